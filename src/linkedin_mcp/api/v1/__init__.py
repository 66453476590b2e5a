# API router aggregation.
# Created: 2026-10-12
#
# mount_v1_routers(app) registers the domain routers at the application root:
# the OAuth paths are fixed by RFC 8414 discovery and by what MCP clients
# expect, so they carry no version prefix.

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

_V1_ROUTERS: list[tuple[str, str, str]] = [
    # (module_path, attr_name, tag)
    ("linkedin_mcp.api.v1.oauth2", "router", "OAuth2"),
    ("linkedin_mcp.api.v1.health", "router", "Health"),
]


def mount_v1_routers(app: FastAPI) -> None:
    """Mount all domain routers on *app*."""
    for module_path, attr_name, tag in _V1_ROUTERS:
        mod = importlib.import_module(module_path)
        app.include_router(getattr(mod, attr_name))
        logger.debug("Mounted router: %s (%s)", module_path, tag)
