# Health router.
# Created: 2026-10-12

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
async def get_health_status():
    """Liveness probe."""
    return {"status": "ok", "oauth": "ready"}
