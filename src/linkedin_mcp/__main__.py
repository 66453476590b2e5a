"""LinkedIn MCP server entry point.

Changes:
  - 2026-10-12: HTTP transport runs the OAuth proxy and the MCP endpoint together.
  - 2026-10-12: Added --generate-token and --transport flags.
"""

import argparse
import logging
import secrets
import string
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from linkedin_mcp.config import Settings
from linkedin_mcp.logging_setup import setup_logging

logger = logging.getLogger(__name__)

_TOKEN_ALPHABET = string.ascii_letters + string.digits


def _version() -> str:
    try:
        return get_version("linkedin-mcp")
    except PackageNotFoundError:
        return "unknown"


def generate_token(length: int = 32) -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkedin-mcp",
        description="LinkedIn API MCP server with a built-in OAuth proxy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  LINKEDIN_CLIENT_ID / LINKEDIN_CLIENT_SECRET   LinkedIn app credentials (required for http)
  LINKEDIN_ACCESS_TOKEN                        Static token for stdio mode (optional)
  BASE_URL                                     Public URL of the OAuth server
  JWT_SECRET                                   Token signing secret (random if unset)
  TRANSPORT_TYPE                               stdio or http (default: http)

Examples:
  linkedin-mcp                           Start OAuth proxy + MCP over HTTP
  linkedin-mcp --transport stdio         Run as a stdio MCP server
  linkedin-mcp --generate-token          Print a random secret
""",
    )
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")
    parser.add_argument(
        "--generate-token",
        action="store_true",
        help="Print a random 32-character token (e.g. for JWT_SECRET) and exit",
    )
    parser.add_argument(
        "--transport",
        choices=["http", "stdio"],
        default=None,
        help="Override TRANSPORT_TYPE",
    )
    parser.add_argument("--host", default=None, help="Override HOST")
    parser.add_argument("--port", type=int, default=None, help="Override PORT")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"linkedin-mcp version {_version()}")
        return 0

    if args.generate_token:
        print(generate_token())
        return 0

    setup_logging(level=args.log_level)

    overrides = {
        key: value
        for key, value in (
            ("transport_type", args.transport),
            ("host", args.host),
            ("port", args.port),
        )
        if value is not None
    }
    settings = Settings(**overrides)

    if settings.transport_type == "stdio":
        from linkedin_mcp.mcp.server import create_mcp_server

        logger.info("Starting in stdio mode")
        create_mcp_server(settings).run(transport="stdio")
        return 0

    if not settings.has_linkedin_credentials:
        logger.error("Missing required LinkedIn API credentials.")
        return 1

    from linkedin_mcp.api.serve import run_api_server

    try:
        run_api_server(settings)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
