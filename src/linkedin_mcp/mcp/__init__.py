"""MCP tool serving and per-call authentication."""

from linkedin_mcp.mcp.auth import ToolAuthenticator

__all__ = ["ToolAuthenticator"]
