"""LinkedIn MCP server with an OAuth 2.0 authorization proxy."""

__version__ = "1.0.0"
