# OAuth proxy HTTP layer
# Created: 2026-10-12
#
# FastAPI application serving discovery, registration, authorize, callback,
# token and health endpoints for MCP clients.
