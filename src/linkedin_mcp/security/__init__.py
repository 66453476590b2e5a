from linkedin_mcp.security.rate_limiter import RateLimiter
from linkedin_mcp.security.session_tokens import (
    create_session_token,
    generate_secret,
    verify_session_token,
)

__all__ = ["RateLimiter", "create_session_token", "generate_secret", "verify_session_token"]
