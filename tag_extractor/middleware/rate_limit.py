"""Rate limiting middleware using SlowAPI."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from tag_extractor.config import settings


def get_ip_key(request: Request) -> str:
    """Use the client IP address for rate limiting (there are no user accounts)."""
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_ip_key,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[f"{settings.rate_limit_general_per_minute}/minute"],
    headers_enabled=True,  # Include X-RateLimit-* headers in responses
    enabled=settings.rate_limit_enabled,
)


def rate_limit_extract():
    """Decorator for extraction endpoints (each request decodes PDFs)."""
    return limiter.limit(f"{settings.rate_limit_extract_per_minute}/minute")
