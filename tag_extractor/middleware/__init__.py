"""Middleware components for request validation and protection."""

from tag_extractor.middleware.rate_limit import get_ip_key, limiter, rate_limit_extract
from tag_extractor.middleware.size_limit import RequestSizeLimitMiddleware

__all__ = [
    "RequestSizeLimitMiddleware",
    "get_ip_key",
    "limiter",
    "rate_limit_extract",
]
