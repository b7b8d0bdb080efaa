"""Upload size limit middleware."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from tag_extractor.config import settings

logger = logging.getLogger(__name__)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject uploads whose declared size exceeds the limit.

    Only requests under one of path_prefixes are checked; the Content-Length
    header is read before any PDF bytes are buffered.
    """

    def __init__(
        self,
        app,
        max_size: int | None = None,
        path_prefixes: tuple[str, ...] = ("/api/extract",),
    ):
        super().__init__(app)
        self.max_size = max_size or settings.max_request_size_bytes
        self.path_prefixes = path_prefixes

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefixes):
            return await call_next(request)

        content_length = request.headers.get("content-length")
        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                # Malformed header - let the endpoint reject the body
                return await call_next(request)

            if size > self.max_size:
                logger.warning(
                    f"Upload too large: {size} bytes (max: {self.max_size})",
                    extra={
                        "content_length": size,
                        "max_size": self.max_size,
                        "path": request.url.path,
                    },
                )
                return JSONResponse(
                    status_code=413,
                    content={
                        "detail": f"Upload exceeds maximum size of {self.max_size} bytes"
                    },
                )

        return await call_next(request)
