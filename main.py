import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tag_extractor.config import settings
from tag_extractor.middleware import RequestSizeLimitMiddleware, limiter
from tag_extractor.routes import extraction, health
from tag_extractor.services.posthog import shutdown_posthog

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Shutdown - flush analytics
    shutdown_posthog()


app = FastAPI(
    title="Tag Extractor API",
    description="Extract text from tagged regions of PDF pages",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiter state (required by slowapi)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Upload size limit middleware (prevents memory exhaustion)
app.add_middleware(RequestSizeLimitMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(extraction.router, prefix="/api/extract", tags=["extraction"])
app.include_router(health.router, prefix="/api/health", tags=["health"])
