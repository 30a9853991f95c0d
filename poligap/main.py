"""FastAPI application for the PoliGap document validation service."""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Union

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded  # type: ignore[import-not-found]

from poligap.config import get_settings
from poligap.middleware.logging import RequestLoggingMiddleware, configure_logging
from poligap.middleware.rate_limit import get_limiter, rate_limit_exceeded_handler
from poligap.routers import validation

# Application metadata
VERSION = "1.0.0"
COMMIT_HASH = "development"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan event handler for startup and shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Starting PoliGap Validation API v%s", VERSION)
    logger.info("Validate rate limit: %s", settings.validate_rate_limit)

    yield

    logger.info("Shutting down PoliGap Validation API")


app = FastAPI(
    title="PoliGap Validation API",
    description="Checks uploaded policy documents before compliance gap analysis",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add rate limiter to app state (required by slowapi)
app.state.limiter = get_limiter()
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Add logging middleware (first, so it wraps all other middleware)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=None)
async def health_check() -> Union[Dict[str, Any], Response]:
    """
    Health check endpoint that verifies the parsing libraries load.

    Returns:
        JSON response with overall status and individual component statuses.

    Status Codes:
        200: All components healthy
        503: One or more components unavailable
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    services: Dict[str, str] = {}
    overall_healthy = True

    try:
        from pypdf import PdfReader  # noqa: F401
        services["pdf_parser"] = "healthy"
    except Exception as e:
        services["pdf_parser"] = f"unhealthy: {str(e)}"
        overall_healthy = False

    # python-magic imports fine without libmagic until first use
    try:
        import magic
        magic.from_buffer(b"%PDF-1.4\n", mime=True)
        services["mime_detection"] = "healthy"
    except Exception as e:
        services["mime_detection"] = f"unhealthy: {str(e)}"
        overall_healthy = False

    response_data: Dict[str, Any] = {
        "status": "healthy" if overall_healthy else "unhealthy",
        "timestamp": timestamp,
        "services": services,
    }

    if not overall_healthy:
        return Response(
            content=json.dumps(response_data),
            status_code=503,
            media_type="application/json",
        )

    return response_data


@app.get("/version")
async def version_info() -> Dict[str, str]:
    """
    Get version information for the API.

    Returns:
        JSON with version number and commit hash.
    """
    return {
        "version": VERSION,
        "commit_hash": COMMIT_HASH,
    }


app.include_router(validation.router)
