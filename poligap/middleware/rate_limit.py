"""Rate limiting for the upload endpoints using slowapi."""

import json

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from poligap.config import get_settings


def get_client_ip(request: Request) -> str:
    """
    Get the client IP address from the request.

    Only trusts X-Forwarded-For header from configured trusted proxies
    to prevent IP spoofing attacks.

    Args:
        request: FastAPI request object

    Returns:
        Client IP address string
    """
    direct_ip: str = get_remote_address(request)

    settings = get_settings()
    if not settings.trusted_proxies:
        return direct_ip

    trusted_proxy_list = [
        ip.strip() for ip in settings.trusted_proxies.split(",")
        if ip.strip()
    ]

    if direct_ip in trusted_proxy_list:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

    return direct_ip


# In-memory storage, keyed by client IP
limiter = Limiter(key_func=get_client_ip, default_limits=["200/minute"])


def validate_rate_limit() -> str:
    """Limit for POST /api/documents/validate, read per request from settings."""
    return get_settings().validate_rate_limit


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Custom handler for rate limit exceeded errors.

    Returns 429 Too Many Requests with appropriate headers:
    - Retry-After: Seconds until the rate limit resets
    - X-RateLimit-Limit: The rate limit that was exceeded
    - X-RateLimit-Remaining: Always 0 when exceeded

    Args:
        request: FastAPI request object
        exc: RateLimitExceeded exception with limit details

    Returns:
        Response with 429 status code and rate limit headers
    """
    retry_after = getattr(exc, "retry_after", 60)

    error_body = {
        "detail": "Rate limit exceeded",
        "message": f"Too many uploads. Please retry after {retry_after} seconds.",
        "retry_after": retry_after,
    }

    response = Response(
        content=json.dumps(error_body),
        status_code=429,
        media_type="application/json",
    )
    response.headers["Retry-After"] = str(retry_after)
    response.headers["X-RateLimit-Remaining"] = "0"
    if getattr(exc, "detail", None):
        response.headers["X-RateLimit-Limit"] = exc.detail

    return response


def get_limiter() -> Limiter:
    """Return the module-level limiter used by route decorators."""
    return limiter
