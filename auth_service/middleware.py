"""HTTP middleware for request tracing, logging, and security headers."""

from fastapi import Request
import time
import uuid
from .config import settings
from .logger import logger


# ==================== Request ID Middleware ====================

async def add_request_id_middleware(request: Request, call_next):
    """Add unique request ID to each request for tracing across logs."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


# ==================== Request Logging Middleware ====================

async def request_logging_middleware(request: Request, call_next):
    """Log all incoming requests and their response times."""
    start_time = time.perf_counter()
    request_id = getattr(request.state, "request_id", "unknown")

    logger.info(f"[{request_id}] {request.method} {request.url.path} - Request received")

    try:
        response = await call_next(request)
    except Exception as e:
        duration = time.perf_counter() - start_time
        logger.error(
            f"[{request_id}] {request.method} {request.url.path} - "
            f"Error: {str(e)} - Duration: {duration:.3f}s",
            exc_info=True
        )
        raise

    duration = time.perf_counter() - start_time
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} - "
        f"Status: {response.status_code} - Duration: {duration:.3f}s"
    )
    return response


# ==================== Security Headers Middleware ====================

async def security_headers_middleware(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "no-referrer"
    # Responses carry user records
    response.headers["Cache-Control"] = "no-store"

    if settings.APP_ENV == "production":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response
