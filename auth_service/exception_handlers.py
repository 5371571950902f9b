"""Translate exceptions into the {error: true, message} envelope."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ServiceError
from .logger import logger
from .utils import error_json


async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} | {type(exc).__name__}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} | {type(exc).__name__}: {exc.message}")
    return error_json(exc.message, status_code=exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"{request.method} {request.url.path} | validation failed | {exc.errors()}")
    return error_json("invalid request parameters", status_code=400)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_json(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} | unhandled error", exc_info=exc)
    return error_json("internal server error", status_code=500)
