"""FastAPI application entry point with lifecycle management."""

from fastapi import FastAPI
import uvicorn
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import dummy_hash
from .config import settings
from .routes import router
from .db import create_db_engine, create_session_factory, dispose_engine, wait_for_db
from .errors import ServiceError
from .exception_handlers import (
    http_exception_handler,
    service_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .logger import logger
from .middleware import (
    add_request_id_middleware,
    request_logging_middleware,
    security_headers_middleware,
)
from .monitoring import setup_monitoring
from .repository import UserRepository

# ==================== Application Lifecycle ====================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the database (with retries), build the repository, clean up on exit."""
    logger.info(f"Starting {settings.APP_NAME} in {settings.APP_ENV} mode")

    engine = create_db_engine(settings.get_async_dsn())
    # Raises DatabaseUnavailable and aborts startup once retries are exhausted
    await wait_for_db(engine)

    app.state.engine = engine
    app.state.user_repository = UserRepository(
        create_session_factory(engine),
        timeout=settings.DB_TIMEOUT,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
    dummy_hash()

    logger.info(f"{settings.APP_NAME} started successfully - ready to accept requests")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await dispose_engine(engine)
    logger.info(f"{settings.APP_NAME} shutdown complete")

# ==================== Application Setup ====================


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Middleware registration (first registered = innermost layer)
app.middleware("http")(security_headers_middleware)
app.middleware("http")(request_logging_middleware)
app.middleware("http")(add_request_id_middleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(router)

setup_monitoring(app)


def run() -> None:
    """Serve the application with uvicorn."""
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
