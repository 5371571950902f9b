# API route definitions (HTTP layer)
# Authentication and user routes answer with the {error, message, data} envelope

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from .schemas import (
    AuthRequest,
    Envelope,
    PasswordReset,
    UserCreate,
    UserUpdate,
)
from .repository import UserRepository
from .dependencies import get_user_repository, require_admin_key
from .errors import QueryError
from .utils import read_json, write_json
from . import services
from .config import settings
from .logger import logger


router = APIRouter()

@router.get("/")
def root():
    return {"app": settings.APP_NAME, "env": settings.APP_ENV}


@router.get("/health")
async def health_check(repository: UserRepository = Depends(get_user_repository)):
    """Health check endpoint for load balancers and monitoring.

    Returns:
        - 200 OK if the database answers
        - 503 Service Unavailable otherwise
    """
    health_status = {
        "status": "healthy",
        "service": settings.APP_NAME,
        "environment": settings.APP_ENV,
        "database": "connected",
    }
    try:
        await repository.ping()
    except QueryError as e:
        logger.error(f"Health check failed: {e.message}")
        health_status["status"] = "unhealthy"
        health_status["database"] = "disconnected"
        return JSONResponse(status_code=503, content=health_status)
    return health_status


@router.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(status_code=204)


# ============================================================================
# Authentication Endpoint
# ============================================================================

@router.post("/authenticate", response_model=Envelope, status_code=202)
async def authenticate(
    request: Request,
    repository: UserRepository = Depends(get_user_repository),
):
    """Verify an email/password pair.

    Returns:
        202: {error: false, message: "Logged in user <email>", data: user}

    Raises:
        400: Malformed body, or "invalid credentials" for any unknown email
            or wrong password
    """
    payload = await read_json(request, AuthRequest)
    user = await services.authenticate(repository, payload)
    return write_json(202, f"Logged in user {user.email}", user)


# ============================================================================
# User Management Endpoints
# ============================================================================

users_router = APIRouter(prefix="/users", dependencies=[Depends(require_admin_key)])


@users_router.get("", response_model=Envelope)
async def list_users(repository: UserRepository = Depends(get_user_repository)):
    users = await services.list_users(repository)
    return write_json(200, f"Found {len(users)} users", users)


@users_router.post("", response_model=Envelope, status_code=201)
async def create_user(
    request: Request,
    repository: UserRepository = Depends(get_user_repository),
):
    payload = await read_json(request, UserCreate)
    user = await services.create_user(repository, payload)
    return write_json(201, f"Created user {user.email}", user)


@users_router.get("/{user_id}", response_model=Envelope)
async def get_user(user_id: int, repository: UserRepository = Depends(get_user_repository)):
    user = await services.get_user(repository, user_id)
    return write_json(200, f"Found user {user.email}", user)


@users_router.put("/{user_id}", response_model=Envelope)
async def update_user(
    user_id: int,
    request: Request,
    repository: UserRepository = Depends(get_user_repository),
):
    payload = await read_json(request, UserUpdate)
    user = await services.update_user(repository, user_id, payload)
    return write_json(200, f"Updated user {user.email}", user)


@users_router.put("/{user_id}/password", response_model=Envelope)
async def reset_password(
    user_id: int,
    request: Request,
    repository: UserRepository = Depends(get_user_repository),
):
    payload = await read_json(request, PasswordReset)
    await services.reset_password(repository, user_id, payload)
    return write_json(200, f"Password reset for user {user_id}")


@users_router.delete("/{user_id}", response_model=Envelope)
async def delete_user(user_id: int, repository: UserRepository = Depends(get_user_repository)):
    await services.delete_user(repository, user_id)
    return write_json(200, f"Deleted user {user_id}")


router.include_router(users_router)
