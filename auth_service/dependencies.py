"""FastAPI dependencies for repository access and admin authorization."""

import secrets
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from .config import settings
from .errors import Forbidden
from .repository import UserRepository


# ==================== Repository ====================

def get_user_repository(request: Request) -> UserRepository:
    """Return the repository built during application startup."""
    return request.app.state.user_repository


# ==================== Admin Authorization ====================

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_admin_key(api_key: str | None = Depends(api_key_header)) -> None:
    """Guard user management routes. Raises 403 if the key is missing, wrong, or unconfigured."""
    if not settings.ADMIN_API_KEY:
        raise Forbidden("user management is disabled")
    if api_key is None or not secrets.compare_digest(api_key, settings.ADMIN_API_KEY):
        raise Forbidden("invalid API key")
