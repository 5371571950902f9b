"""Business logic for credential verification and user management.

The authentication flow collapses every lookup or verification failure into
``InvalidCredentials`` so that clients cannot tell an unknown email from a
wrong password.
"""

import asyncio
from contextlib import suppress

from .auth import dummy_hash, password_matches
from .errors import (
    CredentialMismatch,
    HashError,
    InvalidCredentials,
    NotFound,
    QueryError,
)
from .logger import logger
from .models import User
from .repository import UserRepository
from .schemas import AuthRequest, PasswordReset, UserCreate, UserOut, UserUpdate
from .utils import normalize_email

# ==================== Helper Functions ====================


def _convert_to_user_out(user: User) -> UserOut:
    """Convert ORM User model to UserOut schema."""
    return UserOut.model_validate(user)


async def _verify_password(hashed_password: str, password: str) -> None:
    """Raise CredentialMismatch unless ``password`` matches the hash."""
    matches = await asyncio.to_thread(password_matches, hashed_password, password)
    if not matches:
        raise CredentialMismatch()


# ==================== Authentication ====================


async def authenticate(repository: UserRepository, data: AuthRequest) -> UserOut:
    """Verify an email/password pair and return the matching user."""
    email = normalize_email(data.email)
    logger.info(f"Authentication attempt for user: {email}")

    try:
        user = await repository.get_by_email(email)
    except (NotFound, QueryError) as e:
        logger.warning(f"Authentication failed - lookup error for {email}: {e.message}")
        # Spend the same bcrypt work as a real check before answering
        with suppress(HashError):
            await asyncio.to_thread(password_matches, dummy_hash(), data.password)
        raise InvalidCredentials() from e

    try:
        await _verify_password(user.password, data.password)
    except (CredentialMismatch, HashError) as e:
        logger.warning(f"Authentication failed - {e.message} for user: {email}")
        raise InvalidCredentials() from e

    logger.info(f"Authentication successful for user: {email} (id={user.id})")
    return _convert_to_user_out(user)


# ==================== User Operations ====================


async def list_users(repository: UserRepository) -> list[UserOut]:
    users = await repository.get_all()
    return [_convert_to_user_out(u) for u in users]


async def get_user(repository: UserRepository, user_id: int) -> UserOut:
    logger.debug(f"Fetching user: id={user_id}")
    user = await repository.get_one(user_id)
    return _convert_to_user_out(user)


async def create_user(repository: UserRepository, data: UserCreate) -> UserOut:
    """Insert a user and return the stored record."""
    email = normalize_email(data.email)
    logger.info(f"Creating user: {email}")
    user_id = await repository.insert(
        email=email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        active=data.active,
    )
    logger.info(f"User created: id={user_id} email={email}")
    return await get_user(repository, user_id)


async def update_user(repository: UserRepository, user_id: int, data: UserUpdate) -> UserOut:
    logger.info(f"Updating user: id={user_id}")
    user = User(
        id=user_id,
        email=normalize_email(data.email),
        first_name=data.first_name,
        last_name=data.last_name,
        active=data.active,
    )
    await repository.update(user)
    return await get_user(repository, user_id)


async def reset_password(repository: UserRepository, user_id: int, data: PasswordReset) -> None:
    logger.info(f"Resetting password for user: id={user_id}")
    await repository.reset_password(user_id, data.password)


async def delete_user(repository: UserRepository, user_id: int) -> None:
    logger.info(f"Deleting user: id={user_id}")
    await repository.delete(user_id)
    logger.info(f"User deleted: id={user_id}")
