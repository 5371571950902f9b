"""User repository: parameterized queries against the users table.

Each public method is one round trip in its own transaction, bounded by the
repository's deadline. SQLAlchemy failures are translated into the service
error types from ``errors`` before they leave this module.
"""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import delete as sql_delete, select, text, update as sql_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .auth import hash_password
from .config import settings
from .errors import DuplicateEmail, NotFound, QueryError, QueryTimeout
from .logger import logger
from .models import User

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRepository:
    """Typed operations on ``User`` rows.

    Args:
        session_factory: Session maker bound to the shared engine
        timeout: Deadline in seconds applied to every call
        bcrypt_rounds: Cost factor for newly computed password hashes
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float = settings.DB_TIMEOUT,
        bcrypt_rounds: int = settings.BCRYPT_ROUNDS,
    ):
        self._session_factory = session_factory
        self.timeout = timeout
        self.bcrypt_rounds = bcrypt_rounds

    async def _with_deadline(self, operation: str, func: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(func(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"{operation} exceeded the {self.timeout}s deadline")
            raise QueryTimeout() from e
        except IntegrityError as e:
            logger.debug(f"{operation} rejected by a constraint: {str(e.orig)}")
            raise DuplicateEmail() from e
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed: {str(e)}", exc_info=True)
            raise QueryError() from e
        except OSError as e:
            # Socket errors from the driver are not wrapped by SQLAlchemy
            logger.error(f"{operation} could not reach the database: {str(e)}")
            raise QueryError() from e

    async def _hash(self, password: str) -> str:
        # bcrypt is CPU bound; keep it off the event loop
        return await asyncio.to_thread(hash_password, password, self.bcrypt_rounds)

    # ==================== Reads ====================

    async def get_all(self) -> list[User]:
        """Return every user ordered by last name."""
        async def _query():
            async with self._session_factory() as session:
                result = await session.execute(select(User).order_by(User.last_name, User.id))
                return list(result.scalars().all())

        users = await self._with_deadline("get_all", _query)
        logger.debug(f"get_all returned {len(users)} users")
        return users

    async def get_by_email(self, email: str) -> User:
        """Return the single user with this email or raise NotFound.

        More than one match violates the unique constraint and surfaces as
        QueryError.
        """
        async def _query():
            async with self._session_factory() as session:
                result = await session.execute(select(User).where(User.email == email))
                return result.scalar_one_or_none()

        user = await self._with_deadline("get_by_email", _query)
        if user is None:
            raise NotFound()
        return user

    async def get_one(self, user_id: int) -> User:
        async def _query():
            async with self._session_factory() as session:
                return await session.get(User, user_id)

        user = await self._with_deadline("get_one", _query)
        if user is None:
            raise NotFound(f"user {user_id} not found")
        return user

    async def ping(self) -> None:
        """Round trip ``SELECT 1`` used by the health check."""
        async def _query():
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))

        await self._with_deadline("ping", _query)

    # ==================== Writes ====================

    async def insert(
        self,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
        active: int = 1,
    ) -> int:
        """Hash the plaintext password, store a new user and return its id."""
        hashed_password = await self._hash(password)

        async def _query():
            now = _utcnow()
            async with self._session_factory() as session:
                async with session.begin():
                    user = User(
                        email=email,
                        first_name=first_name,
                        last_name=last_name,
                        password=hashed_password,
                        active=active,
                        created_at=now,
                        updated_at=now,
                    )
                    session.add(user)
                    await session.flush()
                    return user.id

        user_id = await self._with_deadline("insert", _query)
        logger.debug(f"Inserted user id={user_id}")
        return user_id

    async def update(self, user: User) -> None:
        """Persist the mutable fields of ``user`` and refresh ``updated_at``."""
        stmt = (
            sql_update(User)
            .where(User.id == user.id)
            .values({
                User.email: user.email,
                User.first_name: user.first_name,
                User.last_name: user.last_name,
                User.active: user.active,
                User.updated_at: _utcnow(),
            })
            .execution_options(synchronize_session=False)
        )
        affected = await self._with_deadline("update", lambda: self._execute_write(stmt))
        if affected == 0:
            raise NotFound(f"user {user.id} not found")

    async def reset_password(self, user_id: int, password: str) -> None:
        """Store a freshly computed hash of ``password`` for the user."""
        hashed_password = await self._hash(password)
        stmt = (
            sql_update(User)
            .where(User.id == user_id)
            .values({User.password: hashed_password, User.updated_at: _utcnow()})
            .execution_options(synchronize_session=False)
        )
        affected = await self._with_deadline("reset_password", lambda: self._execute_write(stmt))
        if affected == 0:
            raise NotFound(f"user {user_id} not found")

    async def delete(self, user_id: int) -> None:
        """Delete the user. A missing id raises NotFound."""
        stmt = (
            sql_delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False)
        )
        affected = await self._with_deadline("delete", lambda: self._execute_write(stmt))
        if affected == 0:
            raise NotFound(f"user {user_id} not found")

    async def _execute_write(self, stmt) -> int:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(stmt)
                return result.rowcount
