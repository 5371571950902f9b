"""SQLAlchemy ORM models for database tables."""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from .db import Base
from .config import settings


class User(Base):
    """User model mapped to 'users' table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(settings.USER_EMAIL_MAX_LENGTH), nullable=False, unique=True, index=True)
    first_name = Column(String(settings.USER_NAME_MAX_LENGTH), nullable=True)
    last_name = Column(String(settings.USER_NAME_MAX_LENGTH), nullable=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    active = Column("user_active", Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"
