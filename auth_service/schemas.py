"""Pydantic schemas for request decoding and response serialization."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import datetime
from typing import Any
from .config import settings

# bcrypt only uses the first 72 bytes of a password and rejects longer input
BCRYPT_MAX_PASSWORD_BYTES = 72


def check_password_bytes(v: str) -> str:
    if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(f"password must not exceed {BCRYPT_MAX_PASSWORD_BYTES} bytes")
    return v


# ==================== Envelope ====================

class Envelope(BaseModel):
    """Uniform response wrapper used by every endpoint."""
    error: bool = False
    message: str
    data: Any | None = None


# ==================== User Schemas ====================

class UserOut(BaseModel):
    """User output schema. The password hash is deliberately absent."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    active: int
    created_at: datetime
    updated_at: datetime


class UserCreate(BaseModel):
    """Payload for creating a user with a plaintext password."""
    model_config = ConfigDict(extra="forbid")

    email: EmailStr = Field(..., max_length=settings.USER_EMAIL_MAX_LENGTH)
    first_name: str | None = Field(None, max_length=settings.USER_NAME_MAX_LENGTH)
    last_name: str | None = Field(None, max_length=settings.USER_NAME_MAX_LENGTH)
    password: str = Field(..., min_length=8, max_length=BCRYPT_MAX_PASSWORD_BYTES)
    active: int = Field(1, ge=0, le=1)

    @field_validator('password')
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        return check_password_bytes(v)

    @field_validator('first_name', 'last_name')
    @classmethod
    def strip_names(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class UserUpdate(BaseModel):
    """Mutable user fields; every field is written on update."""
    model_config = ConfigDict(extra="forbid")

    email: EmailStr = Field(..., max_length=settings.USER_EMAIL_MAX_LENGTH)
    first_name: str | None = Field(None, max_length=settings.USER_NAME_MAX_LENGTH)
    last_name: str | None = Field(None, max_length=settings.USER_NAME_MAX_LENGTH)
    active: int = Field(1, ge=0, le=1)

    @field_validator('first_name', 'last_name')
    @classmethod
    def strip_names(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class PasswordReset(BaseModel):
    model_config = ConfigDict(extra="forbid")

    password: str = Field(..., min_length=8, max_length=BCRYPT_MAX_PASSWORD_BYTES)

    @field_validator('password')
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        return check_password_bytes(v)


# ==================== Authentication Schemas ====================

class AuthRequest(BaseModel):
    """Credentials posted to the authentication endpoint."""
    model_config = ConfigDict(extra="forbid")

    email: str
    password: str
