"""Configuration management and validation using Pydantic."""

import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    """Service configuration loaded from environment variables or .env files."""

    @staticmethod
    def get_env_file() -> str | None:
        """Determine which .env file to load based on environment variables.

        Returns:
            None if SKIP_ENV_FILE is set (Docker/direct env vars)
            .env.{APP_ENV} file path otherwise (defaults to .env.dev)
        """
        if os.getenv("SKIP_ENV_FILE"):
            return None
        env = os.getenv("APP_ENV", "dev")
        env_file = f".env.{env}"
        if not os.path.exists(env_file):
            raise FileNotFoundError(
                f"Environment file '{env_file}' not found. "
                f"Create it or set SKIP_ENV_FILE to read the environment only."
            )
        return env_file

    model_config = SettingsConfigDict(
        env_file=get_env_file.__func__(),
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # ==================== Application Settings ====================
    APP_NAME: str = "Authentication Service"
    APP_ENV: str = "dev"
    HOST: str = "0.0.0.0"
    PORT: int = 80
    DSN: str  # Required, PostgreSQL connection string

    # ==================== Database Connection Pooling ====================
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for a pooled connection
    DB_POOL_RECYCLE: int = 3600

    # ==================== Database Deadlines ====================
    DB_TIMEOUT: float = 3.0  # Deadline for every repository call (seconds)
    DB_CONNECT_TIMEOUT: int = 10
    DB_CONNECT_MAX_ATTEMPTS: int = 10  # Startup connection attempts
    DB_CONNECT_BACKOFF: float = 2.0  # Fixed delay between startup attempts (seconds)

    # ==================== Password Hashing ====================
    BCRYPT_ROUNDS: int = 12

    # ==================== Request Decoding ====================
    MAX_BODY_BYTES: int = 1024 * 1024

    # ==================== CORS Settings ====================
    CORS_ORIGINS: str = "http://localhost:3000"  # Comma-separated allowed origins

    # ==================== Field Validation ====================
    USER_NAME_MAX_LENGTH: int = 100
    USER_EMAIL_MAX_LENGTH: int = 255

    # ==================== User Management ====================
    ADMIN_API_KEY: str | None = None  # User management routes are disabled when unset

    # ==================== Logging ====================
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_FILE: str | None = None  # Path enables file logging
    LOG_FORMAT: str = "console"  # "console" for dev, "json" for production

    @field_validator('DSN')
    @classmethod
    def validate_dsn(cls, v: str) -> str:
        """Validate that DSN is provided and properly formatted."""
        if not v:
            raise ValueError("DSN is required but not provided in environment variables")
        if not v.startswith(("postgresql://", "postgresql+asyncpg://", "postgres://")):
            raise ValueError("DSN must be a valid PostgreSQL connection string")
        return v

    @field_validator('BCRYPT_ROUNDS')
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    def get_async_dsn(self) -> str:
        """Return the DSN with the asyncpg driver selected."""
        for scheme in ("postgresql://", "postgres://"):
            if self.DSN.startswith(scheme):
                return "postgresql+asyncpg://" + self.DSN[len(scheme):]
        return self.DSN

    def get_cors_origins(self) -> list[str]:
        """Parse CORS_ORIGINS into a list of allowed origins."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

settings = Settings()
