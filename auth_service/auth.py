"""Password hashing and verification with bcrypt."""

from functools import lru_cache
import bcrypt
from .config import settings
from .errors import HashError


# ==================== Password Hashing ====================

def hash_password(password: str, rounds: int = settings.BCRYPT_ROUNDS) -> str:
    """Hash a plain text password with a fresh salt. Raises HashError on failure."""
    # bcrypt requires bytes and returns bytes
    try:
        hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))
    except (ValueError, TypeError) as e:
        raise HashError() from e
    # Return as string for database storage
    return hashed.decode('utf-8')


def password_matches(hashed_password: str, plain_password: str) -> bool:
    """Check a plain text password against a stored hash.

    Returns False on a mismatch. Raises HashError when the stored hash is
    malformed or the password cannot be checked at all.
    """
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except (ValueError, TypeError) as e:
        raise HashError("password verification failed") from e


@lru_cache(maxsize=1)
def dummy_hash() -> str:
    """Hash checked when no user matched, so unknown emails cost as much as known ones."""
    return hash_password("not-a-real-password")
