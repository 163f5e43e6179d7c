"""Password hashing built on Argon2."""
from __future__ import annotations

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return an Argon2 hash of ``password``."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Check ``plain`` against an Argon2 hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False
