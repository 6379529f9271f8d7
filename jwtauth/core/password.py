"""Password hashing helpers for the account directory."""

from __future__ import annotations

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

# bcrypt_sha256 pre-hashes so inputs past bcrypt's 72-byte limit still count.
_PASSWORD_CONTEXT = CryptContext(schemes=["bcrypt_sha256", "bcrypt"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """Hash plaintext password with a salted adaptive hash."""
    return _PASSWORD_CONTEXT.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify plaintext password against a stored hash."""
    try:
        return _PASSWORD_CONTEXT.verify(plain_password, password_hash)
    except (UnknownHashError, ValueError, TypeError):
        return False


def dummy_verify() -> None:
    """Spend one verification worth of time when no hash exists."""
    _PASSWORD_CONTEXT.dummy_verify()
