"""Failure values returned by the auth components.

Components return these instead of raising so callers branch on an explicit
``kind``; the HTTP boundary maps every kind to a status code in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ValidationErrorKind(str, Enum):
    ALREADY_EXISTS = "already_exists"
    INVALID_USERNAME = "invalid_username"


class AuthenticationErrorKind(str, Enum):
    UNKNOWN_USER = "unknown_user"
    BAD_PASSWORD = "bad_password"
    ACCOUNT_DISABLED = "account_disabled"


class TokenErrorKind(str, Enum):
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ValidationError:
    """Caller supplied data the directory refuses to store."""

    kind: ValidationErrorKind
    message: str


@dataclass(frozen=True)
class AuthenticationError:
    """Credential check failed; the kind is for logs, never for clients."""

    kind: AuthenticationErrorKind
    message: str


@dataclass(frozen=True)
class TokenError:
    """Access or refresh token rejected."""

    kind: TokenErrorKind
    message: str
