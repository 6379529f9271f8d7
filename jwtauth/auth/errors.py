"""Auth-specific HTTP error helpers."""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException

from jwtauth.auth.http import api_error
from jwtauth.core.outcomes import TokenError
from jwtauth.core.outcomes import TokenErrorKind
from jwtauth.core.outcomes import ValidationError
from jwtauth.core.outcomes import ValidationErrorKind

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def raise_validation_error(error: ValidationError) -> NoReturn:
    """Raise the 400 matching a registration refusal."""
    if error.kind is ValidationErrorKind.ALREADY_EXISTS:
        raise HTTPException(
            status_code=400,
            detail=api_error(
                code="AUTH_USERNAME_CONFLICT",
                message="username already exists",
                detail={},
            ),
        )
    raise HTTPException(
        status_code=400,
        detail=api_error(code="VALIDATION_ERROR", message=error.message, detail={}),
    )


def raise_invalid_credentials() -> NoReturn:
    """Raise unified invalid-credentials response."""
    raise HTTPException(
        status_code=401,
        detail=api_error(
            code="AUTH_INVALID_CREDENTIALS",
            message="invalid username or password",
            detail={},
        ),
    )


def raise_refresh_rejected(error: TokenError | None = None) -> NoReturn:
    """Raise unified refresh-token rejection."""
    if error is not None and error.kind is TokenErrorKind.EXPIRED:
        code, message = "AUTH_REFRESH_EXPIRED", "refresh token expired"
    elif error is not None:
        code, message = "AUTH_REFRESH_NOT_FOUND", "refresh token not found"
    else:
        code, message = "AUTH_REFRESH_REJECTED", "refresh token rejected"
    raise HTTPException(
        status_code=401,
        detail=api_error(code=code, message=message, detail={}),
    )


def raise_unauthenticated() -> NoReturn:
    """Raise 401 for protected routes reached without an identity."""
    raise HTTPException(
        status_code=401,
        detail=api_error(
            code="AUTH_UNAUTHENTICATED",
            message="authentication required",
            detail={},
        ),
        headers=BEARER_CHALLENGE,
    )
