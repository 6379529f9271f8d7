"""Dependency helpers shared by API routers."""

from __future__ import annotations

from fastapi import Request

from jwtauth.auth.errors import raise_unauthenticated
from jwtauth.auth.identity import Identity
from jwtauth.runtime import AuthRuntime


def get_runtime(request: Request) -> AuthRuntime:
    return request.app.state.runtime


def require_identity(request: Request) -> Identity:
    """Return the identity the gate attached, or answer 401."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise_unauthenticated()
    return identity
