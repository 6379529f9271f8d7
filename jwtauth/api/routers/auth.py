"""Auth REST routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends

from jwtauth.api.deps import get_runtime
from jwtauth.api.deps import require_identity
from jwtauth.auth.identity import Identity
from jwtauth.auth.models import LoginRequest
from jwtauth.auth.models import RefreshRequest
from jwtauth.auth.models import RegisterRequest
from jwtauth.auth.service import login_user
from jwtauth.auth.service import logout_user
from jwtauth.auth.service import refresh_user
from jwtauth.auth.service import register_user
from jwtauth.runtime import AuthRuntime

router = APIRouter(prefix="/auth")


@router.post("/register")
def register(
    payload: RegisterRequest,
    runtime: AuthRuntime = Depends(get_runtime),
) -> dict[str, object]:
    """Create an account."""
    return register_user(runtime=runtime, payload=payload)


@router.post("/login")
def login(
    payload: LoginRequest,
    runtime: AuthRuntime = Depends(get_runtime),
) -> dict[str, object]:
    """Authenticate and issue an access/refresh token pair."""
    return login_user(runtime=runtime, payload=payload)


@router.post("/refreshToken")
def refresh(
    payload: RefreshRequest,
    runtime: AuthRuntime = Depends(get_runtime),
) -> dict[str, object]:
    """Issue a new access token for a refresh token."""
    return refresh_user(runtime=runtime, payload=payload)


@router.post("/logout")
def logout(
    identity: Identity = Depends(require_identity),
    runtime: AuthRuntime = Depends(get_runtime),
) -> dict[str, object]:
    """Revoke all refresh tokens of the caller."""
    return logout_user(runtime=runtime, identity=identity)
