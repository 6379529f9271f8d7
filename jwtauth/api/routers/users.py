"""User profile routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends

from jwtauth.api.deps import require_identity
from jwtauth.auth.identity import Identity
from jwtauth.auth.service import me_user

router = APIRouter(prefix="/users")


@router.get("/me")
def me(identity: Identity = Depends(require_identity)) -> dict[str, object]:
    return me_user(identity=identity)
