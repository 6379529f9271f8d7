"""Sample endpoint behind the authentication gate."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends

from jwtauth.api.deps import require_identity
from jwtauth.auth.identity import Identity

router = APIRouter(prefix="/secured")


@router.get("/hello")
def hello(identity: Identity = Depends(require_identity)) -> dict[str, str]:
    return {"message": f"Hello, {identity.username}! This is a secured endpoint."}
