"""Authentication gate: re-establish identity from a bearer token per request.

The gate never rejects a request. It either attaches an ``Identity`` to
``request.state.identity`` or leaves it unset; route dependencies decide
whether an identity is required.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from jwtauth.auth.directory import AccountDirectory
from jwtauth.auth.identity import Identity
from jwtauth.core.clock import Clock
from jwtauth.core.clock import utc_now
from jwtauth.core.logging import get_logger
from jwtauth.core.outcomes import AuthenticationError
from jwtauth.core.outcomes import TokenError
from jwtauth.core.tokens import AccessTokenCodec

BEARER_SCHEME = "bearer"

log = get_logger(__name__)


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header."""
    if authorization is None:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token:
        return None
    return token


class AuthenticationGate:
    def __init__(
        self,
        codec: AccessTokenCodec,
        directory: AccountDirectory,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self.codec = codec
        self.directory = directory
        self._clock = clock

    def resolve(self, authorization: str | None, *, now: datetime | None = None) -> Identity | None:
        """Decode the bearer token and load its identity; ``None`` on any failure."""
        token = extract_bearer_token(authorization)
        if token is None:
            return None

        claims = self.codec.verify_and_decode(token, now=now or self._clock())
        if isinstance(claims, TokenError):
            log.info("access_token_rejected", reason=claims.kind.value)
            return None

        identity = self.directory.load_identity(claims.subject)
        if isinstance(identity, AuthenticationError):
            log.info("identity_unresolved", reason=identity.kind.value, username=claims.subject)
            return None

        if identity.username != self.codec.subject_of(token):
            log.warning("identity_subject_mismatch", username=identity.username)
            return None
        return identity

    async def attach_identity(self, request: Request) -> Identity | None:
        """Resolve once per request and store the result on ``request.state``."""
        identity = getattr(request.state, "identity", None)
        if identity is None:
            identity = await run_in_threadpool(self.resolve, request.headers.get("Authorization"))
            request.state.identity = identity
        return identity
