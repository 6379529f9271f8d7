"""JWT access token codec.

Access tokens are HS256 JWTs carrying ``sub`` (the username), ``iat`` and
``exp`` as whole seconds. Verification never touches the credential store.
A token is valid while ``now < exp``; at ``exp`` itself it is expired.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from datetime import timedelta
from datetime import timezone

import jwt
from jwt.utils import base64url_decode
from jwt.utils import base64url_encode

from jwtauth.core.clock import Clock
from jwtauth.core.clock import utc_now
from jwtauth.core.outcomes import TokenError
from jwtauth.core.outcomes import TokenErrorKind

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ("sub", "iat", "exp")


@dataclass(frozen=True)
class AccessClaims:
    """Verified claim set of an access token."""

    subject: str
    issued_at: datetime
    expires_at: datetime


def _to_timestamp(value: datetime) -> int:
    return int(value.astimezone(timezone.utc).timestamp())


def _decode_json_segment(segment: str) -> dict | None:
    try:
        value = json.loads(base64url_decode(segment))
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def _check_structure(token: str) -> TokenError | None:
    """Classify a token before signature verification.

    Header and payload must be base64url JSON objects, otherwise the token is
    malformed. Once they parse, any defect in the signature segment counts as
    a signature failure, including non-canonical base64url.
    """
    parts = token.split(".", 2)
    if len(parts) != 3:
        return TokenError(TokenErrorKind.MALFORMED, "malformed access token")
    header, payload, signature = parts
    if _decode_json_segment(header) is None or _decode_json_segment(payload) is None:
        return TokenError(TokenErrorKind.MALFORMED, "malformed access token")
    try:
        canonical = base64url_encode(base64url_decode(signature)) == signature.encode("utf-8")
    except ValueError:
        canonical = False
    if not canonical:
        return TokenError(TokenErrorKind.INVALID_SIGNATURE, "access token signature mismatch")
    return None


class AccessTokenCodec:
    """Mint and verify access tokens under one signing key."""

    def __init__(
        self,
        *,
        signing_key: bytes,
        expires_in_seconds: int,
        clock: Clock = utc_now,
    ) -> None:
        self._key = signing_key
        self._ttl = timedelta(seconds=expires_in_seconds)
        self._clock = clock

    @property
    def expires_in_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def mint(self, subject: str, *, now: datetime | None = None) -> str:
        """Create a signed token for ``subject`` expiring one TTL from now."""
        issued_at = now or self._clock()
        payload = {
            "sub": subject,
            "iat": _to_timestamp(issued_at),
            "exp": _to_timestamp(issued_at + self._ttl),
        }
        return jwt.encode(payload, self._key, algorithm=ALGORITHM)

    def verify_and_decode(
        self, token: str, *, now: datetime | None = None
    ) -> AccessClaims | TokenError:
        """Check signature, structure and expiry; return claims or the failure."""
        structure_error = _check_structure(token)
        if structure_error is not None:
            return structure_error
        try:
            payload = jwt.decode(
                token,
                self._key,
                algorithms=[ALGORITHM],
                # Time claims are checked below against the injected clock.
                options={
                    "require": list(REQUIRED_CLAIMS),
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError):
            return TokenError(TokenErrorKind.INVALID_SIGNATURE, "access token signature mismatch")
        except jwt.InvalidTokenError:
            return TokenError(TokenErrorKind.MALFORMED, "malformed access token")

        subject = payload["sub"]
        exp = payload["exp"]
        iat = payload["iat"]
        if not isinstance(subject, str) or not subject:
            return TokenError(TokenErrorKind.MALFORMED, "missing or invalid sub")
        if not isinstance(exp, int) or not isinstance(iat, int):
            return TokenError(TokenErrorKind.MALFORMED, "missing or invalid exp/iat")

        now_ts = _to_timestamp(now or self._clock())
        if now_ts >= exp:
            return TokenError(TokenErrorKind.EXPIRED, "access token expired")

        return AccessClaims(
            subject=subject,
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )

    def subject_of(self, token: str) -> str:
        """Return ``sub`` of a token that already passed ``verify_and_decode``.

        The signature is still checked; expiry is not.
        """
        payload = jwt.decode(
            token,
            self._key,
            algorithms=[ALGORITHM],
            options={"verify_exp": False, "verify_iat": False, "verify_nbf": False},
        )
        return str(payload["sub"])
