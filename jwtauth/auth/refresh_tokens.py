"""Refresh token manager.

Refresh tokens are opaque ``secrets.token_urlsafe(32)`` strings (256 bits).
Only their SHA-256 digest is stored. A token is valid while ``now < expiry``;
the first use after expiry purges every refresh token of the owning account.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime
from datetime import timedelta

from jwtauth.auth.directory import AccountDirectory
from jwtauth.auth.repository import CredentialStore
from jwtauth.auth.repository import RefreshTokenRecord
from jwtauth.core.clock import Clock
from jwtauth.core.clock import utc_now
from jwtauth.core.logging import get_logger
from jwtauth.core.outcomes import AuthenticationError
from jwtauth.core.outcomes import AuthenticationErrorKind
from jwtauth.core.outcomes import TokenError
from jwtauth.core.outcomes import TokenErrorKind
from jwtauth.core.tokens import AccessTokenCodec

REFRESH_TOKEN_BYTES = 32

log = get_logger(__name__)


def hash_refresh_token(plain_token: str) -> str:
    return hashlib.sha256(plain_token.encode("utf-8")).hexdigest()


def generate_refresh_token() -> str:
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


@dataclass(frozen=True)
class RefreshToken:
    """A stored refresh token together with its plaintext value."""

    id: int
    account_id: int
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class RefreshResult:
    access_token: str
    refresh_token: str


class RefreshTokenManager:
    def __init__(
        self,
        store: CredentialStore,
        codec: AccessTokenCodec,
        directory: AccountDirectory,
        *,
        expires_in_seconds: int,
        rotation: bool = False,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.codec = codec
        self.directory = directory
        self.rotation = rotation
        self._ttl = timedelta(seconds=expires_in_seconds)
        self._clock = clock

    @property
    def expires_in_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, account_id: int, *, now: datetime | None = None) -> RefreshToken:
        """Create and persist a new refresh token for ``account_id``.

        Existing tokens of the account are left alone.
        """
        issued_at = now or self._clock()
        plain = generate_refresh_token()
        record = self.store.save_refresh_token(
            account_id=account_id,
            token_hash=hash_refresh_token(plain),
            expiry_date=issued_at + self._ttl,
            created_at=issued_at,
        )
        return _to_refresh_token(record, plain)

    def find(self, token: str) -> RefreshToken | None:
        record = self.store.find_refresh_token(hash_refresh_token(token))
        return None if record is None else _to_refresh_token(record, token)

    def verify_not_expired(
        self, token: RefreshToken, *, now: datetime | None = None
    ) -> RefreshToken | TokenError:
        """Return ``token`` if still valid; otherwise purge the account's tokens."""
        current = now or self._clock()
        if current < token.expires_at:
            return token

        purged = self.store.delete_refresh_tokens_by_account_id(token.account_id)
        log.info("refresh_token_expired", account_id=token.account_id, purged=purged)
        return TokenError(TokenErrorKind.EXPIRED, "refresh token expired")

    def refresh_access_token(
        self, token: str, *, now: datetime | None = None
    ) -> RefreshResult | TokenError | AuthenticationError:
        """Exchange a refresh token for a new access token."""
        current = now or self._clock()
        found = self.find(token)
        if found is None:
            log.info("refresh_token_not_found")
            return TokenError(TokenErrorKind.NOT_FOUND, "refresh token not found")

        checked = self.verify_not_expired(found, now=current)
        if isinstance(checked, TokenError):
            return checked

        account = self.directory.find_by_id(checked.account_id)
        if account is None:
            self.store.delete_refresh_tokens_by_account_id(checked.account_id)
            return TokenError(TokenErrorKind.NOT_FOUND, "refresh token owner not found")
        if not account.enabled:
            log.info("refresh_rejected", reason="account_disabled", account_id=account.id)
            return AuthenticationError(AuthenticationErrorKind.ACCOUNT_DISABLED, "account disabled")

        refresh_token = checked.token
        if self.rotation:
            if not self.store.delete_refresh_token(checked.id):
                return TokenError(TokenErrorKind.NOT_FOUND, "refresh token already used")
            refresh_token = self.issue(account.id, now=current).token

        return RefreshResult(
            access_token=self.codec.mint(account.username, now=current),
            refresh_token=refresh_token,
        )

    def revoke_all_for_account(self, account_id: int) -> int:
        """Delete every refresh token of the account; returns the count."""
        return self.store.delete_refresh_tokens_by_account_id(account_id)


def _to_refresh_token(record: RefreshTokenRecord, plain: str) -> RefreshToken:
    return RefreshToken(
        id=record.id,
        account_id=record.account_id,
        token=plain,
        expires_at=record.expiry_date,
    )
