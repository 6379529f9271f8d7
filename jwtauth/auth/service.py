"""Auth business logic behind the HTTP routes.

Component outcomes are matched here and turned into HTTP responses or
unified errors.
"""

from __future__ import annotations

from jwtauth.auth.errors import raise_invalid_credentials
from jwtauth.auth.errors import raise_refresh_rejected
from jwtauth.auth.errors import raise_validation_error
from jwtauth.auth.identity import Identity
from jwtauth.auth.models import LoginRequest
from jwtauth.auth.models import RefreshRequest
from jwtauth.auth.models import RegisterRequest
from jwtauth.core.logging import get_logger
from jwtauth.core.outcomes import AuthenticationError
from jwtauth.core.outcomes import TokenError
from jwtauth.core.outcomes import ValidationError
from jwtauth.runtime import AuthRuntime

log = get_logger(__name__)

REGISTERED_MESSAGE = "registration completed"
LOGGED_OUT_MESSAGE = "logged out"


def register_user(*, runtime: AuthRuntime, payload: RegisterRequest) -> dict[str, object]:
    """Create an account; no tokens are issued until login."""
    result = runtime.directory.register(payload.username, payload.password)
    if isinstance(result, ValidationError):
        raise_validation_error(result)
    return {"message": REGISTERED_MESSAGE}


def login_user(*, runtime: AuthRuntime, payload: LoginRequest) -> dict[str, object]:
    """Authenticate and issue an access/refresh token pair."""
    result = runtime.directory.login(payload.username, payload.password)
    if isinstance(result, AuthenticationError):
        raise_invalid_credentials()

    account_id = result.account.id
    if runtime.settings.jwtauth_refresh_token_single_session:
        runtime.refresh_tokens.revoke_all_for_account(account_id)
    refresh_token = runtime.refresh_tokens.issue(account_id)

    log.info("login_succeeded", account_id=account_id)
    return {"accessToken": result.access_token, "refreshToken": refresh_token.token}


def refresh_user(*, runtime: AuthRuntime, payload: RefreshRequest) -> dict[str, object]:
    """Exchange a refresh token for a new access token."""
    result = runtime.refresh_tokens.refresh_access_token(payload.refresh_token)
    if isinstance(result, TokenError):
        raise_refresh_rejected(result)
    if isinstance(result, AuthenticationError):
        raise_refresh_rejected()
    return {"accessToken": result.access_token, "refreshToken": result.refresh_token}


def logout_user(*, runtime: AuthRuntime, identity: Identity) -> dict[str, object]:
    """Revoke every refresh token of the caller."""
    revoked = runtime.refresh_tokens.revoke_all_for_account(identity.account_id)
    log.info("logout", account_id=identity.account_id, revoked=revoked)
    return {"message": LOGGED_OUT_MESSAGE}


def me_user(*, identity: Identity) -> dict[str, object]:
    """Return current user profile."""
    return {"id": identity.account_id, "username": identity.username}
