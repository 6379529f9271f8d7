"""Application settings for the auth service runtime and tests."""

from __future__ import annotations

import base64
import binascii

from pydantic import Field
from pydantic import model_validator
from pydantic_settings import BaseSettings

MIN_SIGNING_KEY_BYTES = 32


class Settings(BaseSettings):
    """Typed settings loaded from environment variables or explicit kwargs."""

    jwtauth_app_env: str = "dev"
    jwtauth_app_host: str = "127.0.0.1"
    jwtauth_app_port: int = Field(default=8000, ge=1)

    jwtauth_jwt_secret: str = Field(min_length=1)
    jwtauth_jwt_secret_base64: bool = False
    jwtauth_access_token_expire_seconds: int = Field(default=3600, ge=1)
    jwtauth_refresh_token_expire_seconds: int = Field(default=604800, ge=1)
    jwtauth_refresh_token_single_session: bool = False
    jwtauth_refresh_token_rotation: bool = False

    jwtauth_sqlite_path: str = "jwtauth.db"
    jwtauth_cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    jwtauth_log_level: str = "INFO"
    jwtauth_log_json: bool = True

    @model_validator(mode="after")
    def validate_token_lifetimes(self) -> "Settings":
        """Ensure refresh tokens outlive the access tokens they renew."""
        if self.jwtauth_refresh_token_expire_seconds <= self.jwtauth_access_token_expire_seconds:
            raise ValueError(
                "JWTAUTH_REFRESH_TOKEN_EXPIRE_SECONDS must be greater than "
                "JWTAUTH_ACCESS_TOKEN_EXPIRE_SECONDS"
            )
        return self

    @model_validator(mode="after")
    def validate_signing_key(self) -> "Settings":
        """Reject secrets that cannot produce a 256-bit HMAC key."""
        if len(self.signing_key()) < MIN_SIGNING_KEY_BYTES:
            raise ValueError(
                f"JWTAUTH_JWT_SECRET must yield at least {MIN_SIGNING_KEY_BYTES} key bytes"
            )
        return self

    def signing_key(self) -> bytes:
        """Derive the HS256 key from the configured secret."""
        if not self.jwtauth_jwt_secret_base64:
            return self.jwtauth_jwt_secret.encode("utf-8")
        try:
            return base64.b64decode(self.jwtauth_jwt_secret, validate=True)
        except binascii.Error as exc:
            raise ValueError("JWTAUTH_JWT_SECRET is not valid base64") from exc

    def cors_origins(self) -> list[str]:
        """Split the comma separated origin list."""
        return [
            origin.strip()
            for origin in self.jwtauth_cors_allow_origins.split(",")
            if origin.strip()
        ]


def load_settings() -> Settings:
    """Load settings from process environment."""
    return Settings()
