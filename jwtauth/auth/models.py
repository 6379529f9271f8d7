"""Pydantic models for auth requests."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class RegisterRequest(BaseModel):
    """POST /auth/register request body."""

    username: str
    password: str


class LoginRequest(BaseModel):
    """POST /auth/login request body."""

    username: str
    password: str


class RefreshRequest(BaseModel):
    """POST /auth/refreshToken request body."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(alias="refreshToken", min_length=1)
