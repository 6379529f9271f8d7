"""Log redaction and request correlation tests."""

from __future__ import annotations

import logging

import structlog

from jwtauth.core.logging import REDACTED
from jwtauth.core.logging import bind_request_id
from jwtauth.core.logging import clear_request_id
from jwtauth.core.logging import configure_logging
from jwtauth.core.logging import get_logger
from jwtauth.core.logging import redact_secrets


def test_credential_keys_are_masked() -> None:
    """Input: event with password/token fields -> Output: values fully replaced, others intact."""
    event = redact_secrets(
        None,
        "info",
        {
            "event": "login_failed",
            "password": "hunter2-long",
            "refresh_token": "abcdefghijkl",
            "Authorization": "Bearer xyz",
            "jwt_secret": "abc",
            "username": "alice",
        },
    )

    assert event["event"] == "login_failed"
    assert event["username"] == "alice"
    assert event["password"] == REDACTED
    assert event["refresh_token"] == REDACTED
    assert event["Authorization"] == REDACTED
    assert event["jwt_secret"] == REDACTED


def test_bind_request_id_uses_given_or_generates() -> None:
    try:
        assert bind_request_id("req-1") == "req-1"
        assert structlog.contextvars.get_contextvars()["request_id"] == "req-1"

        generated = bind_request_id()
        assert generated and generated != "req-1"
    finally:
        clear_request_id()

    assert "request_id" not in structlog.contextvars.get_contextvars()


def test_get_logger_binds_to_filtering_logger() -> None:
    """Input: configure at WARNING -> Output: bound loggers are the level-filtering class."""
    configure_logging("WARNING", json_output=True)
    filtering_class = structlog.make_filtering_bound_logger(logging.WARNING)

    bound = get_logger("jwtauth.test").bind(component="test")

    assert structlog.get_config()["wrapper_class"] is filtering_class
    assert isinstance(bound, filtering_class)
