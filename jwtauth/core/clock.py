"""UTC time helpers shared by token components."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from datetime import timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def from_utc_iso(value: str) -> datetime:
    """Parse a value written by ``to_utc_iso`` back into an aware datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
