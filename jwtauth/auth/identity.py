"""Request-scoped identity value."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field


@dataclass(frozen=True)
class Identity:
    """Authenticated caller of one request; built fresh on every lookup."""

    account_id: int
    username: str
    authorities: frozenset[str] = field(default_factory=frozenset)
