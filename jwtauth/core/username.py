"""Account name canonicalization.

Names are compared after trimming and NFC normalization, case-sensitively,
and measured in user-visible characters (grapheme clusters) rather than code
points.
"""

from __future__ import annotations

import unicodedata

import regex

from jwtauth.core.outcomes import ValidationError
from jwtauth.core.outcomes import ValidationErrorKind

MIN_USERNAME_GRAPHEMES = 1
MAX_USERNAME_GRAPHEMES = 250
_GRAPHEME = regex.compile(r"\X")


def canonical_username(raw: str) -> str:
    return unicodedata.normalize("NFC", raw.strip())


def count_graphemes(value: str) -> int:
    return sum(1 for _ in _GRAPHEME.finditer(value))


def check_username(raw: str) -> str | ValidationError:
    """Return the canonical name, or ``INVALID_USERNAME`` when its length is out of range."""
    name = canonical_username(raw)
    if not MIN_USERNAME_GRAPHEMES <= count_graphemes(name) <= MAX_USERNAME_GRAPHEMES:
        return ValidationError(
            ValidationErrorKind.INVALID_USERNAME,
            f"username must be {MIN_USERNAME_GRAPHEMES} to {MAX_USERNAME_GRAPHEMES} characters",
        )
    return name
