from __future__ import annotations

from typing import Literal, TypeAlias


ParseErrorKind: TypeAlias = Literal[
    "MISSING_DIE_SEPARATOR",
    "INVALID_SIDES",
    "INVALID_COUNT",
    "INVALID_MODIFIER",
    "INVALID_REPEAT",
    "TRAILING_INPUT",
]


class DiceError(ValueError):
    """User-facing errors. Messages start with a stable bracketed code."""


class ParseError(DiceError):
    """Raised when an expression does not match the roll grammar.

    ``text`` is the normalized expression (whitespace removed, lowercased) and
    ``position`` indexes into it; ``source`` is the input as the caller gave it.
    """

    def __init__(
        self, kind: ParseErrorKind, text: str, position: int, detail: str, source: str | None = None
    ) -> None:
        self.kind = kind
        self.text = text
        self.source = text if source is None else source
        self.position = position
        self.detail = detail
        super().__init__(f"[{kind}] {detail} (in {text!r} at position {position})")


class RandomSourceError(DiceError):
    """A randomness source could not produce a value."""


class AliasError(DiceError):
    """Alias store failures (unknown alias, unreadable file, bad color)."""
