from __future__ import annotations

import re

from .errors import ParseError, ParseErrorKind
from .models import RollExpression


_WHITESPACE_RE = re.compile(r"\s+")
_DIGITS_RE = re.compile(r"\d+")

_SIGNS = {"+": 1, "-": -1}


def normalize_text(text: str) -> str:
    # Whitespace is not significant and letters are case-insensitive ("2D6R").
    return _WHITESPACE_RE.sub("", text).lower()


class _Scanner:
    """Single left-to-right cursor over a normalized expression."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.text = normalize_text(source)
        self.pos = 0

    def peek(self) -> str:
        return self.text[self.pos : self.pos + 1]

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def accept(self, char: str) -> bool:
        if self.peek() == char:
            self.pos += 1
            return True
        return False

    def digits(self) -> int | None:
        m = _DIGITS_RE.match(self.text, self.pos)
        if not m:
            return None
        self.pos = m.end()
        return int(m.group())

    def fail(self, kind: ParseErrorKind, detail: str, position: int | None = None) -> ParseError:
        return ParseError(kind, self.text, self.pos if position is None else position, detail, self.source)


def _parse_count(scanner: _Scanner) -> int:
    count = scanner.digits()
    if scanner.accept("d"):
        if count is None:
            return 1
        if count < 1:
            raise scanner.fail("INVALID_COUNT", "Dice count must be a positive integer. Example: '2d6'.", 0)
        return count

    if "d" not in scanner.text[scanner.pos :]:
        raise scanner.fail("MISSING_DIE_SEPARATOR", "Expected a 'd' between count and sides. Example: '1d20'.")
    raise scanner.fail("INVALID_COUNT", "Dice count must be a positive integer. Example: '2d6'.", 0)


def _parse_sides(scanner: _Scanner) -> int:
    start = scanner.pos
    sides = scanner.digits()
    if sides is None:
        raise scanner.fail("INVALID_SIDES", "Missing die size after 'd'. Example: 'd20'.")
    if sides < 2:
        raise scanner.fail("INVALID_SIDES", "A die must have at least 2 sides. Example: '2d6'.", start)
    return sides


def _parse_modifier(scanner: _Scanner) -> int:
    sign = _SIGNS.get(scanner.peek())
    if sign is None:
        return 0
    scanner.pos += 1

    value = scanner.digits()
    if value is None:
        raise scanner.fail("INVALID_MODIFIER", "Expected a number after the modifier sign. Example: '1d20+4'.")
    return sign * value


def _parse_repeat(scanner: _Scanner) -> int:
    # "*N" and "[N]" are two spellings of the same repeat count.
    start = scanner.pos
    if scanner.accept("*"):
        bracketed = False
    elif scanner.accept("["):
        bracketed = True
    else:
        if scanner.peek() == "]":
            raise scanner.fail("INVALID_REPEAT", "Unmatched ']' in repeat suffix. Example: '2d6[5]'.")
        return 1

    repeat = scanner.digits()
    if repeat is None:
        raise scanner.fail("INVALID_REPEAT", "Expected a repeat count. Example: '2d6*5' or '2d6[5]'.")
    if repeat < 1:
        raise scanner.fail("INVALID_REPEAT", "Repeat count must be a positive integer. Example: '2d6*5'.", start)

    closed = scanner.accept("]")
    if bracketed != closed:
        raise scanner.fail("INVALID_REPEAT", "Mismatched bracket in repeat suffix. Example: '2d6[5]'.")
    return repeat


def parse(text: str) -> RollExpression:
    """Parse a single roll expression such as ``2d6r+2*3``.

    Raises ParseError (with a distinct kind) for any malformed input.
    """

    scanner = _Scanner(text)

    count = _parse_count(scanner)
    sides = _parse_sides(scanner)
    reroll = scanner.accept("r")
    modifier = _parse_modifier(scanner)
    repeat = _parse_repeat(scanner)

    if not scanner.at_end():
        raise scanner.fail(
            "TRAILING_INPUT",
            f"Unexpected trailing input {scanner.text[scanner.pos:]!r}. Example: '2d6r+2*3'.",
        )

    return RollExpression(count=count, sides=sides, reroll=reroll, modifier=modifier, repeat=repeat)


def to_text(expr: RollExpression) -> str:
    """Canonical text for an expression; ``parse(to_text(e)) == e``."""

    chunks = [f"{expr.count}d{expr.sides}"]
    if expr.reroll:
        chunks.append("r")
    if expr.modifier:
        chunks.append(f"{expr.modifier:+d}")
    if expr.repeat != 1:
        chunks.append(f"*{expr.repeat}")
    return "".join(chunks)
