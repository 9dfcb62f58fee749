from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import Face, FormattedDie, FormattedLine, RollExpression, RollResult


def classify(value: int, sides: int) -> Face:
    if value == sides:
        return "max"
    if value == 1:
        return "min"
    return "neutral"


def format_modifier(modifier: int) -> str:
    if not modifier:
        return ""
    return f"({modifier:+d})"


def format_results(
    results: Sequence[RollResult], expr: RollExpression, text: str
) -> list[FormattedLine]:
    """One line per result, totals right-aligned across the whole batch."""

    width = max((len(str(r.total)) for r in results), default=0)
    return [
        FormattedLine(
            total=str(r.total).rjust(width),
            text=text,
            dice=tuple(FormattedDie(value=v, face=classify(v, expr.sides)) for v in r.rolls),
            modifier=format_modifier(r.modifier),
        )
        for r in results
    ]


def format_average(rows: Iterable[tuple[str, float]]) -> list[str]:
    rows = list(rows)
    width = max((len(text) for text, _ in rows), default=0)
    return [f"{text.ljust(width)}  {value:.2f}" for text, value in rows]
