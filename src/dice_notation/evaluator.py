from __future__ import annotations

from .models import RollExpression, RollResult
from .rng import RandomSource


def roll_die(expr: RollExpression, rng: RandomSource) -> int:
    value = rng.next(1, expr.sides)
    if expr.reroll and value == 1:
        # Single pass: the second draw is kept even if it is another 1.
        value = rng.next(1, expr.sides)
    return value


def evaluate_once(expr: RollExpression, rng: RandomSource) -> RollResult:
    rolls = tuple(roll_die(expr, rng) for _ in range(expr.count))
    return RollResult(rolls=rolls, modifier=expr.modifier, total=sum(rolls) + expr.modifier)


def evaluate(expr: RollExpression, rng: RandomSource) -> list[RollResult]:
    """Roll ``expr`` ``expr.repeat`` times, independently.

    Errors raised by ``rng`` propagate unchanged.
    """

    return [evaluate_once(expr, rng) for _ in range(expr.repeat)]


def average(expr: RollExpression) -> float:
    """Expected total of a single evaluation."""

    per_die = (expr.sides + 1) / 2
    if expr.reroll:
        # A first-draw 1 is replaced by a fresh draw with the plain mean.
        per_die = (per_die + expr.sides * (expr.sides + 1) // 2 - 1) / expr.sides
    return expr.count * per_die + expr.modifier
