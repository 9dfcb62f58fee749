from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from .evaluator import average, evaluate
from .formatter import format_results
from .parser import parse, to_text
from .rng import RandomSource, SystemRandomSource


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def roll_from_text(text: str, rng: RandomSource | None = None) -> dict[str, Any]:
    """Parse, then roll. Raises DiceError for invalid input."""

    expr = parse(text)
    rng = rng or SystemRandomSource()

    results = evaluate(expr, rng)
    lines = format_results(results, expr, text.strip())

    explanation_parts: list[str] = []
    for result in results:
        part = f"rolls {list(result.rolls)}"
        if result.modifier:
            part += f" {result.modifier:+d}"
        explanation_parts.append(f"{part} => {result.total}")

    return {
        "request_id": uuid.uuid4().hex,
        "timestamp": _now_utc_iso(),
        "input": text,
        "normalized_expression": to_text(expr),
        "expression": {
            "count": expr.count,
            "sides": expr.sides,
            "reroll": expr.reroll,
            "modifier": expr.modifier,
            "repeat": expr.repeat,
        },
        "rng": {
            "source": getattr(rng, "name", type(rng).__name__),
            "nonce": str(uuid.uuid4()),
        },
        "results": [
            {
                "total": result.total,
                "rolls": list(result.rolls),
                "modifier": result.modifier,
                "faces": [die.face for die in line.dice],
            }
            for result, line in zip(results, lines)
        ],
        "lines": [line.plain() for line in lines],
        "explanation": f"{to_text(expr)}: " + "; ".join(explanation_parts),
    }


def average_from_text(text: str) -> dict[str, Any]:
    expr = parse(text)
    return {
        "input": text,
        "normalized_expression": to_text(expr),
        "average": round(average(expr), 2),
    }
