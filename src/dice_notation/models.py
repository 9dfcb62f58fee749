from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias


Face: TypeAlias = Literal["min", "max", "neutral"]


@dataclass(frozen=True)
class RollExpression:
    count: int
    sides: int
    reroll: bool = False
    modifier: int = 0
    repeat: int = 1


@dataclass(frozen=True)
class RollResult:
    rolls: tuple[int, ...]
    modifier: int
    total: int


@dataclass(frozen=True)
class FormattedDie:
    value: int
    face: Face


@dataclass(frozen=True)
class FormattedLine:
    total: str
    text: str
    dice: tuple[FormattedDie, ...]
    modifier: str = ""

    def plain(self) -> str:
        parts = [self.total, self.text, " ".join(str(d.value) for d in self.dice)]
        if self.modifier:
            parts.append(self.modifier)
        return "  ".join(parts)


@dataclass(frozen=True)
class Alias:
    expressions: tuple[str, ...]
    comment: str | None = None