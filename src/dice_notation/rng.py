from __future__ import annotations

import random
import secrets
from collections import defaultdict
from typing import Protocol

from .errors import RandomSourceError


class RandomSource(Protocol):
    def next(self, minimum: int, maximum: int) -> int:
        """Return a uniformly distributed integer in [minimum, maximum]."""
        ...


class SystemRandomSource:
    """OS entropy, the default for real rolls."""

    name = "secrets.SystemRandom"

    def __init__(self) -> None:
        self._rng = secrets.SystemRandom()

    def next(self, minimum: int, maximum: int) -> int:
        return self._rng.randint(minimum, maximum)


class SeededRandomSource:
    """Reproducible rolls from a fixed seed."""

    name = "random.Random"

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def next(self, minimum: int, maximum: int) -> int:
        return self._rng.randint(minimum, maximum)


class RecordingRandomSource:
    """Forwards to another source and keeps every drawn value, keyed by upper bound."""

    def __init__(self, inner: RandomSource) -> None:
        self.inner = inner
        self.draws: dict[int, list[int]] = defaultdict(list)

    @property
    def name(self) -> str:
        return getattr(self.inner, "name", type(self.inner).__name__)

    def next(self, minimum: int, maximum: int) -> int:
        value = self.inner.next(minimum, maximum)
        if not minimum <= value <= maximum:
            raise RandomSourceError(
                f"[RANDOM_SOURCE] Source returned {value}, outside [{minimum}, {maximum}]."
            )
        self.draws[maximum].append(value)
        return value
