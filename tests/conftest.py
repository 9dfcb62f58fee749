from __future__ import annotations

import pytest

from dice_notation.errors import RandomSourceError


class ScriptedRandomSource:
    """Replays a fixed sequence of draws and records the bounds it was asked for."""

    name = "scripted"

    def __init__(self, values):
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []

    def next(self, minimum: int, maximum: int) -> int:
        self.calls.append((minimum, maximum))
        if not self.values:
            raise RandomSourceError("[RANDOM_SOURCE] Scripted source exhausted.")
        return self.values.pop(0)


class ConstantRandomSource:
    name = "constant"

    def __init__(self, value: int):
        self.value = value

    def next(self, minimum: int, maximum: int) -> int:
        return self.value


@pytest.fixture
def scripted():
    return ScriptedRandomSource


@pytest.fixture
def constant():
    return ConstantRandomSource


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("DICE_NOTATION_HOME", str(tmp_path))
    monkeypatch.delenv("DICE_NOTATION_LOG_LEVEL", raising=False)
    monkeypatch.delenv("DICE_NOTATION_HISTORY", raising=False)
    return tmp_path
