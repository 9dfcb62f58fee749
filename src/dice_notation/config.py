from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import DiceError


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ALIAS_FILE = ".roll"
HISTORY_FILE = ".roll.history"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    home: Path
    profile: str | None = None
    log_level: str = "WARNING"
    record_history: bool = True

    @property
    def alias_path(self) -> Path:
        if not self.profile:
            return self.home / ALIAS_FILE
        return self.home / f"{ALIAS_FILE}.{self.profile}"

    @property
    def history_path(self) -> Path:
        return self.home / HISTORY_FILE


def profile_suffix(profile: str | None) -> str | None:
    """Reduce a profile name to the lowercase ASCII letters used in the file name."""

    if profile is None:
        return None
    suffix = "".join(c for c in profile.lower() if c.isascii() and c.isalpha())
    return suffix or None


def load_settings(profile: str | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ

    home = Path(env.get("DICE_NOTATION_HOME") or Path.home()).expanduser()

    log_level = env.get("DICE_NOTATION_LOG_LEVEL", "WARNING").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise DiceError(f"[CONFIG] Unknown log level {log_level!r} in DICE_NOTATION_LOG_LEVEL.")

    record_history = env.get("DICE_NOTATION_HISTORY", "1").strip().lower() not in _FALSE_VALUES

    return Settings(
        home=home,
        profile=profile_suffix(profile),
        log_level=log_level,
        record_history=record_history,
    )


def configure_logging(level: str) -> None:
    # No-op when the root logger already has handlers (e.g. under pytest).
    logging.basicConfig(level=level, format=LOG_FORMAT)
