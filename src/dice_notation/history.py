from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path


logger = logging.getLogger(__name__)


def program_version() -> str:
    try:
        return version("dice-notation")
    except PackageNotFoundError:
        return "0+unknown"


def format_entries(draws: Mapping[int, Sequence[int]], timestamp: datetime, program: str) -> list[str]:
    stamp = timestamp.strftime("%Y-%m-%d %H:%M")
    return [
        f"{stamp}|{program}|{sides}:{','.join(str(v) for v in values)}"
        for sides, values in sorted(draws.items())
        if values
    ]


def append_history(path: Path, draws: Mapping[int, Sequence[int]], now: datetime | None = None) -> int:
    """Append one line per die size to the history log. Returns lines written."""

    lines = format_entries(draws, now or datetime.now(timezone.utc), program_version())
    if not lines:
        return 0

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as fh:
        fh.writelines(line + "\n" for line in lines)

    logger.debug("Appended %d history lines to %s", len(lines), path)
    return len(lines)
