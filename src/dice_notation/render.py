from __future__ import annotations

from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.text import Text

from .models import FormattedLine


DEFAULT_COLORS: dict[str, str] = {"high": "bright_green", "low": "bright_red"}


def make_console(no_color: bool = False) -> Console:
    return Console(highlight=False, no_color=no_color)


def render_line(line: FormattedLine, colors: Mapping[str, str] = DEFAULT_COLORS) -> Text:
    styles = {"max": colors.get("high"), "min": colors.get("low")}

    text = Text()
    text.append(f"{line.total}  {line.text}  ")
    for i, die in enumerate(line.dice):
        if i:
            text.append(" ")
        text.append(str(die.value), style=styles.get(die.face))
    if line.modifier:
        text.append(f"  {line.modifier}")
    return text


def print_lines(console: Console, lines: Iterable[Text | str]) -> None:
    for line in lines:
        console.print(line if isinstance(line, Text) else Text(line), soft_wrap=True)
