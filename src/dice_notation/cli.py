"""The ``roll`` command.

    roll 2d6r+2 1d20+4*3        roll expressions (or aliases) in order
    roll -a 2d6r                print averages instead of rolling
    roll add attack 1d20+5 1d8+3 -c "longsword"
    roll rm attack
    roll list
    roll colors --high cyan
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.text import Text

from .aliases import AliasStore
from .config import Settings, configure_logging, load_settings
from .errors import DiceError
from .evaluator import average, evaluate
from .formatter import format_average, format_results
from .history import append_history
from .models import RollExpression
from .parser import parse
from .render import make_console, print_lines, render_line
from .rng import RecordingRandomSource, SeededRandomSource, SystemRandomSource


logger = logging.getLogger(__name__)

# The core accepts any size; these only keep a typo from hanging the terminal.
MAX_DRAWS = 100_000
MAX_SIDES = 10**9

COMMANDS = ("roll", "add", "rm", "list", "colors")
_VALUE_OPTIONS = {"-p", "--profile", "--seed"}


def _common_options() -> argparse.ArgumentParser:
    # SUPPRESS so a subcommand never resets an option given before it.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-p", "--profile", default=argparse.SUPPRESS, help="use the alias file of a named profile")
    common.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="debug logging")
    common.add_argument("--no-color", action="store_true", default=argparse.SUPPRESS, help="disable highlighting")
    common.add_argument("--seed", type=int, default=argparse.SUPPRESS, help="seed for reproducible rolls")
    return common


def build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog="roll",
        description="Roll dice expressions like 2d8+5, 2d6r+2 or 1d20+4*3.",
        parents=[common],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    roll = sub.add_parser("roll", parents=[common], help="roll expressions or aliases (default)")
    roll.add_argument(
        "expressions",
        nargs="+",
        help="expressions such as 2d6, d20+4, 2d6r (reroll ones once), 2d6*5 or 2d6[5] (repeat)",
    )
    roll.add_argument("-a", "--average", action="store_true", help="print average values instead of rolling")

    add = sub.add_parser("add", parents=[common], help="store expressions under an alias")
    add.add_argument("alias")
    add.add_argument("expressions", nargs="+")
    add.add_argument("-c", "--comment", help="a comment shown when the alias is rolled")

    rm = sub.add_parser("rm", parents=[common], help="remove an alias")
    rm.add_argument("alias")

    sub.add_parser("list", parents=[common], help="list stored aliases")

    colors = sub.add_parser("colors", parents=[common], help="show or set highlight colors")
    colors.add_argument("--high", help="color for dice that rolled their maximum face")
    colors.add_argument("--low", help="color for dice that rolled a one")

    return parser


def with_default_command(argv: Sequence[str]) -> list[str]:
    """Prefix ``roll`` unless the first positional argument names a command."""

    argv = list(argv)
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in _VALUE_OPTIONS:
            i += 2
        elif arg.startswith("-"):
            i += 1
        else:
            break

    if i < len(argv) and argv[i] in COMMANDS:
        return argv
    if i >= len(argv) and any(a in ("-h", "--help") for a in argv):
        return argv
    return ["roll", *argv]


def check_limits(expr: RollExpression, text: str) -> None:
    if expr.sides > MAX_SIDES:
        raise DiceError(f"[TOO_LARGE] {text!r}: at most {MAX_SIDES} sides per die.")
    if expr.count * expr.repeat > MAX_DRAWS:
        raise DiceError(f"[TOO_LARGE] {text!r}: at most {MAX_DRAWS} dice per expression.")


def _expand(store: AliasStore, candidates: Sequence[str]) -> list[tuple[int, str | None, str, RollExpression]]:
    """Resolve aliases and parse everything up front, so nothing is rolled on bad input."""

    planned: list[tuple[int, str | None, str, RollExpression]] = []
    for index, candidate in enumerate(candidates):
        alias = store.get(candidate)
        texts = alias.expressions if alias is not None else (candidate,)
        for text in texts:
            expr = parse(text)
            check_limits(expr, text)
            planned.append((index, candidate if alias is not None else None, text, expr))
    return planned


def _alias_header(name: str, store: AliasStore) -> Text:
    alias = store.get(name)
    header = f"# {name}"
    if alias is not None and alias.comment:
        header += f"  {alias.comment}"
    return Text(header)


def cmd_roll(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    store = AliasStore.load(settings.alias_path, strict_colors=False)
    planned = _expand(store, args.expressions)

    if args.average:
        rows: dict[str, float] = {}
        for _, _, text, expr in planned:
            rows.setdefault(text, average(expr))
        print_lines(console, format_average(rows.items()))
        return 0

    seed = getattr(args, "seed", None)
    rng = RecordingRandomSource(SystemRandomSource() if seed is None else SeededRandomSource(seed))
    colors = store.highlight_colors()

    previous = -1
    for index, alias_name, text, expr in planned:
        if alias_name is not None and index != previous:
            print_lines(console, [_alias_header(alias_name, store)])
        previous = index

        lines = format_results(evaluate(expr, rng), expr, text)
        print_lines(console, (render_line(line, colors) for line in lines))

    if settings.record_history:
        try:
            append_history(settings.history_path, rng.draws)
        except OSError as e:
            logger.warning("Could not write history to %s: %s", settings.history_path, e)
    return 0


def cmd_add(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    store = AliasStore.load(settings.alias_path)
    alias = store.add(args.alias, args.expressions, comment=args.comment)
    store.save()
    logger.info("Stored alias %r in %s", args.alias, settings.alias_path)
    print_lines(console, [f"Saved {args.alias.strip()}: {' '.join(alias.expressions)}"])
    return 0


def cmd_rm(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    store = AliasStore.load(settings.alias_path)
    store.remove(args.alias)
    store.save()
    logger.info("Removed alias %r from %s", args.alias, settings.alias_path)
    print_lines(console, [f"Removed {args.alias}"])
    return 0


def cmd_list(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    store = AliasStore.load(settings.alias_path)
    lines: list[str] = []
    for name, alias in store.list():
        lines.append(f"# {name}")
        if alias.comment:
            lines.append(f"# {alias.comment}")
        lines.extend(f"  {text}" for text in alias.expressions)
    print_lines(console, lines)
    return 0


def cmd_colors(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    store = AliasStore.load(settings.alias_path)
    changed = False
    for role in ("high", "low"):
        color = getattr(args, role)
        if color is not None:
            store.set_color(role, color)
            changed = True
    if changed:
        store.save()

    print_lines(console, [f"{role}: {color}" for role, color in store.highlight_colors().items()])
    return 0


COMMAND_HANDLERS = {
    "roll": cmd_roll,
    "add": cmd_add,
    "rm": cmd_rm,
    "list": cmd_list,
    "colors": cmd_colors,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(with_default_command(sys.argv[1:] if argv is None else argv))

    try:
        settings = load_settings(profile=getattr(args, "profile", None))
        configure_logging("DEBUG" if getattr(args, "verbose", False) else settings.log_level)
        console = make_console(no_color=getattr(args, "no_color", False))
        return COMMAND_HANDLERS[args.command](args, settings, console)
    except (DiceError, OSError) as e:
        logger.debug("Command %r failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
