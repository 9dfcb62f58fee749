"""JSON-backed alias store.

An alias names an ordered list of expressions plus an optional comment:

    {
      "colors": {"high": "bright_green", "low": "bright_red"},
      "aliases": {"attack": {"comment": "longsword", "expressions": ["1d20+5", "1d8+3"]}}
    }

Older files were a bare mapping of alias name to entry; they are upgraded on load and
rewritten in the current shape on the next save.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from rich.color import Color, ColorParseError

from .errors import AliasError, ParseError
from .models import Alias
from .parser import parse
from .render import DEFAULT_COLORS


logger = logging.getLogger(__name__)

COLOR_ROLES = ("high", "low")


def validate_color(role: str, color: str) -> str:
    if role not in COLOR_ROLES:
        raise AliasError(f"[ALIAS_STORE] Unknown color role {role!r}. Use one of: {', '.join(COLOR_ROLES)}.")
    if not isinstance(color, str):
        raise AliasError(f"[ALIAS_STORE] Color for {role!r} must be a string, got {color!r}.")
    try:
        Color.parse(color)
    except ColorParseError as e:
        raise AliasError(f"[ALIAS_STORE] Unknown color {color!r} for {role!r}.") from e
    return color


def _expression_text(raw: Any) -> str | None:
    if isinstance(raw, str):
        return raw
    # Legacy entries stored {"text": ..., "expression": {...}}.
    if isinstance(raw, dict) and isinstance(raw.get("text"), str):
        return raw["text"]
    return None


def _alias_from_json(name: str, raw: Any) -> Alias | None:
    if not isinstance(raw, dict) or not isinstance(raw.get("expressions"), list):
        logger.warning("Skipping alias %r: expected an object with an 'expressions' list", name)
        return None

    expressions: list[str] = []
    for item in raw["expressions"]:
        text = _expression_text(item)
        if text is None:
            logger.warning("Skipping unreadable expression %r in alias %r", item, name)
            continue
        try:
            parse(text)
        except ParseError as e:
            logger.warning("Skipping expression in alias %r: %s", name, e)
            continue
        expressions.append(text)

    if not expressions:
        logger.warning("Skipping alias %r: no valid expressions", name)
        return None

    comment = raw.get("comment")
    return Alias(expressions=tuple(expressions), comment=comment if isinstance(comment, str) else None)


def _looks_like_alias_entry(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("expressions"), list)


def _is_legacy(data: dict[str, Any]) -> bool:
    # Current files hold only "aliases" and "colors"; a legacy file may have aliases by those names.
    if not data:
        return False
    if not data.keys() <= {"aliases", "colors"}:
        return True
    return any(_looks_like_alias_entry(data.get(key)) for key in ("aliases", "colors"))


class AliasStore:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.aliases: dict[str, Alias] = {}
        self.colors: dict[str, str] = {}
        self.legacy = False

    @classmethod
    def load(cls, path: Path, strict_colors: bool = True) -> AliasStore:
        """Read the store at ``path``; a missing file is an empty store.

        With ``strict_colors`` off, an unknown color is logged and left at its default
        instead of failing the load.
        """

        store = cls(path)
        if not path.exists():
            logger.debug("No alias file at %s", path)
            return store

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise AliasError(f"[ALIAS_STORE] Could not read {path}: {e}") from e
        if not isinstance(data, dict):
            raise AliasError(f"[ALIAS_STORE] Could not read {path}: expected a JSON object.")

        if _is_legacy(data):
            logger.info("Upgrading legacy alias file %s", path)
            store.legacy = True
            entries = data
        else:
            entries = data.get("aliases", {})
            colors = data.get("colors", {})
            for key, value in (("aliases", entries), ("colors", colors)):
                if not isinstance(value, dict):
                    raise AliasError(f"[ALIAS_STORE] Could not read {path}: {key!r} must be an object.")
            for role, color in colors.items():
                try:
                    store.colors[role] = validate_color(role, color)
                except AliasError as e:
                    if strict_colors:
                        raise
                    logger.warning("Ignoring color from %s: %s", path, e)

        for name, raw in entries.items():
            alias = _alias_from_json(name, raw)
            if alias is not None:
                store.aliases[name] = alias

        logger.debug("Loaded %d aliases from %s", len(store.aliases), path)
        return store

    def save(self) -> None:
        data: dict[str, Any] = {}
        if self.colors:
            data["colors"] = dict(self.colors)
        data["aliases"] = {
            name: {"comment": alias.comment, "expressions": list(alias.expressions)}
            for name, alias in sorted(self.aliases.items())
        }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        self.legacy = False
        logger.debug("Saved %d aliases to %s", len(self.aliases), self.path)

    def __contains__(self, name: object) -> bool:
        return name in self.aliases

    def get(self, name: str) -> Alias | None:
        return self.aliases.get(name)

    def add(self, name: str, expressions: Iterable[str], comment: str | None = None) -> Alias:
        """Store an alias. Every expression must parse; otherwise nothing is stored."""

        name = name.strip()
        if not name:
            raise AliasError("[ALIAS_STORE] Alias name must not be empty.")

        texts = tuple(t.strip() for t in expressions)
        if not texts:
            raise AliasError("[ALIAS_STORE] An alias needs at least one expression. Example: 'add attack 1d20+5'.")

        for text in texts:
            parse(text)

        alias = Alias(expressions=texts, comment=comment)
        if name in self.aliases:
            logger.info("Replacing alias %r", name)
        self.aliases[name] = alias
        return alias

    def remove(self, name: str) -> Alias:
        try:
            return self.aliases.pop(name)
        except KeyError:
            raise AliasError(f"[ALIAS_STORE] No alias named {name!r}.") from None

    def list(self) -> Iterator[tuple[str, Alias]]:
        return iter(sorted(self.aliases.items()))

    def set_color(self, role: str, color: str) -> None:
        self.colors[role] = validate_color(role, color)

    def highlight_colors(self) -> dict[str, str]:
        return {**DEFAULT_COLORS, **self.colors}
