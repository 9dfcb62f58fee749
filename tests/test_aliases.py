import json

import pytest

from dice_notation.aliases import AliasStore
from dice_notation.errors import AliasError, ParseError
from dice_notation.models import Alias


def test_missing_file_is_empty_store(tmp_path):
    store = AliasStore.load(tmp_path / ".roll")
    assert list(store.list()) == []
    assert store.highlight_colors() == {"high": "bright_green", "low": "bright_red"}


def test_add_save_and_reload(tmp_path):
    path = tmp_path / "nested" / ".roll"
    store = AliasStore.load(path)
    store.add("attack", ["1d20+5", " 1d8+3 "], comment="longsword")
    store.save()

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "aliases": {"attack": {"comment": "longsword", "expressions": ["1d20+5", "1d8+3"]}}
    }
    reloaded = AliasStore.load(path)
    assert reloaded.get("attack") == Alias(expressions=("1d20+5", "1d8+3"), comment="longsword")
    assert "attack" in reloaded


def test_add_rejects_invalid_expression_and_stores_nothing(tmp_path):
    store = AliasStore.load(tmp_path / ".roll")
    with pytest.raises(ParseError) as exc:
        store.add("broken", ["1d20", "2d1"])
    assert exc.value.kind == "INVALID_SIDES"
    assert store.get("broken") is None


@pytest.mark.parametrize(("name", "expressions"), [("", ["1d6"]), ("  ", ["1d6"]), ("empty", [])])
def test_add_rejects_empty_name_or_expressions(tmp_path, name, expressions):
    store = AliasStore.load(tmp_path / ".roll")
    with pytest.raises(AliasError):
        store.add(name, expressions)


def test_add_replaces_existing(tmp_path):
    store = AliasStore.load(tmp_path / ".roll")
    store.add("dmg", ["1d8"])
    store.add("dmg", ["2d6"], comment="greatsword")
    assert store.get("dmg") == Alias(expressions=("2d6",), comment="greatsword")


def test_remove(tmp_path):
    store = AliasStore.load(tmp_path / ".roll")
    store.add("dmg", ["1d8"])
    assert store.remove("dmg") == Alias(expressions=("1d8",))
    with pytest.raises(AliasError):
        store.remove("dmg")


def test_list_is_sorted(tmp_path):
    store = AliasStore.load(tmp_path / ".roll")
    store.add("zeta", ["1d4"])
    store.add("alpha", ["1d6"])
    assert [name for name, _ in store.list()] == ["alpha", "zeta"]


def test_legacy_file_is_upgraded(tmp_path):
    path = tmp_path / ".roll"
    path.write_text(
        json.dumps(
            {
                "attack": {
                    "comment": None,
                    "expressions": [{"text": "1d20+5", "expression": {"count": 1, "max": 20}}, "1d8+3"],
                }
            }
        ),
        encoding="utf-8",
    )

    store = AliasStore.load(path)
    assert store.legacy
    assert store.get("attack") == Alias(expressions=("1d20+5", "1d8+3"))

    store.save()
    assert "aliases" in json.loads(path.read_text(encoding="utf-8"))
    assert not AliasStore.load(path).legacy


def test_invalid_stored_expressions_are_skipped(tmp_path):
    path = tmp_path / ".roll"
    path.write_text(
        json.dumps(
            {
                "aliases": {
                    "mixed": {"expressions": ["1d6", "1d20x", 7]},
                    "bad": {"expressions": ["2d1"]},
                    "shape": ["1d6"],
                }
            }
        ),
        encoding="utf-8",
    )

    store = AliasStore.load(path)
    assert store.get("mixed") == Alias(expressions=("1d6",))
    assert store.get("bad") is None
    assert store.get("shape") is None


@pytest.mark.parametrize(
    "content",
    [
        b"{not json",
        b"[1, 2]",
        b"\xff\xfe{}",
        b'{"aliases": ["x"]}',
        b'{"aliases": "1d6"}',
        b'{"colors": ["red"]}',
        b'{"aliases": {}, "colors": null}',
    ],
)
def test_unreadable_file(tmp_path, content):
    path = tmp_path / ".roll"
    path.write_bytes(content)
    with pytest.raises(AliasError):
        AliasStore.load(path)


def test_colors(tmp_path):
    path = tmp_path / ".roll"
    store = AliasStore.load(path)
    store.set_color("high", "cyan")
    store.save()

    reloaded = AliasStore.load(path)
    assert reloaded.highlight_colors() == {"high": "cyan", "low": "bright_red"}


@pytest.mark.parametrize(("role", "color"), [("high", "not-a-color"), ("middle", "red"), ("low", 3)])
def test_invalid_colors(tmp_path, role, color):
    store = AliasStore.load(tmp_path / ".roll")
    with pytest.raises(AliasError):
        store.set_color(role, color)


def test_invalid_color_in_file(tmp_path):
    path = tmp_path / ".roll"
    path.write_text(json.dumps({"colors": {"high": "nope"}, "aliases": {}}), encoding="utf-8")
    with pytest.raises(AliasError):
        AliasStore.load(path)


@pytest.mark.parametrize("name", ["colors", "aliases"])
def test_legacy_alias_named_like_a_section(tmp_path, name):
    path = tmp_path / ".roll"
    path.write_text(json.dumps({name: {"comment": None, "expressions": ["1d6"]}}), encoding="utf-8")

    store = AliasStore.load(path)
    assert store.legacy
    assert store.get(name) == Alias(expressions=("1d6",))
    assert store.highlight_colors() == {"high": "bright_green", "low": "bright_red"}


def test_legacy_alias_named_colors_beside_others(tmp_path):
    path = tmp_path / ".roll"
    path.write_text(
        json.dumps(
            {
                "colors": {"comment": "paint", "expressions": ["1d6"]},
                "attack": {"comment": None, "expressions": ["1d20+5"]},
            }
        ),
        encoding="utf-8",
    )

    store = AliasStore.load(path)
    assert [name for name, _ in store.list()] == ["attack", "colors"]
    assert store.get("colors").comment == "paint"


def test_current_file_with_alias_named_expressions(tmp_path):
    path = tmp_path / ".roll"
    path.write_text(json.dumps({"aliases": {"expressions": {"expressions": ["2d6"]}}}), encoding="utf-8")

    store = AliasStore.load(path)
    assert not store.legacy
    assert store.get("expressions") == Alias(expressions=("2d6",))


def test_invalid_color_ignored_when_not_strict(tmp_path):
    path = tmp_path / ".roll"
    path.write_text(
        json.dumps({"colors": {"high": "nope", "low": "blue"}, "aliases": {"dmg": {"expressions": ["1d8"]}}}),
        encoding="utf-8",
    )

    store = AliasStore.load(path, strict_colors=False)
    assert store.highlight_colors() == {"high": "bright_green", "low": "blue"}
    assert store.get("dmg") == Alias(expressions=("1d8",))
