"""Tests for ghrel.core.structured module."""

from __future__ import annotations

from ghrel.core.structured import (
    as_obj_list,
    as_str_dict,
    get_bool,
    get_int,
    get_raw_str,
    get_str,
    get_str_list,
    get_table,
    is_str_dict,
)


def test_is_str_dict() -> None:
    assert is_str_dict({"a": 1})
    assert not is_str_dict({1: "a"})
    assert not is_str_dict(["a"])


def test_as_helpers() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict("nope") is None
    assert as_obj_list([1, "2"]) == [1, "2"]
    assert as_obj_list({"a": 1}) is None


def test_get_str_strips_and_drops_empty() -> None:
    table: dict[str, object] = {"name": "  Widgets  ", "blank": "   ", "num": 3}
    assert get_str(table, "name") == "Widgets"
    assert get_str(table, "blank") is None
    assert get_str(table, "num") is None
    assert get_str(table, "missing") is None


def test_get_raw_str_keeps_whitespace() -> None:
    assert get_raw_str({"body": "  notes\n"}, "body") == "  notes\n"


def test_get_int_rejects_bool() -> None:
    assert get_int({"id": 7}, "id") == 7
    assert get_int({"id": True}, "id") is None
    assert get_int({"id": "7"}, "id") is None


def test_get_bool() -> None:
    assert get_bool({"draft": False}, "draft") is False
    assert get_bool({"draft": "false"}, "draft") is None


def test_get_table() -> None:
    table: dict[str, object] = {"tool": {"ghrel": {"tag": "v1"}}}
    tool = get_table(table, "tool")
    assert tool is not None
    assert get_table(tool, "ghrel") == {"tag": "v1"}
    assert get_table(table, "missing") is None


def test_get_str_list_filters_items() -> None:
    table: dict[str, object] = {"includes": ["*.zip", " ", 3, " *.jar "]}
    assert get_str_list(table, "includes") == ["*.zip", "*.jar"]
    assert get_str_list({"includes": "*.zip"}, "includes") is None
