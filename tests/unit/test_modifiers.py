from __future__ import annotations

import pytest

from rowbridge.delimited.modifiers import (
    MODIFIERS_BY_NAME,
    ModifierList,
    compact_spaced_strings,
    remove_empty_rows,
    replace_newline_with_space,
    set_empty_rows_nil,
    set_rows_with_non_uniform_columns_nil,
)


def test_non_uniform_columns_majority():
    rows = [["a", "b", "c"], ["1", "2", "3"], ["x", "y"], ["only"], None, ["4", "5", "6"]]
    assert set_rows_with_non_uniform_columns_nil(rows) == [
        ["a", "b", "c"], ["1", "2", "3"], None, None, None, ["4", "5", "6"],
    ]


def test_non_uniform_columns_tie_goes_to_wider_rows():
    rows = [["a", "b"], ["1", "2", "3"]]
    assert set_rows_with_non_uniform_columns_nil(rows) == [None, ["1", "2", "3"]]


def test_empty_rows():
    rows = [["a"], [], ["", ""], None, ["b"]]
    assert set_empty_rows_nil(rows) == [["a"], None, None, None, ["b"]]
    assert remove_empty_rows(rows) == [["a"], ["b"]]


def test_compact_spaced_strings():
    rows = [["H e l l o", "ab", "a b c d", "a  b"], None]
    assert compact_spaced_strings(rows) == [["Hello", "ab", "abcd", "a  b"], None]


def test_replace_newline_with_space():
    assert replace_newline_with_space([["a\nb"], None]) == [["a b"], None]


@pytest.mark.parametrize(
    "name, expected",
    [
        ("RemoveTopRow", [["2"], ["3"]]),
        ("RemoveBottomRow", [["1"], ["2"]]),
        ("SetTopRowNil", [None, ["2"], ["3"]]),
        ("SetBottomRowNil", [["1"], ["2"], None]),
    ],
)
def test_edge_row_modifiers(name: str, expected):
    assert MODIFIERS_BY_NAME[name]([["1"], ["2"], ["3"]]) == expected


def test_edge_modifiers_on_short_input():
    assert MODIFIERS_BY_NAME["RemoveTopRow"]([["1"]]) == []
    assert MODIFIERS_BY_NAME["SetTopRowNil"]([]) == []


def test_modifier_list_applies_in_order():
    mods = ModifierList.from_names(["RemoveTopRow", "SetEmptyRowsNil"])
    assert mods.names() == ["RemoveTopRow", "SetEmptyRowsNil"]
    assert mods.modify([["title"], ["", ""], ["a", "b"]]) == [None, ["a", "b"]]


def test_modifier_does_not_mutate_input():
    rows = [["1"], ["2"]]
    MODIFIERS_BY_NAME["SetTopRowNil"](rows)
    assert rows == [["1"], ["2"]]


def test_unknown_modifier_name():
    with pytest.raises(KeyError, match="Bogus"):
        ModifierList.from_names(["Bogus"])


def test_all_modifiers_registered():
    assert len(MODIFIERS_BY_NAME) == 9
