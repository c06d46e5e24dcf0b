from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass

"""Row cleanup modifiers for raw delimited rows.

Each modifier takes ``list[list[str] | None]`` and returns the modified rows.
``None`` marks a row that readers skip. Modifiers are looked up by name so a
``ModifierList`` can be declared in configuration as a list of strings.
"""

__all__ = [
    "Rows",
    "Modifier",
    "ModifierList",
    "MODIFIERS_BY_NAME",
    "set_rows_with_non_uniform_columns_nil",
    "set_empty_rows_nil",
    "remove_empty_rows",
    "compact_spaced_strings",
    "replace_newline_with_space",
]

Rows = list[list[str] | None]


def _is_empty(row: list[str] | None) -> bool:
    return not row or all(f == "" for f in row)


def set_rows_with_non_uniform_columns_nil(rows: Rows) -> Rows:
    """Set every row whose column count differs from the majority to None.

    Rows with fewer than two columns do not vote. Ties go to the wider row.
    """
    counts = Counter(len(r) for r in rows if r is not None and len(r) > 1)
    majority = 0
    highest = 0
    for columns, count in counts.items():
        if count > highest or (count == highest and columns > majority):
            majority, highest = columns, count
    return [r if r is not None and len(r) == majority else None for r in rows]


def set_empty_rows_nil(rows: Rows) -> Rows:
    return [None if _is_empty(r) else r for r in rows]


def remove_empty_rows(rows: Rows) -> Rows:
    return [r for r in rows if not _is_empty(r)]


def _compact_spaced_string(value: str) -> str | None:
    # "H e l l o" -> "Hello"; 奇数位置が全て空白の場合のみ
    if len(value) < 3:
        return None
    if any(ch != " " for ch in value[1::2]):
        return None
    return value[::2]


def compact_spaced_strings(rows: Rows) -> Rows:
    result: Rows = []
    for row in rows:
        if row is None:
            result.append(None)
            continue
        cleaned = []
        for value in row:
            compact = _compact_spaced_string(value)
            cleaned.append(value if compact is None else compact)
        result.append(cleaned)
    return result


def replace_newline_with_space(rows: Rows) -> Rows:
    return [None if r is None else [v.replace("\n", " ") for v in r] for r in rows]


def remove_top_row(rows: Rows) -> Rows:
    return rows[1:] if len(rows) >= 2 else []


def remove_bottom_row(rows: Rows) -> Rows:
    return rows[:-1] if len(rows) >= 2 else []


def set_top_row_nil(rows: Rows) -> Rows:
    return [None] + rows[1:] if rows else rows


def set_bottom_row_nil(rows: Rows) -> Rows:
    return rows[:-1] + [None] if rows else rows


@dataclass(frozen=True)
class Modifier:
    name: str
    apply: Callable[[Rows], Rows]

    def __call__(self, rows: Rows) -> Rows:
        return self.apply(list(rows))


MODIFIERS_BY_NAME: dict[str, Modifier] = {
    m.name: m
    for m in (
        Modifier("SetRowsWithNonUniformColumnsNil", set_rows_with_non_uniform_columns_nil),
        Modifier("SetEmptyRowsNil", set_empty_rows_nil),
        Modifier("RemoveEmptyRows", remove_empty_rows),
        Modifier("CompactSpacedStrings", compact_spaced_strings),
        Modifier("RemoveTopRow", remove_top_row),
        Modifier("RemoveBottomRow", remove_bottom_row),
        Modifier("SetTopRowNil", set_top_row_nil),
        Modifier("SetBottomRowNil", set_bottom_row_nil),
        Modifier("ReplaceNewlineWithSpace", replace_newline_with_space),
    )
}


class ModifierList(tuple):
    """Ordered modifiers applied one after another."""

    @classmethod
    def from_names(cls, names: Iterable[str]) -> ModifierList:
        """Resolve modifier names.

        Raises:
            KeyError: an unknown modifier name
        """
        modifiers = []
        for name in names:
            if name not in MODIFIERS_BY_NAME:
                raise KeyError(f"unknown row modifier: {name!r}")
            modifiers.append(MODIFIERS_BY_NAME[name])
        return cls(modifiers)

    def names(self) -> list[str]:
        return [m.name for m in self]

    def modify(self, rows: Rows) -> Rows:
        for m in self:
            rows = m(rows)
        return rows
