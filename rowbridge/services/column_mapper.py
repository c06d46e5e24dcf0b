from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Protocol

from ..models.field_descriptor import COLUMN_TAG, IGNORE, FieldDescriptor
from .introspect import field_values, flatten

"""Column mapping: which record fields become which table columns.

``FieldColumnMapper`` derives a title for every flattened field (declared
title or a transform of the field name), drops ignored fields and assigns
every remaining field a unique column index. Explicit remaps are honoured
first-come-first-served in declaration order; a remap that is out of range or
already taken silently falls back to the next free index, so the assigned
indices always form the dense range ``[0, n)``.

Mappers are immutable values; use ``default_column_mapper()`` for the stock
configuration or the ``with_*`` builders for variations.
"""

__all__ = [
    "IGNORE_INDEX",
    "ColumnAssignment",
    "ColumnMapper",
    "FieldColumnMapper",
    "ColumnTitles",
    "NoColumnTitles",
    "default_column_mapper",
    "space_pascal_case",
]

logger = logging.getLogger(__name__)

# map_indices の値として使うと列を除外する
IGNORE_INDEX = -1


def space_pascal_case(name: str) -> str:
    """Insert spaces between PascalCase words and turn underscores into spaces.

    Examples:
        >>> space_pascal_case("HelloWorld")
        'Hello World'
        >>> space_pascal_case("UserID")
        'User ID'
        >>> space_pascal_case("ThisHasMore_Spaces__ForSure")
        'This Has More Spaces For Sure'
    """
    out: list[str] = []
    last_was_upper = True
    last_was_space = True
    for ch in name:
        if ch == "_":
            if not last_was_space:
                out.append(" ")
            last_was_upper = False
            last_was_space = True
            continue
        is_upper = ch.isupper()
        if is_upper and not last_was_upper and not last_was_space:
            out.append(" ")
        out.append(ch)
        last_was_upper = is_upper
        last_was_space = ch.isspace()
    return "".join(out).strip()


@dataclass(frozen=True)
class ColumnAssignment:
    """Result of mapping a record type to columns.

    Attributes:
        titles: Column titles in column order, None when no header is produced
        column_indices: Per flattened field, its column index or None if ignored
        fields: The flattened fields the indices refer to
        num_columns: Number of columns a reflected row has
    """
    titles: tuple[str, ...] | None
    column_indices: tuple[int | None, ...]
    fields: tuple[FieldDescriptor, ...]
    num_columns: int

    def reflect_row(self, record: Any) -> list[Any]:
        """Place the field values of ``record`` at their assigned columns."""
        row: list[Any] = [None] * self.num_columns
        for value, index in zip(field_values(record), self.column_indices, strict=False):
            if index is not None and index < self.num_columns:
                row[index] = value
        return row


class ColumnMapper(Protocol):
    def map_columns(self, record_type: type) -> ColumnAssignment: ...


@dataclass(frozen=True)
class FieldColumnMapper:
    """Derives column titles and order from dataclass field metadata.

    Attributes:
        tag: Metadata key holding the declared title
        ignore_title: Title value that excludes a field
        untagged_field_title: Title transform for fields without a declared
            title; None uses the plain field name
        map_indices: Flattened field index -> requested column index
            (``IGNORE_INDEX`` excludes the field)
    """
    tag: str = COLUMN_TAG
    ignore_title: str = IGNORE
    untagged_field_title: Callable[[str], str] | None = space_pascal_case
    map_indices: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({}))

    def with_tag(self, tag: str) -> FieldColumnMapper:
        return replace(self, tag=tag)

    def with_ignore_title(self, ignore_title: str) -> FieldColumnMapper:
        return replace(self, ignore_title=ignore_title)

    def with_untagged_field_title(self, transform: Callable[[str], str] | None) -> FieldColumnMapper:
        return replace(self, untagged_field_title=transform)

    def with_map_index(self, field_index: int, column_index: int) -> FieldColumnMapper:
        indices = dict(self.map_indices)
        indices[field_index] = column_index
        return replace(self, map_indices=MappingProxyType(indices))

    def with_ignore_index(self, field_index: int) -> FieldColumnMapper:
        return self.with_map_index(field_index, IGNORE_INDEX)

    def with_map_indices(self, map_indices: Mapping[int, int]) -> FieldColumnMapper:
        return replace(self, map_indices=MappingProxyType(dict(map_indices)))

    def title_for(self, fd: FieldDescriptor) -> str:
        title = fd.declared_title(self.tag)
        if title is not None:
            return title
        if self.untagged_field_title is None:
            return fd.name
        return self.untagged_field_title(fd.name)

    def map_columns(self, record_type: type) -> ColumnAssignment:
        fields = flatten(record_type)
        titles = [self.title_for(fd) for fd in fields]

        # 1st pass: 除外されない列数を確定
        kept = [
            i for i, title in enumerate(titles)
            if title != self.ignore_title and self.map_indices.get(i) != IGNORE_INDEX
        ]
        n = len(kept)

        indices: list[int | None] = [None] * len(fields)
        used = [False] * n
        next_free = 0
        for i in kept:
            requested = self.map_indices.get(i)
            if requested is not None and 0 <= requested < n and not used[requested]:
                index = requested
            else:
                while used[next_free]:
                    next_free += 1
                index = next_free
            used[index] = True
            indices[i] = index

        ordered: list[str] = [""] * n
        for i in kept:
            ordered[indices[i]] = titles[i]  # type: ignore[index]

        logger.debug("mapped %s to columns %s", record_type.__qualname__, ordered)
        return ColumnAssignment(
            titles=tuple(ordered),
            column_indices=tuple(indices),
            fields=fields,
            num_columns=n,
        )


@dataclass(frozen=True)
class ColumnTitles:
    """Fixed titles; fields are emitted in flattened declaration order."""
    titles: Sequence[str]

    def map_columns(self, record_type: type) -> ColumnAssignment:
        fields = flatten(record_type)
        return ColumnAssignment(
            titles=tuple(self.titles),
            column_indices=tuple(range(len(fields))),
            fields=fields,
            num_columns=len(fields),
        )


@dataclass(frozen=True)
class NoColumnTitles:
    """No header row; fields are emitted in flattened declaration order."""

    def map_columns(self, record_type: type) -> ColumnAssignment:
        fields = flatten(record_type)
        return ColumnAssignment(
            titles=None,
            column_indices=tuple(range(len(fields))),
            fields=fields,
            num_columns=len(fields),
        )


def default_column_mapper() -> FieldColumnMapper:
    """Stock mapper: tag "col", ignore title "-", ``space_pascal_case`` titles."""
    return FieldColumnMapper()
