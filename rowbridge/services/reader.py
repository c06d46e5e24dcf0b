from __future__ import annotations

import dataclasses
import functools
import logging
import typing
from collections.abc import Mapping, MutableSequence, Sequence
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Protocol

from ..models.field_descriptor import COLUMN_TAG, EMBED_KEY, FieldDescriptor
from ..models.format_config import FormatConfig, new_format_config
from .column_mapper import ColumnMapper, default_column_mapper
from .introspect import SchemaContractError, flatten, is_record_type, unwrap_optional
from .scanner import ScanError, scan_value

"""Read direction of the table protocol.

A ``Reader`` serves raw string rows and builds one record per row. ``read``
drives a reader over all rows: the first ``num_header_rows`` rows are
returned verbatim, every following row becomes a record. The result is all
or nothing; the first failing cell aborts the whole read and nothing is
assigned to the destination list.

Rows that are ``None`` (set by row modifiers) are skipped.
"""

__all__ = [
    "IndexBoundsError",
    "UnmappedFieldError",
    "Reader",
    "RowsReader",
    "ReadResult",
    "read",
    "build_record",
    "zero_value",
]

logger = logging.getLogger(__name__)


class IndexBoundsError(IndexError):
    """A row or column index lies outside the available range."""

    def __init__(self, kind: str, index: int, bound: int, *, row: int | None = None) -> None:
        self.kind = kind
        self.index = index
        self.bound = bound
        self.row = row
        where = f"row {row} " if row is not None else ""
        super().__init__(f"{where}{kind} index {index} out of range [0..{bound})")


class UnmappedFieldError(LookupError):
    """A column mapping names a field the record type does not have."""

    def __init__(self, field_name: str, record_type: type, tag: str) -> None:
        self.field_name = field_name
        self.record_type = record_type
        self.tag = tag
        super().__init__(f"no field {field_name!r} found in {record_type.__qualname__} using tag {tag!r}")


class Reader(Protocol):
    def num_rows(self) -> int: ...

    def read_row_strings(self, index: int) -> list[str] | None: ...

    def read_row(self, index: int, record_type: type) -> Any: ...


@functools.lru_cache(maxsize=256)
def _hints(record_type: type) -> dict[str, Any]:
    return typing.get_type_hints(record_type)


_ZERO_VALUES: dict[Any, Any] = {
    str: "",
    int: 0,
    float: 0.0,
    bool: False,
    bytes: b"",
    Decimal: Decimal(0),
    timedelta: timedelta(0),
}


def zero_value(annotation: Any) -> Any:
    """Value for a field that neither has a default nor a mapped column.

    Nullable and unknown types get None; nested dataclasses are built from
    their own zero values.
    """
    inner, nullable = unwrap_optional(annotation)
    if nullable:
        return None
    if inner in _ZERO_VALUES:
        return _ZERO_VALUES[inner]
    origin = typing.get_origin(inner) or inner
    if origin is list:
        return []
    if origin is dict:
        return {}
    if is_record_type(inner):
        return build_record(inner, {})
    return None


def _has_default(f: dataclasses.Field) -> bool:
    return f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING


def build_record(record_type: type, values: Mapping[tuple[str, ...], Any], prefix: tuple[str, ...] = ()) -> Any:
    """Instantiate ``record_type`` from scanned values keyed by field path.

    Fields without a value keep their dataclass default or get ``zero_value``.
    """
    hints = _hints(record_type)
    init_kwargs: dict[str, Any] = {}
    late: dict[str, Any] = {}
    for f in dataclasses.fields(record_type):
        path = prefix + (f.name,)
        annotation = hints.get(f.name, f.type)
        if f.metadata.get(EMBED_KEY):
            inner, nullable = unwrap_optional(annotation)
            touched = any(p[:len(path)] == path for p in values)
            if touched:
                value = build_record(inner, values, path)
            elif _has_default(f):
                continue
            elif nullable:
                value = None
            else:
                value = build_record(inner, {}, path)
        elif path in values:
            value = values[path]
        elif _has_default(f):
            continue
        else:
            value = zero_value(annotation)

        if f.init:
            init_kwargs[f.name] = value
        else:
            late[f.name] = value

    record = record_type(**init_kwargs)
    for name, value in late.items():
        # frozen dataclass でも設定できるように
        object.__setattr__(record, name, value)
    return record


class RowsReader:
    """Reader over in-memory string rows with an explicit column mapping.

    Args:
        rows: Raw rows; ``None`` marks a removed row
        columns: Column index -> field name. A field matches by its declared
            title under ``tag`` when it has one, otherwise by attribute name.
            None places the fields at the columns ``mapper`` assigns them,
            so a rendered table reads back with the same mapper.
        tag: Metadata key used for name matching
        config: Scanner configuration
        mapper: Column mapper for positional reads (default mapper with ``tag``)
    """

    def __init__(
        self,
        rows: Sequence[Sequence[str] | None],
        columns: Mapping[int, str] | None = None,
        *,
        tag: str = COLUMN_TAG,
        config: FormatConfig | None = None,
        mapper: ColumnMapper | None = None,
    ) -> None:
        self.rows = [list(r) if r is not None else None for r in rows]
        self.columns = dict(columns) if columns is not None else None
        self.tag = tag
        self.config = config if config is not None else new_format_config()
        self.mapper = mapper if mapper is not None else default_column_mapper().with_tag(tag)
        self._field_maps: dict[type, list[tuple[int, FieldDescriptor]]] = {}

    def num_rows(self) -> int:
        return len(self.rows)

    def read_row_strings(self, index: int) -> list[str] | None:
        if index < 0 or index >= len(self.rows):
            raise IndexBoundsError("row", index, len(self.rows))
        return self.rows[index]

    def _field_map(self, record_type: type) -> list[tuple[int, FieldDescriptor]]:
        cached = self._field_maps.get(record_type)
        if cached is not None:
            return cached
        if self.columns is None:
            # 除外された列は読まない
            a = self.mapper.map_columns(record_type)
            mapping = sorted(
                ((idx, fd) for fd, idx in zip(a.fields, a.column_indices, strict=True) if idx is not None),
                key=lambda item: item[0],
            )
        else:
            fields = flatten(record_type)
            by_name: dict[str, FieldDescriptor] = {}
            for fd in fields:
                by_name.setdefault(fd.declared_title(self.tag) or fd.name, fd)
            mapping = []
            for col, name in sorted(self.columns.items()):
                fd = by_name.get(name)
                if fd is None:
                    raise UnmappedFieldError(name, record_type, self.tag)
                mapping.append((col, fd))
        self._field_maps[record_type] = mapping
        return mapping

    def read_row(self, index: int, record_type: type) -> Any:
        row = self.read_row_strings(index) or []
        values: dict[tuple[str, ...], Any] = {}
        for col, fd in self._field_map(record_type):
            if col < 0 or col >= len(row):
                raise IndexBoundsError("column", col, len(row), row=index)
            try:
                values[fd.path] = scan_value(fd.type, row[col], self.config)
            except ScanError as e:
                raise e.at(index, col) from e
        return build_record(record_type, values)


@dataclass(frozen=True)
class ReadResult:
    header_rows: list[list[str]]
    records: list[Any]


def read(
    reader: Reader,
    record_type: type,
    num_header_rows: int = 0,
    *,
    into: MutableSequence[Any] | None = None,
) -> ReadResult:
    """Read all rows of ``reader`` into records of ``record_type``.

    Args:
        reader: Row source
        record_type: Destination dataclass type
        num_header_rows: Leading rows returned verbatim as header rows
        into: Optional list replaced with the records once every row succeeded

    Raises:
        SchemaContractError: ``record_type`` is not a dataclass or ``into`` is not a list
        ValueError: ``num_header_rows`` is negative
        IndexBoundsError / UnmappedFieldError / ScanError: from the reader
    """
    if not is_record_type(record_type):
        raise SchemaContractError(f"destination must be a dataclass type, got {record_type!r}")
    if into is not None and not isinstance(into, MutableSequence):
        raise SchemaContractError(f"destination must be a mutable sequence, got {type(into).__name__}")
    if num_header_rows < 0:
        raise ValueError("num_header_rows can't be negative")

    total = reader.num_rows()
    header_rows: list[list[str]] = []
    for i in range(min(num_header_rows, total)):
        header_rows.append(list(reader.read_row_strings(i) or []))

    records: list[Any] = []
    for i in range(num_header_rows, total):
        if reader.read_row_strings(i) is None:
            continue
        records.append(reader.read_row(i, record_type))

    if into is not None:
        into[:] = records
    logger.debug("read %d records of %s (%d header rows)", len(records), record_type.__qualname__, len(header_rows))
    return ReadResult(header_rows=header_rows, records=records)
