from __future__ import annotations

import enum
import io
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, BinaryIO, Protocol, TextIO

from ..models.format_config import FormatConfig, new_format_config
from .column_mapper import ColumnMapper, default_column_mapper
from .formatter import format_row
from .introspect import SchemaContractError, is_record_type

"""Render direction of the table protocol.

A ``TableRenderer`` owns a private output buffer and moves through
``NOT_STARTED -> HEADER_WRITTEN -> ROWS_WRITTEN -> FINALIZED``:

- the backend's begin hook runs lazily, once, on the first header or row
- ``result()`` runs the end hook once and caches the bytes; later calls
  return the cached buffer
- writing after finalization raises ``RenderStateError``

Text formats only implement ``TextTableFormat``'s four hooks and are driven
by ``TextRenderer``, which converts every value with ``format_value``.
Renderer instances are not thread safe.
"""

__all__ = [
    "RenderState",
    "RenderStateError",
    "TableRenderer",
    "TextTableFormat",
    "TextRenderer",
    "render",
    "render_to",
    "render_file",
]

logger = logging.getLogger(__name__)


class RenderState(enum.Enum):
    NOT_STARTED = "not_started"
    HEADER_WRITTEN = "header_written"
    ROWS_WRITTEN = "rows_written"
    FINALIZED = "finalized"


class RenderStateError(RuntimeError):
    """Raised on a write that the render state machine does not allow."""


class TableRenderer:
    """Base class driving the begin/header/row/end hooks of one backend.

    Subclasses implement ``_begin_table``, ``_write_header_row``,
    ``_write_row`` and ``_end_table``. Row values are passed through
    unconverted so binary backends can write typed cells.
    """

    mime_type = "application/octet-stream"

    def __init__(self, config: FormatConfig | None = None) -> None:
        self.config = config if config is not None else new_format_config()
        self.state = RenderState.NOT_STARTED
        self._begun = False
        self._result: bytes | None = None

    # --- backend hooks -------------------------------------------------
    def _begin_table(self) -> None:
        raise NotImplementedError

    def _write_header_row(self, titles: Sequence[str]) -> None:
        raise NotImplementedError

    def _write_row(self, values: Sequence[Any]) -> None:
        raise NotImplementedError

    def _end_table(self) -> bytes:
        raise NotImplementedError

    # --- state machine -------------------------------------------------
    def _begin_if_missing(self) -> None:
        if self.state is RenderState.FINALIZED:
            raise RenderStateError(f"{type(self).__name__} already finalized")
        if not self._begun:
            self._begin_table()
            self._begun = True

    def render_header_row(self, titles: Sequence[str]) -> None:
        """Write one header row.

        Several header rows may be written one after another (state stays
        ``HEADER_WRITTEN``), e.g. a title row above the column titles. A header
        after the first data row raises ``RenderStateError``.
        """
        if self.state is RenderState.ROWS_WRITTEN:
            raise RenderStateError("header row after data rows")
        self._begin_if_missing()
        self._write_header_row(list(titles))
        self.state = RenderState.HEADER_WRITTEN

    def render_row(self, values: Sequence[Any]) -> None:
        self._begin_if_missing()
        self._write_row(list(values))
        self.state = RenderState.ROWS_WRITTEN

    def result(self) -> bytes:
        """Finalize (once) and return the rendered table."""
        if self._result is None:
            self._begin_if_missing()
            self._result = self._end_table()
            self.state = RenderState.FINALIZED
            logger.debug("%s finalized (%d bytes)", type(self).__name__, len(self._result))
        return self._result

    def write_result_to(self, stream: BinaryIO) -> int:
        return stream.write(self.result())

    def write_result_file(self, path: Path) -> Path:
        path = Path(path)
        path.write_bytes(self.result())
        return path


class TextTableFormat(Protocol):
    """Hooks of a text based table format, called in state machine order."""

    mime_type: str

    def begin_table(self, sink: TextIO) -> None: ...

    def header_row(self, sink: TextIO, titles: Sequence[str]) -> None: ...

    def data_row(self, sink: TextIO, fields: Sequence[str]) -> None: ...

    def end_table(self, sink: TextIO) -> None: ...


class TextRenderer(TableRenderer):
    """Drives a ``TextTableFormat``; values are formatted to strings first."""

    def __init__(self, fmt: TextTableFormat, config: FormatConfig | None = None, encoding: str = "utf-8") -> None:
        super().__init__(config)
        self.format = fmt
        self.encoding = encoding
        self.mime_type = fmt.mime_type
        self._sink = io.StringIO()

    def _begin_table(self) -> None:
        self.format.begin_table(self._sink)

    def _write_header_row(self, titles: Sequence[str]) -> None:
        self.format.header_row(self._sink, titles)

    def _write_row(self, values: Sequence[Any]) -> None:
        self.format.data_row(self._sink, format_row(list(values), self.config))

    def _end_table(self) -> bytes:
        self.format.end_table(self._sink)
        return self._sink.getvalue().encode(self.encoding)


def _resolve_record_type(records: Sequence[Any], record_type: type | None) -> type:
    if record_type is None:
        first = next((r for r in records if r is not None), None)
        if first is None:
            raise SchemaContractError("record_type is required when no records are given")
        record_type = type(first)
    if not is_record_type(record_type):
        raise SchemaContractError(f"records must be dataclass instances, got {record_type!r}")
    return record_type


def render(
    renderer: TableRenderer,
    records: Iterable[Any],
    *,
    header: bool = True,
    mapper: ColumnMapper | None = None,
    record_type: type | None = None,
) -> TableRenderer:
    """Write ``records`` (instances of one dataclass) through ``renderer``.

    Args:
        renderer: Backend renderer, must not be finalized
        records: Records to write; ``None`` entries are skipped
        header: Emit the mapper's titles as header row
        mapper: Column mapper, ``default_column_mapper()`` when omitted
        record_type: Needed when ``records`` is empty

    Returns:
        The renderer, not yet finalized

    Raises:
        SchemaContractError: Records are not instances of one dataclass
    """
    if isinstance(records, str | bytes) or not isinstance(records, Iterable):
        raise SchemaContractError(f"records must be a sequence of dataclass instances, got {type(records).__name__}")
    rows = list(records)
    record_type = _resolve_record_type(rows, record_type)
    assignment = (mapper or default_column_mapper()).map_columns(record_type)

    if header and assignment.titles is not None:
        renderer.render_header_row(assignment.titles)
    for i, record in enumerate(rows):
        if record is None:
            logger.warning("skipping None record at index %d", i)
            continue
        if not isinstance(record, record_type):
            raise SchemaContractError(
                f"record {i} is {type(record).__qualname__}, expected {record_type.__qualname__}"
            )
        renderer.render_row(assignment.reflect_row(record))
    return renderer


def render_to(stream: BinaryIO, renderer: TableRenderer, records: Iterable[Any], **kwargs: Any) -> int:
    """Render ``records`` and write the finalized table to ``stream``."""
    render(renderer, records, **kwargs)
    return renderer.write_result_to(stream)


def render_file(path: Path, renderer: TableRenderer, records: Iterable[Any], **kwargs: Any) -> Path:
    render(renderer, records, **kwargs)
    return renderer.write_result_file(path)
