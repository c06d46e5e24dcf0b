from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from ..models.field_descriptor import COLUMN_TAG
from ..models.format_config import FormatConfig
from ..services.column_mapper import ColumnMapper
from ..services.reader import RowsReader
from .format import DelimitedFormat, FormatDetectionConfig
from .modifiers import ModifierList, Rows
from .parse import parse_strings_detect_format, parse_strings_with_format

"""CSV reading: parse, clean up with modifiers, then serve as ``RowsReader``."""

__all__ = [
    "CsvReader",
]


class CsvReader(RowsReader):
    """Reader over delimited text.

    ``format`` is detected from the data when not given.
    """

    def __init__(
        self,
        rows: Rows,
        *,
        format: DelimitedFormat | None = None,
        modifiers: ModifierList | None = None,
        columns: Mapping[int, str] | None = None,
        tag: str = COLUMN_TAG,
        config: FormatConfig | None = None,
        mapper: ColumnMapper | None = None,
    ) -> None:
        self.format = format
        self.modifiers = modifiers or ModifierList()
        super().__init__(self.modifiers.modify(rows), columns, tag=tag, config=config, mapper=mapper)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        *,
        format: DelimitedFormat | None = None,
        detection: FormatDetectionConfig | None = None,
        newline_replacement: str = "\n",
        **kwargs,
    ) -> CsvReader:
        if format is None:
            rows, format = parse_strings_detect_format(data, detection, newline_replacement)
        else:
            rows = parse_strings_with_format(data, format, newline_replacement)
        return cls(rows, format=format, **kwargs)

    @classmethod
    def from_file(cls, path: Path, **kwargs) -> CsvReader:
        return cls.from_bytes(Path(path).read_bytes(), **kwargs)
