from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

from ..models.format_config import FormatConfig
from ..services.renderer import TextRenderer
from .format import DelimitedFormat

"""CSV rendering.

Output is UTF-8 with a leading byte order mark, ``;`` separated and ``\\r\\n``
terminated unless configured otherwise. A field is quoted when it contains a
double quote, a line break or the delimiter, or when one of the quoting
options asks for it; embedded quotes are doubled.
"""

__all__ = [
    "CsvFormat",
    "CsvRenderer",
]

UTF8_BOM = "\ufeff"


@dataclass
class CsvFormat:
    delimiter: str = ";"
    newline: str = "\r\n"
    header_comment: str = ""
    quote_all_fields: bool = False
    quote_empty_fields: bool = False
    mime_type: str = "text/csv; charset=UTF-8"

    def _must_quote(self, value: str) -> bool:
        if self.quote_all_fields or (self.quote_empty_fields and value == ""):
            return True
        return '"' in value or "\n" in value or "\r" in value or self.delimiter in value

    def begin_table(self, sink: TextIO) -> None:
        sink.write(UTF8_BOM)

    def header_row(self, sink: TextIO, titles: Sequence[str]) -> None:
        if self.header_comment:
            sink.write(self.header_comment)
        self.data_row(sink, titles)

    def data_row(self, sink: TextIO, fields: Sequence[str]) -> None:
        out = []
        for value in fields:
            escaped = value.replace('"', '""')
            out.append(f'"{escaped}"' if self._must_quote(value) else escaped)
        sink.write(self.delimiter.join(out))
        sink.write(self.newline)

    def end_table(self, sink: TextIO) -> None:
        return None


class CsvRenderer(TextRenderer):
    """``TextRenderer`` bound to a ``CsvFormat``."""

    def __init__(self, config: FormatConfig | None = None, csv_format: CsvFormat | None = None) -> None:
        super().__init__(csv_format or CsvFormat(), config)

    def with_format(self, fmt: DelimitedFormat) -> CsvRenderer:
        fmt.validate()
        self.format.delimiter = fmt.separator
        self.format.newline = fmt.newline
        return self

    def with_delimiter(self, delimiter: str) -> CsvRenderer:
        if not delimiter:
            raise ValueError("empty delimiter not possible for CSV")
        self.format.delimiter = delimiter
        return self

    def with_header_comment(self, comment: str) -> CsvRenderer:
        self.format.header_comment = comment
        return self

    def with_quote_all_fields(self, quote: bool) -> CsvRenderer:
        self.format.quote_all_fields = quote
        return self

    def with_quote_empty_fields(self, quote: bool) -> CsvRenderer:
        self.format.quote_empty_fields = quote
        return self
