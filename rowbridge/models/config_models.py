from __future__ import annotations

from dataclasses import dataclass, field

from ..delimited.format import DelimitedFormat
from ..delimited.modifiers import ModifierList
from ..services.column_mapper import FieldColumnMapper
from .format_config import FormatConfig

"""Config dataclasses produced by ``rowbridge.config.loader``.

These only group already validated values; the loader applies defaults.
"""


@dataclass(frozen=True)
class CsvSettings:
    """Delimited text options (read and write).

    ``format`` is None when the format should be detected from the data.
    """
    format: DelimitedFormat | None = None
    header_comment: str = ""
    quote_all_fields: bool = False
    quote_empty_fields: bool = False
    newline_replacement: str = "\n"


@dataclass(frozen=True)
class ReadSettings:
    """How raw rows are turned into records."""
    header_rows: int = 0
    modifiers: ModifierList = field(default_factory=ModifierList)
    columns: dict[int, str] | None = None  # 列番号 -> フィールド名 (None なら位置順)
    sheet: str | None = None  # None なら先頭シート


@dataclass(frozen=True)
class ExcelSettings:
    sheet_name: str = "Sheet1"


@dataclass(frozen=True)
class RowbridgeConfig:
    """Root configuration object."""
    format: FormatConfig = field(default_factory=FormatConfig)
    mapper: FieldColumnMapper = field(default_factory=FieldColumnMapper)
    csv: CsvSettings = field(default_factory=CsvSettings)
    read: ReadSettings = field(default_factory=ReadSettings)
    excel: ExcelSettings = field(default_factory=ExcelSettings)
