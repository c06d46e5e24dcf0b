from __future__ import annotations

import enum
import io
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE, Cell
from openpyxl.styles import Alignment, Font
from openpyxl.utils.datetime import CALENDAR_MAC_1904
from openpyxl.worksheet.worksheet import Worksheet

from ..models.format_config import FormatConfig
from ..models.type_handlers import CurrencyAmount
from ..services.formatter import format_value
from ..services.renderer import TableRenderer

"""XLSX rendering with openpyxl.

Values are written as typed cells: numbers stay numeric (right aligned),
dates and times get Excel date formats, durations become day fractions with
an ``[h]:mm:ss`` format and money amounts get accounting formats. The
workbook uses the 1904 date system. Anything without a cell writer falls back
to the text formatter.
"""

__all__ = [
    "CONTENT_TYPE",
    "ExcelFormatConfig",
    "ExcelRenderer",
    "sanitize_sheet_name",
]

CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MONEY_FORMAT = "#,##0.00"
DURATION_FORMAT = "[h]:mm:ss"
MAX_SHEET_NAME = 31
INVALID_SHEET_CHARS = frozenset("\\/?*[]:")


@dataclass(frozen=True)
class ExcelFormatConfig:
    """Excel number formats used by the typed cell writers.

    Attributes:
        time_format: Format for datetime cells
        date_format: Format for date cells
        time_of_day_format: Format for time cells
        null: Text written for None values; None uses the ``null_token`` of
            the text format configuration, empty leaves the cell blank
    """
    time_format: str = "dd.mm.yyyy hh:mm:ss"
    date_format: str = "dd.mm.yyyy"
    time_of_day_format: str = "hh:mm:ss"
    null: str | None = None


def sanitize_sheet_name(name: str) -> str:
    """Make ``name`` acceptable as an Excel sheet title.

    Blank names become ``UNNAMED``; ``\\ / ? * [ ] :`` become ``_``; names
    longer than 30 characters are cut to 30 plus ``…``.
    """
    name = name.strip()
    if not name:
        return "UNNAMED"
    out = []
    for i, ch in enumerate(name):
        if i == MAX_SHEET_NAME - 1:
            out.append("…")
            break
        out.append("_" if ch in INVALID_SHEET_CHARS else ch)
    return "".join(out)


def _write_date(cell: Cell, value: date, cfg: ExcelFormatConfig) -> None:
    cell.value = value
    cell.number_format = cfg.date_format


def _write_datetime(cell: Cell, value: datetime, cfg: ExcelFormatConfig) -> None:
    # Excel はタイムゾーンを持たないので壁時計時刻のまま書く
    cell.value = value.replace(tzinfo=None)
    cell.number_format = cfg.time_format


def _write_time(cell: Cell, value: time, cfg: ExcelFormatConfig) -> None:
    cell.value = value.replace(tzinfo=None)
    cell.number_format = cfg.time_of_day_format


def _write_duration(cell: Cell, value: timedelta, cfg: ExcelFormatConfig) -> None:
    cell.value = value.total_seconds() / 86400
    cell.number_format = DURATION_FORMAT


def _write_money(cell: Cell, value: Decimal, cfg: ExcelFormatConfig) -> None:
    cell.value = float(value)
    cell.number_format = MONEY_FORMAT


def _write_currency_amount(cell: Cell, value: CurrencyAmount, cfg: ExcelFormatConfig) -> None:
    cell.value = float(value.amount)
    if value.currency:
        cell.number_format = f"#,##0.00 [${value.currency}];-#,##0.00 [${value.currency}]"
    else:
        cell.number_format = MONEY_FORMAT


CellWriter = Callable[[Cell, Any, ExcelFormatConfig], None]


class ExcelRenderer(TableRenderer):
    """Renders rows into an in-memory openpyxl workbook.

    Args:
        sheet_name: Title of the first sheet
        config: Text format configuration for values without a cell writer
        excel_config: Excel number formats
    """

    mime_type = CONTENT_TYPE

    def __init__(
        self,
        sheet_name: str = "Sheet1",
        config: FormatConfig | None = None,
        excel_config: ExcelFormatConfig | None = None,
    ) -> None:
        super().__init__(config)
        self.excel_config = excel_config or ExcelFormatConfig()
        self.workbook = Workbook()
        self.workbook.epoch = CALENDAR_MAC_1904
        self.current_sheet: Worksheet = self.workbook.active
        self.current_sheet.title = sanitize_sheet_name(sheet_name)
        self._row_counts: dict[str, int] = {}
        self.header_font = Font(name="Liberation Sans", size=10, bold=True)
        self.number_alignment = Alignment(horizontal="right")
        self.cell_writers: dict[type, CellWriter] = {
            date: _write_date,
            datetime: _write_datetime,
            time: _write_time,
            timedelta: _write_duration,
            Decimal: _write_money,
            CurrencyAmount: _write_currency_amount,
        }

    def add_sheet(self, name: str) -> Worksheet:
        """Create a sheet and make it the target of following rows."""
        self.current_sheet = self.workbook.create_sheet(sanitize_sheet_name(name))
        return self.current_sheet

    def set_current_sheet(self, name: str) -> Worksheet:
        for ws in self.workbook.worksheets:
            if ws.title == name:
                self.current_sheet = ws
                return ws
        raise ValueError(f"sheet with name {name!r} not found")

    def _next_row(self) -> int:
        # 空セルだけの行も 1 行として数える
        title = self.current_sheet.title
        self._row_counts[title] = self._row_counts.get(title, 0) + 1
        return self._row_counts[title]

    def _set_text(self, cell: Cell, text: str) -> None:
        cell.value = ILLEGAL_CHARACTERS_RE.sub("", text)

    def _write_cell(self, cell: Cell, value: Any) -> None:
        if isinstance(value, enum.Enum):
            value = value.value
        writer = self.cell_writers.get(type(value))
        if writer is not None:
            writer(cell, value, self.excel_config)
            return
        if value is None:
            null = self.excel_config.null
            if null is None:
                null = self.config.null_token
            if null:
                cell.value = null
            return
        if isinstance(value, bool):
            cell.value = value
            return
        if isinstance(value, str):
            self._set_text(cell, value)
            return
        if isinstance(value, int | float):
            cell.value = value
            cell.alignment = self.number_alignment
            return
        self._set_text(cell, format_value(value, self.config))

    def _begin_table(self) -> None:
        return None

    def _write_header_row(self, titles: Sequence[str]) -> None:
        row = self._next_row()
        for col, title in enumerate(titles, start=1):
            cell = self.current_sheet.cell(row=row, column=col)
            self._set_text(cell, title)
            cell.font = self.header_font

    def _write_row(self, values: Sequence[Any]) -> None:
        row = self._next_row()
        for col, value in enumerate(values, start=1):
            self._write_cell(self.current_sheet.cell(row=row, column=col), value)

    def _end_table(self) -> bytes:
        buf = io.BytesIO()
        self.workbook.save(buf)
        return buf.getvalue()
