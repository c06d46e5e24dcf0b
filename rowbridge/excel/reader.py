from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl import load_workbook

from ..models.field_descriptor import COLUMN_TAG
from ..models.format_config import FormatConfig, new_format_config
from ..models.type_handlers import CurrencyAmount
from ..services.column_mapper import ColumnMapper
from ..services.formatter import format_value
from ..services.reader import RowsReader

"""Excel reader.

Sheets are read through pandas without a header row (``header=None``) and
with ``dtype=object`` so integer columns stay integers. Every cell is turned
back into a string with the text formatter so the scanner can read it with
the same ``FormatConfig``: empty cells become "", integral floats lose their
``.0``, timestamps at midnight become plain dates.

The currency code of a ``CurrencyAmount`` cell lives only in its number
format (``[$EUR]``), which pandas drops. The formats are read once more
with openpyxl; a column whose numeric cells carry exactly one currency code
reads back as currency amounts. Columns mixing several codes read back as
plain numbers.
"""

__all__ = [
    "SheetNotFoundError",
    "list_sheet_names",
    "read_sheet_rows",
    "read_workbook_rows",
    "ExcelReader",
]

_CURRENCY_FORMAT_RE = re.compile(r"\[\$([^\]\-]+)\]")


class SheetNotFoundError(LookupError):
    """Raised when the requested sheet does not exist in the workbook."""


def list_sheet_names(path: Path) -> list[str]:
    with pd.ExcelFile(path) as xls:
        return [str(n) for n in xls.sheet_names]


def _cell_text(value: Any, config: FormatConfig) -> str:
    if value is None:
        return ""
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return ""
        value = value.to_pydatetime()
    elif isinstance(value, pd.Timedelta):
        if pd.isna(value):
            return ""
        value = value.to_pytimedelta()
    elif not isinstance(value, list | tuple | dict) and pd.isna(value):
        return ""
    if type(value) is datetime and value.time() == time(0) and value.tzinfo is None:
        # Excel の日付セルは 00:00 の datetime として読まれる
        value = value.date()
    return format_value(value, config)


def _currency_columns(path: Path) -> dict[str, dict[int, str]]:
    """Sheet name -> {column index: currency code} from the cell number formats."""
    found: dict[str, dict[int, set[str]]] = {}
    wb = load_workbook(path, read_only=True)
    try:
        for ws in wb.worksheets:
            codes = found.setdefault(ws.title, {})
            for row in ws.iter_rows():
                for col, cell in enumerate(row):
                    if isinstance(cell.value, bool) or not isinstance(cell.value, int | float):
                        continue
                    m = _CURRENCY_FORMAT_RE.search(cell.number_format or "")
                    codes.setdefault(col, set()).add(m.group(1) if m else "")
    finally:
        wb.close()
    # 通貨が 1 種類に定まる列のみ
    return {
        title: {col: next(iter(cs)) for col, cs in codes.items() if len(cs) == 1 and "" not in cs}
        for title, codes in found.items()
    }


def _frame_rows(df: pd.DataFrame, config: FormatConfig, currencies: Mapping[int, str] | None = None) -> list[list[str]]:
    currencies = currencies or {}
    rows = []
    for raw in df.itertuples(index=False, name=None):
        row = []
        for col, v in enumerate(raw):
            code = currencies.get(col)
            if code and isinstance(v, int | float) and not isinstance(v, bool) and not pd.isna(v):
                v = CurrencyAmount(code, Decimal(str(v)))
            row.append(_cell_text(v, config))
        rows.append(row)
    return rows


def read_sheet_rows(
    path: Path, sheet_name: str | None = None, config: FormatConfig | None = None
) -> tuple[str, list[list[str]]]:
    """Read one sheet as string rows.

    Parameters
    ----------
    path: Excel ファイルパス
    sheet_name: 対象シート (None なら先頭シート)
    config: セル値を文字列化する FormatConfig

    Returns
    -------
    (sheet name, rows)
    """
    config = config or new_format_config()
    with pd.ExcelFile(path) as xls:
        names = [str(n) for n in xls.sheet_names]
        if not names:
            raise SheetNotFoundError(f"workbook {path} has no sheets")
        name = names[0] if sheet_name is None else sheet_name
        if name not in names:
            raise SheetNotFoundError(f"sheet {name!r} not found in {Path(path).name} (sheets: {names})")
        # NA 文字列 ("NA", "null" 等) はそのまま文字列として保持
        df = xls.parse(name, header=None, dtype=object, keep_default_na=False)
    return name, _frame_rows(df, config, _currency_columns(path).get(name))


def read_workbook_rows(path: Path, config: FormatConfig | None = None) -> dict[str, list[list[str]]]:
    config = config or new_format_config()
    sheets: dict[str, list[list[str]]] = {}
    currencies = _currency_columns(path)
    with pd.ExcelFile(path) as xls:
        for name in xls.sheet_names:
            df = xls.parse(name, header=None, dtype=object, keep_default_na=False)
            sheets[str(name)] = _frame_rows(df, config, currencies.get(str(name)))
    return sheets


class ExcelReader(RowsReader):
    """``RowsReader`` over one sheet of an xlsx workbook."""

    def __init__(
        self,
        path: Path,
        sheet_name: str | None = None,
        columns: Mapping[int, str] | None = None,
        *,
        tag: str = COLUMN_TAG,
        config: FormatConfig | None = None,
        mapper: ColumnMapper | None = None,
    ) -> None:
        self.path = Path(path)
        config = config or new_format_config()
        self.sheet_name, rows = read_sheet_rows(self.path, sheet_name, config)
        super().__init__(rows, columns, tag=tag, config=config, mapper=mapper)
