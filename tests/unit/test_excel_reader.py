from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from rowbridge.excel.reader import (
    ExcelReader,
    SheetNotFoundError,
    list_sheet_names,
    read_sheet_rows,
    read_workbook_rows,
)
from rowbridge.services.reader import read


@dataclass
class Person:
    Name: str
    Age: int
    Score: float | None = None
    Member: bool = False
    Joined: date | None = None


def _make_excel(path: Path, sheets: dict[str, pd.DataFrame]) -> None:
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        for name, df in sheets.items():
            df.to_excel(w, sheet_name=name, index=False)


@pytest.fixture()
def people_xlsx(tmp_path: Path) -> Path:
    p = tmp_path / "people.xlsx"
    _make_excel(p, {
        "People": pd.DataFrame({
            "Name": ["Ann", "NA"],
            "Age": [30, 41],
            "Score": [1.5, None],
            "Member": [True, False],
            "Joined": [pd.Timestamp("2024-03-09"), pd.NaT],
        }),
        "Other": pd.DataFrame({"X": [1]}),
    })
    return p


def test_list_sheet_names(people_xlsx: Path):
    assert list_sheet_names(people_xlsx) == ["People", "Other"]


def test_read_sheet_rows_as_strings(people_xlsx: Path):
    name, rows = read_sheet_rows(people_xlsx)
    assert name == "People"
    assert rows[0] == ["Name", "Age", "Score", "Member", "Joined"]
    assert rows[1] == ["Ann", "30", "1.5", "true", "2024-03-09"]
    # "NA" は文字列のまま, 空セルは ""
    assert rows[2] == ["NA", "41", "", "false", ""]


def test_missing_sheet(people_xlsx: Path):
    with pytest.raises(SheetNotFoundError, match="Nope"):
        read_sheet_rows(people_xlsx, "Nope")


def test_read_workbook_rows(people_xlsx: Path):
    sheets = read_workbook_rows(people_xlsx)
    assert list(sheets) == ["People", "Other"]
    assert sheets["Other"] == [["X"], ["1"]]


def test_excel_reader_reads_records(people_xlsx: Path):
    reader = ExcelReader(people_xlsx, "People")
    assert reader.sheet_name == "People"
    records = read(reader, Person, 1).records
    assert records == [
        Person("Ann", 30, 1.5, True, date(2024, 3, 9)),
        Person("NA", 41, None, False, None),
    ]
