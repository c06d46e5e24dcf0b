from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

import pytest

from rowbridge.models.field_descriptor import IGNORE, column
from rowbridge.services.column_mapper import default_column_mapper
from rowbridge.services.introspect import SchemaContractError
from rowbridge.services.reader import (
    IndexBoundsError,
    RowsReader,
    UnmappedFieldError,
    build_record,
    read,
    zero_value,
)
from rowbridge.services.scanner import ScanError


@dataclass
class Person:
    Name: str
    Age: int
    City: str = "?"


@dataclass
class Address:
    Street: str = ""
    Zip: str = column("ZIP", default="")


@dataclass
class Customer:
    Name: str = ""
    address: Address = column(embed=True, default_factory=Address)
    Birthday: date | None = None


@dataclass
class Tracked:
    Name: str
    Internal: str = column(IGNORE, default="n/a")
    Age: int = 0


@dataclass(frozen=True)
class Frozen:
    A: int
    B: str = field(init=False, default="b")


ROWS = [
    ["Name", "Age", "City"],
    ["Ann", "30", "Linz"],
    ["Bo", "41", "Graz"],
    ["Cy", "19", "Wels"],
]


def test_read_positional_with_header_rows():
    result = read(RowsReader(ROWS), Person, 1)
    assert result.header_rows == [["Name", "Age", "City"]]
    assert result.records == [Person("Ann", 30, "Linz"), Person("Bo", 41, "Graz"), Person("Cy", 19, "Wels")]


def test_positional_read_skips_ignored_fields():
    rows = [["Name", "Age"], ["Ann", "30"]]
    (t,) = read(RowsReader(rows), Tracked, 1).records
    assert t == Tracked("Ann", "n/a", 30)


def test_positional_read_follows_mapper_order():
    mapper = default_column_mapper().with_map_index(0, 2)
    # Name -> 2, Age -> 0, City -> 1
    (p,) = read(RowsReader([["30", "Linz", "Ann"]], mapper=mapper), Person).records
    assert p == Person("Ann", 30, "Linz")


def test_read_with_explicit_columns_leaves_other_fields_default():
    reader = RowsReader(ROWS, {1: "Age", 0: "Name"})
    records = read(reader, Person, 1).records
    assert records[0] == Person("Ann", 30, "?")


def test_columns_match_declared_title_and_embedded_fields():
    rows = [["Ann", "4020", "1990-05-01"]]
    reader = RowsReader(rows, {0: "Name", 1: "ZIP", 2: "Birthday"})
    (c,) = read(reader, Customer).records
    assert c == Customer("Ann", Address("", "4020"), date(1990, 5, 1))


def test_read_into_replaces_list_only_on_success():
    dest = ["old"]
    read(RowsReader(ROWS), Person, 1, into=dest)
    assert [p.Name for p in dest] == ["Ann", "Bo", "Cy"]

    bad = ROWS + [["Dee", "many", "Steyr"]]
    dest = ["old"]
    with pytest.raises(ScanError) as ei:
        read(RowsReader(bad), Person, 1, into=dest)
    assert dest == ["old"]
    assert ei.value.row == 4
    assert ei.value.column == 1
    assert ei.value.raw == "many"


def test_none_rows_are_skipped():
    rows = [ROWS[0], None, ROWS[1], None]
    result = read(RowsReader(rows), Person, 1)
    assert [p.Name for p in result.records] == ["Ann"]


def test_header_rows_larger_than_table():
    result = read(RowsReader(ROWS[:1]), Person, 5)
    assert result.header_rows == [ROWS[0]]
    assert result.records == []


def test_column_out_of_range():
    reader = RowsReader([["Ann"]], {0: "Name", 3: "City"})
    with pytest.raises(IndexBoundsError) as ei:
        read(reader, Person)
    assert ei.value.kind == "column"
    assert ei.value.index == 3
    assert ei.value.row == 0


def test_row_index_out_of_range():
    with pytest.raises(IndexBoundsError):
        RowsReader(ROWS).read_row_strings(10)


def test_unmapped_field_name():
    reader = RowsReader(ROWS, {0: "Nope"})
    with pytest.raises(UnmappedFieldError, match="Nope"):
        read(reader, Person, 1)


def test_read_contract_checks():
    with pytest.raises(SchemaContractError):
        read(RowsReader(ROWS), dict)
    with pytest.raises(SchemaContractError):
        read(RowsReader(ROWS), Person, 1, into=())  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        read(RowsReader(ROWS), Person, -1)


def test_zero_values():
    assert zero_value(str) == ""
    assert zero_value(int) == 0
    assert zero_value(Decimal) == Decimal(0)
    assert zero_value(int | None) is None
    assert zero_value(list[int]) == []
    assert zero_value(date) is None
    assert zero_value(Address) == Address()


def test_build_record_sets_non_init_fields_on_frozen():
    rec = build_record(Frozen, {("A",): 1, ("B",): "x"})
    assert rec.A == 1
    assert rec.B == "x"


def test_build_record_without_values_uses_zero_values():
    assert build_record(Person, {}) == Person("", 0, "?")
