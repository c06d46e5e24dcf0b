from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

from rowbridge.delimited.renderer import CsvRenderer
from rowbridge.markup.renderer import HtmlRenderer
from rowbridge.models.field_descriptor import IGNORE, column
from rowbridge.services.column_mapper import default_column_mapper
from rowbridge.services.renderer import TextRenderer, render


@dataclass
class Person:
    Name: str
    Age: int
    City: str


PEOPLE = [Person("Ann", 30, "Linz"), Person("Bo", 41, "Graz"), Person("Cy", 19, "Wels")]


class CollectingFormat:
    mime_type = "text/plain"

    def __init__(self) -> None:
        self.titles: list[str] = []
        self.rows: list[list[str]] = []

    def begin_table(self, sink: TextIO) -> None:
        pass

    def header_row(self, sink: TextIO, titles: Sequence[str]) -> None:
        self.titles = list(titles)

    def data_row(self, sink: TextIO, fields: Sequence[str]) -> None:
        self.rows.append(list(fields))

    def end_table(self, sink: TextIO) -> None:
        pass


def test_people_titles_and_rows_before_quoting():
    fmt = CollectingFormat()
    renderer = TextRenderer(fmt)
    render(renderer, PEOPLE)
    renderer.result()
    assert fmt.titles == ["Name", "Age", "City"]
    assert fmt.rows == [["Ann", "30", "Linz"], ["Bo", "41", "Graz"], ["Cy", "19", "Wels"]]


def test_people_as_csv():
    renderer = CsvRenderer()
    render(renderer, PEOPLE)
    assert renderer.result().decode("utf-8") == (
        "\ufeffName;Age;City\r\nAnn;30;Linz\r\nBo;41;Graz\r\nCy;19;Wels\r\n"
    )


def test_people_as_html_keeps_order():
    renderer = HtmlRenderer(element_class="p")
    render(renderer, PEOPLE)
    html = renderer.result().decode("utf-8")
    assert html.index(">Ann<") < html.index(">Bo<") < html.index(">Cy<")


@dataclass
class Audit:
    CreatedBy: str = ""
    Revision: int = column(IGNORE, default=0)


@dataclass
class Invoice:
    Number: str = column("Invoice No.", default="")
    audit: Audit = column(embed=True, default_factory=Audit)
    Amount: float = 0.0


def test_embedded_record_columns_in_place():
    fmt = CollectingFormat()
    mapper = default_column_mapper().with_map_index(0, 2)
    render(TextRenderer(fmt), [Invoice("R-1", Audit("ann", 7), 12.5)], mapper=mapper)
    assert fmt.titles == ["Created By", "Amount", "Invoice No."]
    assert fmt.rows == [["ann", "12.5", "R-1"]]
