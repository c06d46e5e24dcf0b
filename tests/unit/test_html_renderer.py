from __future__ import annotations

from dataclasses import dataclass

from rowbridge.markup.renderer import (
    EVEN_TABLE_ROW_STYLE,
    ODD_TABLE_ROW_STYLE,
    HtmlRenderer,
    render_html_table,
)
from rowbridge.services.renderer import render


@dataclass
class Flag:
    Name: str
    Active: bool


def test_html_table_structure():
    r = HtmlRenderer(element_class="tbl")
    render(r, [Flag("<a>", True), Flag("b", False)])
    html = r.result().decode("utf-8")
    assert html.startswith("<style>table.tbl, td.tbl, th.tbl {")
    assert "<table class='tbl' style='border-collapse:collapse'>\n" in html
    assert (
        f"<tr class='tbl' style='{EVEN_TABLE_ROW_STYLE}'><th class='tbl'>Name</th><th class='tbl'>Active</th></tr>\n"
        in html
    )
    assert f"<tr class='tbl' style='{ODD_TABLE_ROW_STYLE}'><td class='tbl'>&lt;a&gt;</td>" in html
    assert html.endswith("</table>\n")
    assert html.count("<tr ") == 3
    assert r.mime_type == "text/html; charset=UTF-8"


def test_rows_alternate_starting_with_header():
    r = HtmlRenderer(element_class="x")
    r.render_header_row(["A"])
    r.render_row(["1"])
    r.render_row(["2"])
    html = r.result().decode("utf-8")
    styles = [line.split("style='")[1].split("'")[0] for line in html.splitlines() if line.startswith("<tr")]
    assert styles == [EVEN_TABLE_ROW_STYLE, ODD_TABLE_ROW_STYLE, EVEN_TABLE_ROW_STYLE]


def test_random_class_per_table():
    a = HtmlRenderer()
    a.render_row(["1"])
    a.result()
    cls = a.format.element_class
    assert cls is not None and cls.startswith("t") and cls[1:].isdigit()


def test_render_html_table_uses_english_tokens():
    html = render_html_table([Flag("a", True), Flag("b", False)], element_class="e")
    assert "<td class='e'>YES</td>" in html
    assert "<td class='e'>NO</td>" in html
