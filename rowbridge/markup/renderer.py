from __future__ import annotations

import html
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, TextIO

from ..models.format_config import FormatConfig, new_english_format_config
from ..services.column_mapper import ColumnMapper
from ..services.renderer import TextRenderer, render

"""HTML table rendering.

Every table gets its own CSS class (``t<random>``) so several tables can be
embedded in one page without their styles leaking into each other. Rows
alternate between the even and odd background styles; the header row counts
as the first row.
"""

__all__ = [
    "EVEN_TABLE_ROW_STYLE",
    "ODD_TABLE_ROW_STYLE",
    "HtmlFormat",
    "HtmlRenderer",
    "render_html_table",
]

EVEN_TABLE_ROW_STYLE = "background:#EEF"
ODD_TABLE_ROW_STYLE = "background:#FFF"

_STYLE = (
    "<style>table.{0}, td.{0}, th.{0} {{ border:1px solid black; padding: 4px; "
    "white-space: nowrap; font-family: \"Lucida Console\", Monaco, monospace; }}</style>"
)


@dataclass
class HtmlFormat:
    element_class: str | None = None
    even_row_style: str = EVEN_TABLE_ROW_STYLE
    odd_row_style: str = ODD_TABLE_ROW_STYLE
    mime_type: str = "text/html; charset=UTF-8"
    rows_written: int = 0

    def begin_table(self, sink: TextIO) -> None:
        if self.element_class is None:
            self.element_class = f"t{random.getrandbits(32)}"
        sink.write(_STYLE.format(self.element_class))
        sink.write(f"<table class='{self.element_class}' style='border-collapse:collapse'>\n")

    def _row(self, sink: TextIO, fields: Sequence[str], cell_tag: str) -> None:
        style = self.even_row_style if self.rows_written % 2 == 0 else self.odd_row_style
        sink.write(f"<tr class='{self.element_class}' style='{style}'>")
        for value in fields:
            sink.write(f"<{cell_tag} class='{self.element_class}'>{html.escape(value)}</{cell_tag}>")
        sink.write("</tr>\n")
        self.rows_written += 1

    def header_row(self, sink: TextIO, titles: Sequence[str]) -> None:
        self._row(sink, titles, "th")

    def data_row(self, sink: TextIO, fields: Sequence[str]) -> None:
        self._row(sink, fields, "td")

    def end_table(self, sink: TextIO) -> None:
        sink.write("</table>\n")


class HtmlRenderer(TextRenderer):
    def __init__(self, config: FormatConfig | None = None, element_class: str | None = None) -> None:
        super().__init__(HtmlFormat(element_class=element_class), config)


def render_html_table(
    records: Iterable[Any],
    *,
    mapper: ColumnMapper | None = None,
    record_type: type | None = None,
    element_class: str | None = None,
) -> str:
    """Render ``records`` as an HTML table with the English preset (YES/NO)."""
    renderer = HtmlRenderer(new_english_format_config(), element_class=element_class)
    render(renderer, records, mapper=mapper, record_type=record_type)
    return renderer.result().decode("utf-8")
