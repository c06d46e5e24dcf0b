from __future__ import annotations

import csv
import io
from pathlib import Path

from .format import DelimitedFormat, FormatDetectionConfig, codec_name, detect_format

"""Delimited text -> rows of strings.

Rows come back as ``list[list[str] | None]``; a blank line becomes ``None``
so row indices keep matching line numbers. Line breaks inside quoted fields
are normalized to ``newline_replacement``.
"""

__all__ = [
    "parse_text",
    "parse_strings_with_format",
    "parse_strings_detect_format",
    "file_parse_strings_detect_format",
]


def _normalize_newlines(value: str, replacement: str) -> str:
    if "\r" not in value and "\n" not in value:
        return value
    return value.replace("\r\n", "\n").replace("\r", "\n").replace("\n", replacement)


def parse_text(text: str, separator: str, newline_replacement: str = "\n") -> list[list[str] | None]:
    rows: list[list[str] | None] = []
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=separator, strict=False)
    for record in reader:
        if not record:
            rows.append(None)
            continue
        rows.append([_normalize_newlines(v, newline_replacement) for v in record])
    return rows


def parse_strings_with_format(
    data: bytes, fmt: DelimitedFormat, newline_replacement: str = "\n"
) -> list[list[str] | None]:
    fmt.validate()
    name = codec_name(fmt.encoding)
    if name == "utf-8":
        name = "utf-8-sig"  # BOM があれば除去
    text = data.decode(name)
    return parse_text(text, fmt.separator, newline_replacement)


def parse_strings_detect_format(
    data: bytes, config: FormatDetectionConfig | None = None, newline_replacement: str = "\n"
) -> tuple[list[list[str] | None], DelimitedFormat]:
    fmt, text = detect_format(data, config)
    return parse_text(text, fmt.separator, newline_replacement), fmt


def file_parse_strings_detect_format(
    path: Path, config: FormatDetectionConfig | None = None
) -> tuple[list[list[str] | None], DelimitedFormat]:
    return parse_strings_detect_format(Path(path).read_bytes(), config)
