from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field

"""Delimited text format description and detection.

``DelimitedFormat`` names the encoding, field separator and line ending of a
file. ``detect_format`` guesses all three from raw bytes: a byte order mark
decides the encoding outright, otherwise every candidate encoding is tried
and scored by how many characteristic non-ASCII test strings the decoded
text contains.
"""

__all__ = [
    "DelimitedFormatError",
    "DelimitedFormat",
    "FormatDetectionConfig",
    "new_format",
    "codec_name",
    "decode_auto",
    "detect_format",
]

logger = logging.getLogger(__name__)

VALID_NEWLINES = ("\n", "\r\n", "\n\r", "\r")

# 表示名 -> Python codec 名
_CODEC_NAMES = {
    "UTF-8": "utf-8",
    "UTF-16LE": "utf-16-le",
    "UTF-16BE": "utf-16-be",
    "ISO 8859-1": "latin-1",
    "Windows 1252": "cp1252",
    "Macintosh": "mac-roman",
}

_BOMS = (
    (codecs.BOM_UTF8, "UTF-8"),
    (codecs.BOM_UTF16_LE, "UTF-16LE"),
    (codecs.BOM_UTF16_BE, "UTF-16BE"),
)


class DelimitedFormatError(ValueError):
    """Invalid format description or undecodable input."""


def codec_name(encoding: str) -> str:
    """Map an encoding display name to a Python codec name."""
    name = _CODEC_NAMES.get(encoding, encoding)
    try:
        return codecs.lookup(name).name
    except LookupError as e:
        raise DelimitedFormatError(f"unknown encoding: {encoding!r}") from e


@dataclass(frozen=True)
class DelimitedFormat:
    encoding: str = "UTF-8"
    separator: str = ","
    newline: str = "\r\n"

    def validate(self) -> None:
        """Raise ``DelimitedFormatError`` for an unusable format."""
        if not self.encoding:
            raise DelimitedFormatError("missing encoding")
        codec_name(self.encoding)
        if not self.separator:
            raise DelimitedFormatError("missing separator")
        if len(self.separator) > 1:
            raise DelimitedFormatError(f"invalid separator: {self.separator!r}")
        if not self.newline:
            raise DelimitedFormatError("missing newline")
        if self.newline not in VALID_NEWLINES:
            raise DelimitedFormatError(f"invalid newline: {self.newline!r}")


def new_format(separator: str) -> DelimitedFormat:
    """UTF-8 format with ``\\r\\n`` line endings and the given separator."""
    return DelimitedFormat(encoding="UTF-8", separator=separator, newline="\r\n")


@dataclass(frozen=True)
class FormatDetectionConfig:
    encodings: tuple[str, ...] = ("UTF-8", "UTF-16LE", "ISO 8859-1", "Windows 1252", "Macintosh")
    encoding_tests: tuple[str, ...] = field(
        default_factory=lambda: tuple("äÄöÖüÜß§€дДъЪбБлЛиИж")
    )


def decode_auto(data: bytes, config: FormatDetectionConfig) -> tuple[str, str]:
    """Decode ``data`` returning ``(text, encoding display name)``."""
    for bom, name in _BOMS:
        if data.startswith(bom):
            return data[len(bom):].decode(codec_name(name)), name

    best: tuple[str, str] | None = None
    best_score = 0
    for name in config.encodings:
        try:
            text = data.decode(codec_name(name))
        except UnicodeDecodeError:
            continue
        score = sum(text.count(t) for t in config.encoding_tests) - 10 * text.count("\x00")
        if best is None or score > best_score:
            best = (text, name)
            best_score = score
    if best is None:
        raise DelimitedFormatError(f"none of the encodings {list(config.encodings)} can decode the data")
    return best


def _detect_newline(text: str) -> str:
    num_r = text.count("\r")
    num_n = text.count("\n")
    num_rn = text.count("\r\n")
    if num_r > num_n:
        return "\r"
    if num_n > num_rn:
        return "\n"
    return "\r\n"


def _detect_separator(lines: list[str]) -> str:
    commas = semicolons = tabs = 0
    for line in lines:
        line = line.strip("\r\n")
        if not line:
            continue
        commas += line.count(",")
        semicolons += line.count(";")
        tabs += line.count("\t")
    if commas > semicolons and commas > tabs:
        return ","
    if semicolons > commas and semicolons > tabs:
        return ";"
    if tabs > commas and tabs > semicolons:
        return "\t"
    return ","


def detect_format(data: bytes, config: FormatDetectionConfig | None = None) -> tuple[DelimitedFormat, str]:
    """Detect encoding, line ending and separator of ``data``.

    Returns:
        ``(format, decoded text)``
    """
    config = config or FormatDetectionConfig()
    text, encoding = decode_auto(data, config)
    newline = _detect_newline(text)
    separator = _detect_separator(text.split(newline))
    fmt = DelimitedFormat(encoding=encoding, separator=separator, newline=newline)
    logger.debug("detected delimited format %r", fmt)
    return fmt, text
