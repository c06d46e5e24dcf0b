from __future__ import annotations

import enum
import json
import types
import typing
from typing import Any

from ..models.format_config import FormatConfig
from .introspect import unwrap_optional

"""Display string -> typed value conversion (inverse of the formatter).

``scan_value`` parses one cell for one destination annotation. Failures raise
``ScanError`` carrying the raw text and target type; readers attach the row
and column index before re-raising.
"""

__all__ = [
    "ScanError",
    "scan_value",
]

_TRUE_WORDS = frozenset({"true", "yes", "1", "on", "y", "t"})
_FALSE_WORDS = frozenset({"false", "no", "0", "off", "n", "f"})


class ScanError(ValueError):
    """A cell string could not be converted to the destination type."""

    def __init__(
        self,
        raw: str,
        target: Any,
        reason: str,
        *,
        row: int | None = None,
        column: int | None = None,
    ) -> None:
        self.raw = raw
        self.target = target
        self.reason = reason
        self.row = row
        self.column = column
        super().__init__(self._message())

    def _message(self) -> str:
        where = ""
        if self.row is not None:
            where = f"row {self.row}, column {self.column}: "
        return f"{where}cannot scan {self.raw!r} as {_type_name(self.target)}: {self.reason}"

    def at(self, row: int, column: int) -> ScanError:
        """Return a copy carrying the cell position."""
        return ScanError(self.raw, self.target, self.reason, row=row, column=column)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)


def _scan_bool(text: str, config: FormatConfig) -> bool:
    s = text.strip()
    if s == config.true_token:
        return True
    if s == config.false_token:
        return False
    lowered = s.lower()
    if lowered in _TRUE_WORDS or lowered == config.true_token.lower():
        return True
    if lowered in _FALSE_WORDS or lowered == config.false_token.lower():
        return False
    raise ValueError("not a boolean token")


def _scan_enum(tp: type[enum.Enum], text: str, config: FormatConfig) -> enum.Enum:
    s = text.strip()
    for member in tp:
        value = member.value
        if isinstance(value, str) and value == s:
            return member
        if not isinstance(value, str) and not isinstance(value, bool) and isinstance(value, int | float):
            try:
                if scan_value(type(value), s, config) == value:
                    return member
            except ScanError:
                pass
    if s in tp.__members__:
        return tp.__members__[s]
    raise ValueError(f"no member of {tp.__qualname__} matches")


def _scan_union(tp: Any, text: str, config: FormatConfig) -> Any:
    errors: list[str] = []
    for member in typing.get_args(tp):
        try:
            return scan_value(member, text, config)
        except ScanError as e:
            errors.append(e.reason)
    raise ValueError("; ".join(errors) or "no union member matches")


def scan_value(field_type: Any, text: str, config: FormatConfig) -> Any:
    """Parse ``text`` into a value of ``field_type``.

    Nullable annotations (``X | None``) read a blank cell or the null token
    as None. For non-nullable non-string types an empty cell is an error.

    Raises:
        ScanError: ``text`` is not a valid representation
    """
    inner, nullable = unwrap_optional(field_type)
    if nullable and (text.strip() == "" or text == config.null_token):
        return None
    try:
        return _scan(inner, text, config)
    except ScanError:
        raise
    except (ValueError, TypeError, ArithmeticError) as e:
        raise ScanError(text, field_type, str(e) or type(e).__name__) from e


def _scan(tp: Any, text: str, config: FormatConfig) -> Any:
    handler = config.handler_for(tp)
    if handler is not None:
        if text.strip() == "":
            raise ValueError("empty cell")
        return handler.scan(text, config)

    if tp is Any or tp is str or tp is object:
        return text

    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        return _scan_union(tp, text, config)
    if origin is typing.Literal:
        for option in typing.get_args(tp):
            if str(option) == text.strip():
                return option
        raise ValueError("not one of the literal options")

    if tp in (list, dict) or origin in (list, dict):
        value = json.loads(text)
        expected = origin or tp
        if not isinstance(value, expected):
            raise ValueError(f"JSON value is not a {expected.__name__}")
        return value

    if origin is None and isinstance(tp, type):
        if text.strip() == "" and not issubclass(tp, str | bytes):
            raise ValueError("empty cell")
        if issubclass(tp, enum.Enum):
            return _scan_enum(tp, text, config)
        if issubclass(tp, bool):
            return _scan_bool(text, config)
        if issubclass(tp, str):
            return tp(text)
        if issubclass(tp, int):
            return tp(int(text.strip()))
        if issubclass(tp, float):
            return tp(config.float_format.parse(text))
        if issubclass(tp, bytes | bytearray):
            return tp(text.encode("utf-8"))
        return tp(text)
    raise ValueError(f"unsupported destination type {tp!r}")
