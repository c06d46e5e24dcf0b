from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any

from .type_handlers import TypeHandler, default_type_handlers

"""Format configuration value objects.

A ``FormatConfig`` is built once per render/read session and never mutated;
every "with_*" helper returns a modified copy. Instances can be shared
read-only between renderers.
"""

__all__ = [
    "FloatFormat",
    "MoneyFormat",
    "FormatConfig",
    "new_format_config",
    "new_english_format_config",
    "new_german_format_config",
]


def _group_thousands(digits: str, sep: str | None) -> str:
    if not sep or len(digits) <= 3:
        return digits
    head = len(digits) % 3 or 3
    parts = [digits[:head]]
    parts.extend(digits[i:i + 3] for i in range(head, len(digits), 3))
    return sep.join(parts)


def _split_number(text: str, thousands_sep: str | None, decimal_sep: str) -> str:
    """Normalize a localized number string to Python literal syntax."""
    s = text.strip()
    if thousands_sep:
        s = s.replace(thousands_sep, "")
    if decimal_sep != ".":
        s = s.replace(decimal_sep, ".")
    return s


@dataclass(frozen=True)
class FloatFormat:
    """Float rendering rules.

    Attributes:
        thousands_sep: Grouping separator or None for no grouping
        decimal_sep: Decimal separator
        precision: Fixed number of decimals, -1 for the shortest exact form
        pad_precision: Keep trailing zeros up to ``precision``
    """
    thousands_sep: str | None = None
    decimal_sep: str = "."
    precision: int = -1
    pad_precision: bool = False

    def format(self, value: float) -> str:
        if value != value or value in (float("inf"), float("-inf")):
            return str(value)
        negative = value < 0
        if self.precision < 0:
            d = Decimal(repr(abs(value)))
            if d == d.to_integral_value():
                text = str(int(d))
            else:
                text = format(d, "f")
        else:
            text = f"{abs(value):.{self.precision}f}"
            if not self.pad_precision and "." in text:
                text = text.rstrip("0").rstrip(".")
        int_part, _, frac_part = text.partition(".")
        out = _group_thousands(int_part, self.thousands_sep)
        if frac_part:
            out += self.decimal_sep + frac_part
        if negative and out.strip("0" + (self.thousands_sep or "") + self.decimal_sep):
            out = "-" + out
        return out

    def parse(self, text: str) -> float:
        return float(_split_number(text, self.thousands_sep, self.decimal_sep))


@dataclass(frozen=True)
class MoneyFormat:
    """Money amount rendering rules (amounts are ``decimal.Decimal``)."""
    currency_first: bool = True
    thousands_sep: str | None = ","
    decimal_sep: str = "."
    precision: int = 2

    def format_amount(self, amount: Decimal) -> str:
        if self.precision >= 0:
            amount = amount.quantize(Decimal(1).scaleb(-self.precision), rounding=ROUND_HALF_UP)
        text = format(abs(amount), "f")
        int_part, _, frac_part = text.partition(".")
        out = _group_thousands(int_part, self.thousands_sep)
        if frac_part:
            out += self.decimal_sep + frac_part
        if amount.is_signed() and amount != 0:
            out = "-" + out
        return out

    def parse_amount(self, text: str) -> Decimal:
        try:
            return Decimal(_split_number(text, self.thousands_sep, self.decimal_sep))
        except InvalidOperation as e:
            raise ValueError(f"invalid money amount: {text!r}") from e

    def format_currency_amount(self, currency: str, amount: Decimal) -> str:
        number = self.format_amount(amount)
        if not currency:
            return number
        if self.currency_first:
            return f"{currency} {number}"
        return f"{number} {currency}"

    def parse_currency_amount(self, text: str) -> tuple[str, Decimal]:
        tokens = text.split()
        if len(tokens) == 1:
            return "", self.parse_amount(tokens[0])
        if len(tokens) != 2:
            raise ValueError(f"invalid currency amount: {text!r}")
        first, second = tokens
        # 通貨コードはアルファベットのみ
        if first.isalpha():
            return first.upper(), self.parse_amount(second)
        if second.isalpha():
            return second.upper(), self.parse_amount(first)
        raise ValueError(f"invalid currency amount: {text!r}")


@dataclass(frozen=True)
class FormatConfig:
    """Everything the formatter and scanner need to convert values.

    Attributes:
        float_format: Rules for ``float`` values
        money_format: Rules for ``Decimal`` and ``CurrencyAmount`` values
        null_token: Text for absent values (read back as None)
        true_token / false_token: Text for booleans
        date_layout: ``strftime`` layout for dates
        time_layout: ``strftime`` layout for datetimes, None for ISO 8601
        type_handlers: Exact type -> custom ``TypeHandler``
    """
    float_format: FloatFormat = field(default_factory=FloatFormat)
    money_format: MoneyFormat = field(default_factory=MoneyFormat)
    null_token: str = ""
    true_token: str = "true"
    false_token: str = "false"
    date_layout: str = "%Y-%m-%d"
    time_layout: str | None = None
    type_handlers: Mapping[type, TypeHandler] = field(default_factory=default_type_handlers)

    def handler_for(self, tp: Any) -> TypeHandler | None:
        if not isinstance(tp, type):
            return None
        return self.type_handlers.get(tp)

    def with_type_handler(self, tp: type, handler: TypeHandler | None) -> FormatConfig:
        """Return a copy with ``handler`` registered for ``tp`` (None removes it)."""
        handlers = dict(self.type_handlers)
        if handler is None:
            handlers.pop(tp, None)
        else:
            handlers[tp] = handler
        return replace(self, type_handlers=MappingProxyType(handlers))

    def with_options(self, **changes: Any) -> FormatConfig:
        return replace(self, **changes)


def new_format_config() -> FormatConfig:
    """Default configuration: ``.`` decimals, true/false, ISO dates."""
    return FormatConfig()


def new_english_format_config() -> FormatConfig:
    return FormatConfig(true_token="YES", false_token="NO")


def new_german_format_config() -> FormatConfig:
    return FormatConfig(
        float_format=FloatFormat(thousands_sep=None, decimal_sep=","),
        money_format=MoneyFormat(currency_first=True, thousands_sep=".", decimal_sep=","),
        date_layout="%d.%m.%Y",
        true_token="JA",
        false_token="NEIN",
    )
