from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .format_config import FormatConfig

"""Custom per-type value handlers.

Types without a faithful primitive text form (dates, durations, money)
register a ``TypeHandler`` in ``FormatConfig.type_handlers``. Lookup is by
exact type, so ``datetime`` and ``date`` get separate handlers even though
``datetime`` subclasses ``date``.
"""

__all__ = [
    "TypeHandler",
    "CurrencyAmount",
    "DateHandler",
    "DateTimeHandler",
    "TimeOfDayHandler",
    "DurationHandler",
    "MoneyAmountHandler",
    "CurrencyAmountHandler",
    "default_type_handlers",
    "format_duration",
    "parse_duration",
]


@runtime_checkable
class TypeHandler(Protocol):
    """Formats and scans values of one registered type."""

    def format(self, value: Any, config: FormatConfig) -> str: ...

    def scan(self, text: str, config: FormatConfig) -> Any: ...


@dataclass(frozen=True)
class CurrencyAmount:
    """A money amount together with its ISO 4217 currency code."""
    currency: str
    amount: Decimal

    def __str__(self) -> str:
        if not self.currency:
            return f"{self.amount}"
        return f"{self.currency} {self.amount}"


_DURATION_RE = re.compile(r"^(?P<sign>-)?(?P<h>\d+):(?P<m>[0-5]\d):(?P<s>[0-5]\d)(?:\.(?P<f>\d{1,6}))?$")


def format_duration(value: timedelta) -> str:
    """Render a timedelta as ``[-]H:MM:SS[.ffffff]`` with unbounded hours."""
    total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)
    seconds, micros = divmod(total_us, 1_000_000)
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    text = f"{sign}{hours}:{minutes:02d}:{secs:02d}"
    if micros:
        text += f".{micros:06d}"
    return text


def parse_duration(text: str) -> timedelta:
    m = _DURATION_RE.match(text.strip())
    if m is None:
        raise ValueError(f"invalid duration: {text!r}")
    frac = (m.group("f") or "").ljust(6, "0")
    td = timedelta(
        hours=int(m.group("h")),
        minutes=int(m.group("m")),
        seconds=int(m.group("s")),
        microseconds=int(frac or 0),
    )
    return -td if m.group("sign") else td


class DateHandler:
    def format(self, value: date, config: FormatConfig) -> str:
        return value.strftime(config.date_layout)

    def scan(self, text: str, config: FormatConfig) -> date:
        return datetime.strptime(text.strip(), config.date_layout).date()


class DateTimeHandler:
    def format(self, value: datetime, config: FormatConfig) -> str:
        if config.time_layout is None:
            return value.isoformat()
        return value.strftime(config.time_layout)

    def scan(self, text: str, config: FormatConfig) -> datetime:
        if config.time_layout is None:
            return datetime.fromisoformat(text.strip())
        return datetime.strptime(text.strip(), config.time_layout)


class TimeOfDayHandler:
    def format(self, value: time, config: FormatConfig) -> str:
        return value.isoformat()

    def scan(self, text: str, config: FormatConfig) -> time:
        return time.fromisoformat(text.strip())


class DurationHandler:
    def format(self, value: timedelta, config: FormatConfig) -> str:
        return format_duration(value)

    def scan(self, text: str, config: FormatConfig) -> timedelta:
        return parse_duration(text)


class MoneyAmountHandler:
    def format(self, value: Decimal, config: FormatConfig) -> str:
        return config.money_format.format_amount(value)

    def scan(self, text: str, config: FormatConfig) -> Decimal:
        return config.money_format.parse_amount(text)


class CurrencyAmountHandler:
    def format(self, value: CurrencyAmount, config: FormatConfig) -> str:
        return config.money_format.format_currency_amount(value.currency, value.amount)

    def scan(self, text: str, config: FormatConfig) -> CurrencyAmount:
        currency, amount = config.money_format.parse_currency_amount(text)
        return CurrencyAmount(currency=currency, amount=amount)


_DEFAULT_TYPE_HANDLERS: MappingProxyType[type, TypeHandler] = MappingProxyType({
    date: DateHandler(),
    datetime: DateTimeHandler(),
    time: TimeOfDayHandler(),
    timedelta: DurationHandler(),
    Decimal: MoneyAmountHandler(),
    CurrencyAmount: CurrencyAmountHandler(),
})


def default_type_handlers() -> MappingProxyType[type, TypeHandler]:
    """Shared read-only table of the built-in handlers."""
    return _DEFAULT_TYPE_HANDLERS
