from __future__ import annotations

from decimal import Decimal

import pytest

from rowbridge.models.format_config import (
    FloatFormat,
    FormatConfig,
    MoneyFormat,
    new_english_format_config,
    new_format_config,
    new_german_format_config,
)
from rowbridge.models.type_handlers import CurrencyAmount


@pytest.mark.parametrize(
    "fmt, value, expected",
    [
        (FloatFormat(), 1.5, "1.5"),
        (FloatFormat(), 3.0, "3"),
        (FloatFormat(), 0.1, "0.1"),
        (FloatFormat(), -2.25, "-2.25"),
        (FloatFormat(thousands_sep=","), 1234567.5, "1,234,567.5"),
        (FloatFormat(decimal_sep=","), 1.25, "1,25"),
        (FloatFormat(precision=2), 1.5, "1.5"),
        (FloatFormat(precision=2, pad_precision=True), 1.5, "1.50"),
        (FloatFormat(precision=0, pad_precision=True), 2.0, "2"),
        (FloatFormat(thousands_sep=".", decimal_sep=",", precision=2, pad_precision=True), 1234.5, "1.234,50"),
    ],
)
def test_float_format(fmt: FloatFormat, value: float, expected: str):
    assert fmt.format(value) == expected


def test_float_parse_inverse():
    fmt = FloatFormat(thousands_sep=".", decimal_sep=",")
    assert fmt.parse("1.234,5") == 1234.5
    assert FloatFormat().parse(" 2.5 ") == 2.5


def test_money_format_amount_rounds_half_up():
    m = MoneyFormat()
    assert m.format_amount(Decimal("1234.565")) == "1,234.57"
    assert m.format_amount(Decimal("-5")) == "-5.00"
    assert m.format_amount(Decimal("0")) == "0.00"


def test_money_currency_placement():
    m = MoneyFormat()
    assert m.format_currency_amount("EUR", Decimal("12.5")) == "EUR 12.50"
    assert MoneyFormat(currency_first=False).format_currency_amount("EUR", Decimal("12.5")) == "12.50 EUR"
    assert m.format_currency_amount("", Decimal("1")) == "1.00"


def test_money_parse_currency_amount():
    m = MoneyFormat(thousands_sep=".", decimal_sep=",")
    assert m.parse_currency_amount("eur 1.234,50") == ("EUR", Decimal("1234.50"))
    assert m.parse_currency_amount("1,5 USD") == ("USD", Decimal("1.5"))
    assert m.parse_currency_amount("7") == ("", Decimal("7"))
    with pytest.raises(ValueError):
        m.parse_currency_amount("1 2 3")
    with pytest.raises(ValueError):
        m.parse_amount("abc")


def test_presets():
    d = new_format_config()
    assert (d.true_token, d.false_token, d.null_token) == ("true", "false", "")
    e = new_english_format_config()
    assert (e.true_token, e.false_token) == ("YES", "NO")
    g = new_german_format_config()
    assert (g.true_token, g.false_token) == ("JA", "NEIN")
    assert g.float_format.decimal_sep == ","
    assert g.date_layout == "%d.%m.%Y"
    assert g.money_format.format_currency_amount("EUR", Decimal("1234.5")) == "EUR 1.234,50"


def test_config_is_immutable_and_copied():
    cfg = FormatConfig()
    changed = cfg.with_options(null_token="N/A")
    assert cfg.null_token == ""
    assert changed.null_token == "N/A"
    with pytest.raises(AttributeError):
        cfg.null_token = "x"  # type: ignore[misc]


def test_with_type_handler_registers_and_removes():
    class Upper:
        def format(self, value, config):
            return str(value).upper()

        def scan(self, text, config):
            return text.lower()

    class Code(str):
        pass

    cfg = FormatConfig().with_type_handler(Code, Upper())
    assert cfg.handler_for(Code) is not None
    assert FormatConfig().handler_for(Code) is None
    removed = cfg.with_type_handler(CurrencyAmount, None)
    assert removed.handler_for(CurrencyAmount) is None
    assert cfg.handler_for(CurrencyAmount) is not None
