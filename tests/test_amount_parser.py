"""Tests for amount parsing."""

from decimal import Decimal

import pytest

from caixa.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", "123.45"),
        ("-123.45", "-123.45"),
        ("R$ 1.234,56", "1234.56"),
        ("1,234.56", "1234.56"),
        ("-123,45", "-123.45"),
        ("(50.00)", "-50.00"),
        ("$ 10", "10"),
        ("1.234.567", "1234567"),
        ("1,234", "1234"),
        ("1.500", "1500"),
        ("R$ 1.500", "1500"),
        ("-12.000", "-12000"),
        ("0.500", "0.500"),
        ("1.50", "1.50"),
        ("1234.567", "1234.567"),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == Decimal(expected)


def test_parse_amount_keeps_cents_exact():
    assert parse_amount("0,10") + parse_amount("0,20") == Decimal("0.30")


@pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "Infinity"])
def test_parse_amount_rejects(text):
    with pytest.raises(ValueError):
        parse_amount(text)
