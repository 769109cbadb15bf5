"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from momoetl.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("500.00", Decimal("500.00")),
        ("1,234.56", Decimal("1234.56")),
        ("$123.45", Decimal("123.45")),
        ("€10", Decimal("10.00")),
        ("2,000 RWF", Decimal("2000.00")),
        ("2000RWF", Decimal("2000.00")),
        ("UGX 15,000", Decimal("15000.00")),
        ("usd 7.5", Decimal("7.50")),
        ("-10.00", Decimal("-10.00")),
        ("(123.45)", Decimal("-123.45")),
    ],
)
def test_parse_amount_formats(text, expected):
    """Test that common SMS amount formats are accepted."""
    assert parse_amount(text) == expected


def test_parse_amount_rounds_half_up():
    """Test that amounts are quantized to cents, rounding half up."""
    assert parse_amount("10.005") == Decimal("10.01")
    assert parse_amount("10.004") == Decimal("10.00")


@pytest.mark.parametrize("text", ["", "   ", "abc", "12.3.4", "NaN", "Infinity"])
def test_parse_amount_rejects_garbage(text):
    """Test that unparseable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(text)


@pytest.mark.parametrize("text", ["1e30", "9" * 40])
def test_parse_amount_rejects_out_of_range(text):
    """Test that amounts too large to quantize raise ValueError."""
    with pytest.raises(ValueError, match="out of range"):
        parse_amount(text)
