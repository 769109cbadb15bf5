"""Tests for date and timestamp parsing."""

import pytest
from datetime import date, datetime, timedelta

from momoetl.utils.date_parser import parse_date, parse_timestamp


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_relative_dates():
    """Test parsing 'today' and 'yesterday'."""
    assert parse_date("today") == date.today()
    assert parse_date("yesterday") == date.today() - timedelta(days=1)


def test_parse_this_month():
    """Test parsing 'this month'."""
    assert parse_date("this month") == date.today().replace(day=1)


def test_parse_invalid_date():
    """Test that invalid dates raise ValueError."""
    with pytest.raises(ValueError):
        parse_date("gibberish")


@pytest.mark.parametrize(
    "text",
    [
        "2026-01-20 14:30:00",
        "2026-01-20T14:30:00",
        "2026-01-20T14:30:00Z",
        "2026-01-20T16:30:00+02:00",
        "20/01/2026 14:30",
        "20/01/2026 14:30:00",
        "20 Jan 2026 2:30:00 PM",
        "1768919400000",
    ],
)
def test_parse_timestamp_formats(text):
    """Test that every accepted format resolves to the same UTC instant."""
    assert parse_timestamp(text) == datetime(2026, 1, 20, 14, 30)


def test_parse_timestamp_is_naive_utc():
    """Test that results carry no tzinfo."""
    assert parse_timestamp("2026-01-20T14:30:00Z").tzinfo is None


def test_parse_timestamp_converts_local_zone():
    """Test that naive input is read in the configured zone."""
    assert parse_timestamp("2026-01-20 14:30:00", "Africa/Kampala") == datetime(2026, 1, 20, 11, 30)


def test_parse_timestamp_day_first():
    """Test that slash dates are day first."""
    assert parse_timestamp("03/04/2026 10:00") == datetime(2026, 4, 3, 10, 0)


@pytest.mark.parametrize("text", ["", "yesterday-ish", "1999-12-31 23:59:59", "2100-01-01 00:00:00", "12345"])
def test_parse_timestamp_rejects_invalid(text):
    """Test that unparseable and out-of-range timestamps raise ValueError."""
    with pytest.raises(ValueError):
        parse_timestamp(text)


def test_parse_timestamp_unknown_zone():
    """Test that an unknown timezone raises ValueError."""
    with pytest.raises(ValueError):
        parse_timestamp("2026-01-20 14:30:00", "Mars/Olympus_Mons")
