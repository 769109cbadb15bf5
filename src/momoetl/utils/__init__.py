"""Utility functions for momoetl."""

from momoetl.utils.date_parser import parse_date, parse_timestamp
from momoetl.utils.amount_parser import parse_amount
from momoetl.utils.phone import normalize_phone

__all__ = ["parse_date", "parse_timestamp", "parse_amount", "normalize_phone"]
