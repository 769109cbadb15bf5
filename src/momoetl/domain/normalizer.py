"""Record normalization.

Pure functions only: no database access, no clock, no randomness. The same
candidate always yields the same ``NormalizedRecord``, which is what makes
reprocessing a batch safe to reason about.
"""

import re
from decimal import Decimal
from typing import Optional

from momoetl.domain.entities import Candidate, NormalizedRecord, PartyType
from momoetl.domain.errors import ValidationError
from momoetl.utils.amount_parser import MAX_INTEGER_DIGITS, exceeds_ledger_precision, parse_amount
from momoetl.utils.date_parser import parse_timestamp
from momoetl.utils.phone import normalize_phone

MAX_DESCRIPTION_LENGTH = 500
MAX_NAME_LENGTH = 255

_WHITESPACE = re.compile(r"\s+")
_CURRENCY = re.compile(r"^[A-Z]{3}$")


class Normalizer:
    """Cleans and standardizes candidate fields."""

    def __init__(
        self,
        default_currency: str = "USD",
        country_code: str = "256",
        timezone: str = "UTC",
    ):
        """Initialize normalizer.

        Args:
            default_currency: Currency used when a record carries none
            country_code: Prefix for local phone numbers starting with 0
            timezone: Zone used to interpret timestamps without an offset
        """
        self.default_currency = default_currency
        self.country_code = country_code
        self.timezone = timezone

    def normalize(self, candidate: Candidate) -> NormalizedRecord:
        """Normalize a candidate.

        Args:
            candidate: Parsed record with raw text fields

        Returns:
            NormalizedRecord

        Raises:
            ValidationError: Naming the first field that fails
        """
        return NormalizedRecord(
            reference_code=candidate.reference_code.strip(),
            sender_phone=self.normalize_phone(candidate.sender, "sender"),
            receiver_phone=self.normalize_phone(candidate.receiver, "receiver"),
            amount=self.normalize_amount(candidate.amount),
            currency=self.normalize_currency(candidate.currency),
            timestamp=self.normalize_timestamp(candidate.date),
            description=normalize_description(candidate.body),
            fee=self.normalize_fee(candidate.fee),
            sender_name=_clean_name(candidate.sender_name),
            receiver_name=_clean_name(candidate.receiver_name),
            sender_type=normalize_party_type(candidate.sender_type, "sender_type"),
            receiver_type=normalize_party_type(candidate.receiver_type, "receiver_type"),
        )

    def normalize_amount(self, amount_str: str) -> Decimal:
        """Parse a transaction amount; it must be strictly positive."""
        try:
            amount = parse_amount(amount_str)
        except ValueError as e:
            raise ValidationError("amount", str(e))
        if amount <= 0:
            raise ValidationError("amount", f"must be positive, got {amount}")
        if exceeds_ledger_precision(amount):
            raise ValidationError("amount", f"more than {MAX_INTEGER_DIGITS} integer digits: {amount}")
        return amount

    def normalize_fee(self, fee_str: Optional[str]) -> Optional[Decimal]:
        """Parse an explicit fee; None when the record has no fee."""
        if fee_str is None or not fee_str.strip():
            return None
        try:
            fee = parse_amount(fee_str)
        except ValueError as e:
            raise ValidationError("fee", str(e))
        if fee < 0:
            raise ValidationError("fee", f"must not be negative, got {fee}")
        if exceeds_ledger_precision(fee):
            raise ValidationError("fee", f"more than {MAX_INTEGER_DIGITS} integer digits: {fee}")
        return fee

    def normalize_timestamp(self, date_str: str):
        """Parse a timestamp into a naive UTC datetime."""
        try:
            return parse_timestamp(date_str, self.timezone)
        except ValueError as e:
            raise ValidationError("date", str(e))

    def normalize_phone(self, phone_str: str, field: str) -> str:
        """Canonicalize a phone number."""
        try:
            return normalize_phone(phone_str, self.country_code)
        except ValueError as e:
            raise ValidationError(field, str(e))

    def normalize_currency(self, currency: Optional[str]) -> str:
        """Upper-case a 3-letter currency code, defaulting when absent."""
        if currency is None or not currency.strip():
            return self.default_currency
        code = currency.strip().upper()
        if not _CURRENCY.match(code):
            raise ValidationError("currency", f"'{currency}' is not a 3-letter code")
        return code


def normalize_description(body: Optional[str]) -> str:
    """Collapse whitespace, trim and cap the description."""
    if not body:
        return ""
    return _WHITESPACE.sub(" ", body).strip()[:MAX_DESCRIPTION_LENGTH]


def normalize_party_type(value: Optional[str], field: str) -> Optional[PartyType]:
    """Map a party type hint to PartyType, case-insensitively."""
    if value is None or not value.strip():
        return None
    wanted = value.strip().lower()
    for party_type in PartyType:
        if party_type.value.lower() == wanted:
            return party_type
    raise ValidationError(field, f"unknown party type '{value}'")


def _clean_name(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    cleaned = _WHITESPACE.sub(" ", name).strip()
    return cleaned[:MAX_NAME_LENGTH] or None
