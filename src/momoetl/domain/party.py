"""Party and account domain service."""

from decimal import Decimal
from typing import Optional

from momoetl.database.base import Database
from momoetl.domain.entities import Account, AccountType, Party, PartyType
from momoetl.domain.errors import ConflictError, ValidationError
from momoetl.utils.amount_parser import MAX_INTEGER_DIGITS, exceeds_ledger_precision
from momoetl.utils.phone import normalize_phone

# (name, type, phone, national ID, email, opening balance)
SAMPLE_PARTIES: list[tuple[str, PartyType, str, str, str, Decimal]] = [
    ("Mugisha Moses", PartyType.INDIVIDUAL, "+256701234567", "CM-123456789", "mugisha@example.com", Decimal("5000.00")),
    ("Lisa Ineza", PartyType.INDIVIDUAL, "+256702345678", "CM-987654321", "lisa@example.com", Decimal("3500.50")),
    ("TechHub Business Ltd", PartyType.BUSINESS, "+256703456789", "BRN-001234", "info@techhub.ug", Decimal("15000.00")),
    ("Mobile Agent Kampala", PartyType.AGENT, "+256704567890", "AGN-005678", "agent@kampala.ug", Decimal("8200.25")),
    ("Nkingi Chris", PartyType.INDIVIDUAL, "+256705678901", "CM-555666777", "chris@example.com", Decimal("2750.75")),
]

ACCOUNT_TYPE_FOR_PARTY = {
    PartyType.INDIVIDUAL: AccountType.WALLET,
    PartyType.BUSINESS: AccountType.BUSINESS,
    PartyType.AGENT: AccountType.AGENT,
}


class PartyService:
    """Service for registering parties and their accounts."""

    def __init__(self, db: Database, country_code: str = "256", default_currency: str = "USD"):
        """Initialize party service.

        Args:
            db: Database instance
            country_code: Country calling code for local phone numbers
            default_currency: Currency of accounts opened without one
        """
        self.db = db
        self.country_code = country_code
        self.default_currency = default_currency

    def register_party(
        self,
        name: str,
        phone_number: str,
        party_type: PartyType = PartyType.INDIVIDUAL,
        national_id: Optional[str] = None,
        email: Optional[str] = None,
        opening_balance: Decimal = Decimal("0.00"),
        currency: Optional[str] = None,
    ) -> int:
        """Register a party and open its default account.

        Args:
            name: Party name
            phone_number: Phone number in any accepted format
            party_type: Individual, Business or Agent
            national_id: Optional national ID or registration number
            email: Optional email address
            opening_balance: Balance of the new account
            currency: Account currency (defaults to the configured currency)

        Returns:
            Party ID

        Raises:
            ValidationError: If the name, phone number or balance is invalid
            ConflictError: If the phone number or national ID is already registered
        """
        if not name or not name.strip():
            raise ValidationError("name", "party name must not be empty")
        if opening_balance < 0:
            raise ValidationError("opening_balance", f"must not be negative, got {opening_balance}")
        if exceeds_ledger_precision(opening_balance):
            raise ValidationError(
                "opening_balance", f"more than {MAX_INTEGER_DIGITS} integer digits: {opening_balance}"
            )
        try:
            canonical = normalize_phone(phone_number, self.country_code)
        except ValueError as e:
            raise ValidationError("phone_number", str(e)) from e

        if self.db.get_party_by_phone(canonical) is not None:
            raise ConflictError(f"Party with phone number '{canonical}' already exists")

        party_id = self.db.create_party(
            name=name.strip(),
            party_type=party_type,
            phone_number=canonical,
            national_id=national_id,
            email=email,
        )
        self.db.create_account(
            party_id=party_id,
            currency=(currency or self.default_currency).upper(),
            account_type=ACCOUNT_TYPE_FOR_PARTY[party_type],
            balance=opening_balance,
        )
        return party_id

    def get_party_by_phone(self, phone_number: str) -> Optional[Party]:
        """Get party by phone number in any accepted format.

        Returns:
            Party entity or None if not found or the number is invalid
        """
        try:
            canonical = normalize_phone(phone_number, self.country_code)
        except ValueError:
            return None
        return self.db.get_party_by_phone(canonical)

    def list_parties(self) -> list[Party]:
        """List all parties."""
        return self.db.list_parties()

    def list_accounts(self, party_id: Optional[int] = None) -> list[Account]:
        """List accounts, optionally for one party."""
        return self.db.list_accounts(party_id=party_id)

    def seed_sample(self) -> int:
        """Register the sample parties that are not yet present.

        Returns:
            Number of parties created
        """
        created = 0
        for name, party_type, phone, national_id, email, balance in SAMPLE_PARTIES:
            if self.db.get_party_by_phone(phone) is not None:
                continue
            self.register_party(
                name=name,
                phone_number=phone,
                party_type=party_type,
                national_id=national_id,
                email=email,
                opening_balance=balance,
                currency="USD",
            )
            created += 1
        return created
