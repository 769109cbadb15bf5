"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from momoetl.domain.entities import (
    Party,
    PartyType,
    Account,
    AccountType,
    Category,
    Transaction,
    TransactionStatus,
    Fee,
    FeeQuote,
    LogLevel,
    ProcessingLogEntry,
    TransactionTag,
)


class Database(ABC):
    """Abstract database interface for the momoetl ledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def release_session(self) -> None:
        """Release the calling thread's session. Worker threads call this when done."""
        pass

    # Party operations
    @abstractmethod
    def create_party(
        self,
        name: str,
        party_type: PartyType,
        phone_number: str,
        national_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> int:
        """Create a party. Returns party ID."""
        pass

    @abstractmethod
    def get_party(self, party_id: int) -> Optional[Party]:
        """Get party by ID."""
        pass

    @abstractmethod
    def get_party_by_phone(self, phone_number: str) -> Optional[Party]:
        """Get party by canonical phone number."""
        pass

    @abstractmethod
    def list_parties(self) -> list[Party]:
        """List all parties."""
        pass

    @abstractmethod
    def touch_party(self, party_id: int) -> None:
        """Set the party's updated_at to now."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        party_id: int,
        currency: str,
        account_type: AccountType = AccountType.WALLET,
        balance: Decimal = Decimal("0.00"),
    ) -> int:
        """Create an account for a party. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_default_account(self, party_id: int, currency: str) -> Optional[Account]:
        """Get the party's first active account in the given currency."""
        pass

    @abstractmethod
    def list_accounts(self, party_id: Optional[int] = None) -> list[Account]:
        """List accounts, optionally filtered by party."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, description: Optional[str] = None) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    # Transaction operations
    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def get_transaction_by_code(self, transaction_code: str) -> Optional[Transaction]:
        """Get transaction by reference code."""
        pass

    @abstractmethod
    def transaction_exists(self, transaction_code: str) -> bool:
        """Check if a transaction with the given reference code exists."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        status: Optional[TransactionStatus] = None,
        account_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters."""
        pass

    @abstractmethod
    def get_fees(self, transaction_id: int) -> list[Fee]:
        """Get fees charged on a transaction."""
        pass

    @abstractmethod
    def fee_totals(self) -> dict[int, Decimal]:
        """Total fee charged per transaction ID, for transactions that carry fees."""
        pass

    @abstractmethod
    def apply_transfer(
        self,
        transaction_code: str,
        sender_account_id: int,
        receiver_account_id: int,
        category_id: int,
        amount: Decimal,
        currency: str,
        timestamp: datetime,
        description: Optional[str],
        fee: FeeQuote,
    ) -> int:
        """Atomically insert a transaction, move balances and record its fee.

        Returns the Completed transaction ID. Nothing is written unless every
        step succeeds.
        """
        pass

    @abstractmethod
    def record_failed_transaction(
        self,
        transaction_code: str,
        sender_account_id: int,
        receiver_account_id: int,
        category_id: int,
        amount: Decimal,
        currency: str,
        timestamp: datetime,
        description: Optional[str],
    ) -> int:
        """Store a Failed transaction with no balance effect. Returns its ID."""
        pass

    @abstractmethod
    def apply_reversal(
        self,
        original_id: int,
        reversal_code: str,
        timestamp: datetime,
        description: Optional[str],
    ) -> int:
        """Atomically reverse a Completed transaction. Returns the compensating ID."""
        pass

    # Processing log operations
    @abstractmethod
    def append_log(
        self,
        log_level: LogLevel,
        message: str,
        process_name: Optional[str] = None,
        status: Optional[str] = None,
        transaction_id: Optional[int] = None,
        reference_code: Optional[str] = None,
        batch_id: Optional[str] = None,
    ) -> int:
        """Append a processing log entry. Returns entry ID."""
        pass

    @abstractmethod
    def list_logs(
        self,
        batch_id: Optional[str] = None,
        log_level: Optional[LogLevel] = None,
        process_name: Optional[str] = None,
        reference_code: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[ProcessingLogEntry]:
        """List log entries in the order they were written."""
        pass

    @abstractmethod
    def purge_logs(self, before: datetime) -> int:
        """Delete log entries older than ``before``. Returns number deleted."""
        pass

    # Tag operations
    @abstractmethod
    def add_tag(self, transaction_id: int, tag_name: str, assigned_by: Optional[str] = None) -> None:
        """Attach a tag to a transaction, creating the tag if needed."""
        pass

    @abstractmethod
    def remove_tag(self, transaction_id: int, tag_name: str) -> bool:
        """Detach a tag from a transaction. Returns False if it was not attached."""
        pass

    @abstractmethod
    def list_transaction_tags(self, transaction_id: int) -> list[TransactionTag]:
        """List tag assignments for a transaction."""
        pass

    @abstractmethod
    def list_transactions_by_tag(self, tag_name: str) -> list[Transaction]:
        """List transactions carrying a tag."""
        pass

    # Read views
    @abstractmethod
    def get_transaction_summary(
        self,
        status: Optional[TransactionStatus] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Transactions joined with party names and category name."""
        pass

    @abstractmethod
    def get_account_summary(self) -> list[dict[str, Any]]:
        """Accounts with owner details and aggregate transaction counts/sums."""
        pass
