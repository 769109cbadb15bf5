"""Domain model entities for momoetl.

These are pure data classes representing ledger and pipeline concepts,
independent of database schema. The database layer converts its ORM rows
into these through the mapper functions, so services never touch ORM objects.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class PartyType(str, enum.Enum):
    """Kind of actor that can own accounts."""

    INDIVIDUAL = "Individual"
    BUSINESS = "Business"
    AGENT = "Agent"


class AccountType(str, enum.Enum):
    """Kind of balance-bearing account."""

    WALLET = "Wallet"
    SAVINGS = "Savings"
    BUSINESS = "Business"
    AGENT = "Agent"


class TransactionStatus(str, enum.Enum):
    """Lifecycle state of a transaction.

    Pending -> Completed | Failed, and Completed -> Reversed. Nothing moves
    backwards and Failed/Reversed are terminal.
    """

    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REVERSED = "Reversed"

    def can_transition_to(self, target: "TransactionStatus") -> bool:
        """Return True if moving from this status to target is allowed."""
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS = {
    TransactionStatus.PENDING: {TransactionStatus.COMPLETED, TransactionStatus.FAILED},
    TransactionStatus.COMPLETED: {TransactionStatus.REVERSED},
    TransactionStatus.FAILED: set(),
    TransactionStatus.REVERSED: set(),
}


class FeeType(str, enum.Enum):
    """How a fee amount was derived."""

    FLAT = "Flat"
    PERCENTAGE = "Percentage"
    TIERED = "Tiered"


class LogLevel(str, enum.Enum):
    """Severity of a processing log entry."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoadStatus(str, enum.Enum):
    """Per-record outcome reported by the pipeline."""

    COMPLETED = "Completed"
    FAILED = "Failed"
    SKIPPED = "Skipped"
    UNPARSED = "Unparsed"
    ABORTED = "Aborted"


# Persisted entities


@dataclass(frozen=True)
class Party:
    """Natural or organizational actor identified by phone number."""

    id: int
    name: str
    party_type: PartyType
    phone_number: str
    national_id: Optional[str]
    email: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Account:
    """Balance-bearing account owned by exactly one party."""

    id: int
    party_id: int
    account_type: AccountType
    currency: str
    current_balance: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Category:
    """Transaction category."""

    id: int
    name: str
    description: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Value movement between two distinct accounts."""

    id: int
    transaction_code: str
    sender_account_id: int
    receiver_account_id: int
    category_id: int
    amount: Decimal
    currency: str
    status: TransactionStatus
    transaction_timestamp: datetime
    description: Optional[str]
    created_at: datetime
    reversal_of_id: Optional[int] = None


@dataclass(frozen=True)
class Fee:
    """Charge attached to one transaction."""

    id: int
    transaction_id: int
    fee_amount: Decimal
    fee_type: FeeType
    fee_percentage: Optional[Decimal]
    created_at: datetime


@dataclass(frozen=True)
class ProcessingLogEntry:
    """Append-only audit record for one pipeline decision."""

    id: int
    transaction_id: Optional[int]
    log_level: LogLevel
    message: str
    log_timestamp: datetime
    process_name: Optional[str]
    status: Optional[str]
    reference_code: Optional[str]
    batch_id: Optional[str]


@dataclass(frozen=True)
class Tag:
    """Free-form label."""

    id: int
    name: str


@dataclass(frozen=True)
class TransactionTag:
    """Assignment of a tag to a transaction."""

    transaction_id: int
    tag_name: str
    assigned_by: Optional[str]
    assigned_at: datetime


# Pipeline records


@dataclass(frozen=True)
class Candidate:
    """Parsed but unvalidated transaction record; every field is raw text."""

    offset: int
    reference_code: str
    sender: str
    receiver: str
    amount: str
    date: str
    body: str = ""
    fee: Optional[str] = None
    currency: Optional[str] = None
    sender_name: Optional[str] = None
    receiver_name: Optional[str] = None
    sender_type: Optional[str] = None
    receiver_type: Optional[str] = None


@dataclass(frozen=True)
class ParseFailure:
    """A record that could not be read, with the offending fragment."""

    offset: int
    fragment: str
    reason: str


@dataclass(frozen=True)
class NormalizedRecord:
    """Clean, typed transaction record ready for categorization and loading."""

    reference_code: str
    sender_phone: str
    receiver_phone: str
    amount: Decimal
    currency: str
    timestamp: datetime
    description: str
    fee: Optional[Decimal] = None
    sender_name: Optional[str] = None
    receiver_name: Optional[str] = None
    sender_type: Optional[PartyType] = None
    receiver_type: Optional[PartyType] = None


@dataclass(frozen=True)
class CategoryAssignment:
    """Category picked for a record and the rule that picked it."""

    category: str
    rule_id: str
    confidence: float


@dataclass(frozen=True)
class FeeQuote:
    """Fee computed for a transaction before it is applied."""

    amount: Decimal
    fee_type: FeeType
    percentage: Optional[Decimal] = None


@dataclass(frozen=True)
class LoadOutcome:
    """Result of pushing one record through the ledger loader."""

    reference_code: str
    status: LoadStatus
    transaction_id: Optional[int] = None
    message: str = ""


@dataclass(frozen=True)
class BatchSummary:
    """Counts reported to the user after a batch run."""

    batch_id: str
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    unparsed: int = 0
    aborted: int = 0
    dead_letter_path: Optional[str] = None
    outcomes: tuple[LoadOutcome, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        """Number of input records seen by the batch."""
        return self.completed + self.failed + self.skipped + self.unparsed + self.aborted
