"""Ledger loader domain service.

The state-mutating core of the pipeline. For each normalized, categorized
record it:

1. resolves or creates the sender and receiver parties by phone number
   (first write wins on name and type; updated_at is always bumped),
2. resolves or creates each party's default account in the record currency,
3. skips records whose reference code is already stored,
4. rejects records whose sender and receiver are the same account,
5. quotes the fee and, holding both account locks in ascending ID order,
   applies the transfer as one store transaction: insert Pending, debit
   sender amount + fee, credit receiver amount, insert fee, mark Completed.

When the sender cannot cover amount + fee nothing moves; a Failed row is
kept for the audit trail.
"""

import hashlib
import logging
import threading
from datetime import datetime, UTC
from typing import Optional

from momoetl.database.base import Database
from momoetl.domain.audit import AuditLogger, STAGE_LOAD, STAGE_REVERSE
from momoetl.domain.entities import (
    Account,
    CategoryAssignment,
    LoadOutcome,
    LoadStatus,
    NormalizedRecord,
    Party,
    PartyType,
    TransactionStatus,
)
from momoetl.domain.errors import (
    DomainError,
    DuplicateTransactionError,
    InsufficientFundsError,
    IntegrityViolation,
    InvalidTransitionError,
    NotFoundError,
    invalid_transition,
    same_account,
    transaction_not_found,
)
from momoetl.domain.fees import FeePolicy
from momoetl.domain.locking import AccountLocks
from momoetl.domain.party import ACCOUNT_TYPE_FOR_PARTY

logger = logging.getLogger(__name__)

REVERSAL_PREFIX = "REV-"
MAX_CODE_LENGTH = 50


class LedgerLoader:
    """Loads records into the ledger while keeping balances consistent.

    Safe to share between worker threads: party/account/category resolution
    is serialized and balance updates hold per-account locks.
    """

    def __init__(
        self,
        db: Database,
        fee_policy: Optional[FeePolicy] = None,
        audit: Optional[AuditLogger] = None,
        locks: Optional[AccountLocks] = None,
    ):
        """Initialize ledger loader.

        Args:
            db: Database instance
            fee_policy: Fee policy; defaults to 1% of the amount
            audit: Audit logger; defaults to one without a batch ID
            locks: Account lock registry to share with other loaders
        """
        self.db = db
        self.fee_policy = fee_policy or FeePolicy()
        self.audit = audit or AuditLogger(db)
        self.locks = locks or AccountLocks()
        self._resolve_lock = threading.RLock()

    def load(self, record: NormalizedRecord, assignment: CategoryAssignment) -> LoadOutcome:
        """Load one record and audit the outcome.

        Per-record problems become Failed or Skipped outcomes; only
        StoreUnavailableError propagates.

        Args:
            record: Normalized record
            assignment: Category assignment for the record

        Returns:
            LoadOutcome with status Completed, Failed or Skipped
        """
        reference_code = record.reference_code
        try:
            transaction_id = self.apply(record, assignment)
        except DuplicateTransactionError as e:
            self.audit.warning(STAGE_LOAD, str(e), status="Duplicate", reference_code=reference_code)
            return LoadOutcome(reference_code, LoadStatus.SKIPPED, message=str(e))
        except InsufficientFundsError as e:
            self.audit.error(
                STAGE_LOAD,
                str(e),
                status="Failed",
                reference_code=reference_code,
                transaction_id=e.transaction_id,
            )
            return LoadOutcome(reference_code, LoadStatus.FAILED, e.transaction_id, str(e))
        except DomainError as e:
            self.audit.error(STAGE_LOAD, str(e), status="Failed", reference_code=reference_code)
            return LoadOutcome(reference_code, LoadStatus.FAILED, message=str(e))

        message = (
            f"Loaded {record.amount} {record.currency} from {record.sender_phone} "
            f"to {record.receiver_phone} as {assignment.category}"
        )
        self.audit.info(
            STAGE_LOAD,
            message,
            status="Success",
            reference_code=reference_code,
            transaction_id=transaction_id,
        )
        return LoadOutcome(reference_code, LoadStatus.COMPLETED, transaction_id, message)

    def apply(self, record: NormalizedRecord, assignment: CategoryAssignment) -> int:
        """Load one record, raising on any per-record problem.

        Args:
            record: Normalized record
            assignment: Category assignment for the record

        Returns:
            ID of the Completed transaction

        Raises:
            DuplicateTransactionError: Reference code already stored
            IntegrityViolation: Sender and receiver are the same account
            InsufficientFundsError: Sender cannot cover amount + fee
            StoreUnavailableError: The store cannot be reached
        """
        sender_party = self.resolve_party(record.sender_phone, record.sender_name, record.sender_type)
        receiver_party = self.resolve_party(record.receiver_phone, record.receiver_name, record.receiver_type)
        sender_account = self.resolve_account(sender_party, record.currency)
        receiver_account = self.resolve_account(receiver_party, record.currency)

        if self.db.transaction_exists(record.reference_code):
            raise DuplicateTransactionError(record.reference_code)

        if sender_account.id == receiver_account.id:
            raise IntegrityViolation(same_account(record.reference_code, sender_account.id))

        category_id = self.resolve_category(assignment.category)
        fee = self.fee_policy.quote(record.amount, record.fee)

        with self.locks.hold(sender_account.id, receiver_account.id):
            try:
                return self.db.apply_transfer(
                    transaction_code=record.reference_code,
                    sender_account_id=sender_account.id,
                    receiver_account_id=receiver_account.id,
                    category_id=category_id,
                    amount=record.amount,
                    currency=record.currency,
                    timestamp=record.timestamp,
                    description=record.description or None,
                    fee=fee,
                )
            except InsufficientFundsError as e:
                e.transaction_id = self.db.record_failed_transaction(
                    transaction_code=record.reference_code,
                    sender_account_id=sender_account.id,
                    receiver_account_id=receiver_account.id,
                    category_id=category_id,
                    amount=record.amount,
                    currency=record.currency,
                    timestamp=record.timestamp,
                    description=record.description or None,
                )
                raise

    def resolve_party(
        self,
        phone_number: str,
        name: Optional[str] = None,
        party_type: Optional[PartyType] = None,
    ) -> Party:
        """Find the party for a phone number, creating it on first sight.

        An existing party keeps its name and type; only updated_at changes.
        """
        with self._resolve_lock:
            party = self.db.get_party_by_phone(phone_number)
            if party is None:
                party_id = self.db.create_party(
                    name=name or phone_number,
                    party_type=party_type or PartyType.INDIVIDUAL,
                    phone_number=phone_number,
                )
                logger.debug("Created party %s for %s", party_id, phone_number)
            else:
                party_id = party.id
                self.db.touch_party(party_id)
            return self.db.get_party(party_id)

    def resolve_account(self, party: Party, currency: str) -> Account:
        """Find the party's default account in a currency, creating it if needed."""
        with self._resolve_lock:
            account = self.db.get_default_account(party.id, currency)
            if account is not None:
                return account
            account_id = self.db.create_account(
                party_id=party.id,
                currency=currency,
                account_type=ACCOUNT_TYPE_FOR_PARTY[party.party_type],
            )
            logger.debug("Created %s account %s for party %s", currency, account_id, party.id)
            return self.db.get_account(account_id)

    def resolve_category(self, name: str) -> int:
        """Return the category ID for a name, creating the category if needed."""
        with self._resolve_lock:
            category = self.db.get_category_by_name(name)
            if category is not None:
                return category.id
            return self.db.create_category(name=name)

    def reverse(
        self,
        reference_code: str,
        reason: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> int:
        """Reverse a Completed transaction with a compensating transaction.

        The original row keeps its amount and moves to Reversed; a new
        Completed transaction moves the amount back. Fees are not refunded.

        Args:
            reference_code: Reference code of the transaction to reverse
            reason: Optional description for the compensating transaction
            timestamp: Time of the reversal; defaults to now (UTC)

        Returns:
            ID of the compensating transaction

        Raises:
            NotFoundError: Unknown reference code
            InvalidTransitionError: Transaction is not Completed
            InsufficientFundsError: Receiver no longer holds the amount
        """
        original = self.db.get_transaction_by_code(reference_code)
        if original is None:
            raise NotFoundError(transaction_not_found(reference_code))
        if not original.status.can_transition_to(TransactionStatus.REVERSED):
            raise InvalidTransitionError(
                invalid_transition(reference_code, original.status.value, TransactionStatus.REVERSED.value)
            )

        reversal_code = reversal_code_for(reference_code)
        when = timestamp or datetime.now(UTC).replace(tzinfo=None)
        description = reason or f"Reversal of {reference_code}"

        with self.locks.hold(original.sender_account_id, original.receiver_account_id):
            reversal_id = self.db.apply_reversal(
                original_id=original.id,
                reversal_code=reversal_code,
                timestamp=when,
                description=description,
            )

        self.audit.info(
            STAGE_REVERSE,
            f"Reversed {reference_code} as {reversal_code}",
            status="Reversed",
            reference_code=reference_code,
            transaction_id=reversal_id,
        )
        return reversal_id


def reversal_code_for(reference_code: str) -> str:
    """Reference code of the compensating transaction for ``reference_code``."""
    code = REVERSAL_PREFIX + reference_code
    if len(code) <= MAX_CODE_LENGTH:
        return code
    digest = hashlib.sha256(reference_code.encode("utf-8")).hexdigest()[:20].upper()
    return REVERSAL_PREFIX + digest
