"""Tests for database mappers."""

from datetime import datetime, UTC
from decimal import Decimal

from momoetl.database.models import (
    Account as ORMAccount,
    Fee as ORMFee,
    Party as ORMParty,
    ProcessingLog as ORMProcessingLog,
    Tag as ORMTag,
    Transaction as ORMTransaction,
    TransactionTag as ORMTransactionTag,
)
from momoetl.database.mappers import (
    account_to_domain,
    fee_to_domain,
    log_entry_to_domain,
    party_to_domain,
    transaction_tag_to_domain,
    transaction_to_domain,
)
from momoetl.domain.entities import (
    AccountType,
    FeeType,
    LogLevel,
    Party,
    PartyType,
    Transaction,
    TransactionStatus,
)


class TestPartyMapper:
    """Tests for Party and Account mappers."""

    def test_party_to_domain(self):
        """Test converting ORM Party to domain Party."""
        now = datetime.now(UTC)
        orm_party = ORMParty(
            id=1,
            name="Mugisha Moses",
            party_type=PartyType.INDIVIDUAL,
            phone_number="+256701234567",
            national_id="CM-123456789",
            email="mugisha@example.com",
            created_at=now,
            updated_at=now,
        )
        party = party_to_domain(orm_party)

        assert isinstance(party, Party)
        assert party.id == 1
        assert party.party_type == PartyType.INDIVIDUAL
        assert party.phone_number == "+256701234567"
        assert party.updated_at == now

    def test_account_to_domain(self):
        orm_account = ORMAccount(
            id=3,
            party_id=1,
            account_type=AccountType.WALLET,
            currency="USD",
            current_balance=Decimal("5000.00"),
            is_active=True,
            created_at=datetime.now(UTC),
            updated_at=datetime.now(UTC),
        )
        account = account_to_domain(orm_account)

        assert account.party_id == 1
        assert account.account_type == AccountType.WALLET
        assert account.current_balance == Decimal("5000.00")
        assert account.is_active is True


class TestTransactionMapper:
    """Tests for Transaction, Fee and tag mappers."""

    def test_transaction_to_domain(self):
        """Test converting ORM Transaction to domain Transaction."""
        orm_transaction = ORMTransaction(
            id=10,
            transaction_code="TXN-001-2026-001",
            sender_account_id=1,
            receiver_account_id=2,
            category_id=1,
            amount=Decimal("500.00"),
            currency="USD",
            status=TransactionStatus.COMPLETED,
            transaction_timestamp=datetime(2026, 1, 20, 14, 30),
            description="Payment for services",
            created_at=datetime.now(UTC),
        )
        transaction = transaction_to_domain(orm_transaction)

        assert isinstance(transaction, Transaction)
        assert transaction.transaction_code == "TXN-001-2026-001"
        assert transaction.amount == Decimal("500.00")
        assert transaction.status == TransactionStatus.COMPLETED
        assert transaction.reversal_of_id is None

    def test_fee_to_domain(self):
        orm_fee = ORMFee(
            id=1,
            transaction_id=10,
            fee_amount=Decimal("5.00"),
            fee_type=FeeType.PERCENTAGE,
            fee_percentage=Decimal("1.000"),
            created_at=datetime.now(UTC),
        )
        fee = fee_to_domain(orm_fee)

        assert fee.fee_type == FeeType.PERCENTAGE
        assert fee.fee_percentage == Decimal("1.000")

    def test_transaction_tag_to_domain(self):
        assigned_at = datetime.now(UTC)
        orm_assignment = ORMTransactionTag(
            transaction_id=10,
            tag=ORMTag(id=1, name="verified"),
            assigned_by="system",
            assigned_at=assigned_at,
        )
        assignment = transaction_tag_to_domain(orm_assignment)

        assert assignment.tag_name == "verified"
        assert assignment.assigned_by == "system"
        assert assignment.assigned_at == assigned_at


def test_log_entry_to_domain():
    """Test converting ORM ProcessingLog to domain entry."""
    orm_log = ORMProcessingLog(
        id=1,
        transaction_id=None,
        log_level=LogLevel.WARNING,
        message="No categorization rule matched",
        log_timestamp=datetime.now(UTC),
        process_name="categorize",
        status="Uncategorized",
        reference_code="TXN-9",
        batch_id="abc",
    )
    entry = log_entry_to_domain(orm_log)

    assert entry.log_level == LogLevel.WARNING
    assert entry.process_name == "categorize"
    assert entry.batch_id == "abc"
