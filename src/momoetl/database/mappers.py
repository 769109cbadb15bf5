"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic so the ledger services depend only
on the frozen dataclasses in ``momoetl.domain.entities``.
"""

from momoetl.domain import entities as domain
from momoetl.database.models import (
    Party as ORMParty,
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    Fee as ORMFee,
    ProcessingLog as ORMProcessingLog,
    Tag as ORMTag,
    TransactionTag as ORMTransactionTag,
)


def party_to_domain(orm_party: ORMParty) -> domain.Party:
    """Convert SQLAlchemy Party model to domain Party entity."""
    return domain.Party(
        id=orm_party.id,
        name=orm_party.name,
        party_type=domain.PartyType(orm_party.party_type),
        phone_number=orm_party.phone_number,
        national_id=orm_party.national_id,
        email=orm_party.email,
        created_at=orm_party.created_at,
        updated_at=orm_party.updated_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        party_id=orm_account.party_id,
        account_type=domain.AccountType(orm_account.account_type),
        currency=orm_account.currency,
        current_balance=orm_account.current_balance,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        description=orm_category.description,
        is_active=orm_category.is_active,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        transaction_code=orm_transaction.transaction_code,
        sender_account_id=orm_transaction.sender_account_id,
        receiver_account_id=orm_transaction.receiver_account_id,
        category_id=orm_transaction.category_id,
        amount=orm_transaction.amount,
        currency=orm_transaction.currency,
        status=domain.TransactionStatus(orm_transaction.status),
        transaction_timestamp=orm_transaction.transaction_timestamp,
        description=orm_transaction.description,
        created_at=orm_transaction.created_at,
        reversal_of_id=orm_transaction.reversal_of_id,
    )


def fee_to_domain(orm_fee: ORMFee) -> domain.Fee:
    """Convert SQLAlchemy Fee model to domain Fee entity."""
    return domain.Fee(
        id=orm_fee.id,
        transaction_id=orm_fee.transaction_id,
        fee_amount=orm_fee.fee_amount,
        fee_type=domain.FeeType(orm_fee.fee_type),
        fee_percentage=orm_fee.fee_percentage,
        created_at=orm_fee.created_at,
    )


def log_entry_to_domain(orm_log: ORMProcessingLog) -> domain.ProcessingLogEntry:
    """Convert SQLAlchemy ProcessingLog model to domain ProcessingLogEntry."""
    return domain.ProcessingLogEntry(
        id=orm_log.id,
        transaction_id=orm_log.transaction_id,
        log_level=domain.LogLevel(orm_log.log_level),
        message=orm_log.message,
        log_timestamp=orm_log.log_timestamp,
        process_name=orm_log.process_name,
        status=orm_log.status,
        reference_code=orm_log.reference_code,
        batch_id=orm_log.batch_id,
    )


def tag_to_domain(orm_tag: ORMTag) -> domain.Tag:
    """Convert SQLAlchemy Tag model to domain Tag entity."""
    return domain.Tag(id=orm_tag.id, name=orm_tag.name)


def transaction_tag_to_domain(orm_assignment: ORMTransactionTag) -> domain.TransactionTag:
    """Convert SQLAlchemy TransactionTag model to domain TransactionTag entity."""
    return domain.TransactionTag(
        transaction_id=orm_assignment.transaction_id,
        tag_name=orm_assignment.tag.name,
        assigned_by=orm_assignment.assigned_by,
        assigned_at=orm_assignment.assigned_at,
    )
