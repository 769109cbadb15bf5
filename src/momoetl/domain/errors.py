"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """A record field failed normalization."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DuplicateTransactionError(ConflictError):
    """A transaction with the same reference code is already stored."""

    def __init__(self, reference_code: str):
        self.reference_code = reference_code
        super().__init__(duplicate_transaction(reference_code))


class InsufficientFundsError(DomainError):
    """Sender balance cannot cover the amount plus fees."""

    def __init__(self, account_id: int, requested: Decimal, available: Decimal):
        self.account_id = account_id
        self.requested = requested
        self.available = available
        # Set by the loader when a Failed row is recorded for the audit trail
        self.transaction_id: Optional[int] = None
        super().__init__(
            f"Insufficient funds in account {account_id}: "
            f"requested {requested}, available {available}"
        )


class IntegrityViolation(DomainError):
    """Loading the record would break a data-model invariant."""


class InvalidTransitionError(DomainError):
    """Transaction status change not allowed by the lifecycle."""


class StoreUnavailableError(RuntimeError):
    """The store cannot be reached; fatal to the whole batch."""

    def __init__(self, message: str, original: Optional[BaseException] = None):
        self.original = original
        super().__init__(message)


def duplicate_transaction(reference_code: str) -> str:
    """Return message for a reference code that is already loaded."""
    return f"Transaction '{reference_code}' already exists"


def transaction_not_found(reference_code: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction '{reference_code}' not found"


def party_not_found(phone_number: str) -> str:
    """Return message for missing party by phone number."""
    return f"Party with phone number '{phone_number}' not found"


def category_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def same_account(reference_code: str, account_id: int) -> str:
    """Return message when sender and receiver resolve to the same account."""
    return (
        f"Transaction '{reference_code}' has the same sender and receiver "
        f"account ({account_id})"
    )


def invalid_transition(reference_code: str, current: str, target: str) -> str:
    """Return message for a disallowed status transition."""
    return f"Transaction '{reference_code}' cannot move from {current} to {target}"
