"""Transaction tagging domain service."""

import re
from typing import Optional

from momoetl.database.base import Database
from momoetl.domain.entities import Transaction, TransactionTag
from momoetl.domain.errors import NotFoundError, ValidationError, transaction_not_found

MAX_TAG_LENGTH = 50
_TAG_NAME = re.compile(r"^[a-z0-9][a-z0-9\-_]*$")


class TagService:
    """Service for attaching free-form tags to stored transactions."""

    def __init__(self, db: Database):
        """Initialize tag service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_tag(self, reference_code: str, tag_name: str, assigned_by: Optional[str] = None) -> None:
        """Tag a transaction.

        Args:
            reference_code: Reference code of the transaction
            tag_name: Tag name (lower-cased; letters, digits, '-' and '_')
            assigned_by: Who assigned the tag (e.g. "system", "admin")

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If the tag name is invalid
            ConflictError: If the transaction already carries the tag
        """
        transaction = self._get_transaction(reference_code)
        self.db.add_tag(transaction.id, normalize_tag(tag_name), assigned_by=assigned_by)

    def remove_tag(self, reference_code: str, tag_name: str) -> bool:
        """Remove a tag from a transaction.

        Returns:
            True if the tag was attached and has been removed
        """
        transaction = self._get_transaction(reference_code)
        return self.db.remove_tag(transaction.id, normalize_tag(tag_name))

    def list_tags(self, reference_code: str) -> list[TransactionTag]:
        """List the tags of a transaction, ordered by name."""
        transaction = self._get_transaction(reference_code)
        return self.db.list_transaction_tags(transaction.id)

    def transactions_with_tag(self, tag_name: str) -> list[Transaction]:
        """List transactions carrying a tag."""
        return self.db.list_transactions_by_tag(normalize_tag(tag_name))

    def _get_transaction(self, reference_code: str) -> Transaction:
        transaction = self.db.get_transaction_by_code(reference_code)
        if transaction is None:
            raise NotFoundError(transaction_not_found(reference_code))
        return transaction


def normalize_tag(tag_name: str) -> str:
    """Lower-case and validate a tag name.

    Raises:
        ValidationError: If the name is empty, too long or has other characters
    """
    name = (tag_name or "").strip().lower()
    if not name:
        raise ValidationError("tag", "tag name must not be empty")
    if len(name) > MAX_TAG_LENGTH:
        raise ValidationError("tag", f"tag name longer than {MAX_TAG_LENGTH} characters")
    if not _TAG_NAME.match(name):
        raise ValidationError("tag", f"'{tag_name}' may only contain letters, digits, '-' and '_'")
    return name
