"""JSON snapshot export for dashboard consumers."""

import json
import logging
import os
from collections import defaultdict
from datetime import datetime, UTC
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

from momoetl.database.base import Database
from momoetl.domain.entities import TransactionStatus

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class ExportService:
    """Builds aggregate reports from the read views and writes them as JSON."""

    def __init__(self, db: Database):
        """Initialize export service.

        Args:
            db: Database instance
        """
        self.db = db

    def build_snapshot(self) -> dict[str, Any]:
        """Build the snapshot.

        Returns:
            Dict with ``generated_at`` and ``reports``: totals, by_category,
            by_status, by_day and accounts, each a list of flat rows. Decimals
            are strings, timestamps ISO 8601. Completed sums leave out
            compensating reversal transactions; totals report them as
            reversed_amount.
        """
        transactions = self.db.get_transaction_summary()
        fees = self.db.fee_totals()

        return {
            "generated_at": datetime.now(UTC).isoformat(),
            "reports": {
                "totals": _totals(transactions, fees),
                "by_category": _by_category(transactions),
                "by_status": _by_status(transactions),
                "by_day": _by_day(transactions),
                "accounts": [_serialize_row(row) for row in self.db.get_account_summary()],
            },
        }

    def write(self, path: Union[str, Path]) -> dict[str, Any]:
        """Regenerate the snapshot file, replacing any previous one.

        Args:
            path: Output JSON file

        Returns:
            The snapshot that was written
        """
        target = Path(path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        snapshot = self.build_snapshot()

        tmp_path = target.with_name(target.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_path, target)
        logger.info("Wrote export snapshot to %s", target)
        return snapshot


def _totals(transactions: list[dict], fees: dict[int, Decimal]) -> list[dict[str, Any]]:
    rows: dict[str, dict[str, Any]] = {}
    for txn in transactions:
        row = rows.setdefault(
            txn["currency"],
            {
                "currency": txn["currency"],
                "transaction_count": 0,
                "completed_count": 0,
                "completed_amount": ZERO,
                "reversed_amount": ZERO,
                "total_fees": ZERO,
            },
        )
        row["transaction_count"] += 1
        row["total_fees"] += fees.get(txn["transaction_id"], ZERO)
        if _is_reversal(txn):
            row["reversed_amount"] += txn["amount"]
        elif txn["status"] == TransactionStatus.COMPLETED:
            row["completed_count"] += 1
            row["completed_amount"] += txn["amount"]
    return [_serialize_row(rows[currency]) for currency in sorted(rows)]


def _by_category(transactions: list[dict]) -> list[dict[str, Any]]:
    counts: dict[tuple[str, str], int] = defaultdict(int)
    amounts: dict[tuple[str, str], Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        key = (txn["category_name"], txn["currency"])
        counts[key] += 1
        if _counts_as_completed(txn):
            amounts[key] += txn["amount"]
    return [
        _serialize_row(
            {"category": category, "currency": currency, "transaction_count": counts[(category, currency)],
             "completed_amount": amounts[(category, currency)]}
        )
        for category, currency in sorted(counts)
    ]


def _by_status(transactions: list[dict]) -> list[dict[str, Any]]:
    counts: dict[tuple[str, str], int] = defaultdict(int)
    amounts: dict[tuple[str, str], Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        key = (txn["status"].value, txn["currency"])
        counts[key] += 1
        amounts[key] += txn["amount"]
    return [
        _serialize_row(
            {"status": status, "currency": currency, "transaction_count": counts[(status, currency)],
             "amount": amounts[(status, currency)]}
        )
        for status, currency in sorted(counts)
    ]


def _by_day(transactions: list[dict]) -> list[dict[str, Any]]:
    counts: dict[tuple[str, str], int] = defaultdict(int)
    amounts: dict[tuple[str, str], Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        key = (txn["transaction_timestamp"].date().isoformat(), txn["currency"])
        counts[key] += 1
        if _counts_as_completed(txn):
            amounts[key] += txn["amount"]
    return [
        _serialize_row(
            {"date": day, "currency": currency, "transaction_count": counts[(day, currency)],
             "completed_amount": amounts[(day, currency)]}
        )
        for day, currency in sorted(counts)
    ]


def _is_reversal(txn: dict) -> bool:
    return txn.get("reversal_of_id") is not None


def _counts_as_completed(txn: dict) -> bool:
    return txn["status"] == TransactionStatus.COMPLETED and not _is_reversal(txn)


def _serialize_row(row: dict[str, Any]) -> dict[str, Any]:
    return {key: _serialize_value(value) for key, value in row.items()}


def _serialize_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value.quantize(Decimal("0.01")))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value
