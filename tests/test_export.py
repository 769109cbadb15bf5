"""Tests for the JSON snapshot export."""

import json
from decimal import Decimal

import pytest

from momoetl.domain.export import ExportService


@pytest.fixture
def export_service(temp_db):
    return ExportService(temp_db)


def test_empty_snapshot(export_service):
    """Test that an empty ledger still yields every report."""
    snapshot = export_service.build_snapshot()

    assert set(snapshot) == {"generated_at", "reports"}
    assert snapshot["reports"] == {
        "totals": [],
        "by_category": [],
        "by_status": [],
        "by_day": [],
        "accounts": [],
    }


def test_snapshot_after_sample_run(export_service, pipeline, sample_parties, fixtures_dir):
    """Test aggregates over the sample export."""
    pipeline.run_file(fixtures_dir / "sample_sms.xml")

    reports = export_service.build_snapshot()["reports"]

    assert reports["totals"] == [
        {
            "currency": "USD",
            "transaction_count": 4,
            "completed_count": 4,
            "completed_amount": "1800.00",
            "reversed_amount": "0.00",
            "total_fees": "18.00",
        }
    ]
    assert reports["by_status"] == [
        {"status": "Completed", "currency": "USD", "transaction_count": 4, "amount": "1800.00"}
    ]
    assert [(row["date"], row["transaction_count"]) for row in reports["by_day"]] == [
        ("2026-01-20", 1),
        ("2026-01-21", 2),
        ("2026-01-24", 1),
    ]
    airtime = next(row for row in reports["by_category"] if row["category"] == "Airtime Purchase")
    assert airtime["completed_amount"] == "50.00"

    accounts = {row["party_name"]: row for row in reports["accounts"]}
    assert len(accounts) == 5
    assert accounts["Mugisha Moses"]["current_balance"] == "4745.00"
    assert accounts["Mugisha Moses"]["party_type"] == "Individual"
    assert accounts["Mobile Agent Kampala"]["total_transactions"] == 1


def test_reversal_kept_out_of_completed_amounts(export_service, pipeline, loader, sample_parties, fixtures_dir):
    """Test that a compensating reversal is reported apart from completed value."""
    pipeline.run_file(fixtures_dir / "sample_sms.xml")
    loader.reverse("TXN-001-2026-001", reason="Customer dispute")

    reports = export_service.build_snapshot()["reports"]

    assert reports["totals"] == [
        {
            "currency": "USD",
            "transaction_count": 5,
            "completed_count": 3,
            "completed_amount": "1300.00",
            "reversed_amount": "500.00",
            "total_fees": "18.00",
        }
    ]
    assert sum(row["transaction_count"] for row in reports["by_category"]) == 5
    assert sum(Decimal(row["completed_amount"]) for row in reports["by_category"]) == Decimal("1300.00")
    assert sum(Decimal(row["completed_amount"]) for row in reports["by_day"]) == Decimal("1300.00")
    statuses = {row["status"]: row for row in reports["by_status"]}
    assert statuses["Reversed"]["amount"] == "500.00"
    assert statuses["Completed"]["transaction_count"] == 4


def test_write_replaces_file(export_service, pipeline, sample_parties, fixtures_dir, tmp_path):
    """Test that each write regenerates the snapshot file."""
    target = tmp_path / "out" / "snapshot.json"
    export_service.write(target)
    first = json.loads(target.read_text(encoding="utf-8"))
    assert first["reports"]["totals"] == []

    pipeline.run_file(fixtures_dir / "sample_sms.xml")
    export_service.write(target)

    second = json.loads(target.read_text(encoding="utf-8"))
    assert second["reports"]["totals"][0]["transaction_count"] == 4
    assert not (tmp_path / "out" / "snapshot.json.tmp").exists()
