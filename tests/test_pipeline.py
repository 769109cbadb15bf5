"""Tests for batch pipeline runs."""

import json
import pytest
from datetime import datetime
from decimal import Decimal

from conftest import balance_of
from momoetl.domain.dead_letter import read_dead_letters
from momoetl.domain.entities import CategoryAssignment, LoadStatus, NormalizedRecord, TransactionStatus
from momoetl.domain.errors import StoreUnavailableError
from momoetl.domain.pipeline import Pipeline, partition

MOSES = "+256701234567"
LISA = "+256702345678"
TECHHUB = "+256703456789"
AGENT = "+256704567890"
CHRIS = "+256705678901"


def sms(ref, sender, receiver, amount, date="2026-01-20 14:30:00", body="Sent money", **extra):
    attrs = " ".join(f'{key}="{value}"' for key, value in extra.items())
    ref_attr = f'ref="{ref}" ' if ref else ""
    return (
        f'<sms {ref_attr}sender="{sender}" receiver="{receiver}" amount="{amount}" '
        f'date="{date}" {attrs}>{body}</sms>'
    )


def export(*records):
    return "<smses>" + "".join(records) + "</smses>"


class TestSampleExport:
    """End-to-end runs over the sample export."""

    def test_process_sample(self, temp_db, pipeline, sample_parties, fixtures_dir):
        """Test counts, balances and categories after one run."""
        summary = pipeline.run_file(fixtures_dir / "sample_sms.xml")

        assert summary.completed == 4
        assert summary.failed == 1
        assert summary.skipped == 0
        assert summary.unparsed == 0
        assert summary.aborted == 0
        assert summary.total == 5
        assert [o.status for o in summary.outcomes] == [
            LoadStatus.COMPLETED,
            LoadStatus.COMPLETED,
            LoadStatus.COMPLETED,
            LoadStatus.COMPLETED,
            LoadStatus.FAILED,
        ]

        assert balance_of(temp_db, MOSES) == Decimal("4745.00")
        assert balance_of(temp_db, LISA) == Decimal("3748.00")
        assert balance_of(temp_db, TECHHUB) == Decimal("14040.00")
        assert balance_of(temp_db, AGENT) == Decimal("9200.25")
        assert balance_of(temp_db, CHRIS) == Decimal("2700.25")

        airtime = temp_db.get_transaction_by_code("73214484437")
        assert temp_db.get_category(airtime.category_id).name == "Airtime Purchase"
        assert temp_db.get_transaction_by_code("TXN-BAD-AMOUNT") is None

    def test_rerun_is_idempotent(self, temp_db, pipeline, sample_parties, fixtures_dir):
        """Test that re-submitting a batch changes no balance."""
        pipeline.run_file(fixtures_dir / "sample_sms.xml")
        balances = {phone: balance_of(temp_db, phone) for phone in sample_parties}

        summary = pipeline.run_file(fixtures_dir / "sample_sms.xml")

        assert summary.completed == 0
        assert summary.skipped == 4
        assert summary.failed == 1
        assert {phone: balance_of(temp_db, phone) for phone in sample_parties} == balances
        assert len(temp_db.list_transactions()) == 4

    def test_rejected_record_dead_lettered(self, pipeline, sample_parties, fixtures_dir):
        """Test that the negative amount is written to the dead-letter file."""
        summary = pipeline.run_file(fixtures_dir / "sample_sms.xml")

        assert summary.dead_letter_path is not None
        [entry] = read_dead_letters(summary.dead_letter_path)
        assert entry["batch_id"] == summary.batch_id
        assert entry["offset"] == 4
        assert entry["stage"] == "clean_normalize"
        assert "amount" in entry["reason"]
        assert json.loads(entry["fragment"])["reference_code"] == "TXN-BAD-AMOUNT"

    def test_audit_trail(self, temp_db, pipeline, sample_parties, fixtures_dir):
        """Test that each stage of a record is logged under the batch ID."""
        summary = pipeline.run_file(fixtures_dir / "sample_sms.xml")

        entries = temp_db.list_logs(batch_id=summary.batch_id)
        assert entries[0].process_name == "batch"
        assert entries[0].status == "Started"
        assert entries[-1].process_name == "batch"
        assert entries[-1].status == "Finished"

        stages = [e.process_name for e in temp_db.list_logs(reference_code="TXN-001-2026-001")]
        assert stages == ["parse_xml", "clean_normalize", "categorize", "load_db"]

        [rejected] = temp_db.list_logs(reference_code="TXN-BAD-AMOUNT", process_name="clean_normalize")
        assert rejected.reference_code == "TXN-BAD-AMOUNT"
        assert rejected.status == "Failed"


class TestRecordHandling:
    """Per-record pipeline behavior."""

    def test_malformed_record_is_unparsed(self, temp_db, pipeline, sample_parties):
        """Test that a broken fragment is counted and dead-lettered."""
        text = export(
            sms("OK-1", MOSES, LISA, "10"),
            '<sms ref="BROKEN" sender="x" amount="1 & 2">oops</sms>',
        )
        summary = pipeline.run_string(text)

        assert summary.completed == 1
        assert summary.unparsed == 1
        [entry] = read_dead_letters(summary.dead_letter_path)
        assert entry["stage"] == "parse_xml"
        assert entry["offset"] == 1
        assert "BROKEN" in entry["fragment"]

    def test_no_dead_letter_file_when_clean(self, pipeline, sample_parties):
        """Test that a clean batch creates no dead-letter file."""
        summary = pipeline.run_string(export(sms("OK-1", MOSES, LISA, "10")))

        assert summary.dead_letter_path is None
        assert summary.completed == 1

    def test_uncategorized_warning(self, temp_db, pipeline, sample_parties):
        """Test that a record no rule matches is loaded as Uncategorized with a warning."""
        summary = pipeline.run_string(export(sms("ODD-1", MOSES, LISA, "10", body="hello")))

        assert summary.completed == 1
        txn = temp_db.get_transaction_by_code("ODD-1")
        assert temp_db.get_category(txn.category_id).name == "Uncategorized"
        [entry] = temp_db.list_logs(reference_code="ODD-1", process_name="categorize")
        assert entry.log_level.value == "WARNING"

    def test_insufficient_funds_in_batch(self, temp_db, pipeline, sample_parties):
        """Test that one failing transfer does not stop the others."""
        text = export(
            sms("BIG-1", CHRIS, LISA, "9000"),
            sms("SMALL-1", CHRIS, LISA, "100"),
        )
        summary = pipeline.run_string(text)

        assert summary.failed == 1
        assert summary.completed == 1
        assert temp_db.get_transaction_by_code("BIG-1").status == TransactionStatus.FAILED
        assert balance_of(temp_db, CHRIS) == Decimal("2649.75")

    def test_out_of_range_amount_fails_only_its_record(self, temp_db, pipeline, sample_parties):
        """Test that an amount too large for the ledger is rejected without stopping the batch."""
        text = export(
            sms("HUGE-1", MOSES, LISA, "1e30"),
            sms("WIDE-1", MOSES, LISA, "12345678901234567.89"),
            sms("OK-1", MOSES, LISA, "10.00"),
        )
        summary = pipeline.run_string(text)

        assert summary.failed == 2
        assert summary.completed == 1
        assert temp_db.get_transaction_by_code("HUGE-1") is None
        assert temp_db.get_transaction_by_code("OK-1").status == TransactionStatus.COMPLETED
        entries = read_dead_letters(summary.dead_letter_path)
        assert [json.loads(entry["fragment"])["reference_code"] for entry in entries] == ["HUGE-1", "WIDE-1"]
        assert all("amount" in entry["reason"] for entry in entries)

    def test_duplicate_reference_within_batch(self, temp_db, pipeline, sample_parties):
        """Test that a repeated reference code in one batch loads once."""
        text = export(sms("DUP-1", MOSES, LISA, "10"), sms("DUP-1", MOSES, LISA, "10"))
        summary = pipeline.run_string(text)

        assert summary.completed == 1
        assert summary.skipped == 1
        assert balance_of(temp_db, MOSES) == Decimal("4989.90")

    def test_batch_timeout_aborts_pending_records(self, temp_db, sample_parties, settings):
        """Test that records not started before the deadline are Aborted."""
        pipeline = Pipeline(temp_db, settings=settings.with_overrides(batch_timeout=0.0))
        summary = pipeline.run_string(export(sms("T-1", MOSES, LISA, "10"), sms("T-2", CHRIS, AGENT, "10")))

        assert summary.aborted == 2
        assert summary.completed == 0
        assert temp_db.list_transactions() == []
        assert balance_of(temp_db, MOSES) == Decimal("5000.00")

    def test_store_unavailable_stops_batch(self, temp_db, pipeline, sample_parties, monkeypatch):
        """Test that a store outage propagates instead of failing records one by one."""

        def unavailable(*args, **kwargs):
            raise StoreUnavailableError("Store unavailable: disk I/O error")

        monkeypatch.setattr(temp_db, "apply_transfer", unavailable)

        with pytest.raises(StoreUnavailableError):
            pipeline.run_string(export(sms("S-1", MOSES, LISA, "10"), sms("S-2", MOSES, LISA, "20")))

    def test_settings_drive_normalization(self, temp_db, sample_parties, settings):
        """Test that currency and fee settings reach the normalizer and fee policy."""
        pipeline = Pipeline(temp_db, settings=settings.with_overrides(fee_percent=Decimal("2")))
        pipeline.run_string(export(sms("FEE-1", MOSES, LISA, "100")))

        assert balance_of(temp_db, MOSES) == Decimal("4898.00")


class TestConcurrency:
    """Parallel loading keeps balances consistent."""

    def test_parallel_matches_expected_balances(self, temp_db, party_service, settings):
        """Test a four-worker batch over independent and chained transfers."""
        phones = [f"+2567100000{i:02d}" for i in range(8)]
        for i, phone in enumerate(phones):
            party_service.register_party(f"Party {i}", phone, opening_balance=Decimal("10000.00"))

        expected = {phone: Decimal("10000.00") for phone in phones}
        records = []
        for n in range(40):
            # Pairs (0,1), (2,3), (4,5) stay independent; 6 and 7 also trade with pair (4,5)
            sender = phones[(n * 2) % 8]
            receiver = phones[(n * 2 + 1) % 8] if n % 5 else phones[(n * 2 + 3) % 8]
            amount = Decimal(10 + n)
            expected[sender] -= amount + (amount / 100).quantize(Decimal("0.01"))
            expected[receiver] += amount
            records.append(sms(f"PAR-{n:03d}", sender, receiver, str(amount)))

        pipeline = Pipeline(temp_db, settings=settings.with_overrides(workers=4))
        summary = pipeline.run_string(export(*records))

        assert summary.completed == 40
        assert [o.reference_code for o in summary.outcomes] == [f"PAR-{n:03d}" for n in range(40)]
        for phone in phones:
            assert balance_of(temp_db, phone) == expected[phone]

    def test_parallel_rerun_is_idempotent(self, temp_db, sample_parties, settings, fixtures_dir):
        parallel = Pipeline(temp_db, settings=settings.with_overrides(workers=4))
        parallel.run_file(fixtures_dir / "sample_sms.xml")
        summary = parallel.run_file(fixtures_dir / "sample_sms.xml")

        assert summary.skipped == 4
        assert balance_of(temp_db, MOSES) == Decimal("4745.00")


def test_partition_groups_by_shared_phone():
    """Test that records sharing any phone number land in one group, in order."""

    def item(position, sender, receiver):
        record = NormalizedRecord(
            reference_code=f"R{position}",
            sender_phone=sender,
            receiver_phone=receiver,
            amount=Decimal("1"),
            currency="USD",
            timestamp=datetime(2026, 1, 1),
            description="",
        )
        return position, record, CategoryAssignment("Money Transfer", "transfer-keyword", 0.8)

    items = [item(0, "A", "B"), item(1, "C", "D"), item(2, "B", "E"), item(3, "F", "G"), item(4, "E", "C")]
    groups = partition(items)

    assert [[position for position, _, _ in group] for group in groups] == [[0, 1, 2, 4], [3]]
