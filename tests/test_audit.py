"""Tests for the audit logger."""

import logging
from datetime import datetime, timedelta, UTC

from momoetl.domain.audit import STAGE_LOAD, STAGE_PARSE, AuditLogger
from momoetl.domain.entities import LogLevel


def test_record_and_query(temp_db, audit):
    """Test that entries are stored with their batch, stage and level."""
    audit.info(STAGE_PARSE, "Transaction parsed", status="Success", reference_code="REF-1")
    audit.error(STAGE_LOAD, "Insufficient funds", status="Failed", reference_code="REF-2")

    entries = audit.entries(batch_id="test-batch")
    assert [e.message for e in entries] == ["Transaction parsed", "Insufficient funds"]
    assert entries[0].log_level == LogLevel.INFO
    assert entries[0].process_name == STAGE_PARSE
    assert entries[1].status == "Failed"
    assert all(e.batch_id == "test-batch" for e in entries)

    assert [e.reference_code for e in audit.entries(level=LogLevel.ERROR)] == ["REF-2"]
    assert [e.message for e in audit.entries(stage=STAGE_PARSE)] == ["Transaction parsed"]
    assert len(audit.entries(limit=1)) == 1


def test_entries_across_batches(temp_db):
    """Test filtering by batch ID."""
    AuditLogger(temp_db, "batch-a").warning(STAGE_LOAD, "dup", status="Duplicate")
    AuditLogger(temp_db, "batch-b").info(STAGE_LOAD, "ok", status="Success")

    reader = AuditLogger(temp_db)
    assert [e.message for e in reader.entries(batch_id="batch-a")] == ["dup"]
    assert len(reader.entries()) == 2


def test_mirrors_python_logging(audit, caplog):
    """Test that entries are also emitted on the momoetl.audit logger."""
    with caplog.at_level(logging.WARNING, logger="momoetl.audit"):
        audit.warning(STAGE_LOAD, "Transaction 'X' already exists", reference_code="X")

    assert any(
        r.name == "momoetl.audit" and "already exists" in r.getMessage() for r in caplog.records
    )


def test_purge_is_explicit(temp_db, audit):
    """Test that purge only removes entries older than the cutoff."""
    audit.info(STAGE_LOAD, "one")
    audit.info(STAGE_LOAD, "two")
    now = datetime.now(UTC).replace(tzinfo=None)

    assert audit.purge(now - timedelta(days=1)) == 0
    assert len(audit.entries()) == 2

    assert audit.purge(now + timedelta(days=1)) == 2
    assert audit.entries() == []
