"""Audit logging domain service."""

import logging
from datetime import datetime
from typing import Optional

from momoetl.database.base import Database
from momoetl.domain.entities import LogLevel, ProcessingLogEntry

logger = logging.getLogger("momoetl.audit")

# Pipeline stage names recorded in processing_logs.process_name
STAGE_PARSE = "parse_xml"
STAGE_NORMALIZE = "clean_normalize"
STAGE_CATEGORIZE = "categorize"
STAGE_LOAD = "load_db"
STAGE_BATCH = "batch"
STAGE_REVERSE = "reverse"

_PYTHON_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


class AuditLogger:
    """Append-only sink for pipeline decisions.

    Entries are written to the processing_logs table and mirrored to the
    ``momoetl.audit`` Python logger. Normal operation only appends; ``purge``
    is a maintenance operation invoked explicitly from the CLI.
    """

    def __init__(self, db: Database, batch_id: Optional[str] = None):
        """Initialize audit logger.

        Args:
            db: Database instance
            batch_id: Batch every entry written through this logger belongs to
        """
        self.db = db
        self.batch_id = batch_id

    def record(
        self,
        stage: str,
        level: LogLevel,
        message: str,
        status: Optional[str] = None,
        reference_code: Optional[str] = None,
        transaction_id: Optional[int] = None,
    ) -> int:
        """Append one entry.

        Args:
            stage: Pipeline stage name (e.g. STAGE_LOAD)
            level: Severity
            message: Human-readable message
            status: Short status label (Success, Failed, Duplicate, ...)
            reference_code: Reference code of the record concerned
            transaction_id: Stored transaction, when one exists

        Returns:
            Log entry ID
        """
        logger.log(
            _PYTHON_LEVELS[level],
            "[%s] %s%s",
            stage,
            f"{reference_code}: " if reference_code else "",
            message,
        )
        return self.db.append_log(
            log_level=level,
            message=message,
            process_name=stage,
            status=status,
            transaction_id=transaction_id,
            reference_code=reference_code,
            batch_id=self.batch_id,
        )

    def info(self, stage: str, message: str, **kwargs) -> int:
        """Append an INFO entry."""
        return self.record(stage, LogLevel.INFO, message, **kwargs)

    def warning(self, stage: str, message: str, **kwargs) -> int:
        """Append a WARNING entry."""
        return self.record(stage, LogLevel.WARNING, message, **kwargs)

    def error(self, stage: str, message: str, **kwargs) -> int:
        """Append an ERROR entry."""
        return self.record(stage, LogLevel.ERROR, message, **kwargs)

    def entries(
        self,
        batch_id: Optional[str] = None,
        level: Optional[LogLevel] = None,
        stage: Optional[str] = None,
        reference_code: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[ProcessingLogEntry]:
        """Query stored entries in write order."""
        return self.db.list_logs(
            batch_id=batch_id,
            log_level=level,
            process_name=stage,
            reference_code=reference_code,
            limit=limit,
        )

    def purge(self, before: datetime) -> int:
        """Delete entries older than ``before``. Maintenance only.

        Returns:
            Number of entries deleted
        """
        deleted = self.db.purge_logs(before)
        logger.info("Purged %d processing log entries older than %s", deleted, before.isoformat())
        return deleted
