"""Batch pipeline domain service.

Runs one SMS export through parse, normalize, categorize and load:

- parse failures and normalization rejects go to the dead-letter sink and
  never stop the batch,
- records are split into groups that share no phone number; each group is
  loaded in input order and groups are loaded in parallel on a thread pool,
- once the batch timeout passes, records not yet started are Aborted,
- StoreUnavailableError stops the batch and propagates.
"""

import dataclasses
import json
import logging
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional, Union

from momoetl.config import Settings
from momoetl.database.base import Database
from momoetl.domain.audit import (
    AuditLogger,
    STAGE_BATCH,
    STAGE_CATEGORIZE,
    STAGE_LOAD,
    STAGE_NORMALIZE,
    STAGE_PARSE,
)
from momoetl.domain.categorizer import UNCATEGORIZED, Categorizer
from momoetl.domain.dead_letter import DeadLetterSink
from momoetl.domain.entities import (
    BatchSummary,
    Candidate,
    CategoryAssignment,
    LoadOutcome,
    LoadStatus,
    NormalizedRecord,
    ParseFailure,
)
from momoetl.domain.errors import StoreUnavailableError, ValidationError
from momoetl.domain.fees import FeePolicy
from momoetl.domain.loader import LedgerLoader
from momoetl.domain.locking import AccountLocks
from momoetl.domain.normalizer import Normalizer
from momoetl.domain.parser import ParseResult, SMSParser

logger = logging.getLogger(__name__)

# (input position, record, assignment)
WorkItem = tuple[int, NormalizedRecord, CategoryAssignment]


class Pipeline:
    """Orchestrates batch runs against one database."""

    def __init__(
        self,
        db: Database,
        settings: Optional[Settings] = None,
        parser: Optional[SMSParser] = None,
        normalizer: Optional[Normalizer] = None,
        categorizer: Optional[Categorizer] = None,
        fee_policy: Optional[FeePolicy] = None,
        locks: Optional[AccountLocks] = None,
    ):
        """Initialize pipeline.

        Args:
            db: Database instance
            settings: Runtime settings; defaults to Settings()
            parser: SMS parser
            normalizer: Normalizer; built from settings when omitted
            categorizer: Categorizer with the default rules when omitted
            fee_policy: Fee policy; percentage from settings when omitted
            locks: Account lock registry shared across batches
        """
        self.db = db
        self.settings = settings or Settings()
        self.parser = parser or SMSParser()
        self.normalizer = normalizer or Normalizer(
            default_currency=self.settings.default_currency,
            country_code=self.settings.country_code,
            timezone=self.settings.timezone,
        )
        self.categorizer = categorizer or Categorizer()
        self.fee_policy = fee_policy or FeePolicy(percentage=self.settings.fee_percent)
        self.locks = locks or AccountLocks()

    def run_file(self, path: Union[str, Path]) -> BatchSummary:
        """Process an SMS export file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            StoreUnavailableError: If the store cannot be reached
        """
        xml_path = Path(path)
        if not xml_path.exists():
            raise FileNotFoundError(f"SMS export not found: {path}")
        return self.run(self.parser.parse_file(xml_path), source=str(xml_path))

    def run_string(self, text: str, source: str = "<string>") -> BatchSummary:
        """Process SMS export text."""
        return self.run(self.parser.parse_string(text), source=source)

    def run(self, results: Iterable[ParseResult], source: str = "<stream>") -> BatchSummary:
        """Process parse results as one batch.

        Args:
            results: Candidates and parse failures in input order
            source: Name of the input, for the audit trail

        Returns:
            BatchSummary with per-status counts and per-record outcomes

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        batch_id = uuid.uuid4().hex
        started = time.monotonic()
        deadline = started + self.settings.batch_timeout if self.settings.batch_timeout is not None else None
        audit = AuditLogger(self.db, batch_id)
        sink = DeadLetterSink(self.settings.dead_letter_dir, batch_id)
        loader = LedgerLoader(self.db, fee_policy=self.fee_policy, audit=audit, locks=self.locks)

        audit.info(STAGE_BATCH, f"Batch started for {source}", status="Started")
        logger.info("Batch %s started for %s", batch_id, source)

        outcomes: dict[int, LoadOutcome] = {}
        ready: list[WorkItem] = []
        for position, result in enumerate(results):
            if isinstance(result, ParseFailure):
                outcomes[position] = self._reject_unparsed(result, audit, sink)
                continue
            item = self._prepare(position, result, audit, sink)
            if isinstance(item, LoadOutcome):
                outcomes[position] = item
            else:
                ready.append(item)

        outcomes.update(self._load(ready, loader, audit, deadline))
        ordered = tuple(outcomes[position] for position in sorted(outcomes))
        summary = _summarize(batch_id, ordered, sink.written_path())

        audit.info(
            STAGE_BATCH,
            f"Batch finished: {summary.completed} completed, {summary.failed} failed, "
            f"{summary.skipped} skipped, {summary.unparsed} unparsed, {summary.aborted} aborted",
            status="Finished",
        )
        logger.info("Batch %s finished in %.2fs", batch_id, time.monotonic() - started)
        return summary

    def _reject_unparsed(self, failure: ParseFailure, audit: AuditLogger, sink: DeadLetterSink) -> LoadOutcome:
        sink.write(failure.offset, STAGE_PARSE, failure.reason, failure.fragment)
        audit.error(STAGE_PARSE, f"Record {failure.offset}: {failure.reason}", status="Failed")
        return LoadOutcome("", LoadStatus.UNPARSED, message=failure.reason)

    def _prepare(
        self,
        position: int,
        candidate: Candidate,
        audit: AuditLogger,
        sink: DeadLetterSink,
    ) -> Union[WorkItem, LoadOutcome]:
        """Normalize and categorize one candidate, auditing each stage."""
        reference_code = candidate.reference_code
        audit.info(STAGE_PARSE, "Transaction parsed from XML source", status="Success", reference_code=reference_code)

        try:
            record = self.normalizer.normalize(candidate)
        except ValidationError as e:
            sink.write(candidate.offset, STAGE_NORMALIZE, str(e), _candidate_fragment(candidate))
            audit.error(STAGE_NORMALIZE, str(e), status="Failed", reference_code=reference_code)
            return LoadOutcome(reference_code, LoadStatus.FAILED, message=str(e))
        audit.info(STAGE_NORMALIZE, "Amount, date and phone numbers normalized", status="Success",
                   reference_code=reference_code)

        assignment = self.categorizer.categorize(record)
        if assignment.category == UNCATEGORIZED:
            audit.warning(STAGE_CATEGORIZE, "No categorization rule matched", status="Uncategorized",
                          reference_code=reference_code)
        else:
            audit.info(
                STAGE_CATEGORIZE,
                f"Categorized as {assignment.category} by rule '{assignment.rule_id}' "
                f"(confidence {assignment.confidence:.2f})",
                status="Success",
                reference_code=reference_code,
            )
        return position, record, assignment

    def _load(
        self,
        items: list[WorkItem],
        loader: LedgerLoader,
        audit: AuditLogger,
        deadline: Optional[float],
    ) -> dict[int, LoadOutcome]:
        groups = partition(items)
        cancelled = threading.Event()
        workers = max(1, self.settings.workers)

        if workers == 1 or len(groups) <= 1:
            results = {}
            for group in groups:
                results.update(self._load_group(group, loader, audit, deadline, cancelled, release=False))
            return results

        results = {}
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="momo-load") as executor:
            futures = [
                executor.submit(self._load_group, group, loader, audit, deadline, cancelled, True)
                for group in groups
            ]
            error: Optional[StoreUnavailableError] = None
            for future in futures:
                try:
                    results.update(future.result())
                except StoreUnavailableError as e:
                    cancelled.set()
                    if error is None:
                        error = e
        if error is not None:
            logger.critical("Batch stopped: %s", error)
            raise error
        return results

    def _load_group(
        self,
        group: list[WorkItem],
        loader: LedgerLoader,
        audit: AuditLogger,
        deadline: Optional[float],
        cancelled: threading.Event,
        release: bool,
    ) -> dict[int, LoadOutcome]:
        results = {}
        try:
            for position, record, assignment in group:
                if cancelled.is_set() or (deadline is not None and time.monotonic() >= deadline):
                    message = "Batch timeout reached before the record was loaded"
                    audit.warning(STAGE_LOAD, message, status="Aborted", reference_code=record.reference_code)
                    results[position] = LoadOutcome(record.reference_code, LoadStatus.ABORTED, message=message)
                    continue
                results[position] = loader.load(record, assignment)
        except StoreUnavailableError:
            cancelled.set()
            raise
        finally:
            if release:
                self.db.release_session()
        return results


def partition(items: list[WorkItem]) -> list[list[WorkItem]]:
    """Split work items into groups that share no phone number.

    Items keep their input order inside a group; groups are ordered by their
    first item.
    """
    parent: dict[str, str] = {}

    def find(phone: str) -> str:
        parent.setdefault(phone, phone)
        while parent[phone] != phone:
            parent[phone] = parent[parent[phone]]
            phone = parent[phone]
        return phone

    for _, record, _ in items:
        root_sender, root_receiver = find(record.sender_phone), find(record.receiver_phone)
        if root_sender != root_receiver:
            parent[root_receiver] = root_sender

    groups: dict[str, list[WorkItem]] = {}
    for item in items:
        groups.setdefault(find(item[1].sender_phone), []).append(item)
    return list(groups.values())


def _candidate_fragment(candidate: Candidate) -> str:
    fields = dataclasses.asdict(candidate)
    fields.pop("offset", None)
    return json.dumps({k: v for k, v in fields.items() if v is not None}, ensure_ascii=False)


def _summarize(batch_id: str, outcomes: tuple[LoadOutcome, ...], dead_letter_path: Optional[str]) -> BatchSummary:
    counts = {status: 0 for status in LoadStatus}
    for outcome in outcomes:
        counts[outcome.status] += 1
    return BatchSummary(
        batch_id=batch_id,
        completed=counts[LoadStatus.COMPLETED],
        failed=counts[LoadStatus.FAILED],
        skipped=counts[LoadStatus.SKIPPED],
        unparsed=counts[LoadStatus.UNPARSED],
        aborted=counts[LoadStatus.ABORTED],
        dead_letter_path=dead_letter_path,
        outcomes=outcomes,
    )
