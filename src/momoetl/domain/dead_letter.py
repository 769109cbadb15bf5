"""Dead-letter sink for raw records the pipeline could not use."""

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


class DeadLetterSink:
    """Appends rejected fragments to ``<directory>/<batch_id>.jsonl``.

    One JSON object per line: batch_id, offset, stage, reason, fragment. The
    file is only created once the first entry is written.
    """

    def __init__(self, directory: Union[str, Path], batch_id: str):
        """Initialize dead-letter sink.

        Args:
            directory: Directory holding one file per batch
            batch_id: Batch whose entries this sink writes
        """
        self.directory = Path(directory).expanduser()
        self.batch_id = batch_id
        self.count = 0
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """File the batch's entries are written to."""
        return self.directory / f"{self.batch_id}.jsonl"

    def write(self, offset: int, stage: str, reason: str, fragment: Optional[str]) -> None:
        """Append one entry.

        Args:
            offset: Zero-based position of the record in the input
            stage: Stage that rejected it (parse_xml, clean_normalize)
            reason: Why it was rejected
            fragment: Raw text of the record
        """
        entry = {
            "batch_id": self.batch_id,
            "offset": offset,
            "stage": stage,
            "reason": reason,
            "fragment": fragment or "",
        }
        with self._lock:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
            self.count += 1
        logger.debug("Dead-lettered record %d of batch %s at %s", offset, self.batch_id, stage)

    def written_path(self) -> Optional[str]:
        """Path of the file if any entry was written, else None."""
        return str(self.path) if self.count else None


def read_dead_letters(path: Union[str, Path]) -> list[dict]:
    """Read every entry of a dead-letter file."""
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]
