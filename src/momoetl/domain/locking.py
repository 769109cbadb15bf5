"""Per-account mutual exclusion for balance updates."""

import threading
from contextlib import contextmanager
from typing import Iterator


class AccountLocks:
    """Registry of one lock per account ID.

    ``hold`` acquires every requested lock in ascending ID order, so two
    transfers between the same accounts in opposite directions cannot
    deadlock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, account_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[account_id] = lock
            return lock

    @contextmanager
    def hold(self, *account_ids: int) -> Iterator[None]:
        """Hold the locks for the given accounts for the duration of the block."""
        ordered = [self._lock_for(account_id) for account_id in sorted(set(account_ids))]
        acquired = []
        try:
            for lock in ordered:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
