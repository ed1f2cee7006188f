"""Per-record mutual exclusion for reconciliation.

Two reconciliation attempts against the same record (webhook vs. return
channel, or a duplicated webhook delivery) must never both observe
``processed=False``. Callers hold the record's lock across the
read-check-mutate-commit sequence; the loser re-reads the record inside the
lock, sees the applied transition and exits as a no-op.

Locks are created on demand and dropped once no caller holds or waits for
them.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


def donation_key(donation_id: str) -> str:
    return f"donation:{donation_id}"


def recurring_key(recurring_donation_id: str) -> str:
    return f"recurring:{recurring_donation_id}"


class RecordGuard:
    """Reference-counted lock per record key."""

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._waiters: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._registry_lock:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._registry_lock:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]


_guard = RecordGuard()


def get_guard() -> RecordGuard:
    """Return the process-wide record guard."""
    return _guard
