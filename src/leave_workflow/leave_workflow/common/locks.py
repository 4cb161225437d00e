from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator

from ..core.constants import LOCK_TIMEOUT_SECONDS
from ..core.exceptions import PersistenceFailure


class KeyedLocks:
    """One mutex per key, created on demand and dropped when nobody holds it.

    Keys that differ never contend with each other.
    """

    def __init__(self, *, timeout: float = LOCK_TIMEOUT_SECONDS):
        self._timeout = timeout
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._waiters: Dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1

        acquired = lock.acquire(timeout=self._timeout)
        try:
            if not acquired:
                raise PersistenceFailure(f"Timed out waiting for lock on {key!r}")
            yield
        finally:
            if acquired:
                lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]
