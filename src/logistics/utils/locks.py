"""In-process keyed locks.

Serializes work per key (an entity id, a numbering day-bucket) inside one
process. Cross-process safety comes from the version checks and unique keys
on the persisted rows; these locks only keep threads of the same worker from
racing each other.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class KeyedLock:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield


entity_locks = KeyedLock()
bucket_locks = KeyedLock()
