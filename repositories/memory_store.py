"""
In-memory record store.

Backs tests, scripts and the default API deployment. Writes are guarded by a
re-entrant lock; atomic() snapshots the map and restores it if the block raises.
"""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from repositories.store import Payload, RecordKey


class InMemoryRecordStore:
    def __init__(self) -> None:
        self._records: Dict[RecordKey, Payload] = {}
        self._lock = threading.RLock()

    def get(self, key: RecordKey) -> Optional[Payload]:
        with self._lock:
            record = self._records.get(key)
            return dict(record) if record is not None else None

    def put(self, key: RecordKey, record: Payload) -> None:
        with self._lock:
            self._records[key] = dict(record)

    def delete(self, key: RecordKey) -> bool:
        with self._lock:
            return self._records.pop(key, None) is not None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            snapshot = copy.deepcopy(self._records)
            try:
                yield
            except BaseException:
                self._records = snapshot
                raise

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["InMemoryRecordStore"]
