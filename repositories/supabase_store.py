"""
Supabase record store (persistence).

Stores every record kind in a single table:

    records(kind text, asset text, wallet text, payload jsonb, updated_at_utc timestamptz)
    unique (kind, asset, wallet)

Per-asset records use wallet = "" so the unique constraint covers them too.

PostgREST offers no multi-statement transaction, so atomic() stages writes in
memory and flushes them only when the block completes without raising. Reads
inside the block see the staged writes. A store-level re-entrant lock is held
for the whole block and taken by get/put/delete, so another thread can neither
write into the staging buffer nor read uncommitted records.

The flush sends one request per staged record, in staging order. If the
backend rejects a request mid-flush, the records flushed before it stay
written. Callers stage the record that other records depend on last
(create_sale writes VaultRecord before SaleConfig), so a partial flush leaves
at most an orphan vault row, which the next create_sale for that asset
overwrites.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional

from repositories.store import Payload, RecordKey

_DELETED = object()


def _key_filter(key: RecordKey) -> dict[str, str]:
    return {"kind": key.kind.value, "asset": key.asset, "wallet": key.wallet}


class SupabaseRecordStore:
    def __init__(self, client: Any, table: str = "records") -> None:
        self._client = client
        self._table = table
        self._staged: Optional[Dict[RecordKey, Any]] = None
        self._lock = threading.RLock()

    def _query(self, builder: Any, key: RecordKey) -> Any:
        for column, value in _key_filter(key).items():
            builder = builder.eq(column, value)
        return builder

    def _fetch(self, key: RecordKey) -> Optional[Payload]:
        response = self._query(self._client.table(self._table).select("*"), key).limit(1).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to fetch record: {error}")

        rows: List[Mapping[str, Any]] = getattr(response, "data", None) or []
        if not rows:
            return None
        return dict(rows[0]["payload"])

    def _upsert(self, key: RecordKey, record: Payload) -> None:
        row: dict[str, Any] = {
            **_key_filter(key),
            "payload": dict(record),
            "updated_at_utc": datetime.now(timezone.utc).isoformat(),
        }
        response = (
            self._client.table(self._table)
            .upsert(row, on_conflict="kind,asset,wallet")
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to store record: {error}")

    def _remove(self, key: RecordKey) -> bool:
        response = self._query(self._client.table(self._table).delete(), key).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete record: {error}")
        return bool(getattr(response, "data", None))

    def get(self, key: RecordKey) -> Optional[Payload]:
        with self._lock:
            if self._staged is not None and key in self._staged:
                staged = self._staged[key]
                return None if staged is _DELETED else dict(staged)
            return self._fetch(key)

    def put(self, key: RecordKey, record: Payload) -> None:
        with self._lock:
            if self._staged is not None:
                self._staged[key] = dict(record)
                return
            self._upsert(key, record)

    def delete(self, key: RecordKey) -> bool:
        with self._lock:
            if self._staged is not None:
                existed = self.get(key) is not None
                self._staged[key] = _DELETED
                return existed
            return self._remove(key)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            if self._staged is not None:
                # Nested block: the outermost one owns the flush.
                yield
                return

            self._staged = {}
            try:
                yield
                staged, self._staged = self._staged, None
                for key, record in staged.items():
                    if record is _DELETED:
                        self._remove(key)
                    else:
                        self._upsert(key, record)
            finally:
                self._staged = None


__all__ = ["SupabaseRecordStore"]
