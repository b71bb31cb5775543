"""
FastAPI dependencies.

get_platform() builds the process-wide Platform once, choosing the record-store
backend from STORE_BACKEND. Tests replace it through app.dependency_overrides.
"""

from __future__ import annotations

from functools import lru_cache

from repositories.client import RECORDS_TABLE, STORE_BACKEND, get_supabase
from repositories.memory_store import InMemoryRecordStore
from repositories.store import RecordStore
from repositories.supabase_store import SupabaseRecordStore
from services.platform import Platform, build_platform


def _build_store() -> RecordStore:
    if STORE_BACKEND == "supabase":
        return SupabaseRecordStore(get_supabase(), table=RECORDS_TABLE)
    if STORE_BACKEND == "memory":
        return InMemoryRecordStore()
    raise RuntimeError(
        f"Unsupported STORE_BACKEND: {STORE_BACKEND!r}. Use 'memory' or 'supabase'."
    )


@lru_cache(maxsize=1)
def get_platform() -> Platform:
    return build_platform(store=_build_store())
