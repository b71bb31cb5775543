"""
Record store abstraction (persistence).

Every persisted record is addressed by a RecordKey:
- (kind, asset) for per-asset records (sale config, vault, policy config)
- (kind, asset, wallet) for allow-list markers

Payloads are plain JSON-compatible dicts; converting them to and from domain
entities is the job of the typed repositories built on top of a store.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Protocol


class RecordKind(str, Enum):
    SALE_CONFIG = "sale_config"
    VAULT = "vault"
    POLICY_CONFIG = "policy_config"
    ALLOW_LIST_MARKER = "allow_list_marker"


@dataclass(frozen=True, slots=True)
class RecordKey:
    kind: RecordKind
    asset: str
    wallet: str = ""

    @staticmethod
    def for_asset(kind: RecordKind, asset: str) -> "RecordKey":
        return RecordKey(kind=kind, asset=asset)

    @staticmethod
    def for_wallet(kind: RecordKind, asset: str, wallet: str) -> "RecordKey":
        return RecordKey(kind=kind, asset=asset, wallet=wallet)


Payload = Dict[str, Any]


class RecordStore(Protocol):
    def get(self, key: RecordKey) -> Optional[Payload]:
        ...

    def put(self, key: RecordKey, record: Payload) -> None:
        ...

    def delete(self, key: RecordKey) -> bool:
        """Remove the record; returns False if nothing was stored under `key`."""
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Discard every write made inside the block if it raises."""
        ...


__all__ = ["Payload", "RecordKey", "RecordKind", "RecordStore"]
