"""
Policy repository (persistence).

Stores PolicyConfig records and presence-only allow-list markers. Ownership
checks live in the policy service; this module only reads and writes.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import asdict
from typing import Any, Mapping, Optional

from domain.policy import AllowListMarker, PolicyConfig
from repositories.store import RecordKey, RecordKind, RecordStore


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _row_to_policy(row: Mapping[str, Any]) -> PolicyConfig:
    """Convert a stored payload into a PolicyConfig."""

    return PolicyConfig(
        owner=str(row["owner"]),
        asset=str(row["asset"]),
        gating_asset=str(row["gating_asset"]),
        whitelist_enabled=bool(row.get("whitelist_enabled", False)),
        trading_time_enabled=bool(row.get("trading_time_enabled", False)),
        max_transfer_enabled=bool(row.get("max_transfer_enabled", False)),
        nft_gated=bool(row.get("nft_gated", False)),
        open_minute=_optional_int(row.get("open_minute")),
        close_minute=_optional_int(row.get("close_minute")),
        max_transfer_amount=int(row.get("max_transfer_amount", 0)),
        min_transfer_amount=int(row.get("min_transfer_amount", 0)),
    )


def _marker_key(asset: str, wallet: str) -> RecordKey:
    return RecordKey.for_wallet(RecordKind.ALLOW_LIST_MARKER, asset, wallet)


class PolicyRepository:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def atomic(self) -> AbstractContextManager[None]:
        return self._store.atomic()

    def get_policy(self, asset: str) -> Optional[PolicyConfig]:
        row = self._store.get(RecordKey.for_asset(RecordKind.POLICY_CONFIG, asset))
        return _row_to_policy(row) if row is not None else None

    def save_policy(self, policy: PolicyConfig) -> None:
        self._store.put(RecordKey.for_asset(RecordKind.POLICY_CONFIG, policy.asset), asdict(policy))

    def has_marker(self, asset: str, wallet: str) -> bool:
        """Allow-list membership lookup for the exact (asset, wallet) pair."""

        return self._store.get(_marker_key(asset, wallet)) is not None

    def add_marker(self, marker: AllowListMarker) -> None:
        # Existence is the payload; nothing else is stored.
        self._store.put(_marker_key(marker.asset, marker.wallet), {})

    def remove_marker(self, asset: str, wallet: str) -> bool:
        return self._store.delete(_marker_key(asset, wallet))


__all__ = ["PolicyRepository"]
