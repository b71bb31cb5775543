"""
Sale repository (persistence).

This module provides *only* persistence operations for the SaleConfig and
VaultRecord domain entities. It does not enforce business rules (caps, time
window, single sale per asset); it only stores and fetches records.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import asdict
from typing import Any, Mapping, Optional

from domain.sale import SaleConfig, VaultRecord
from repositories.store import RecordKey, RecordKind, RecordStore


def _row_to_sale(row: Mapping[str, Any]) -> SaleConfig:
    """Convert a stored payload into a SaleConfig."""

    return SaleConfig(
        creator=str(row["creator"]),
        asset=str(row["asset"]),
        soft_cap=int(row["soft_cap"]),
        hard_cap=int(row["hard_cap"]),
        start_time=int(row["start_time"]),
        end_time=int(row["end_time"]),
        vault_reference=str(row["vault_reference"]),
        price_per_unit=int(row["price_per_unit"]),
        total_raised=int(row.get("total_raised", 0)),
    )


def _row_to_vault(row: Mapping[str, Any]) -> VaultRecord:
    return VaultRecord(
        asset=str(row["asset"]),
        creator=str(row["creator"]),
        amount=int(row["amount"]),
    )


class SaleRepository:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def atomic(self) -> AbstractContextManager[None]:
        return self._store.atomic()

    def get_sale(self, asset: str) -> Optional[SaleConfig]:
        """
        Retrieve the sale configured for `asset`.

        Returns:
            SaleConfig or None if no sale exists
        """

        row = self._store.get(RecordKey.for_asset(RecordKind.SALE_CONFIG, asset))
        return _row_to_sale(row) if row is not None else None

    def save_sale(self, sale: SaleConfig) -> None:
        """Insert or replace the sale record for `sale.asset`."""

        self._store.put(RecordKey.for_asset(RecordKind.SALE_CONFIG, sale.asset), asdict(sale))

    def get_vault(self, asset: str) -> Optional[VaultRecord]:
        row = self._store.get(RecordKey.for_asset(RecordKind.VAULT, asset))
        return _row_to_vault(row) if row is not None else None

    def save_vault(self, vault: VaultRecord) -> None:
        self._store.put(RecordKey.for_asset(RecordKind.VAULT, vault.asset), asdict(vault))


__all__ = ["SaleRepository"]
