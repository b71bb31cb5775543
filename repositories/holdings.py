"""
Holding store (external collaborator).

Answers "how many units of the gating asset does this wallet hold?" by reading
the raw holding account and decoding its amount field (see domain/holding.py
for the byte-offset contract).
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol, Tuple

from domain.errors import AccountMissing
from domain.holding import encode_token_account, read_token_amount


class HoldingStore(Protocol):
    def holding_balance(self, wallet: str, gating_asset: str) -> int:
        """Balance of `gating_asset` held by `wallet`; raises AccountMissing if no account."""
        ...


class InMemoryHoldingStore:
    """Raw holding-account data keyed by (wallet, gating_asset)."""

    def __init__(self) -> None:
        self._accounts: Dict[Tuple[str, str], bytes] = {}

    def put_account_data(self, wallet: str, gating_asset: str, data: bytes) -> None:
        self._accounts[(wallet, gating_asset)] = bytes(data)

    def set_holding(self, wallet: str, gating_asset: str, amount: int) -> None:
        self.put_account_data(
            wallet,
            gating_asset,
            encode_token_account(mint=gating_asset, owner=wallet, amount=amount),
        )

    def close_account(self, wallet: str, gating_asset: str) -> None:
        self._accounts.pop((wallet, gating_asset), None)

    def account_data(self, wallet: str, gating_asset: str) -> Optional[bytes]:
        return self._accounts.get((wallet, gating_asset))

    def holding_balance(self, wallet: str, gating_asset: str) -> int:
        data = self._accounts.get((wallet, gating_asset))
        if data is None:
            raise AccountMissing(f"No holding account for {wallet} / {gating_asset}")
        return read_token_amount(data)


__all__ = ["HoldingStore", "InMemoryHoldingStore"]
