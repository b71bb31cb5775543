"""
Asset ledger (external collaborator).

The settlement engine depends only on the AssetLedger protocol: atomic native
and fungible-asset transfers plus balance reads. InMemoryAssetLedger is the
implementation used by tests, scripts and the default API deployment.

Token accounts are addressed by (account, asset). A transfer out of an account
must be signed by the account itself or by the delegate registered for it
(this is how the sale vault releases inventory).
"""

from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager, contextmanager
from typing import Dict, Iterator, Optional, Protocol, Tuple

from domain.amounts import checked_add, require_u64
from domain.errors import InsufficientBalance, Unauthorized

logger = logging.getLogger(__name__)


class AssetLedger(Protocol):
    def native_balance(self, wallet: str) -> int:
        ...

    def asset_balance(self, account: str, asset: str) -> int:
        ...

    def native_transfer(self, from_wallet: str, to_wallet: str, amount: int) -> None:
        ...

    def asset_transfer(
        self,
        from_account: str,
        asset: str,
        to_account: str,
        authority: str,
        amount: int,
    ) -> None:
        ...

    def open_escrow(self, account: str, asset: str, authority: str) -> None:
        """Create (or reuse) an escrow token account that `authority` may sign for."""
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Discard every transfer made inside the block if it raises."""
        ...


TokenAccountKey = Tuple[str, str]


class InMemoryAssetLedger:
    def __init__(self) -> None:
        self._native: Dict[str, int] = {}
        self._tokens: Dict[TokenAccountKey, int] = {}
        self._delegates: Dict[TokenAccountKey, str] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Setup helpers (airdrop / mint)
    # ------------------------------------------------------------------

    def fund_native(self, wallet: str, amount: int) -> int:
        require_u64("amount", amount)
        with self._lock:
            self._native[wallet] = checked_add(self._native.get(wallet, 0), amount)
            return self._native[wallet]

    def mint_to(self, account: str, asset: str, amount: int) -> int:
        require_u64("amount", amount)
        with self._lock:
            key = (account, asset)
            self._tokens[key] = checked_add(self._tokens.get(key, 0), amount)
            return self._tokens[key]

    def delegate_of(self, account: str, asset: str) -> Optional[str]:
        return self._delegates.get((account, asset))

    # ------------------------------------------------------------------
    # AssetLedger protocol
    # ------------------------------------------------------------------

    def open_escrow(self, account: str, asset: str, authority: str) -> None:
        with self._lock:
            existing = self._delegates.get((account, asset))
            if existing is not None and existing != authority:
                raise Unauthorized(f"{account} is already delegated to {existing}")
            self._delegates[(account, asset)] = authority
            self._tokens.setdefault((account, asset), 0)

    def native_balance(self, wallet: str) -> int:
        return self._native.get(wallet, 0)

    def asset_balance(self, account: str, asset: str) -> int:
        return self._tokens.get((account, asset), 0)

    def native_transfer(self, from_wallet: str, to_wallet: str, amount: int) -> None:
        require_u64("amount", amount)
        with self._lock:
            balance = self._native.get(from_wallet, 0)
            if balance < amount:
                raise InsufficientBalance(
                    f"{from_wallet} holds {balance} native units, {amount} required"
                )
            if from_wallet == to_wallet:
                return
            credited = checked_add(self._native.get(to_wallet, 0), amount)
            self._native[from_wallet] = balance - amount
            self._native[to_wallet] = credited
        logger.debug("native transfer %s -> %s: %d", from_wallet, to_wallet, amount)

    def asset_transfer(
        self,
        from_account: str,
        asset: str,
        to_account: str,
        authority: str,
        amount: int,
    ) -> None:
        require_u64("amount", amount)
        with self._lock:
            source = (from_account, asset)
            if authority != from_account and self._delegates.get(source) != authority:
                raise Unauthorized(f"{authority} cannot sign for {from_account}")

            balance = self._tokens.get(source, 0)
            if balance < amount:
                raise InsufficientBalance(
                    f"{from_account} holds {balance} units of {asset}, {amount} required"
                )
            destination = (to_account, asset)
            if destination == source:
                return
            credited = checked_add(self._tokens.get(destination, 0), amount)
            self._tokens[source] = balance - amount
            self._tokens[destination] = credited
        logger.debug("asset transfer %s -> %s: %d %s", from_account, to_account, amount, asset)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            native = dict(self._native)
            tokens = dict(self._tokens)
            delegates = dict(self._delegates)
            try:
                yield
            except BaseException:
                self._native = native
                self._tokens = tokens
                self._delegates = delegates
                raise


__all__ = ["AssetLedger", "InMemoryAssetLedger"]
