"""
Platform wiring.

Builds the services together with the collaborators they share (record store,
asset ledger, holding store, clock). The API, scripts and tests all obtain their
services through build_platform().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from repositories.clock import Clock, SystemClock
from repositories.holdings import InMemoryHoldingStore
from repositories.ledger import InMemoryAssetLedger
from repositories.memory_store import InMemoryRecordStore
from repositories.policy_repository import PolicyRepository
from repositories.sale_repository import SaleRepository
from repositories.store import RecordStore
from services.policy_service import PolicyAdmin, PolicyEvaluator
from services.sale_service import SaleEngine


@dataclass(slots=True)
class Platform:
    store: RecordStore
    ledger: InMemoryAssetLedger
    holdings: InMemoryHoldingStore
    clock: Clock
    sales: SaleEngine
    policy_evaluator: PolicyEvaluator
    policy_admin: PolicyAdmin


def build_platform(
    store: Optional[RecordStore] = None,
    clock: Optional[Clock] = None,
    ledger: Optional[InMemoryAssetLedger] = None,
    holdings: Optional[InMemoryHoldingStore] = None,
) -> Platform:
    store = store if store is not None else InMemoryRecordStore()
    clock = clock if clock is not None else SystemClock()
    ledger = ledger if ledger is not None else InMemoryAssetLedger()
    holdings = holdings if holdings is not None else InMemoryHoldingStore()

    policies = PolicyRepository(store)

    return Platform(
        store=store,
        ledger=ledger,
        holdings=holdings,
        clock=clock,
        sales=SaleEngine(SaleRepository(store), ledger, clock),
        policy_evaluator=PolicyEvaluator(policies, holdings, clock),
        policy_admin=PolicyAdmin(policies),
    )


__all__ = ["Platform", "build_platform"]
