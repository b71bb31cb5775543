"""
Tests for the HTTP surface in `api/`.

Covers contract rules:
- Domain errors map to status codes by kind (400/403/404/409) with {code, message} detail.
- A blocked transfer check is a normal 200 response with allowed = false.
- Request bodies reject amounts outside the unsigned 64-bit range.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_platform
from api.main import app
from domain.amounts import U64_MAX
from services.platform import Platform
from tests.conftest import ASSET, BUYER, CREATOR, DAY_START

OWNER = "owner-wallet"
GOVERNED = "governed-mint"
NFT = "membership-nft"


@pytest.fixture
def client(platform: Platform):
    app.dependency_overrides[get_platform] = lambda: platform
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_sale(client: TestClient, **overrides):
    body = {
        "creator": CREATOR,
        "asset": ASSET,
        "soft_cap": 500,
        "hard_cap": 1000,
        "start_time": DAY_START,
        "end_time": DAY_START + 3600,
        "price_per_unit": 10,
        "deposit_amount": 1000,
    }
    body.update(overrides)
    return client.post("/api/v1/sales", json=body)


def _fund(client: TestClient) -> None:
    client.post("/api/v1/ledger/assets/mint", json={"account": CREATOR, "asset": ASSET, "amount": 1000})
    client.post("/api/v1/ledger/native/fund", json={"wallet": BUYER, "amount": 100_000})


def _register_policy(client: TestClient):
    return client.post(
        "/api/v1/policies",
        json={
            "owner": OWNER,
            "asset": GOVERNED,
            "gating_asset": NFT,
            "open_minute": 540,
            "close_minute": 1020,
            "max_transfer_amount": 100,
            "min_transfer_amount": 10,
        },
    )


def _flags(client: TestClient, caller: str = OWNER, **flags: bool):
    body = {
        "caller": caller,
        "whitelist_enabled": False,
        "trading_time_enabled": False,
        "max_transfer_enabled": False,
        "nft_gated": False,
    }
    body.update(flags)
    return client.put(f"/api/v1/policies/{GOVERNED}/flags", json=body)


def _check(client: TestClient, amount: int = 50, minute: int = 600, wallet: str = "holder"):
    return client.post(
        "/api/v1/transfers/check",
        json={"asset": GOVERNED, "wallet": wallet, "amount": amount, "now": DAY_START + minute * 60},
    )


# ============================================================================
# Health
# ============================================================================

def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# ============================================================================
# Sales
# ============================================================================

def test_create_and_get_sale(client: TestClient) -> None:
    _fund(client)

    response = _create_sale(client)
    assert response.status_code == 201
    body = response.json()
    assert body["total_raised"] == 0
    assert body["phase"] == "active"
    assert body["vault_balance"] == 1000

    fetched = client.get(f"/api/v1/sales/{ASSET}")
    assert fetched.status_code == 200
    assert fetched.json()["hard_cap"] == 1000


def test_create_sale_validation_errors(client: TestClient) -> None:
    _fund(client)

    response = _create_sale(client, soft_cap=2000)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_CAP_RANGE"

    response = _create_sale(client, start_time=DAY_START - 100, end_time=DAY_START - 1)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "TIME_IN_PAST"


def test_create_sale_twice_conflicts(client: TestClient) -> None:
    _fund(client)
    assert _create_sale(client).status_code == 201

    response = _create_sale(client)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "SALE_ALREADY_EXISTS"


def test_get_unknown_sale_is_404(client: TestClient) -> None:
    response = client.get("/api/v1/sales/missing")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "SALE_NOT_FOUND"


def test_purchase_flow_and_hard_cap(client: TestClient) -> None:
    _fund(client)
    _create_sale(client)

    response = client.post(f"/api/v1/sales/{ASSET}/purchases", json={"buyer": BUYER, "amount": 600})
    assert response.status_code == 200
    assert response.json()["total_cost"] == 6000
    assert response.json()["total_raised"] == 600

    response = client.post(f"/api/v1/sales/{ASSET}/purchases", json={"buyer": BUYER, "amount": 500})
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "HARD_CAP_REACHED"

    response = client.post(f"/api/v1/sales/{ASSET}/purchases", json={"buyer": BUYER, "amount": 400})
    assert response.status_code == 200
    assert response.json()["total_raised"] == 1000

    balance = client.get(f"/api/v1/ledger/assets/{ASSET}/{BUYER}")
    assert balance.json()["balance"] == 1000
    assert client.get(f"/api/v1/ledger/native/{CREATOR}").json()["balance"] == 10_000


def test_purchase_outside_window(client: TestClient, clock) -> None:
    _fund(client)
    _create_sale(client)
    clock.advance(7200)

    response = client.post(f"/api/v1/sales/{ASSET}/purchases", json={"buyer": BUYER, "amount": 1})
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "SALE_NOT_ACTIVE"
    assert client.get(f"/api/v1/sales/{ASSET}").json()["phase"] == "ended"


def test_amount_outside_u64_rejected_by_schema(client: TestClient) -> None:
    response = client.post(f"/api/v1/sales/{ASSET}/purchases", json={"buyer": BUYER, "amount": U64_MAX + 1})

    assert response.status_code == 422


# ============================================================================
# Policies
# ============================================================================

def test_register_and_get_policy(client: TestClient) -> None:
    response = _register_policy(client)
    assert response.status_code == 201
    assert response.json()["whitelist_enabled"] is False

    assert _register_policy(client).status_code == 409
    assert client.get(f"/api/v1/policies/{GOVERNED}").json()["owner"] == OWNER
    assert client.get("/api/v1/policies/unknown").status_code == 404


def test_only_owner_updates_flags(client: TestClient) -> None:
    _register_policy(client)

    response = _flags(client, caller="intruder", whitelist_enabled=True)
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "UNAUTHORIZED"

    response = _flags(client, max_transfer_enabled=True)
    assert response.status_code == 200
    assert response.json()["max_transfer_enabled"] is True


def test_transfer_check_reports_blocked_transfers(client: TestClient) -> None:
    _register_policy(client)
    _flags(client, max_transfer_enabled=True, trading_time_enabled=True)

    assert _check(client).json() == {"allowed": True, "code": None, "message": None}

    response = _check(client, amount=101)
    assert response.status_code == 200
    assert response.json()["allowed"] is False
    assert response.json()["code"] == "EXCEEDS_MAX_TRANSFER"

    assert _check(client, minute=1200).json()["code"] == "TRADING_CLOSED"


def test_transfer_check_holding_gate(client: TestClient) -> None:
    _register_policy(client)
    _flags(client, nft_gated=True)

    assert _check(client).json()["code"] == "MISSING_REQUIRED_HOLDING"

    client.post("/api/v1/ledger/holdings", json={"wallet": "holder", "gating_asset": NFT, "amount": 1})
    assert _check(client).json()["allowed"] is True


def test_whitelist_grant_and_revoke(client: TestClient) -> None:
    _register_policy(client)
    _flags(client, whitelist_enabled=True)

    assert _check(client).json()["code"] == "NOT_WHITELISTED"

    response = client.post(
        f"/api/v1/policies/{GOVERNED}/whitelist",
        json={"caller": OWNER, "wallet": "holder"},
    )
    assert response.status_code == 201
    assert _check(client).json()["allowed"] is True

    forbidden = client.delete(f"/api/v1/policies/{GOVERNED}/whitelist/holder", params={"caller": "intruder"})
    assert forbidden.status_code == 403

    revoked = client.delete(f"/api/v1/policies/{GOVERNED}/whitelist/holder", params={"caller": OWNER})
    assert revoked.status_code == 200
    assert revoked.json()["whitelisted"] is False
    assert _check(client).json()["code"] == "NOT_WHITELISTED"

    missing = client.delete(f"/api/v1/policies/{GOVERNED}/whitelist/holder", params={"caller": OWNER})
    assert missing.status_code == 404


def test_transfer_check_unknown_policy(client: TestClient) -> None:
    response = _check(client)

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "POLICY_NOT_FOUND"
