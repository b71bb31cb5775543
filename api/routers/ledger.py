"""
Ledger API Endpoints (development only).

Funding helpers for the in-memory asset ledger and holding store, so sales and
policies can be exercised end to end without a chain. NEVER expose these in
production.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_platform
from api.errors import to_http_exception
from api.models import BalanceResponse, FundNativeRequest, HoldingRequest, MintRequest
from domain.errors import TokenPlatformError
from services.platform import Platform

router = APIRouter()


@router.post("/ledger/native/fund", response_model=BalanceResponse, summary="Airdrop Native Units")
def fund_native(request: FundNativeRequest, platform: Platform = Depends(get_platform)):
    try:
        balance = platform.ledger.fund_native(request.wallet, request.amount)
        return BalanceResponse(account=request.wallet, balance=balance)
    except TokenPlatformError as e:
        raise to_http_exception(e)


@router.post("/ledger/assets/mint", response_model=BalanceResponse, summary="Mint Tokens")
def mint_tokens(request: MintRequest, platform: Platform = Depends(get_platform)):
    try:
        balance = platform.ledger.mint_to(request.account, request.asset, request.amount)
        return BalanceResponse(account=request.account, asset=request.asset, balance=balance)
    except TokenPlatformError as e:
        raise to_http_exception(e)


@router.post("/ledger/holdings", response_model=BalanceResponse, summary="Set Gating Holding")
def set_holding(request: HoldingRequest, platform: Platform = Depends(get_platform)):
    try:
        platform.holdings.set_holding(request.wallet, request.gating_asset, request.amount)
        return BalanceResponse(account=request.wallet, asset=request.gating_asset, balance=request.amount)
    except TokenPlatformError as e:
        raise to_http_exception(e)


@router.get("/ledger/native/{wallet}", response_model=BalanceResponse, summary="Native Balance")
def native_balance(wallet: str, platform: Platform = Depends(get_platform)):
    return BalanceResponse(account=wallet, balance=platform.ledger.native_balance(wallet))


@router.get("/ledger/assets/{asset}/{account}", response_model=BalanceResponse, summary="Token Balance")
def asset_balance(asset: str, account: str, platform: Platform = Depends(get_platform)):
    return BalanceResponse(account=account, asset=asset, balance=platform.ledger.asset_balance(account, asset))
