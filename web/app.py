"""Local-first FastAPI surface over an in-process launchpad."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from fees.distributor import FeeAuthorizationError, FeeWithdrawalError
from fees.models import FeeConfig, FeeConfigError
from graduation.coordinator import (
    AlreadyGraduatedError,
    GraduationError,
    NotGraduatedError,
    TradingStillOpenError,
)
from integrations.ledger import LedgerError
from launchpad.app import Launchpad
from launchpad.config import ConfigError
from pricing.curve import CurveInputError
from trading.guard import ReentrancyError
from trading.machine import (
    AdmissionDeniedError,
    AssetNotFoundError,
    InvalidPhaseError,
    TradingError,
    TradingPausedError,
    UnauthorizedError,
)

app = FastAPI(title="Launchpad", description="Bonding-curve launchpad simulator")

_LAUNCHPAD = Launchpad()


class FeeConfigInput(BaseModel):
    creator: int
    community: int
    buyback: int


class RegisterRequest(BaseModel):
    asset_id: str
    creator: Optional[str] = None
    target: Optional[str] = None
    fee_config: Optional[FeeConfigInput] = None
    dex_fee_config: Optional[FeeConfigInput] = None


class BuyRequest(BaseModel):
    buyer: str
    eth_in: str
    min_tokens_out: str = "0"


class SellRequest(BaseModel):
    seller: str
    amount: str
    min_eth_out: str = "0"


class SellsRequest(BaseModel):
    enabled: bool
    caller: str


class CallerRequest(BaseModel):
    caller: str


class WithdrawRequest(BaseModel):
    bucket: str
    recipient: str
    caller: str
    asset_id: Optional[str] = None


@app.middleware("http")
async def _local_only(request: Request, call_next):
    client = request.client
    if client is not None:
        host = client.host
        if host not in {"127.0.0.1", "::1", "testclient"}:
            return JSONResponse({"error": "Remote access disabled."}, status_code=403)
    return await call_next(request)


async def _handle_errors(request: Request, exc: Exception):
    return JSONResponse({"error": str(exc)}, status_code=400)


async def _handle_forbidden(request: Request, exc: Exception):
    return JSONResponse({"error": str(exc)}, status_code=403)


async def _handle_not_found(request: Request, exc: Exception):
    return JSONResponse({"error": str(exc)}, status_code=404)


async def _handle_conflict(request: Request, exc: Exception):
    return JSONResponse({"error": str(exc)}, status_code=409)


for _exc_class in (
    AdmissionDeniedError,
    ConfigError,
    CurveInputError,
    FeeConfigError,
    FeeWithdrawalError,
    GraduationError,
    LedgerError,
    TradingError,
    ValueError,
):
    app.add_exception_handler(_exc_class, _handle_errors)

for _exc_class in (FeeAuthorizationError, UnauthorizedError, PermissionError):
    app.add_exception_handler(_exc_class, _handle_forbidden)

app.add_exception_handler(AssetNotFoundError, _handle_not_found)

for _exc_class in (
    AlreadyGraduatedError,
    InvalidPhaseError,
    NotGraduatedError,
    ReentrancyError,
    TradingPausedError,
    TradingStillOpenError,
):
    app.add_exception_handler(_exc_class, _handle_conflict)


@app.post("/api/assets")
async def register_asset(payload: RegisterRequest):
    state = _LAUNCHPAD.register(
        payload.asset_id,
        payload.creator,
        target=_parse_wei(payload.target, "target") if payload.target else None,
        fee_config=_build_fee_config(payload.fee_config),
        dex_fee_config=_build_fee_config(payload.dex_fee_config),
    )
    return _state_to_dict(state)


@app.post("/api/assets/{asset_id}/initialize")
async def initialize_asset(asset_id: str):
    return _state_to_dict(_LAUNCHPAD.initialize(asset_id))


@app.post("/api/assets/{asset_id}/buy")
async def buy(asset_id: str, payload: BuyRequest):
    receipt = _LAUNCHPAD.buy(
        asset_id,
        payload.buyer,
        _parse_wei(payload.eth_in, "eth_in"),
        _parse_wei(payload.min_tokens_out, "min_tokens_out"),
    )
    return receipt.to_dict()


@app.post("/api/assets/{asset_id}/sell")
async def sell(asset_id: str, payload: SellRequest):
    receipt = _LAUNCHPAD.sell(
        asset_id,
        payload.seller,
        _parse_wei(payload.amount, "amount"),
        _parse_wei(payload.min_eth_out, "min_eth_out"),
    )
    return receipt.to_dict()


@app.post("/api/assets/{asset_id}/sells")
async def set_sells(asset_id: str, payload: SellsRequest):
    state = _LAUNCHPAD.set_sells_enabled(asset_id, payload.enabled, payload.caller)
    return {"asset_id": state.asset_id, "sells_enabled": state.sells_enabled}


@app.post("/api/assets/{asset_id}/close")
async def close_asset(asset_id: str, payload: CallerRequest):
    state = _LAUNCHPAD.close(asset_id, payload.caller)
    return {"asset_id": state.asset_id, "phase": state.phase.value}


@app.post("/api/assets/{asset_id}/graduate")
async def graduate(asset_id: str):
    return _LAUNCHPAD.graduate(asset_id).to_dict()


@app.post("/api/assets/{asset_id}/collect-fees")
async def collect_fees(asset_id: str):
    return _LAUNCHPAD.collect_fees(asset_id).to_dict()


@app.post("/api/creators/{creator}/claim")
async def claim(creator: str):
    amount = _LAUNCHPAD.claim_creator_rewards(creator)
    return {"creator": creator, "claimed": str(amount)}


@app.post("/api/fees/withdraw")
async def withdraw(payload: WithdrawRequest):
    if payload.bucket == "buyback":
        if not payload.asset_id:
            raise ValueError("asset_id is required when withdrawing buyback fees.")
        amount = _LAUNCHPAD.withdraw_buyback(payload.asset_id, payload.recipient, payload.caller)
    else:
        amount = _LAUNCHPAD.withdraw_fees(payload.bucket, payload.recipient, payload.caller)
    return {"bucket": payload.bucket, "recipient": payload.recipient, "amount": str(amount)}


@app.get("/api/assets/{asset_id}/price")
async def price(asset_id: str):
    return {"asset_id": asset_id, "price": str(_LAUNCHPAD.price(asset_id))}


@app.get("/api/assets/{asset_id}/stats")
async def stats(asset_id: str):
    return _LAUNCHPAD.stats(asset_id).to_dict()


@app.get("/api/assets/{asset_id}/quote/buy")
async def quote_buy(asset_id: str, eth_in: str, buyer: Optional[str] = None):
    return _LAUNCHPAD.quote_buy(asset_id, _parse_wei(eth_in, "eth_in"), buyer).to_dict()


@app.get("/api/assets/{asset_id}/quote/sell")
async def quote_sell(asset_id: str, amount: str):
    return _LAUNCHPAD.quote_sell(asset_id, _parse_wei(amount, "amount")).to_dict()


@app.get("/api/fees")
async def fee_ledger():
    return _stringify(_LAUNCHPAD.fee_ledger().to_dict())


@app.get("/api/notices")
async def notices(asset_id: Optional[str] = None):
    return {"notices": [notice.to_dict() for notice in _LAUNCHPAD.notices(asset_id)]}


def _parse_wei(value: str, label: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise ValueError(f"{label} must be a non-negative integer amount of base units.")
    return int(value)


def _build_fee_config(payload: Optional[FeeConfigInput]) -> Optional[FeeConfig]:
    if payload is None:
        return None
    return FeeConfig(creator=payload.creator, community=payload.community, buyback=payload.buyback)


def _state_to_dict(state) -> dict:
    data = _stringify(state.to_dict())
    data["phase"] = state.phase.value
    return data


def _stringify(data: dict) -> dict:
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = _stringify(value)
        elif isinstance(value, int) and not isinstance(value, bool):
            result[key] = str(value)
        else:
            result[key] = value
    return result


def _reset_state(launchpad: Optional[Launchpad] = None) -> None:
    global _LAUNCHPAD
    _LAUNCHPAD = launchpad or Launchpad()
