# backend/gateways/api.py
# Provider gateway API (login, OTP token, mutations, withdraw, balance, deposits)

import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Type

import httpx
from fastapi import APIRouter, Depends, Request

from mutations import normalize

from .base import BaseGatewayClient
from .config import GatewaySettings, load_gateway_settings
from .credentials import LoginCredential, OtpCredential
from .errors import InvalidPayload, UnsupportedOperation
from .models import Direction, WithdrawDestination
from .payload import int_field, read_payload, require_fields
from .registry import get_gateway_class, list_gateways

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Gateways"])

DESTINATION_FIELDS = ("bank_code", "account_number", "account_name")


@lru_cache()
def get_settings() -> GatewaySettings:
    return load_gateway_settings()


def get_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport (None = real network); overridden in tests"""
    return None


def _gateway_code(data: Dict[str, Any], default: str = "orderkuota") -> str:
    return str(data.get("gateway") or default).strip().lower()


def _resolve(code: str, capability: str) -> Type[BaseGatewayClient]:
    """Client class for `code`, checked before any network client is built"""
    client_class = get_gateway_class(code)
    if not hasattr(client_class, capability) or (
        capability in BaseGatewayClient.__dict__ and not client_class.supports(capability)
    ):
        raise UnsupportedOperation(
            f"{client_class.name} does not support {capability}",
            gateway=client_class.code
        )
    return client_class


def _build(client_class, settings: GatewaySettings, transport) -> BaseGatewayClient:
    return client_class.from_settings(settings, transport=transport)


def _positive_amount(data: Dict[str, Any], gateway: str) -> int:
    amount = int_field(data, "amount", gateway=gateway)
    if amount < 1:
        raise InvalidPayload("amount must be a positive integer", gateway=gateway)
    return amount


def _destination(data: Dict[str, Any], gateway: str) -> Optional[WithdrawDestination]:
    if not any(str(data.get(f) or "").strip() for f in DESTINATION_FIELDS):
        return None
    fields = require_fields(data, *DESTINATION_FIELDS, gateway=gateway)
    return WithdrawDestination(
        **fields,
        email=data.get("email") or None,
        phone=data.get("phone") or None,
        note=data.get("note") or None
    )


# ── provider auth ──────────────────────────────────────────────────

@router.post("/login")
async def login(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    """Username + password → OTP dispatched by the provider"""
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data), "login")
    credential = LoginCredential.from_payload(data, gateway=client_class.code)

    async with _build(client_class, settings, transport) as client:
        pending = await client.login(credential)
    return {"success": True, **pending.model_dump(mode="json")}


@router.post("/get-token")
async def get_token(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    """OTP → long-lived token"""
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data), "exchange_token")
    credential = OtpCredential.from_payload(data, gateway=client_class.code)

    async with _build(client_class, settings, transport) as client:
        token = await client.exchange_token(credential.username, credential.otp)
    return {"success": True, **token.model_dump(mode="json")}


# ── mutations ──────────────────────────────────────────────────────

@router.post("/unified-mutations")
async def unified_mutations(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    """
    Provider mutation feed

    direction=in (default): canonical NormalizedMutation list
    direction=out: raw debit records (no canonical shape for outgoing money)
    """
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data), "list_mutations")
    code = client_class.code
    credential = client_class.credential_class.from_payload(data, gateway=code)

    try:
        direction = Direction(str(data.get("direction") or "in").strip().lower())
    except ValueError:
        raise InvalidPayload("direction must be 'in' or 'out'", gateway=code)

    async with _build(client_class, settings, transport) as client:
        batch = await client.list_mutations(credential, direction)

    if direction is Direction.OUT:
        return {"success": True, "gateway": code, "direction": "out", "records": batch.records}

    mutations = normalize(code, batch.records)
    logger.info("%s: %s incoming mutations normalized", code, len(mutations))
    return {
        "success": True,
        "gateway": code,
        "mutations": [m.model_dump(mode="json") for m in mutations]
    }


# ── money out / balance ────────────────────────────────────────────

@router.post("/withdraw")
async def withdraw(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data), "withdraw")
    code = client_class.code
    credential = client_class.credential_class.from_payload(data, gateway=code)
    amount = _positive_amount(data, code)
    destination = _destination(data, code)

    async with _build(client_class, settings, transport) as client:
        result = await client.withdraw(credential, amount, destination)
    return {"success": True, **result.model_dump(mode="json")}


@router.post("/balance")
async def balance(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data, default="atlantic"), "get_balance")
    credential = client_class.credential_class.from_payload(data, gateway=client_class.code)

    async with _build(client_class, settings, transport) as client:
        info = await client.get_balance(credential)
    return {"success": True, **info.model_dump(mode="json")}


# ── provider-side deposits (Atlantic, Pakasir) ──────────────────────

@router.post("/deposit")
async def create_deposit(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data, default="atlantic"), "create_deposit")
    code = client_class.code
    credential = client_class.credential_class.from_payload(data, gateway=code)
    reference = require_fields(data, "reff_id", gateway=code)["reff_id"]
    amount = _positive_amount(data, code)

    async with _build(client_class, settings, transport) as client:
        deposit = await client.create_deposit(
            credential, reference, amount, callback_url=data.get("callback_url") or None
        )
    return {"success": True, "deposit": deposit.model_dump(mode="json")}


@router.post("/deposit-status")
async def deposit_status(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    """Deposit status; a paid deposit also comes back as a NormalizedMutation"""
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data, default="atlantic"), "check_deposit")
    code = client_class.code
    credential = client_class.credential_class.from_payload(data, gateway=code)
    deposit_id = require_fields(data, "id", gateway=code)["id"]

    async with _build(client_class, settings, transport) as client:
        deposit = await client.check_deposit(credential, deposit_id)

    mutations = normalize(code, [deposit.raw])
    return {
        "success": True,
        "gateway": code,
        "deposit": deposit.model_dump(mode="json"),
        "mutations": [m.model_dump(mode="json") for m in mutations]
    }


@router.post("/deposit-instant")
async def deposit_instant(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data, default="atlantic"), "trigger_instant")
    code = client_class.code
    credential = client_class.credential_class.from_payload(data, gateway=code)
    deposit_id = require_fields(data, "id", gateway=code)["id"]

    async with _build(client_class, settings, transport) as client:
        result = await client.trigger_instant(credential, deposit_id)
    return {"success": True, "gateway": code, "data": result}


@router.post("/banks")
async def banks(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data, default="atlantic"), "list_banks")
    credential = client_class.credential_class.from_payload(data, gateway=client_class.code)

    async with _build(client_class, settings, transport) as client:
        bank_list = await client.list_banks(credential)
    return {"success": True, "banks": [b.model_dump() for b in bank_list]}


@router.post("/verify-account")
async def verify_account(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    transport=Depends(get_transport)
):
    data = await read_payload(request)
    client_class = _resolve(_gateway_code(data, default="atlantic"), "verify_account")
    code = client_class.code
    credential = client_class.credential_class.from_payload(data, gateway=code)
    fields = require_fields(data, "bank_code", "account_number", gateway=code)

    async with _build(client_class, settings, transport) as client:
        account = await client.verify_account(
            credential, fields["bank_code"], fields["account_number"]
        )
    return {"success": True, "account": account.model_dump()}


@router.get("/gateways")
async def gateways():
    """Registered gateways + capability sets"""
    return {"success": True, "gateways": list_gateways()}
