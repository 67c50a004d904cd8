# backend/transactions/api.py
# Transaction API (payable QRIS)

from fastapi import APIRouter, Request

from gateways.config import CFG
from gateways.payload import int_field, read_payload, require_fields

from .synthesizer import create_transaction

router = APIRouter(tags=["Transactions"])


@router.post("/create-transaction")
async def create_transaction_endpoint(request: Request):
    """amount + static qr_string → dynamic QRIS transaction (fee included)"""
    data = await read_payload(request)
    require_fields(data, "amount", "qr_string")
    fee_percent = data.get("fee_percent")

    transaction = create_transaction(
        amount=int_field(data, "amount"),
        static_qr=str(data["qr_string"]).strip(),
        gateway=str(data.get("gateway") or "orderkuota").strip().lower(),
        fee_percent=CFG.DEFAULT_FEE_PERCENT if fee_percent in (None, "") else fee_percent
    )
    return {"success": True, "data": transaction.model_dump()}
