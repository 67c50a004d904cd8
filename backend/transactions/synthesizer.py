# backend/transactions/synthesizer.py
# Payable QRIS transaction: fee + ID + dynamic QR + expiry stamp

import re
import secrets
import string
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation, ROUND_CEILING
from typing import Optional, Union
from urllib.parse import quote

from pydantic import BaseModel

from gateways.config import CFG
from qris import InvalidAmount, make_dynamic

logger = logging.getLogger(__name__)

SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_PREFIX = "QRIS"


class SynthesizedTransaction(BaseModel):
    transaction_id: str
    amount: int
    fee: int
    total_amount: int
    qr_string: str
    image_url: str
    status: str = "unpaid"
    type: str
    gateway: str
    created_at: str
    expires_at: str


def gateway_prefix(gateway: str) -> str:
    """'atlantic_fast' → 'ATLANTICFAST'"""
    return re.sub(r"[^A-Z]", "", (gateway or "").upper()) or DEFAULT_PREFIX


def calculate_fee(amount: int, fee_percent: Union[int, float, str, Decimal]) -> int:
    """ceil(amount * fee_percent / 100), decimal exact"""
    try:
        percent = Decimal(str(fee_percent).strip())
    except InvalidOperation:
        percent = Decimal("NaN")
    if not percent.is_finite() or percent < 0:
        raise InvalidAmount(f"fee_percent must be a non-negative number, got {fee_percent!r}")
    fee = Decimal(amount) * percent / Decimal(100)
    return int(fee.to_integral_value(rounding=ROUND_CEILING))


def generate_transaction_id(gateway: str, now: Optional[datetime] = None) -> str:
    """{GATEWAY}-{yyyyMMddHHmmss UTC}-{6 × A-Z0-9}"""
    now = _utc(now)
    suffix = "".join(
        secrets.choice(SUFFIX_ALPHABET) for _ in range(CFG.TRANSACTION_SUFFIX_LENGTH)
    )
    return f"{gateway_prefix(gateway)}-{now.strftime('%Y%m%d%H%M%S')}-{suffix}"


def _utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def create_transaction(
    amount: int,
    static_qr: str,
    gateway: str = "orderkuota",
    fee_percent: Union[int, float, str, Decimal] = CFG.DEFAULT_FEE_PERCENT,
    now: Optional[datetime] = None
) -> SynthesizedTransaction:
    """
    Static QRIS + amount → payable transaction

    The QR is bound to amount + fee. Codec errors propagate unchanged;
    expires_at is only stamped, never enforced here.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
        raise InvalidAmount(f"Amount must be a positive integer, got {amount!r}")

    created_at = _utc(now)
    fee = calculate_fee(amount, fee_percent)
    total = amount + fee

    qr = make_dynamic(static_qr, total)
    transaction_id = generate_transaction_id(gateway, created_at)
    expires_at = created_at + timedelta(minutes=CFG.TRANSACTION_TTL_MINUTES)

    logger.info(
        "Transaction %s created amount=%s fee=%s total=%s",
        transaction_id, amount, fee, total
    )
    return SynthesizedTransaction(
        transaction_id=transaction_id,
        amount=amount,
        fee=fee,
        total_amount=total,
        qr_string=qr.qr_string,
        image_url=CFG.QR_IMAGE_URL.format(data=quote(qr.qr_string, safe="")),
        type=f"{gateway_prefix(gateway)}_QRIS",
        gateway=gateway,
        created_at=created_at.isoformat(),
        expires_at=expires_at.isoformat()
    )
