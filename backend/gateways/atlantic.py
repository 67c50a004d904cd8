# backend/gateways/atlantic.py
# Atlantic H2H client (deposits, balance, bank transfer)

import logging
import secrets
import string
from typing import Any, Dict, List, Optional

import httpx

from .base import BaseGatewayClient
from .config import AtlanticSettings
from .credentials import AtlanticCredential
from .errors import MissingCredential
from .models import (
    AccountInfo,
    BalanceInfo,
    BankInfo,
    DepositInfo,
    WithdrawDestination,
    WithdrawResult
)

logger = logging.getLogger(__name__)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def local_phone(phone: str) -> str:
    """62xxx → 0xxx"""
    if phone.startswith("62"):
        return "0" + phone[2:]
    return phone


class AtlanticClient(BaseGatewayClient):
    """
    Atlantic Pedia H2H

    Form-encoded POSTs with api_key in the body. With a proxy configured the
    body goes to the proxy and the target path travels as `endpoint`.
    """

    code = "atlantic"
    name = "Atlantic Pedia"
    credential_class = AtlanticCredential

    METHOD = "qris"

    def __init__(
        self,
        settings: Optional[AtlanticSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or AtlanticSettings()
        super().__init__(timeout=self.settings.timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings, transport=None):
        return cls(settings=settings.atlantic, transport=transport)

    @staticmethod
    def _ok(payload: Dict[str, Any]) -> bool:
        # status arrives as either a bool or the string "true"
        return payload.get("status") in (True, "true")

    async def _post(
        self,
        endpoint: str,
        credential: AtlanticCredential,
        data: Dict[str, Any],
        default_error: str
    ) -> Any:
        body = {k: v for k, v in data.items() if v is not None}
        body["api_key"] = credential.api_key

        if self.settings.proxy_url:
            body["endpoint"] = endpoint
            url = self.settings.proxy_url
        else:
            url = f"{self.settings.base_url}{endpoint}"

        response = await self._request("POST", url, label=endpoint, data=body)
        payload = self._decode(response)
        if not self._ok(payload):
            raise self._rejected(response, payload, default_error)
        return payload.get("data")

    # ── capability set ──────────────────────────────────────────────

    async def get_balance(self, credential: AtlanticCredential) -> BalanceInfo:
        data = await self._post("/get_profile", credential, {}, "Failed to get profile")
        data = data if isinstance(data, dict) else {}

        pending = data.get("settlement_balance", data.get("pending_balance"))
        return BalanceInfo(
            gateway=self.code,
            balance=_to_int(data.get("balance")),
            pending_balance=_to_int(pending) if pending is not None else None,
            raw=data
        )

    async def withdraw(
        self,
        credential: AtlanticCredential,
        amount: int,
        destination: Optional[WithdrawDestination] = None
    ) -> WithdrawResult:
        """Bank transfer; destination is required"""
        if destination is None:
            raise MissingCredential("Withdrawal destination is required", gateway=self.code)

        reference = "WD-" + "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(12))
        logger.info(
            "Atlantic withdraw ref=%s bank=%s amount=%s",
            reference, destination.bank_code, amount
        )
        data = await self._post("/transfer/create", credential, {
            "ref_id": reference,
            "kode_bank": destination.bank_code.upper(),
            "nomor_akun": destination.account_number,
            "nama_pemilik": destination.account_name,
            "nominal": str(amount),
            "email": destination.email,
            "phone": local_phone(destination.phone) if destination.phone else None,
            "note": destination.note
        }, "Withdrawal failed")
        data = data if isinstance(data, dict) else {}

        return WithdrawResult(
            gateway=self.code,
            amount=amount,
            reference=str(data.get("id") or reference),
            status=str(data.get("status") or "pending"),
            raw=data
        )

    # ── deposits ───────────────────────────────────────────────────

    def _deposit(self, data: Dict[str, Any], fallback_id: str = "") -> DepositInfo:
        return DepositInfo(
            gateway=self.code,
            deposit_id=str(data.get("id") or fallback_id),
            reference=data.get("reff_id"),
            amount=_to_int(data.get("nominal")),
            status=str(data.get("status") or "pending").lower(),
            qr_string=data.get("qr_string"),
            expires_at=data.get("expired_at"),
            raw=data
        )

    async def create_deposit(
        self,
        credential: AtlanticCredential,
        reference: str,
        amount: int,
        callback_url: Optional[str] = None
    ) -> DepositInfo:
        """Provider-generated QRIS for one order"""
        data = await self._post("/deposit/create", credential, {
            "reff_id": reference,
            "nominal": amount,
            "type": "ewallet",
            "metode": self.METHOD,
            "callback_url": callback_url
        }, "Failed to create QRIS payment")
        return self._deposit(data if isinstance(data, dict) else {})

    async def check_deposit(self, credential: AtlanticCredential, deposit_id: str) -> DepositInfo:
        data = await self._post(
            "/deposit/status", credential, {"id": deposit_id}, "Failed to check status"
        )
        return self._deposit(data if isinstance(data, dict) else {}, fallback_id=deposit_id)

    async def trigger_instant(self, credential: AtlanticCredential, deposit_id: str) -> Dict[str, Any]:
        """Settle a 'processing' deposit immediately (Cair Instant)"""
        data = await self._post(
            "/deposit/instant",
            credential,
            {"id": deposit_id, "action": "true"},
            "Failed to trigger instant"
        )
        return data if isinstance(data, dict) else {}

    # ── bank helpers ───────────────────────────────────────────────

    async def list_banks(self, credential: AtlanticCredential) -> List[BankInfo]:
        data = await self._post("/transfer/bank_list", credential, {}, "Failed to get bank list")
        return [
            BankInfo(
                code=str(bank.get("bank_code") or bank.get("code") or ""),
                name=str(bank.get("bank_name") or bank.get("name") or ""),
                type=str(bank.get("type") or "bank")
            )
            for bank in (data or [])
            if isinstance(bank, dict)
        ]

    async def verify_account(
        self,
        credential: AtlanticCredential,
        bank_code: str,
        account_number: str
    ) -> AccountInfo:
        data = await self._post("/transfer/cek_rekening", credential, {
            "bank_code": bank_code,
            "account_number": account_number
        }, "Account verification failed")
        data = data if isinstance(data, dict) else {}

        return AccountInfo(
            account_name=str(data.get("nama_pemilik") or data.get("account_name") or ""),
            account_number=str(data.get("nomor_akun") or account_number),
            status=str(data.get("status") or "unknown")
        )


class AtlanticFastClient(AtlanticClient):
    """Atlantic QRIS Fast variant"""

    code = "atlantic_fast"
    name = "Atlantic QRIS Fast"

    METHOD = "QRISFAST"
