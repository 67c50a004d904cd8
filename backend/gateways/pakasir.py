# backend/gateways/pakasir.py
# Pakasir client (provider-generated QRIS, status check, webhook check)

import logging
from typing import Any, Mapping, Optional

import httpx

from .atlantic import _to_int
from .base import BaseGatewayClient
from .config import PakasirSettings
from .credentials import PakasirCredential
from .errors import InvalidPayload
from .models import DepositInfo

logger = logging.getLogger(__name__)

STATUS_MAP = {
    "completed": "success",
    "success": "success",
    "paid": "success",
    "pending": "pending",
    "waiting": "pending",
    "expired": "expired",
    "cancelled": "failed",
    "failed": "failed"
}

WEBHOOK_FIELDS = ("amount", "order_id", "project", "status")


def map_status(status: Any) -> str:
    """Pakasir status → success / pending / expired / failed"""
    return STATUS_MAP.get(str(status or "").strip().lower(), "pending")


def deposit_key(order_id: str, amount: int) -> str:
    """'order_id:amount'; the status check needs both"""
    return f"{order_id}:{amount}"


class PakasirClient(BaseGatewayClient):
    """
    Pakasir payment links

    JSON create call per order, status looked up by project + order_id +
    amount. Deposit ids handed out by this client are 'order_id:amount'.
    """

    code = "pakasir"
    name = "Pakasir"
    credential_class = PakasirCredential

    METHOD = "qris"

    def __init__(
        self,
        settings: Optional[PakasirSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or PakasirSettings()
        super().__init__(timeout=self.settings.timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings, transport=None):
        return cls(settings=settings.pakasir, transport=transport)

    async def create_deposit(
        self,
        credential: PakasirCredential,
        reference: str,
        amount: int,
        callback_url: Optional[str] = None
    ) -> DepositInfo:
        """
        Provider-generated QRIS for one order

        callback_url is not sent: Pakasir posts webhooks to the URL set on
        the project.
        """
        endpoint = f"/api/transactioncreate/{self.METHOD}"
        response = await self._request(
            "POST",
            f"{self.settings.base_url}{endpoint}",
            label=endpoint,
            json={
                "project": credential.project_slug,
                "order_id": reference,
                "amount": amount,
                "api_key": credential.api_key
            }
        )
        payload = self._decode(response)

        payment = payload.get("payment")
        if not response.is_success or not isinstance(payment, dict):
            raise self._rejected(response, payload, "Failed to create QRIS payment")

        return DepositInfo(
            gateway=self.code,
            deposit_id=deposit_key(reference, amount),
            reference=reference,
            amount=_to_int(payment.get("total_payment"), default=amount),
            status="pending",
            qr_string=payment.get("payment_number"),
            expires_at=payment.get("expired_at"),
            raw=payment
        )

    async def check_deposit(self, credential: PakasirCredential, deposit_id: str) -> DepositInfo:
        order_id, _, amount = str(deposit_id).partition(":")
        if not order_id or not amount.isdigit():
            raise InvalidPayload(
                "Pakasir deposit id must be 'order_id:amount'",
                gateway=self.code
            )

        response = await self._request(
            "GET",
            f"{self.settings.base_url}/api/transactiondetail",
            label=f"/api/transactiondetail order_id={order_id}",
            params={
                "project": credential.project_slug,
                "order_id": order_id,
                "amount": amount,
                "api_key": credential.api_key
            }
        )
        payload = self._decode(response)

        transaction = payload.get("transaction")
        if not response.is_success or not isinstance(transaction, dict):
            raise self._rejected(response, payload, "Transaction not found")

        raw = dict(transaction)
        raw.setdefault("order_id", order_id)
        return DepositInfo(
            gateway=self.code,
            deposit_id=deposit_id,
            reference=order_id,
            amount=_to_int(transaction.get("amount"), default=int(amount)),
            status=map_status(transaction.get("status")),
            raw=raw
        )

    @staticmethod
    def verify_webhook(payload: Mapping[str, Any], credential: PakasirCredential) -> bool:
        """Required fields present and the project matches the credential"""
        if any(payload.get(field) in (None, "") for field in WEBHOOK_FIELDS):
            logger.warning("Pakasir webhook missing fields: %s", sorted(payload))
            return False
        return str(payload["project"]) == credential.project_slug
