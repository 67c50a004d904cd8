# backend/gateways/orderkuota.py
# Order Kuota client (signed form requests, OTP login)

import logging
from typing import Any, Dict, Optional

import httpx

from .base import BaseGatewayClient
from .config import OrderKuotaSettings
from .credentials import LoginCredential, OrderKuotaCredential
from .errors import ProviderTransportError
from .models import (
    AuthToken,
    Direction,
    MutationBatch,
    PendingAuth,
    WithdrawDestination,
    WithdrawResult
)
from .signer import LengthPrefixSha512Signer, RequestSigner, sign_request

logger = logging.getLogger(__name__)


class OrderKuotaClient(BaseGatewayClient):
    """Order Kuota app API"""

    code = "orderkuota"
    name = "Order Kuota QRIS"
    credential_class = OrderKuotaCredential

    LOGIN_PATH = "/api/v2/login"
    MUTATION_PATH = "/api/v2/qris/mutasi/{account_id}"
    WITHDRAW_PATH = "/api/v2/get"

    # provider answers with this when the caller's network is blocked
    BLOCKED_MARKER = "Gunakan Jaringan"

    DIRECTION_FIELD = "status"
    DIRECTION_VALUES = {
        Direction.IN: {"IN"},
        Direction.OUT: {"OUT"}
    }

    def __init__(
        self,
        settings: Optional[OrderKuotaSettings] = None,
        signer: Optional[RequestSigner] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or OrderKuotaSettings()
        self.signer = signer or LengthPrefixSha512Signer()
        super().__init__(timeout=self.settings.timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings, transport=None):
        return cls(settings=settings.orderkuota, transport=transport)

    async def _signed_post(self, path: str, params: Dict[str, str]):
        body = {**self.settings.device.as_params(), **params}
        signed, signature_headers = sign_request(body, self.signer)

        headers = {"User-Agent": self.settings.user_agent, **signature_headers}
        response = await self._request(
            "POST",
            f"{self.settings.base_url}{path}",
            label=path,
            data=signed,
            headers=headers
        )
        payload = self._decode(response)

        if self.BLOCKED_MARKER in str(payload.get("message") or ""):
            raise ProviderTransportError(
                "Order Kuota API blocked this network, try again later",
                gateway=self.code,
                status_code=response.status_code
            )
        return response, payload

    @staticmethod
    def _results(payload: Dict[str, Any]) -> Dict[str, Any]:
        results = payload.get("results")
        return results if isinstance(results, dict) else {}

    async def login(self, credential: LoginCredential) -> PendingAuth:
        """Username + password → OTP sent to the account's e-mail"""
        response, payload = await self._signed_post(self.LOGIN_PATH, {
            "username": credential.username,
            "password": credential.password
        })
        if not payload.get("success"):
            raise self._rejected(response, payload, "Login rejected")

        results = self._results(payload)
        logger.info("Order Kuota OTP dispatched for %s", credential.username)
        return PendingAuth(
            gateway=self.code,
            username=credential.username,
            message=payload.get("message") or results.get("otp"),
            raw=payload
        )

    async def exchange_token(self, username: str, otp: str) -> AuthToken:
        """OTP goes out as the password of a second login call"""
        response, payload = await self._signed_post(self.LOGIN_PATH, {
            "username": username,
            "password": otp
        })
        token = self._results(payload).get("token")
        if not payload.get("success") or not token:
            raise self._rejected(response, payload, "OTP rejected")

        return AuthToken(gateway=self.code, username=username, token=str(token), raw=payload)

    async def list_mutations(
        self,
        credential: OrderKuotaCredential,
        direction: Direction = Direction.IN
    ) -> MutationBatch:
        account_id = credential.account_id
        response, payload = await self._signed_post(
            self.MUTATION_PATH.format(account_id=account_id),
            {
                "auth_username": credential.username,
                "auth_token": credential.token,
                "requests[0]": "account",
                "requests[qris_history][keterangan]": "",
                "requests[qris_history][jumlah]": "",
                "requests[qris_history][page]": "1",
                "requests[qris_history][dari_tanggal]": "",
                "requests[qris_history][ke_tanggal]": ""
            }
        )
        if not payload.get("success"):
            raise self._rejected(response, payload, "Failed to get mutations")

        history = payload.get("qris_history")
        records = history.get("results") if isinstance(history, dict) else None
        account = payload.get("account")

        return MutationBatch(
            gateway=self.code,
            direction=direction,
            records=self._filter_direction(records or [], direction),
            account=account.get("results") if isinstance(account, dict) else None
        )

    async def withdraw(
        self,
        credential: OrderKuotaCredential,
        amount: int,
        destination: Optional[WithdrawDestination] = None
    ) -> WithdrawResult:
        """QRIS balance → the account's registered bank (destination is fixed)"""
        response, payload = await self._signed_post(self.WITHDRAW_PATH, {
            "auth_username": credential.username,
            "auth_token": credential.token,
            "requests[qris_withdraw][amount]": str(amount)
        })
        section = payload.get("qris_withdraw")
        section = section if isinstance(section, dict) else {}

        if not payload.get("success") or section.get("success") is False:
            raise self._rejected(response, section or payload, "Withdrawal rejected")

        return WithdrawResult(
            gateway=self.code,
            amount=amount,
            message=section.get("message") or payload.get("message"),
            raw=payload
        )
