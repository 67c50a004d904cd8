# backend/gateways/base.py
# Provider client base: capability set + single-request HTTP helpers

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Set, Type

import httpx

from .credentials import ProviderCredential
from .errors import ProviderAuthError, ProviderTransportError, UnsupportedOperation
from .models import (
    AuthToken,
    BalanceInfo,
    Direction,
    MutationBatch,
    PendingAuth,
    WithdrawDestination,
    WithdrawResult
)

logger = logging.getLogger(__name__)

CAPABILITIES = ("login", "exchange_token", "list_mutations", "withdraw", "get_balance")


class BaseGatewayClient(ABC):
    """
    Payment provider client

    Every public call issues exactly one outbound request. One client holds
    one httpx.AsyncClient and no token cache, so concurrent polls should use
    separate instances.
    """

    code: ClassVar[str] = ""
    name: ClassVar[str] = ""
    credential_class: ClassVar[Type[ProviderCredential]] = ProviderCredential

    # discriminator field + values per direction, used by list_mutations
    DIRECTION_FIELD: ClassVar[str] = ""
    DIRECTION_VALUES: ClassVar[Dict[Direction, Set[str]]] = {}

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    @abstractmethod
    def from_settings(cls, settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Build from GatewaySettings"""
        pass

    # ── capability set ──────────────────────────────────────────────

    async def login(self, credential) -> PendingAuth:
        raise self._unsupported("login")

    async def exchange_token(self, username: str, otp: str) -> AuthToken:
        raise self._unsupported("exchange_token")

    async def list_mutations(
        self,
        credential,
        direction: Direction = Direction.IN
    ) -> MutationBatch:
        raise self._unsupported("list_mutations")

    async def withdraw(
        self,
        credential,
        amount: int,
        destination: Optional[WithdrawDestination] = None
    ) -> WithdrawResult:
        raise self._unsupported("withdraw")

    async def get_balance(self, credential) -> BalanceInfo:
        raise self._unsupported("get_balance")

    @classmethod
    def supports(cls, capability: str) -> bool:
        if capability not in CAPABILITIES:
            return False
        return getattr(cls, capability) is not getattr(BaseGatewayClient, capability)

    @classmethod
    def capabilities(cls) -> List[str]:
        return [c for c in CAPABILITIES if cls.supports(c)]

    # ── HTTP helpers ───────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        url: str,
        label: str,
        **kwargs
    ) -> httpx.Response:
        """Send one request; `label` is what gets logged (URLs may hold keys)"""
        try:
            response = await self.http_client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s %s failed: %s", self.code, method, label, e)
            raise ProviderTransportError(f"{self.name} request failed: {e}", gateway=self.code)

        logger.info("%s %s %s -> %s", self.code, method, label, response.status_code)
        return response

    def _decode(self, response: httpx.Response) -> Dict[str, Any]:
        """JSON object body, or ProviderTransportError"""
        if response.status_code >= 500:
            raise ProviderTransportError(
                f"{self.name} returned HTTP {response.status_code}",
                gateway=self.code,
                status_code=response.status_code
            )

        body = response.text
        if "<!DOCTYPE html>" in body or "<html" in body:
            raise ProviderTransportError(
                f"{self.name} returned an HTML page (challenge or block)",
                gateway=self.code,
                status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError:
            raise ProviderTransportError(
                f"{self.name} returned a non-JSON response",
                gateway=self.code,
                status_code=response.status_code
            )

        if not isinstance(payload, dict):
            raise ProviderTransportError(
                f"{self.name} returned an unexpected JSON document",
                gateway=self.code,
                status_code=response.status_code
            )
        return payload

    def _rejected(
        self,
        response: httpx.Response,
        payload: Dict[str, Any],
        default: str
    ) -> ProviderAuthError:
        message = payload.get("message") or payload.get("error") or default
        logger.warning("%s rejected request: %s", self.code, message)
        return ProviderAuthError(
            str(message),
            gateway=self.code,
            status_code=response.status_code,
            payload=payload
        )

    def _unsupported(self, capability: str) -> UnsupportedOperation:
        return UnsupportedOperation(
            f"{self.name} does not support {capability}",
            gateway=self.code
        )

    def _filter_direction(
        self,
        records: Iterable[Dict[str, Any]],
        direction: Direction
    ) -> List[Dict[str, Any]]:
        wanted = self.DIRECTION_VALUES.get(direction, set())
        return [
            r for r in records
            if isinstance(r, dict) and str(r.get(self.DIRECTION_FIELD, "")).upper() in wanted
        ]

    async def close(self):
        await self.http_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()
