# backend/gateways/qiospay.py
# QiosPay client (mutation feed only)

from typing import Optional
from urllib.parse import quote

import httpx

from .base import BaseGatewayClient
from .config import QiosPaySettings
from .credentials import QiosPayCredential
from .errors import ProviderTransportError
from .models import Direction, MutationBatch


class QiosPayClient(BaseGatewayClient):
    """QiosPay QRIS mutation API; credentials travel in the URL path"""

    code = "qiospay"
    name = "QiosPay QRIS"
    credential_class = QiosPayCredential

    MUTATION_PATH = "/mutasi/qris/{merchant_code}/{api_key}"

    DIRECTION_FIELD = "type"
    DIRECTION_VALUES = {
        Direction.IN: {"CR"},
        Direction.OUT: {"DB"}
    }

    def __init__(
        self,
        settings: Optional[QiosPaySettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or QiosPaySettings()
        super().__init__(timeout=self.settings.timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings, transport=None):
        return cls(settings=settings.qiospay, transport=transport)

    async def list_mutations(
        self,
        credential: QiosPayCredential,
        direction: Direction = Direction.IN
    ) -> MutationBatch:
        path = self.MUTATION_PATH.format(
            merchant_code=quote(credential.merchant_code, safe=""),
            api_key=quote(credential.api_key, safe="")
        )
        response = await self._request(
            "GET",
            f"{self.settings.base_url}{path}",
            label=f"/mutasi/qris/{credential.merchant_code}",
            headers={"User-Agent": self.settings.user_agent}
        )
        payload = self._decode(response)

        if not response.is_success:
            raise self._rejected(response, payload, "No mutation data")

        records = payload.get("data")
        if not isinstance(records, list):
            raise ProviderTransportError(
                f"{self.name} returned no mutation data",
                gateway=self.code,
                status_code=response.status_code
            )

        return MutationBatch(
            gateway=self.code,
            direction=direction,
            records=self._filter_direction(records, direction)
        )
