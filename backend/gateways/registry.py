# backend/gateways/registry.py
# Gateway client factory

from typing import Dict, List, Optional, Type

import httpx

from .atlantic import AtlanticClient, AtlanticFastClient
from .base import BaseGatewayClient
from .config import GatewaySettings
from .errors import UnsupportedGateway
from .orderkuota import OrderKuotaClient
from .pakasir import PakasirClient
from .qiospay import QiosPayClient


GATEWAY_REGISTRY: Dict[str, Type[BaseGatewayClient]] = {
    "orderkuota": OrderKuotaClient,
    "qiospay": QiosPayClient,
    "atlantic": AtlanticClient,
    "atlantic_fast": AtlanticFastClient,
    "pakasir": PakasirClient
}


def get_gateway_class(code: str) -> Type[BaseGatewayClient]:
    client_class = GATEWAY_REGISTRY.get((code or "").strip().lower())
    if client_class is None:
        raise UnsupportedGateway(f"Unsupported gateway: {code}", gateway=code)
    return client_class


def get_gateway_client(
    code: str,
    settings: Optional[GatewaySettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> BaseGatewayClient:
    """Fresh client per call (no shared connection between gateways)"""
    client_class = get_gateway_class(code)
    return client_class.from_settings(settings or GatewaySettings(), transport=transport)


def list_gateways() -> List[Dict]:
    return [
        {
            "code": code,
            "name": client_class.name,
            "capabilities": client_class.capabilities()
        }
        for code, client_class in GATEWAY_REGISTRY.items()
    ]
