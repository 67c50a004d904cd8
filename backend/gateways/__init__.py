# backend/gateways/__init__.py
# Payment provider clients

from .errors import (
    GatewayError,
    InvalidTokenFormat,
    InvalidPayload,
    MissingCredential,
    UnsupportedGateway,
    UnsupportedOperation,
    ProviderAuthError,
    ProviderTransportError
)
from .credentials import (
    split_token,
    LoginCredential,
    OrderKuotaCredential,
    QiosPayCredential,
    AtlanticCredential,
    PakasirCredential
)
from .models import Direction, MutationBatch, WithdrawDestination
from .signer import RequestSigner, LengthPrefixSha512Signer, sign_request
from .registry import GATEWAY_REGISTRY, get_gateway_client, get_gateway_class, list_gateways

__all__ = [
    "GatewayError",
    "InvalidTokenFormat",
    "InvalidPayload",
    "MissingCredential",
    "UnsupportedGateway",
    "UnsupportedOperation",
    "ProviderAuthError",
    "ProviderTransportError",
    "split_token",
    "LoginCredential",
    "OrderKuotaCredential",
    "QiosPayCredential",
    "AtlanticCredential",
    "PakasirCredential",
    "Direction",
    "MutationBatch",
    "WithdrawDestination",
    "RequestSigner",
    "LengthPrefixSha512Signer",
    "sign_request",
    "GATEWAY_REGISTRY",
    "get_gateway_client",
    "get_gateway_class",
    "list_gateways"
]
