# backend/gateways/errors.py
# Gateway error taxonomy

from typing import Any, Optional


class GatewayError(Exception):
    """Base error, carries the gateway code for caller diagnostics"""

    def __init__(self, message: str, gateway: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.gateway = gateway

    def to_dict(self) -> dict:
        data = {"success": False, "error": self.message}
        if self.gateway:
            data["gateway"] = self.gateway
        return data


class InvalidTokenFormat(GatewayError):
    """Composite token is not exactly 'accountId:secret'"""


class MissingCredential(GatewayError):
    pass


class UnsupportedGateway(GatewayError):
    pass


class UnsupportedOperation(GatewayError):
    """Provider does not expose this capability"""


class ProviderAuthError(GatewayError):
    """Provider rejected credentials / OTP; payload kept unmodified"""

    def __init__(
        self,
        message: str,
        gateway: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Any = None
    ):
        super().__init__(message, gateway)
        self.status_code = status_code
        self.payload = payload

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.payload is not None:
            data["provider_response"] = self.payload
        return data


class ProviderTransportError(GatewayError):
    """Network failure, non-2xx or non-JSON provider response"""

    def __init__(
        self,
        message: str,
        gateway: Optional[str] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message, gateway)
        self.status_code = status_code


class NormalizationError(ValueError):
    """Single record could not be normalized"""


class UnparsableAmount(NormalizationError):
    pass


class UnparsableDate(NormalizationError):
    pass


class InvalidPayload(GatewayError):
    """Request body unreadable or a field has the wrong shape"""
