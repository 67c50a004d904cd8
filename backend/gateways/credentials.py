# backend/gateways/credentials.py
# Provider credentials (consumed per call, never stored)

from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel

from .errors import InvalidTokenFormat, MissingCredential

TOKEN_SEPARATOR = ":"


def split_token(token: str, gateway: Optional[str] = None) -> Tuple[str, str]:
    """'accountId:secret' → (accountId, secret)"""
    parts = (token or "").split(TOKEN_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise InvalidTokenFormat(
            "Invalid token format, expected 'accountId:secret'",
            gateway=gateway
        )
    return parts[0], parts[1]


class ProviderCredential(BaseModel):
    """Base credential; capability flags describe what a provider needs"""

    requires_username_token: ClassVar[bool] = False
    requires_api_key: ClassVar[bool] = False
    requires_merchant_code: ClassVar[bool] = False

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], gateway: Optional[str] = None):
        """Build from a request body, naming every missing field"""
        missing = [
            name for name in cls.model_fields
            if not str(data.get(name) or "").strip()
        ]
        if missing:
            raise MissingCredential(
                f"Missing required field(s): {', '.join(missing)}",
                gateway=gateway
            )
        return cls(**{name: str(data[name]).strip() for name in cls.model_fields})

    def redacted(self) -> Dict[str, str]:
        """Log-safe view"""
        return {k: (v[:4] + "***" if v else "") for k, v in self.model_dump().items()}


class LoginCredential(ProviderCredential):
    """First factor (username + password)"""
    username: str
    password: str


class OrderKuotaCredential(ProviderCredential):
    requires_username_token: ClassVar[bool] = True

    username: str
    token: str

    @property
    def account_id(self) -> str:
        return split_token(self.token, gateway="orderkuota")[0]


class QiosPayCredential(ProviderCredential):
    requires_api_key: ClassVar[bool] = True
    requires_merchant_code: ClassVar[bool] = True

    merchant_code: str
    api_key: str


class AtlanticCredential(ProviderCredential):
    requires_api_key: ClassVar[bool] = True

    api_key: str


class PakasirCredential(ProviderCredential):
    """Project slug + project API key"""
    requires_api_key: ClassVar[bool] = True

    project_slug: str
    api_key: str


class OtpCredential(ProviderCredential):
    """Second factor (username + one-time code)"""
    username: str
    otp: str
