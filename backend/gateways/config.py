# backend/gateways/config.py
# Gateway settings: environment variables + optional YAML profile file

import os
import logging
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)


# Environment
HTTP_TIMEOUT = float(os.getenv("GATEWAY_HTTP_TIMEOUT", "30"))
ORDERKUOTA_BASE_URL = os.getenv("ORDERKUOTA_BASE_URL", "https://app.orderkuota.com")
QIOSPAY_BASE_URL = os.getenv("QIOSPAY_BASE_URL", "https://qiospay.id/api")
ATLANTIC_BASE_URL = os.getenv("ATLANTIC_BASE_URL", "https://atlantich2h.com")
ATLANTIC_PROXY_URL = os.getenv("ATLANTIC_PROXY_URL", "")
PAKASIR_BASE_URL = os.getenv("PAKASIR_BASE_URL", "https://app.pakasir.com")
GATEWAY_PROFILES_PATH = os.getenv("GATEWAY_PROFILES_PATH", "gateway_profiles.yaml")


class CFG:
    """Core constants"""

    # Transactions
    TRANSACTION_TTL_MINUTES = 5
    DEFAULT_FEE_PERCENT = 0.7
    TRANSACTION_SUFFIX_LENGTH = 6

    # Provider local time (WIB)
    PROVIDER_UTC_OFFSET_HOURS = 7

    QR_IMAGE_URL = "https://api.qrserver.com/v1/create-qr-code/?size=300x300&data={data}"


class DeviceProfile(BaseModel):
    """App/device fingerprint sent with every OrderKuota request"""
    app_reg_id: str = (
        "feWAyrROTHe_RYH3Sbruw8:APA91bFbdiCCuyMLLTtieOr4W5fiSlzPHwUOe9w75UwmiHt7zywlgKi_zlKi5WUSq6pJdqHNkRD7J98p2hU7UBKK5R2wh5xcOQRhLoyb9PNWXTDiFmjrua4"
    )
    phone_uuid: str = "feWAyrROTHe_RYH3Sbruw8"
    phone_model: str = "23124RA7EO"
    phone_android_version: str = "15"
    app_version_code: str = "251029"
    app_version_name: str = "25.10.29"
    ui_mode: str = "light"

    def as_params(self) -> Dict[str, str]:
        return self.model_dump()


class OrderKuotaSettings(BaseModel):
    base_url: str = ORDERKUOTA_BASE_URL
    user_agent: str = "okhttp/4.12.0"
    timeout: float = HTTP_TIMEOUT
    device: DeviceProfile = DeviceProfile()


class QiosPaySettings(BaseModel):
    base_url: str = QIOSPAY_BASE_URL
    user_agent: str = "UnifiedPaymentWorker/1.0"
    timeout: float = HTTP_TIMEOUT


class AtlanticSettings(BaseModel):
    base_url: str = ATLANTIC_BASE_URL
    proxy_url: str = ATLANTIC_PROXY_URL
    timeout: float = HTTP_TIMEOUT


class PakasirSettings(BaseModel):
    base_url: str = PAKASIR_BASE_URL
    timeout: float = HTTP_TIMEOUT


class GatewaySettings(BaseModel):
    """All provider settings; one instance per process is enough"""
    orderkuota: OrderKuotaSettings = OrderKuotaSettings()
    qiospay: QiosPaySettings = QiosPaySettings()
    atlantic: AtlanticSettings = AtlanticSettings()
    pakasir: PakasirSettings = PakasirSettings()


def load_gateway_settings(path: Optional[str] = None) -> GatewaySettings:
    """Load YAML overrides (defaults when the file is missing)"""
    config_path = Path(path or GATEWAY_PROFILES_PATH)

    if not config_path.exists():
        return GatewaySettings()

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    logger.info("Gateway profiles loaded from %s", config_path)
    return GatewaySettings.model_validate(data)
