# backend/qris/codec.py
# EMVCo Merchant Presented QR (QRIS) codec: static → dynamic conversion

import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel

from .crc import checksum

logger = logging.getLogger(__name__)

TAG_AMOUNT = "54"
TAG_CRC = "63"
CRC_HEADER = "6304"
COUNTRY_CODE_ANCHOR = "5802ID"
POI_STATIC = "010211"
POI_DYNAMIC = "010212"


class CodecError(Exception):
    """QRIS payload could not be edited"""


class MalformedTemplate(CodecError):
    """Required anchor missing or TLV structure inconsistent"""


class InvalidAmount(CodecError):
    pass


class AmountAlreadyPresent(CodecError):
    """Payload already carries an amount tag (already dynamic)"""


@dataclass(frozen=True)
class TLVField:
    tag: str
    value: str

    @property
    def length(self) -> int:
        return len(self.value)

    def encode(self) -> str:
        return f"{self.tag}{self.length:02d}{self.value}"


class DynamicQrResult(BaseModel):
    """Amount-bound QRIS payload"""
    qr_string: str
    amount: int


def parse_tlv(payload: str) -> List[TLVField]:
    """Top-level TLV fields; raises MalformedTemplate on length mismatch"""
    fields = []
    pos = 0
    while pos < len(payload):
        header = payload[pos:pos + 4]
        if len(header) < 4 or not header.isdigit():
            raise MalformedTemplate(f"Invalid TLV header at position {pos}")
        tag, length = header[:2], int(header[2:])
        value = payload[pos + 4:pos + 4 + length]
        if len(value) != length:
            raise MalformedTemplate(f"Tag {tag} declares {length} chars, {len(value)} available")
        fields.append(TLVField(tag=tag, value=value))
        pos += 4 + length
    return fields


def build_amount_tag(amount: int) -> str:
    return TLVField(tag=TAG_AMOUNT, value=str(amount)).encode()


def _has_amount_tag(base: str) -> bool:
    try:
        fields = parse_tlv(base)
    except MalformedTemplate:
        # non-standard template: nothing reliable to inspect
        return False
    return any(f.tag == TAG_AMOUNT for f in fields)


def make_dynamic(static_qr: str, amount: int) -> DynamicQrResult:
    """
    Static QRIS → dynamic QRIS bound to `amount`

    1. strip the trailing CRC field (6304XXXX)
    2. point of initiation 010211 → 010212 (left alone when absent)
    3. splice tag 54 right before 5802ID
    4. append 6304 + CRC16 of everything before it
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
        raise InvalidAmount(f"Amount must be a positive integer, got {amount!r}")
    if not static_qr:
        raise MalformedTemplate("Static QRIS string is empty")

    base = static_qr[:-8]
    base = base.replace(POI_STATIC, POI_DYNAMIC, 1)

    anchor = base.find(COUNTRY_CODE_ANCHOR)
    if anchor == -1:
        raise MalformedTemplate(f"Invalid QRIS: country code {COUNTRY_CODE_ANCHOR} not found")

    if _has_amount_tag(base):
        raise AmountAlreadyPresent("QRIS already contains an amount tag (54)")

    payload = base[:anchor] + build_amount_tag(amount) + base[anchor:] + CRC_HEADER
    qr_string = payload + checksum(payload)

    logger.info(
        "Dynamic QRIS created amount=%s length=%s preview=%s...",
        amount, len(qr_string), qr_string[:50]
    )
    return DynamicQrResult(qr_string=qr_string, amount=amount)


def verify_checksum(qr_string: str) -> bool:
    """Trailing CRC field matches the preceding payload"""
    if len(qr_string) < 8 or qr_string[-8:-4] != CRC_HEADER:
        return False
    return checksum(qr_string[:-4]) == qr_string[-4:]


def read_amount(qr_string: str) -> Optional[int]:
    """Amount of tag 54, None for static payloads"""
    for field in parse_tlv(qr_string):
        if field.tag == TAG_AMOUNT:
            return int(field.value)
    return None
