# backend/qris/__init__.py
# QRIS payload tooling

from .crc import crc16_ccitt, format_crc, checksum
from .codec import (
    CodecError,
    MalformedTemplate,
    InvalidAmount,
    AmountAlreadyPresent,
    TLVField,
    DynamicQrResult,
    parse_tlv,
    make_dynamic,
    verify_checksum,
    read_amount
)

__all__ = [
    "crc16_ccitt",
    "format_crc",
    "checksum",
    "CodecError",
    "MalformedTemplate",
    "InvalidAmount",
    "AmountAlreadyPresent",
    "TLVField",
    "DynamicQrResult",
    "parse_tlv",
    "make_dynamic",
    "verify_checksum",
    "read_amount"
]
