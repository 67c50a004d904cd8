# backend/qris/crc.py
# CRC16-CCITT checksum used to close QRIS payloads (tag 63)

from typing import Union

CRC_INIT = 0xFFFF
CRC_POLY = 0x1021


def crc16_ccitt(data: Union[bytes, str]) -> int:
    """CRC16-CCITT (init 0xFFFF, poly 0x1021, MSB first)"""
    if isinstance(data, str):
        data = data.encode("utf-8")

    crc = CRC_INIT
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ CRC_POLY
            else:
                crc = crc << 1
            crc &= 0xFFFF
    return crc


def format_crc(value: int) -> str:
    return f"{value & 0xFFFF:04X}"


def checksum(payload: Union[bytes, str]) -> str:
    """Payload → 4 uppercase hex digits"""
    return format_crc(crc16_ccitt(payload))
