# tests/conftest.py
# Pytest shared setup and fixtures

import pytest
import sys
import os

# backend path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


# TLV-consistent static QRIS; the trailing CRC is a placeholder
STATIC_QR = (
    "000201"
    "010211"
    "26370014ID.CO.QRIS.WWW0215ID1234567890123"
    "52045812"
    "5303360"
    "5802ID"
    "5909TOKO MAJU"
    "6007JAKARTA"
    "610512345"
    "6304ABCD"
)


@pytest.fixture
def static_qr():
    """Static merchant QRIS"""
    return STATIC_QR


@pytest.fixture
def orderkuota_mutations():
    """Order Kuota qris_history.results"""
    return [
        {
            "id": "MX1",
            "status": "IN",
            "kredit": "10.000",
            "debet": "0",
            "tanggal": "11/12/2025 19:44",
            "keterangan": "NOBU / BUDI"
        },
        {
            "id": "MX2",
            "status": "OUT",
            "kredit": "0",
            "debet": "50.000",
            "tanggal": "11/12/2025 20:01",
            "keterangan": "Withdraw"
        },
        {
            "id": "MX3",
            "status": "IN",
            "kredit": "1.250.500",
            "tanggal": "12/12/2025 08:05",
            "keterangan": "DANA / SITI"
        }
    ]


@pytest.fixture
def qiospay_mutations():
    """QiosPay data[]"""
    return [
        {
            "id": 9001,
            "type": "CR",
            "amount": "25000",
            "date": "2025-12-11 19:44:10",
            "issuer_reff": "ISS-1"
        },
        {
            "type": "CR",
            "nominal": 15000,
            "created_at": "2025-12-11T10:00:00Z",
            "buyer_reff": "BUY-7"
        },
        {
            "id": 9003,
            "type": "DB",
            "amount": "5000",
            "date": "2025-12-11 20:00:00"
        }
    ]


@pytest.fixture
def atlantic_deposit():
    """Atlantic /deposit/status data"""
    return {
        "id": "DEP123",
        "reff_id": "ORDER-1",
        "nominal": "50350",
        "status": "success",
        "created_at": "2025-12-11 19:44:00"
    }


@pytest.fixture
def pakasir_webhook():
    """Pakasir completed-payment webhook body"""
    return {
        "amount": 22000,
        "order_id": "INV-240910",
        "project": "tokomaju",
        "status": "completed",
        "payment_method": "qris",
        "completed_at": "2025-12-11T19:44:00.819+07:00"
    }
