# backend/transactions/__init__.py
# Payable QRIS transactions

from .synthesizer import (
    SynthesizedTransaction,
    calculate_fee,
    create_transaction,
    gateway_prefix,
    generate_transaction_id
)

__all__ = [
    "SynthesizedTransaction",
    "calculate_fee",
    "create_transaction",
    "gateway_prefix",
    "generate_transaction_id"
]
