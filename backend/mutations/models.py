# backend/mutations/models.py
# Canonical mutation record

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class MutationStatus(str, Enum):
    PAID = "paid"


class NormalizedMutation(BaseModel):
    """
    One incoming payment, provider independent

    ref_id is the dedup key the matcher stores against an order. It is empty
    only when the provider gave no usable identifier at all.
    """
    ref_id: str
    amount: int  # minor units (rupiah)
    status: MutationStatus = MutationStatus.PAID
    paid_at: Optional[str] = None  # ISO-8601 with offset
    gateway: str
    raw: Dict[str, Any]
