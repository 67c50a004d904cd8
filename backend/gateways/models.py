# backend/gateways/models.py
# Typed success envelopes returned by provider clients

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class Direction(str, Enum):
    IN = "in"
    OUT = "out"


class PendingAuth(BaseModel):
    """First factor accepted, OTP dispatched out-of-band"""
    gateway: str
    username: str
    message: Optional[str] = None
    raw: Dict[str, Any] = {}


class AuthToken(BaseModel):
    gateway: str
    username: str
    token: str
    raw: Dict[str, Any] = {}


class MutationBatch(BaseModel):
    """Raw mutation records, still in provider shape"""
    gateway: str
    direction: Direction = Direction.IN
    records: List[Dict[str, Any]] = []
    account: Optional[Dict[str, Any]] = None


class WithdrawDestination(BaseModel):
    bank_code: str
    account_number: str
    account_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    note: Optional[str] = None


class WithdrawResult(BaseModel):
    gateway: str
    amount: int
    reference: Optional[str] = None
    status: str = "submitted"
    message: Optional[str] = None
    raw: Dict[str, Any] = {}


class BalanceInfo(BaseModel):
    gateway: str
    balance: int
    pending_balance: Optional[int] = None
    raw: Dict[str, Any] = {}


class DepositInfo(BaseModel):
    """Provider-side QRIS deposit"""
    gateway: str
    deposit_id: str
    reference: Optional[str] = None
    amount: int = 0
    status: str = "pending"
    qr_string: Optional[str] = None
    expires_at: Optional[str] = None
    raw: Dict[str, Any] = {}


class BankInfo(BaseModel):
    code: str
    name: str
    type: str = "bank"


class AccountInfo(BaseModel):
    account_name: str
    account_number: str
    status: str = "unknown"
