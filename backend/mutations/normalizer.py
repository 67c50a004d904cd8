# backend/mutations/normalizer.py
# Provider mutation records → NormalizedMutation

import logging
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from gateways.config import CFG
from gateways.errors import UnparsableAmount, UnparsableDate, UnsupportedGateway

from .models import NormalizedMutation

logger = logging.getLogger(__name__)

PROVIDER_TZ = timezone(timedelta(hours=CFG.PROVIDER_UTC_OFFSET_HOURS))


class MutationNormalizer:
    """
    Field layout of one provider's mutation records

    Subclasses declare the credit discriminator, the candidate fields for
    amount / date / ref_id (tried in order) and, when needed, their own
    amount and date parsers.
    """

    GATEWAY: str = ""
    CREDIT_FIELD: str = ""
    CREDIT_VALUES: Set[str] = set()
    AMOUNT_FIELDS: Tuple[str, ...] = ()
    DATE_FIELDS: Tuple[str, ...] = ()
    REF_ID_CHAIN: Tuple[str, ...] = ()

    def __init__(self, gateway: Optional[str] = None):
        self.gateway = gateway or self.GATEWAY

    def normalize(self, records: Iterable[Any]) -> List[NormalizedMutation]:
        mutations = []
        for record in records:
            if not isinstance(record, dict):
                continue
            fields = self.unwrap(record)
            if not self.is_credit(fields):
                continue

            try:
                amount = self.parse_amount(self._first(fields, self.AMOUNT_FIELDS))
            except UnparsableAmount as e:
                logger.warning(
                    "%s: dropping mutation ref=%r: %s",
                    self.gateway, self.ref_id(fields), e
                )
                continue

            mutations.append(NormalizedMutation(
                ref_id=self.ref_id(fields),
                amount=amount,
                paid_at=self.paid_at(fields),
                gateway=self.gateway,
                raw=record
            ))
        return mutations

    def unwrap(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """The dict holding the mutation fields; raw keeps the whole record"""
        return record

    def is_credit(self, record: Dict[str, Any]) -> bool:
        return str(record.get(self.CREDIT_FIELD) or "").strip().upper() in self.CREDIT_VALUES

    @staticmethod
    def _first(record: Dict[str, Any], fields: Tuple[str, ...]) -> Any:
        for field in fields:
            value = record.get(field)
            if value is not None and str(value).strip() != "":
                return value
        return None

    def ref_id(self, record: Dict[str, Any]) -> str:
        value = self._first(record, self.REF_ID_CHAIN)
        return str(value).strip() if value is not None else ""

    def paid_at(self, record: Dict[str, Any]) -> Optional[str]:
        value = self._first(record, self.DATE_FIELDS)
        if value is None:
            return None
        try:
            return self.parse_date(str(value).strip())
        except UnparsableDate as e:
            logger.info("%s: paid_at left empty: %s", self.gateway, e)
            return None

    def parse_amount(self, value: Any) -> int:
        """Integral decimal (string or number), must be positive"""
        if value is None or isinstance(value, bool):
            raise UnparsableAmount(f"missing amount: {value!r}")
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            raise UnparsableAmount(f"non-numeric amount: {value!r}")

        if not number.is_finite() or number != number.to_integral_value():
            raise UnparsableAmount(f"non-integral amount: {value!r}")
        return self._positive(int(number), value)

    def parse_date(self, value: str) -> str:
        """ISO-8601 or 'YYYY-MM-DD HH:MM:SS'; naive values are provider local time"""
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise UnparsableDate(f"unrecognised date: {value!r}")

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=PROVIDER_TZ)
        return parsed.isoformat()

    @staticmethod
    def _positive(amount: int, original: Any) -> int:
        if amount <= 0:
            raise UnparsableAmount(f"non-positive amount: {original!r}")
        return amount


class OrderKuotaNormalizer(MutationNormalizer):
    """kredit '10.000', tanggal 'DD/MM/YYYY HH:mm' (WIB)"""

    GATEWAY = "orderkuota"
    CREDIT_FIELD = "status"
    CREDIT_VALUES = {"IN"}
    AMOUNT_FIELDS = ("kredit",)
    DATE_FIELDS = ("tanggal",)
    REF_ID_CHAIN = ("id",)

    DATE_FORMAT = "%d/%m/%Y %H:%M"
    # plain digits, or digits grouped by threes with '.' or ','
    KREDIT_PATTERN = re.compile(r"^(\d+|\d{1,3}([.,]\d{3})+)$")

    def parse_amount(self, value: Any) -> int:
        if isinstance(value, bool):
            raise UnparsableAmount(f"non-numeric kredit: {value!r}")
        if isinstance(value, (int, float, Decimal)):
            return super().parse_amount(value)

        text = str(value if value is not None else "").strip()
        if not (text.isascii() and self.KREDIT_PATTERN.match(text)):
            raise UnparsableAmount(f"non-numeric kredit: {value!r}")
        return self._positive(int(re.sub(r"[.,]", "", text)), value)

    def parse_date(self, value: str) -> str:
        try:
            parsed = datetime.strptime(value, self.DATE_FORMAT)
        except ValueError:
            raise UnparsableDate(f"unrecognised tanggal: {value!r}")
        return parsed.replace(tzinfo=PROVIDER_TZ).isoformat()


class QiosPayNormalizer(MutationNormalizer):
    GATEWAY = "qiospay"
    CREDIT_FIELD = "type"
    CREDIT_VALUES = {"CR"}
    AMOUNT_FIELDS = ("amount", "nominal")
    DATE_FIELDS = ("date", "created_at", "time")
    # free-text fields (ket, keterangan) come last and are not guaranteed unique
    REF_ID_CHAIN = (
        "id",
        "issuer_reff",
        "buyer_reff",
        "refnum",
        "ket",
        "keterangan",
        "sender_reff",
        "trxid"
    )


class AtlanticNormalizer(MutationNormalizer):
    """Deposit records (status check / webhook); success counts as credit"""

    GATEWAY = "atlantic"
    CREDIT_FIELD = "status"
    CREDIT_VALUES = {"SUCCESS"}
    AMOUNT_FIELDS = ("nominal", "amount")
    DATE_FIELDS = ("paid_at", "created_at")
    REF_ID_CHAIN = ("id", "reff_id")

    def unwrap(self, record: Dict[str, Any]) -> Dict[str, Any]:
        # webhooks wrap the deposit in "data"
        data = record.get("data")
        return data if isinstance(data, dict) else record


class PakasirNormalizer(MutationNormalizer):
    """Transaction detail / webhook records; completed counts as credit"""

    GATEWAY = "pakasir"
    CREDIT_FIELD = "status"
    CREDIT_VALUES = {"COMPLETED", "SUCCESS", "PAID"}
    AMOUNT_FIELDS = ("amount",)
    DATE_FIELDS = ("completed_at",)
    REF_ID_CHAIN = ("order_id",)

    def unwrap(self, record: Dict[str, Any]) -> Dict[str, Any]:
        transaction = record.get("transaction")
        return transaction if isinstance(transaction, dict) else record


NORMALIZERS: Dict[str, MutationNormalizer] = {
    "orderkuota": OrderKuotaNormalizer(),
    "qiospay": QiosPayNormalizer(),
    "atlantic": AtlanticNormalizer(),
    "atlantic_fast": AtlanticNormalizer(gateway="atlantic_fast"),
    "pakasir": PakasirNormalizer()
}


def get_normalizer(gateway: str) -> MutationNormalizer:
    normalizer = NORMALIZERS.get((gateway or "").strip().lower())
    if normalizer is None:
        raise UnsupportedGateway(f"Unsupported gateway: {gateway}", gateway=gateway)
    return normalizer


def normalize(gateway: str, raw_records: Iterable[Any]) -> List[NormalizedMutation]:
    """Incoming records only, one NormalizedMutation each"""
    return get_normalizer(gateway).normalize(raw_records)
