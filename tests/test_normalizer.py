# tests/test_normalizer.py
# Mutation normalizer tests

import logging
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from gateways.errors import UnsupportedGateway
from mutations import (
    AtlanticNormalizer,
    NormalizedMutation,
    OrderKuotaNormalizer,
    PakasirNormalizer,
    QiosPayNormalizer,
    get_normalizer,
    normalize
)


class TestOrderKuotaNormalizer:
    """status IN, kredit '10.000', tanggal DD/MM/YYYY HH:mm"""

    def test_end_to_end_record(self):
        raw = {"status": "IN", "kredit": "10.000", "tanggal": "11/12/2025 19:44", "id": "MX1"}
        [mutation] = normalize("orderkuota", [raw])

        assert mutation.ref_id == "MX1"
        assert mutation.amount == 10000
        assert mutation.paid_at == "2025-12-11T19:44:00+07:00"
        assert mutation.status == "paid"
        assert mutation.gateway == "orderkuota"
        assert mutation.raw == raw

    def test_outgoing_dropped(self, orderkuota_mutations):
        mutations = normalize("orderkuota", orderkuota_mutations)
        assert [m.ref_id for m in mutations] == ["MX1", "MX3"]
        assert "MX2" not in {m.ref_id for m in mutations}

    def test_thousand_separators(self, orderkuota_mutations):
        mutations = normalize("orderkuota", orderkuota_mutations)
        assert mutations[1].amount == 1250500

    def test_comma_separator(self):
        [mutation] = normalize("orderkuota", [
            {"status": "IN", "kredit": "7,500", "tanggal": "01/01/2026 00:00", "id": "A"}
        ])
        assert mutation.amount == 7500

    def test_numeric_kredit(self):
        records = [
            {"status": "IN", "kredit": 10000, "id": "INT"},
            {"status": "IN", "kredit": 10000.0, "id": "FLOAT"}
        ]
        assert [m.amount for m in normalize("orderkuota", records)] == [10000, 10000]

    def test_decimal_string_not_read_as_thousands(self):
        # "10000.00" is not 1000000
        assert normalize("orderkuota", [{"status": "IN", "kredit": "10000.00", "id": "DEC"}]) == []

    @pytest.mark.parametrize("kredit", ["1.0000", "10,5", "1.000,50", True, 12.5])
    def test_ambiguous_kredit_dropped(self, kredit):
        assert normalize("orderkuota", [{"status": "IN", "kredit": kredit, "id": "X"}]) == []

    def test_non_numeric_amount_dropped(self, caplog):
        records = [
            {"status": "IN", "kredit": "abc", "tanggal": "11/12/2025 19:44", "id": "BAD"},
            {"status": "IN", "kredit": "2.000", "tanggal": "11/12/2025 19:45", "id": "OK"}
        ]
        with caplog.at_level(logging.WARNING):
            mutations = normalize("orderkuota", records)

        assert [m.ref_id for m in mutations] == ["OK"]
        assert "BAD" in caplog.text

    def test_zero_amount_dropped(self):
        assert normalize("orderkuota", [
            {"status": "IN", "kredit": "0", "tanggal": "11/12/2025 19:44", "id": "Z"}
        ]) == []

    def test_unparsable_date_is_null(self):
        [mutation] = normalize("orderkuota", [
            {"status": "IN", "kredit": "1.000", "tanggal": "kemarin", "id": "D"}
        ])
        assert mutation.paid_at is None

    def test_missing_date_is_null(self):
        [mutation] = normalize("orderkuota", [{"status": "IN", "kredit": "1.000", "id": "D"}])
        assert mutation.paid_at is None

    def test_missing_id_gives_empty_ref(self):
        [mutation] = normalize("orderkuota", [{"status": "IN", "kredit": "1.000"}])
        assert mutation.ref_id == ""

    def test_numeric_id_stringified(self):
        [mutation] = normalize("orderkuota", [{"status": "IN", "kredit": "1.000", "id": 77}])
        assert mutation.ref_id == "77"

    def test_non_dict_records_skipped(self):
        assert normalize("orderkuota", ["junk", None, 5]) == []


class TestQiosPayNormalizer:
    """type CR, integral decimal amounts, ISO dates"""

    def test_credit_only(self, qiospay_mutations):
        mutations = normalize("qiospay", qiospay_mutations)
        assert len(mutations) == 2
        assert all(m.raw["type"] == "CR" for m in mutations)

    def test_ref_id_chain(self, qiospay_mutations):
        mutations = normalize("qiospay", qiospay_mutations)
        assert mutations[0].ref_id == "9001"
        assert mutations[1].ref_id == "BUY-7"

    def test_ref_id_skips_blank_candidates(self):
        [mutation] = normalize("qiospay", [
            {"type": "CR", "amount": "1000", "id": "", "issuer_reff": None, "refnum": "R-9"}
        ])
        assert mutation.ref_id == "R-9"

    def test_amount_fields(self, qiospay_mutations):
        mutations = normalize("qiospay", qiospay_mutations)
        assert [m.amount for m in mutations] == [25000, 15000]

    def test_integral_decimal_accepted(self):
        [mutation] = normalize("qiospay", [{"type": "CR", "amount": "10000.00", "id": 1}])
        assert mutation.amount == 10000

    def test_fractional_amount_dropped(self):
        assert normalize("qiospay", [{"type": "CR", "amount": "10000.50", "id": 1}]) == []

    def test_naive_date_is_provider_local(self, qiospay_mutations):
        mutations = normalize("qiospay", qiospay_mutations)
        assert mutations[0].paid_at == "2025-12-11T19:44:10+07:00"

    def test_utc_date_kept(self, qiospay_mutations):
        mutations = normalize("qiospay", qiospay_mutations)
        assert mutations[1].paid_at == "2025-12-11T10:00:00+00:00"

    def test_bad_date_is_null(self):
        [mutation] = normalize("qiospay", [{"type": "CR", "amount": 1000, "id": 1, "date": "?"}])
        assert mutation.paid_at is None


class TestAtlanticNormalizer:
    """Deposit records, status success"""

    def test_success_deposit(self, atlantic_deposit):
        [mutation] = normalize("atlantic", [atlantic_deposit])
        assert mutation.ref_id == "DEP123"
        assert mutation.amount == 50350
        assert mutation.paid_at == "2025-12-11T19:44:00+07:00"
        assert mutation.gateway == "atlantic"

    def test_pending_deposit_dropped(self, atlantic_deposit):
        atlantic_deposit["status"] = "pending"
        assert normalize("atlantic", [atlantic_deposit]) == []

    def test_webhook_data_unwrapped(self, atlantic_deposit):
        payload = {"event": "deposit", "data": atlantic_deposit}
        [mutation] = normalize("atlantic", [payload])

        assert mutation.ref_id == "DEP123"
        assert mutation.amount == 50350
        assert mutation.raw == payload

    def test_webhook_pending_dropped(self, atlantic_deposit):
        atlantic_deposit["status"] = "processing"
        assert normalize("atlantic", [{"event": "deposit", "data": atlantic_deposit}]) == []

    def test_fast_variant_gateway(self, atlantic_deposit):
        [mutation] = normalize("atlantic_fast", [atlantic_deposit])
        assert mutation.gateway == "atlantic_fast"


class TestPakasirNormalizer:
    """Webhook / transaction detail, status completed"""

    def test_completed_webhook(self, pakasir_webhook):
        [mutation] = normalize("pakasir", [pakasir_webhook])

        assert mutation.ref_id == "INV-240910"
        assert mutation.amount == 22000
        assert mutation.paid_at == "2025-12-11T19:44:00.819000+07:00"
        assert mutation.gateway == "pakasir"

    def test_transaction_detail_unwrapped(self, pakasir_webhook):
        [mutation] = normalize("pakasir", [{"transaction": pakasir_webhook}])
        assert mutation.ref_id == "INV-240910"

    def test_pending_dropped(self, pakasir_webhook):
        pakasir_webhook["status"] = "pending"
        assert normalize("pakasir", [pakasir_webhook]) == []


class TestRegistry:
    """Normalizer lookup"""

    def test_lookup(self):
        assert isinstance(get_normalizer("orderkuota"), OrderKuotaNormalizer)
        assert isinstance(get_normalizer("QiosPay"), QiosPayNormalizer)
        assert isinstance(get_normalizer("atlantic"), AtlanticNormalizer)
        assert isinstance(get_normalizer("pakasir"), PakasirNormalizer)

    def test_unknown_gateway(self):
        with pytest.raises(UnsupportedGateway):
            normalize("paypal", [])

    def test_output_type(self, orderkuota_mutations):
        assert all(isinstance(m, NormalizedMutation) for m in normalize("orderkuota", orderkuota_mutations))
