# tests/test_qris.py
# QRIS CRC16 + codec tests

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from qris import (
    AmountAlreadyPresent,
    InvalidAmount,
    MalformedTemplate,
    checksum,
    crc16_ccitt,
    format_crc,
    make_dynamic,
    parse_tlv,
    read_amount,
    verify_checksum
)
from qris.codec import build_amount_tag

# issued merchant QRIS (NOBU acquirer); CRC as issued
MERCHANT_QR = (
    "00020101021126670016COM.NOBUBANK.WWW01189360050300000907180214515407176589440303UMI"
    "51440014ID.CO.QRIS.WWW0215ID20254555471610303UMI5204541153033605802ID"
    "5921Toko Kelontong Faisal6006BEKASI61051711162070703A016304992B"
)


class TestCrc16:
    """CRC16-CCITT (0xFFFF / 0x1021)"""

    def test_check_value(self):
        assert crc16_ccitt(b"123456789") == 0x29B1

    def test_empty_input(self):
        assert crc16_ccitt(b"") == 0xFFFF
        assert checksum("") == "FFFF"

    def test_single_char(self):
        assert checksum("A") == "B915"

    def test_str_and_bytes_agree(self):
        assert crc16_ccitt("123456789") == crc16_ccitt(b"123456789")

    def test_format_is_padded_uppercase(self):
        assert format_crc(0x0A) == "000A"
        assert format_crc(0xB915) == "B915"

    def test_issued_merchant_payload(self):
        assert checksum(MERCHANT_QR[:-4]) == "992B"
        assert verify_checksum(MERCHANT_QR)

    def test_issued_payload_tampered(self):
        assert not verify_checksum(MERCHANT_QR.replace("BEKASI", "BEKASU"))


class TestMakeDynamic:
    """Static → dynamic QRIS"""

    def test_issued_merchant_payload(self):
        qr = make_dynamic(MERCHANT_QR, 25000).qr_string
        assert qr.startswith("000201010212")
        assert "540525000" + "5802ID" in qr
        assert read_amount(qr) == 25000
        assert verify_checksum(qr)

    def test_amount_tag_before_country_code(self, static_qr):
        result = make_dynamic(static_qr, 10000)
        assert "540510000" + "5802ID" in result.qr_string
        assert result.amount == 10000

    def test_checksum_recomputed(self, static_qr):
        qr = make_dynamic(static_qr, 10000).qr_string
        assert not qr.endswith("ABCD")
        assert qr[-8:-4] == "6304"
        assert checksum(qr[:-4]) == qr[-4:]
        assert verify_checksum(qr)

    def test_point_of_initiation_dynamic(self, static_qr):
        qr = make_dynamic(static_qr, 5).qr_string
        assert qr.startswith("000201010212")
        assert "010211" not in qr

    def test_exactly_one_amount_field(self, static_qr):
        qr = make_dynamic(static_qr, 50350).qr_string
        tags = [f.tag for f in parse_tlv(qr)]
        assert tags.count("54") == 1
        assert read_amount(qr) == 50350

    @pytest.mark.parametrize("amount", [1, 9, 10, 999999, 123456789012])
    def test_amount_lengths(self, static_qr, amount):
        qr = make_dynamic(static_qr, amount).qr_string
        assert read_amount(qr) == amount
        assert verify_checksum(qr)

    def test_only_first_initiation_replaced(self):
        template = "000201010211" "5802ID" "5906010211" "6304ABCD"
        qr = make_dynamic(template, 100).qr_string
        assert qr.startswith("000201010212")
        assert qr.count("010211") == 1

    def test_static_without_initiation_still_converted(self):
        template = "000201" "5802ID" "5904TOKO" "6304ABCD"
        qr = make_dynamic(template, 100).qr_string
        assert qr.startswith("00020154031005802ID")

    def test_non_standard_template(self):
        qr = make_dynamic("XX5802IDYY6304ABCD", 1000).qr_string
        assert qr.startswith("XX54041000" + "5802IDYY6304")
        assert verify_checksum(qr)

    def test_missing_country_code(self):
        with pytest.raises(MalformedTemplate):
            make_dynamic("00020101021153033606304ABCD", 1000)

    def test_empty_template(self):
        with pytest.raises(MalformedTemplate):
            make_dynamic("", 1000)

    @pytest.mark.parametrize("amount", [0, -1, True, 1.5, "1000", None])
    def test_invalid_amount(self, static_qr, amount):
        with pytest.raises(InvalidAmount):
            make_dynamic(static_qr, amount)

    def test_already_dynamic_rejected(self, static_qr):
        qr = make_dynamic(static_qr, 10000).qr_string
        with pytest.raises(AmountAlreadyPresent):
            make_dynamic(qr, 20000)

    def test_input_not_mutated(self, static_qr):
        original = str(static_qr)
        make_dynamic(static_qr, 10000)
        assert static_qr == original


class TestTlvHelpers:
    """TLV inspection"""

    def test_parse_static(self, static_qr):
        fields = parse_tlv(static_qr)
        assert [f.tag for f in fields] == [
            "00", "01", "26", "52", "53", "58", "59", "60", "61", "63"
        ]
        assert fields[6].value == "TOKO MAJU"

    def test_parse_inconsistent_length(self):
        with pytest.raises(MalformedTemplate):
            parse_tlv("000201" "5920SHORT")

    def test_static_has_no_amount(self, static_qr):
        assert read_amount(static_qr) is None

    def test_build_amount_tag(self):
        assert build_amount_tag(5) == "54015"
        assert build_amount_tag(10000) == "540510000"

    def test_verify_checksum_rejects_placeholder(self, static_qr):
        assert verify_checksum(static_qr) is False
        assert verify_checksum("63") is False
