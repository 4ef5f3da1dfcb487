"""
Pure helpers in domains.erp: arithmetic, validation rules, asset payments.

Run: pytest backend/test_erp_rules.py -v
"""

from datetime import date

import pytest

from domains.erp.assets import ASSET_MESSAGES_BN, ASSET_MESSAGES_EN, asset_errors, normalize_asset_payment
from domains.erp.calculations import (
    add_months,
    due_amount,
    first_number,
    installment_end_date,
    parse_date,
    payment_summary,
    refund_total,
    reissue_total,
    sum_field,
    to_number,
)
from domains.erp.rules import (
    is_valid_bd_mobile,
    is_valid_email,
    is_valid_phone,
    next_sequence_id,
    trade_party_errors,
)


class TestNumbers:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, 0.0),
            ("", 0.0),
            ("  ", 0.0),
            ("1,250.50", 1250.5),
            ("abc", 0.0),
            (float("nan"), 0.0),
            (True, 0.0),
            (7, 7.0),
        ],
    )
    def test_to_number(self, value, expected):
        assert to_number(value) == expected

    def test_first_number_skips_zero_and_blank(self):
        record = {"totalAmount": 0, "totalBill": "", "total_amount": "900"}
        assert first_number(record, "totalAmount", "totalBill", "total_amount") == 900
        assert first_number({}, "a", "b") == 0

    def test_sum_field(self):
        assert sum_field([{"a": 1}, {"b": 2}, {"a": "3"}], "a", "b") == 6

    def test_payment_summary_reconciles(self):
        records = [
            {"totalAmount": 1000, "paidAmount": 400},
            {"totalBill": 500, "paid_amount": 500},
            {"total_amount": "250"},
        ]
        summary = payment_summary(records)
        assert summary == {"totalAmount": 1750, "paidAmount": 900, "dueAmount": 850}
        assert summary["totalAmount"] - summary["paidAmount"] == summary["dueAmount"]

    def test_due_amount_can_go_negative(self):
        assert due_amount(100, 150) == -50


class TestTicketMath:
    def test_refund_total(self):
        assert refund_total(50000, 10000, "2000", None) == 38000

    def test_refund_total_floors_at_zero(self):
        assert refund_total(1000, 800, 300, 0) == 0

    def test_reissue_total(self):
        assert reissue_total("4000", 500, None, 1200) == 5700


class TestDates:
    def test_parse_date_formats(self):
        assert parse_date("2026-01-31") == date(2026, 1, 31)
        assert parse_date("2026-01-31T10:15:00Z") == date(2026, 1, 31)
        assert parse_date(date(2026, 5, 1)) == date(2026, 5, 1)
        assert parse_date("31/01/2026") is None
        assert parse_date("") is None

    @pytest.mark.parametrize(
        "start, months, expected",
        [
            (date(2026, 1, 31), 1, date(2026, 2, 28)),
            (date(2024, 1, 31), 1, date(2024, 2, 29)),
            (date(2026, 11, 15), 3, date(2027, 2, 15)),
            (date(2026, 3, 10), 0, date(2026, 3, 10)),
        ],
    )
    def test_add_months_clamps_day(self, start, months, expected):
        assert add_months(start, months) == expected

    def test_installment_end_date(self):
        assert installment_end_date("2026-01-31", 12) == date(2026, 12, 31)
        assert installment_end_date("2026-01-15", 1) == date(2026, 1, 15)
        assert installment_end_date("2026-01-15", 0) is None
        assert installment_end_date(None, 6) is None

    def test_installment_end_date_out_of_calendar_is_none(self):
        assert installment_end_date("2026-01-15", 200000) is None
        assert installment_end_date("2026-01-15", float("inf")) is None


class TestContactRules:
    @pytest.mark.parametrize("mobile", ["01712345678", "+8801712345678", "8801912345678", "01712 345 678"])
    def test_valid_bd_mobiles(self, mobile):
        assert is_valid_bd_mobile(mobile)

    @pytest.mark.parametrize("mobile", ["", "0121234567", "01212345678", "1712345678x"])
    def test_invalid_bd_mobiles(self, mobile):
        assert not is_valid_bd_mobile(mobile)

    def test_email_and_phone(self):
        assert is_valid_email(" ops@agency.com.bd ")
        assert not is_valid_email("ops@agency")
        assert not is_valid_email(None)
        assert is_valid_phone("+880 (2) 955-1234")
        assert not is_valid_phone("12ab")

    def test_next_sequence_id(self):
        assert next_sequence_id([], "VN", 5) == "VN00001"
        assert next_sequence_id(["VN00007", "vn-00002", "junk", None], "VN", 5) == "VN00008"
        assert next_sequence_id(["AGT0009"], "AGT", 4) == "AGT0010"
        assert next_sequence_id(["HAJ9999"], "HAJ", 4) == "HAJ10000"

    def test_trade_party_errors_in_form_order(self):
        errors = trade_party_errors({"nid": "12", "passport": "ZZ"})
        assert list(errors) == ["tradeName", "tradeLocation", "ownerName", "contactNo", "nid", "passport"]
        assert trade_party_errors(
            {"tradeName": "A", "tradeLocation": "B", "ownerName": "C", "contactNo": "01712345678"}
        ) == {}


class TestAssetRules:
    ONE_TIME = {
        "name": "Printer",
        "type": "Office Equipment",
        "totalPaidAmount": "18000",
        "paymentDate": "2026-02-01",
        "purchaseDate": "2026-02-01",
    }

    def test_valid_one_time(self):
        assert asset_errors(self.ONE_TIME) == {}

    def test_bengali_messages_by_default(self):
        errors = asset_errors({})
        assert errors["name"] == ASSET_MESSAGES_BN["name"]
        assert list(errors) == ["name", "type", "totalPaidAmount", "paymentDate", "purchaseDate"]

    def test_installment_fields(self):
        errors = asset_errors(dict(self.ONE_TIME, paymentType="installment"), ASSET_MESSAGES_EN)
        assert errors == {
            "numberOfInstallments": "Number of installments is required",
            "installmentAmount": "Installment amount is required",
            "installmentStartDate": "Installment start date is required",
        }

    def test_normalize_one_time_clears_plan(self):
        data = normalize_asset_payment(dict(self.ONE_TIME, numberOfInstallments=6, installmentAmount=3000))
        assert data["paymentType"] == "one-time"
        assert data["totalPaidAmount"] == 18000
        assert data["numberOfInstallments"] is None
        assert data["installmentEndDate"] is None

    def test_normalize_installment_derives_end_date(self):
        data = normalize_asset_payment(
            {
                "paymentType": "installment",
                "paymentDate": "2026-01-01",
                "numberOfInstallments": "6",
                "installmentAmount": "5000",
                "installmentStartDate": "2026-08-31",
                "installmentEndDate": "2026-09-30",
            }
        )
        assert data["paymentDate"] is None
        assert data["numberOfInstallments"] == 6
        assert data["installmentEndDate"] == "2027-01-31"
