# frontend/test_validation.py
# Unit tests for client-side form validation

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.validation import (
    refund_preview,
    reissue_preview,
    validate_air_agent,
    validate_asset,
    validate_bank_account,
    validate_capping,
    validate_customer,
    validate_expense,
    validate_family_asset,
    validate_gds,
    validate_investment,
    validate_pilgrim,
    validate_refund,
    validate_reissue,
    validate_sar,
    validate_service,
    validate_trade_party,
    validate_user,
)


def _one_time_asset(**overrides):
    form = {
        "name": "Office laptop",
        "type": "IT Equipment",
        "totalPaidAmount": 85000,
        "paymentType": "one-time",
        "paymentDate": "2026-01-10",
        "purchaseDate": "2026-01-10",
    }
    form.update(overrides)
    return form


def test_valid_one_time_asset_has_no_errors():
    assert validate_asset(_one_time_asset()) == {}


def test_one_time_asset_needs_payment_date():
    errors = validate_asset(_one_time_asset(paymentDate=None))
    assert errors == {"paymentDate": "পরিশোধের তারিখ আবশ্যক"}


def test_installment_asset_needs_plan_fields():
    errors = validate_asset(_one_time_asset(paymentType="installment", paymentDate=None))
    assert set(errors) == {"numberOfInstallments", "installmentAmount", "installmentStartDate"}


def test_family_asset_messages_are_english():
    errors = validate_family_asset({"paymentType": "one-time"})
    assert errors["name"] == "Asset name is required"
    assert errors["totalPaidAmount"] == "Total paid amount is required and must be greater than 0"
    assert errors["purchaseDate"] == "Purchase date is required"


def test_trade_party_required_fields():
    errors = validate_trade_party({})
    assert list(errors) == ["tradeName", "tradeLocation", "ownerName", "contactNo"]

    ok = {"tradeName": "Al Noor", "tradeLocation": "Dhaka", "ownerName": "Karim", "contactNo": "+8801712345678"}
    assert validate_trade_party(ok) == {}
    assert "nid" in validate_trade_party(dict(ok, nid="12ab"))


def test_air_agent_email_and_mobile_rules():
    errors = validate_air_agent({"name": "", "email": "", "mobile": ""})
    assert errors == {
        "name": "Trade Name is required",
        "email": "Email is required",
        "mobile": "Mobile number is required",
    }

    errors = validate_air_agent({"name": "Sky", "email": "bad", "mobile": "12345"})
    assert errors["email"] == "Invalid email format"
    assert errors["mobile"] == "Invalid mobile number format. Please use format: 01XXXXXXXXX"

    assert validate_air_agent({"name": "Sky", "email": "ops@sky.com", "mobile": "01712345678"}) == {}


def test_air_agent_id_format():
    form = {"name": "Sky", "email": "ops@sky.com", "mobile": "01712345678"}
    assert validate_air_agent(dict(form, agentId="agt0042")) == {}
    assert "agentId" in validate_air_agent(dict(form, agentId="A-42"))


def test_gds_rules():
    assert set(validate_gds({})) == {"name", "provider"}
    errors = validate_gds({"name": "Main", "provider": "Sabre", "commissionRate": 120, "contactEmail": "x"})
    assert set(errors) == {"commissionRate", "contactEmail"}
    assert validate_gds({"name": "Main", "provider": "Sabre", "commissionRate": 7.5}) == {}


def test_refund_preview_prefers_fare_breakdown():
    form = {"actualFare": 50000, "usedAmount": 10000, "serviceCharge": 1500, "airlinesPenalty": 3500, "refundAmount": 1}
    assert refund_preview(form) == 35000


def test_refund_preview_never_negative():
    assert refund_preview({"actualFare": 1000, "airlinesPenalty": 5000}) == 0


def test_refund_preview_falls_back_to_typed_amount():
    assert refund_preview({"refundAmount": "4200"}) == 4200


def test_validate_refund():
    assert validate_refund({}) == {
        "ticketNumber": "টিকেট নম্বর আবশ্যক",
        "refundAmount": "রিফান্ড পরিমাণ আবশ্যক",
    }
    assert validate_refund({"ticketNumber": "997-123", "actualFare": 9000, "usedAmount": 1000}) == {}


def test_reissue_total_and_validation():
    form = {"fareDifference": 2000, "taxDifference": 500, "serviceFee": 300, "airlinesPenalty": 1200}
    assert reissue_preview(form) == 4000
    assert validate_reissue(form) == {"ticketNumber": "টিকেট নম্বর আবশ্যক"}
    assert validate_reissue(dict(form, ticketNumber="997-555")) == {}


def test_pilgrim_name_rules():
    errors = validate_pilgrim({"first_name": "Abdul", "mobile": "01712345678"})
    assert errors == {"name": "Name or first name and last name are required"}
    assert validate_pilgrim({"first_name": "Abdul", "last_name": "Karim", "mobile": "01712345678"}) == {}
    assert validate_pilgrim({"name": "Abdul Karim", "mobile": "01712345678"}) == {}


def test_pilgrim_paid_cannot_exceed_package():
    form = {"name": "Rahima", "mobile": "01812345678", "total_amount": 500000, "paid_amount": 600000}
    assert "paid_amount" in validate_pilgrim(form)


def test_sar_requires_package_year_and_rate():
    assert set(validate_sar({"sarRate": 0})) == {"packageName", "year", "sarRate"}
    assert validate_sar({"packageName": "Economy", "year": "2026", "sarRate": 32.5}) == {}


def test_investment_rules():
    form = {
        "investmentName": "Land share",
        "investmentType": "Land",
        "investmentAmount": 500000,
        "investmentDate": "2026-01-01",
        "maturityDate": "2027-01-01",
        "interestRate": 8,
    }
    assert validate_investment(form) == {}
    assert "investmentType" in validate_investment(dict(form, investmentType="IATA"))
    assert "maturityDate" in validate_investment(dict(form, maturityDate="2025-12-31"))
    assert "interestRate" in validate_investment(dict(form, interestRate=150))
    assert "interestRate" in validate_investment(dict(form, interestRate=None))


def test_capping_rules():
    form = {
        "investmentType": "Airlines Capping",
        "airlineName": "US-Bangla",
        "cappingAmount": 300000,
        "investmentDate": "2026-01-01",
        "maturityDate": "2026-12-31",
        "interestRate": 0,
    }
    assert validate_capping(form) == {}
    assert "investmentType" in validate_capping(dict(form, investmentType="Land"))
    assert validate_capping(dict(form, airlineName=""))["airlineName"] == "এয়ারলাইন নাম আবশ্যক"
    assert "cappingAmount" in validate_capping(dict(form, cappingAmount=0.0))


def test_bank_account_rules():
    form = {
        "bankName": "BRAC Bank",
        "accountNumber": "1501200000001",
        "accountCategory": "bank",
        "bankBranchName": "Gulshan",
        "routingNumber": "060261726",
        "accountHolder": "Agency Ltd",
        "accountTitle": "Agency Ltd",
        "initialBalance": 0.0,
    }
    assert validate_bank_account(form) == {}
    errors = validate_bank_account(dict(form, routingNumber="", initialBalance=-1, contactNumber="n/a"))
    assert errors == {
        "routingNumber": "Routing number is required",
        "initialBalance": "Valid initial balance is required",
        "contactNumber": "Please enter a valid contact number",
    }
    assert "accountCategory" in validate_bank_account(dict(form, accountCategory="crypto"))


def test_customer_and_service_rules():
    assert validate_customer({"name": "Rafiq", "mobile": "01912345678"}) == {}
    assert validate_customer({"firstName": "Rafiq", "mobile": "01912345678", "email": "nope"}) == {
        "email": "Invalid email format"
    }

    assert validate_service({}) == {
        "clientName": "Client name is required",
        "phone": "Phone number is required",
        "date": "Date is required",
    }
    assert validate_service({"clientName": "Rafiq", "phone": "01912345678", "date": "2026-10-01"}) == {}


def test_expense_rules():
    assert set(validate_expense({})) == {"categoryId", "amount"}
    assert validate_expense({"categoryId": 3, "amount": 250, "transactionType": "debit"}) == {}
    assert "transactionType" in validate_expense({"categoryName": "Food", "amount": 10, "transactionType": "refund"})


def test_user_rules_on_create():
    errors = validate_user({"email": "staff@agency.com", "password": "123"})
    assert errors == {"password": "Password must be at least 6 characters", "branchId": "Branch is required"}
    assert validate_user({"password": "secret123", "branchId": "BR-1"}) == {"email": "Email is required"}


def test_user_edit_form_passes_without_email():
    from frontend.views_admin import USERS

    edit_fields = [f.name for f in USERS.fields if not f.create_only]
    assert "email" not in edit_fields

    values = {
        "password": None,
        "name": "Staff",
        "phone": "01712345678",
        "role": "manager",
        "branchId": "BR-1",
        "branchName": "Dhaka",
        "status": "inactive",
    }
    form = {name: values.get(name) for name in edit_fields}
    assert validate_user(form, creating=False) == {}
    assert validate_user(dict(form, password="abc"), creating=False) == {
        "password": "Password must be at least 6 characters"
    }
