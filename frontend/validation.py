# frontend/validation.py
# Client-side form validation.
#
# Each validate_* returns {field: message} in form order; an empty dict means
# the form may be submitted. Messages match what the API answers for the same
# mistake so users see one wording whichever side catches it.

from __future__ import annotations

from typing import Any, Dict, Mapping

from domains.erp.assets import ASSET_MESSAGES_BN, ASSET_MESSAGES_EN, asset_errors
from domains.erp.calculations import parse_date, refund_total, reissue_total, to_number
from domains.erp.rules import (
    AGENT_ID_RE,
    BANK_ACCOUNT_CATEGORIES,
    CAPPING_TYPES,
    CONTACT_NUMBER_RE,
    INVESTMENT_EXCLUDED_TYPES,
    is_blank,
    is_valid_bd_mobile,
    is_valid_email,
    trade_party_errors,
)

Form = Mapping[str, Any]
Errors = Dict[str, str]


def validate_asset(form: Form) -> Errors:
    return asset_errors(form, ASSET_MESSAGES_BN)


def validate_family_asset(form: Form) -> Errors:
    return asset_errors(form, ASSET_MESSAGES_EN)


def validate_trade_party(form: Form) -> Errors:
    """Vendors and haj agents share one form."""
    return trade_party_errors(form)


def validate_air_agent(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("name")):
        errors["name"] = "Trade Name is required"
    if is_blank(form.get("email")):
        errors["email"] = "Email is required"
    elif not is_valid_email(form.get("email")):
        errors["email"] = "Invalid email format"
    if is_blank(form.get("mobile")):
        errors["mobile"] = "Mobile number is required"
    elif not is_valid_bd_mobile(form.get("mobile")):
        errors["mobile"] = "Invalid mobile number format. Please use format: 01XXXXXXXXX"
    agent_id = str(form.get("agentId") or "").strip().upper()
    if agent_id and not AGENT_ID_RE.match(agent_id):
        errors["agentId"] = "Invalid agent ID format. Must be in format AGT0001"
    return errors


def validate_gds(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("name")):
        errors["name"] = "GDS নাম আবশ্যক"
    if is_blank(form.get("provider")):
        errors["provider"] = "Provider আবশ্যক"
    email = form.get("contactEmail")
    if not is_blank(email) and not is_valid_email(email):
        errors["contactEmail"] = "Invalid email format"
    rate = to_number(form.get("commissionRate"))
    if rate < 0 or rate > 100:
        errors["commissionRate"] = "কমিশন রেট ০ থেকে ১০০ এর মধ্যে হতে হবে"
    return errors


def refund_preview(form: Form) -> float:
    """Refund shown live while the form is edited; the typed amount when no fare breakdown is given."""
    components = (form.get("actualFare"), form.get("usedAmount"), form.get("serviceCharge"), form.get("airlinesPenalty"))
    if any(to_number(c) for c in components):
        return refund_total(*components)
    return to_number(form.get("refundAmount"))


def reissue_preview(form: Form) -> float:
    return reissue_total(
        form.get("fareDifference"), form.get("taxDifference"), form.get("serviceFee"), form.get("airlinesPenalty")
    )


def validate_refund(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("ticketNumber")):
        errors["ticketNumber"] = "টিকেট নম্বর আবশ্যক"
    if refund_preview(form) <= 0:
        errors["refundAmount"] = "রিফান্ড পরিমাণ আবশ্যক"
    return errors


def validate_reissue(form: Form) -> Errors:
    if is_blank(form.get("ticketNumber")):
        return {"ticketNumber": "টিকেট নম্বর আবশ্যক"}
    return {}


def validate_pilgrim(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("name")) and (is_blank(form.get("first_name")) or is_blank(form.get("last_name"))):
        errors["name"] = "Name or first name and last name are required"
    if is_blank(form.get("mobile")):
        errors["mobile"] = "Mobile number is required"
    if not is_blank(form.get("email")) and not is_valid_email(form.get("email")):
        errors["email"] = "Invalid email format"
    if to_number(form.get("paid_amount")) > to_number(form.get("total_amount")) > 0:
        errors["paid_amount"] = "Paid amount cannot exceed the package amount"
    return errors


def validate_sar(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("packageName")):
        errors["packageName"] = "প্যাকেজের নাম আবশ্যক"
    if is_blank(form.get("year")):
        errors["year"] = "সাল আবশ্যক"
    if to_number(form.get("sarRate")) <= 0:
        errors["sarRate"] = "সৌদি রিয়াল রেট আবশ্যক"
    return errors


def _term_errors(form: Form, errors: Errors) -> Errors:
    invested = parse_date(form.get("investmentDate"))
    matures = parse_date(form.get("maturityDate"))
    if invested is None:
        errors["investmentDate"] = "বিনিয়োগ তারিখ আবশ্যক"
    if matures is None:
        errors["maturityDate"] = "পরিপক্কতার তারিখ আবশ্যক"
    elif invested is not None and matures <= invested:
        errors["maturityDate"] = "পরিপক্কতার তারিখ বিনিয়োগ তারিখের পরে হতে হবে"

    rate = form.get("interestRate")
    if rate is None or rate == "" or not 0 <= to_number(rate) <= 100:
        errors["interestRate"] = "সুদের হার ০ থেকে ১০০ এর মধ্যে হতে হবে"
    return errors


def validate_investment(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("investmentName")):
        errors["investmentName"] = "বিনিয়োগ নাম আবশ্যক"
    if is_blank(form.get("investmentType")):
        errors["investmentType"] = "বিনিয়োগ টাইপ আবশ্যক"
    elif form.get("investmentType") in INVESTMENT_EXCLUDED_TYPES:
        errors["investmentType"] = "এই বিনিয়োগ টাইপ এখানে গ্রহণযোগ্য নয়"
    if to_number(form.get("investmentAmount")) <= 0:
        errors["investmentAmount"] = "বিনিয়োগ পরিমাণ আবশ্যক এবং ০ এর চেয়ে বেশি হতে হবে"
    return _term_errors(form, errors)


def validate_capping(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("airlineName")):
        errors["airlineName"] = "এয়ারলাইন নাম আবশ্যক"
    if form.get("investmentType") and form.get("investmentType") not in CAPPING_TYPES:
        errors["investmentType"] = "এই বিনিয়োগ টাইপ এখানে গ্রহণযোগ্য নয়"
    if to_number(form.get("cappingAmount")) <= 0:
        errors["cappingAmount"] = "বিনিয়োগ পরিমাণ আবশ্যক এবং ০ এর চেয়ে বেশি হতে হবে"
    return _term_errors(form, errors)


def validate_bank_account(form: Form) -> Errors:
    errors: Errors = {}
    for field, label in (
        ("bankName", "Bank name"),
        ("accountNumber", "Account number"),
        ("routingNumber", "Routing number"),
        ("accountCategory", "Account category"),
        ("bankBranchName", "Branch name"),
        ("accountHolder", "Account holder"),
        ("accountTitle", "Account title"),
    ):
        if is_blank(form.get(field)):
            errors[field] = f"{label} is required"
    balance = form.get("initialBalance")
    if balance is None or balance == "" or to_number(balance) < 0:
        errors["initialBalance"] = "Valid initial balance is required"
    category = form.get("accountCategory")
    if category and category not in BANK_ACCOUNT_CATEGORIES:
        errors["accountCategory"] = "Please select a valid account category"
    contact = (form.get("contactNumber") or "").strip()
    if contact and not CONTACT_NUMBER_RE.match(contact):
        errors["contactNumber"] = "Please enter a valid contact number"
    return errors


def validate_customer(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("name")) and is_blank(form.get("firstName")) and is_blank(form.get("lastName")):
        errors["name"] = "Name is required"
    if is_blank(form.get("mobile")):
        errors["mobile"] = "Mobile number is required"
    if not is_blank(form.get("email")) and not is_valid_email(form.get("email")):
        errors["email"] = "Invalid email format"
    return errors


def validate_service(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("clientName")):
        errors["clientName"] = "Client name is required"
    if is_blank(form.get("phone")):
        errors["phone"] = "Phone number is required"
    if is_blank(form.get("date")):
        errors["date"] = "Date is required"
    if not is_blank(form.get("email")) and not is_valid_email(form.get("email")):
        errors["email"] = "Invalid email format"
    return errors


def validate_expense(form: Form) -> Errors:
    errors: Errors = {}
    if is_blank(form.get("categoryId")) and is_blank(form.get("categoryName")):
        errors["categoryId"] = "Category is required"
    if to_number(form.get("amount")) <= 0:
        errors["amount"] = "Amount is required"
    if form.get("transactionType") not in (None, "", "debit", "credit"):
        errors["transactionType"] = "Transaction type must be debit or credit"
    return errors


def validate_category(form: Form) -> Errors:
    if is_blank(form.get("name")):
        return {"name": "Category name is required"}
    return {}


def validate_user(form: Form, creating: bool = True) -> Errors:
    errors: Errors = {}
    # Email is fixed after create, so the edit form does not send it
    if creating and is_blank(form.get("email")):
        errors["email"] = "Email is required"
    elif not is_blank(form.get("email")) and not is_valid_email(form.get("email")):
        errors["email"] = "Invalid email format"
    password = form.get("password") or ""
    if creating and not password:
        errors["password"] = "Password is required"
    elif password and len(password) < 6:
        errors["password"] = "Password must be at least 6 characters"
    if creating and is_blank(form.get("branchId")):
        errors["branchId"] = "Branch is required"
    return errors
