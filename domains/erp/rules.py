"""
Validation rules and reference data shared by API routes and forms.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Mapping

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
BD_MOBILE_RE = re.compile(r"^(\+880|880|0)?1[3-9]\d{8}$")
PHONE_RE = re.compile(r"^\+?[0-9\-()\s]{6,20}$")
NID_RE = re.compile(r"^[0-9]{8,20}$")
PASSPORT_RE = re.compile(r"^[A-Za-z0-9]{6,12}$")
AGENT_ID_RE = re.compile(r"^AGT\d{4}$")
CONTACT_NUMBER_RE = re.compile(r"^\+?[0-9\s\-()]+$")

ASSET_TYPES = ("Office Equipment", "Vehicle", "Furniture", "IT Equipment", "Other")
PAYMENT_TYPES = ("one-time", "installment")
CAPPING_TYPES = ("IATA", "Airlines Capping")
# Capping investments live in their own ledger
INVESTMENT_EXCLUDED_TYPES = CAPPING_TYPES
BANK_ACCOUNT_CATEGORIES = ("cash", "bank", "mobile_banking", "check", "others")

SERVICE_PENDING = ("pending", "processing", "active")
SERVICE_COMPLETED = ("completed", "delivered")


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value.strip()))


def normalize_mobile(value: Any) -> str:
    return re.sub(r"\s+", "", str(value or ""))


def is_valid_bd_mobile(value: Any) -> bool:
    return bool(BD_MOBILE_RE.match(normalize_mobile(value)))


def is_valid_phone(value: Any) -> bool:
    return isinstance(value, str) and bool(PHONE_RE.match(value.strip()))


def next_sequence_id(existing_ids: Iterable[Any], prefix: str, width: int) -> str:
    """
    Next human-readable id after the highest existing one.

    next_sequence_id(["VN00007", "VN-00002"], "VN", 5) -> "VN00008"
    """
    pattern = re.compile(rf"^{re.escape(prefix)}-?(\d+)$", re.IGNORECASE)
    highest = 0
    for value in existing_ids:
        match = pattern.match(str(value or "").strip())
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{highest + 1:0{width}d}"


def trade_party_errors(data: Mapping[str, Any]) -> Dict[str, str]:
    """
    Field errors for a vendor or haj agent (trade name, location, owner, contact).

    NID and passport are optional but must be well-formed when present.
    """
    errors: Dict[str, str] = {}
    if is_blank(data.get("tradeName")):
        errors["tradeName"] = "Trade Name is required"
    if is_blank(data.get("tradeLocation")):
        errors["tradeLocation"] = "Trade Location is required"
    if is_blank(data.get("ownerName")):
        errors["ownerName"] = "Owner's Name is required"
    if is_blank(data.get("contactNo")):
        errors["contactNo"] = "Contact No is required"
    elif not is_valid_phone(data.get("contactNo")):
        errors["contactNo"] = "Enter a valid phone number"

    nid = str(data.get("nid") or "").strip()
    if nid and not NID_RE.match(nid):
        errors["nid"] = "NID should be 8-20 digits"
    passport = str(data.get("passport") or "").strip()
    if passport and not PASSPORT_RE.match(passport):
        errors["passport"] = "Passport should be 6-12 alphanumeric characters"
    return errors
