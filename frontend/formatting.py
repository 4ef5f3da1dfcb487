# frontend/formatting.py
# Bengali-locale display helpers shared by every page and the contract PDF.
#
# Pure functions only: no Streamlit imports, so tests can call them directly.

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from domains.erp.calculations import parse_date

BENGALI_DIGITS = str.maketrans("0123456789", "০১২৩৪৫৬৭৮৯")

BENGALI_MONTHS = (
    "জানুয়ারী",
    "ফেব্রুয়ারী",
    "মার্চ",
    "এপ্রিল",
    "মে",
    "জুন",
    "জুলাই",
    "আগস্ট",
    "সেপ্টেম্বর",
    "অক্টোবর",
    "নভেম্বর",
    "ডিসেম্বর",
)

ASSET_TYPE_LABELS = {
    "Office Equipment": "অফিস সরঞ্জাম",
    "Vehicle": "যানবাহন",
    "Furniture": "আসবাবপত্র",
    "IT Equipment": "আইটি সরঞ্জাম",
    "Other": "অন্যান্য",
}

STATUS_LABELS = {
    "completed": "সম্পন্ন",
    "delivered": "সম্পন্ন",
    "pending": "অপেক্ষমান",
    "processing": "চলমান",
    "active": "চলমান",
    "cancelled": "বাতিল",
    "rejected": "প্রত্যাখ্যাত",
}

PAYMENT_TYPE_LABELS = {
    "one-time": "এককালীন",
    "installment": "কিস্তি",
}

NA = "N/A"


def to_bengali_digits(value: Any) -> str:
    return str(value).translate(BENGALI_DIGITS)


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Decimal for numbers and numeric strings; None for anything unparseable."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _split_number(value: Any) -> Optional[Tuple[bool, str, str]]:
    """(negative, whole digits, fraction digits) rounded half-up to 3 places."""
    number = _to_decimal(value)
    if number is None:
        return None
    rounded = number.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    whole, _, fraction = f"{abs(rounded):f}".partition(".")
    return rounded < 0, whole, fraction.rstrip("0")


def _group_indian(whole: str) -> str:
    """1500000 -> 15,00,000 (last three digits, then pairs)."""
    if len(whole) <= 3:
        return whole
    head, tail = whole[:-3], whole[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    pairs.insert(0, head)
    return ",".join(pairs + [tail])


def _group_western(whole: str) -> str:
    return f"{int(whole):,}"


def _assemble(parts: Tuple[bool, str, str], grouped: str) -> str:
    negative, _, fraction = parts
    text = grouped + (f".{fraction}" if fraction else "")
    return f"-{text}" if negative else text


def format_number_bn(value: Any) -> str:
    """
    Number in the bn-BD locale: Indian digit grouping and Bengali digits.

    format_number_bn(150000)   -> "১,৫০,০০০"
    format_number_bn(1234.5)   -> "১,২৩৪.৫"
    format_number_bn("abc")    -> "০"
    """
    parts = _split_number(value)
    if parts is None:
        return "০"
    return to_bengali_digits(_assemble(parts, _group_indian(parts[1])))


def format_currency(value: Any) -> str:
    return f"৳{format_number_bn(value)}"


def format_currency_en(value: Any) -> str:
    """Taka amount with western grouping and ASCII digits (৳1,500,000)."""
    parts = _split_number(value)
    if parts is None:
        return "৳0"
    return f"৳{_assemble(parts, _group_western(parts[1]))}"


def format_date_bn(value: Any) -> str:
    """১৯ অক্টোবর, ২০২৬ for any ISO date or date object; N/A otherwise."""
    parsed = parse_date(value) if not isinstance(value, (int, float)) else None
    if parsed is None:
        return NA
    month = BENGALI_MONTHS[parsed.month - 1]
    return f"{to_bengali_digits(parsed.day)} {month}, {to_bengali_digits(parsed.year)}"


def format_date(value: Any) -> str:
    parsed = parse_date(value) if not isinstance(value, (int, float)) else None
    return parsed.isoformat() if parsed else NA


def display(value: Any) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return NA
    return str(value)


def asset_type_label(asset_type: Any) -> str:
    if not asset_type:
        return NA
    return ASSET_TYPE_LABELS.get(asset_type, str(asset_type))


def status_label(status: Any) -> str:
    if not status:
        return NA
    return STATUS_LABELS.get(str(status).lower(), str(status))


def payment_type_label(payment_type: Any) -> str:
    return PAYMENT_TYPE_LABELS.get(payment_type or "one-time", str(payment_type))


def active_label(status: Any) -> str:
    return "সক্রিয়" if str(status or "").lower() == "active" else "নিষ্ক্রিয়"
