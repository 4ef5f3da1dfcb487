"""
Payment rules for business assets and family assets.

Both the API and the Streamlit forms run the same checks; only the
message language differs (business assets speak Bengali, family assets
English).
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from .calculations import installment_end_date, to_number
from .rules import is_blank

ASSET_MESSAGES_BN = {
    "name": "সম্পদের নাম আবশ্যক",
    "type": "সম্পদের ধরণ নির্বাচন করুন",
    "totalPaidAmount": "মোট পরিশোধিত মূল্য আবশ্যক এবং ০ এর চেয়ে বেশি হতে হবে",
    "paymentDate": "পরিশোধের তারিখ আবশ্যক",
    "numberOfInstallments": "কিস্তির সংখ্যা আবশ্যক",
    "installmentAmount": "প্রতি কিস্তির পরিমাণ আবশ্যক",
    "installmentStartDate": "কিস্তি শুরু তারিখ আবশ্যক",
    "purchaseDate": "সম্পদ ক্রয়ের তারিখ আবশ্যক",
}

ASSET_MESSAGES_EN = {
    "name": "Asset name is required",
    "type": "Asset type is required",
    "totalPaidAmount": "Total paid amount is required and must be greater than 0",
    "purchaseDate": "Purchase date is required",
    "paymentDate": "Payment date is required for one-time payment",
    "numberOfInstallments": "Number of installments is required",
    "installmentAmount": "Installment amount is required",
    "installmentStartDate": "Installment start date is required",
}


def asset_errors(data: Mapping[str, Any], messages: Mapping[str, str] = ASSET_MESSAGES_BN) -> Dict[str, str]:
    """
    Field-level errors for an asset payload, in form order.

    Returns an empty dict when the payload is valid.
    """
    errors: Dict[str, str] = {}
    if is_blank(data.get("name")):
        errors["name"] = messages["name"]
    if is_blank(data.get("type")):
        errors["type"] = messages["type"]
    if to_number(data.get("totalPaidAmount")) <= 0:
        errors["totalPaidAmount"] = messages["totalPaidAmount"]

    payment_type = data.get("paymentType") or "one-time"
    if payment_type == "one-time":
        if is_blank(data.get("paymentDate")):
            errors["paymentDate"] = messages["paymentDate"]
    elif payment_type == "installment":
        if to_number(data.get("numberOfInstallments")) <= 0:
            errors["numberOfInstallments"] = messages["numberOfInstallments"]
        if to_number(data.get("installmentAmount")) <= 0:
            errors["installmentAmount"] = messages["installmentAmount"]
        if is_blank(data.get("installmentStartDate")):
            errors["installmentStartDate"] = messages["installmentStartDate"]

    if is_blank(data.get("purchaseDate")):
        errors["purchaseDate"] = messages["purchaseDate"]
    return errors


def normalize_asset_payment(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Drop the fields that do not apply to the chosen payment type.

    One-time payments carry no installment plan; installment plans carry no
    single payment date. installmentEndDate follows the start date and the
    installment count; a supplied value is kept only when it cannot be derived.
    """
    payment_type = data.get("paymentType") or "one-time"
    data["paymentType"] = payment_type
    data["totalPaidAmount"] = to_number(data.get("totalPaidAmount"))

    if payment_type == "installment":
        data["paymentDate"] = None
        data["numberOfInstallments"] = int(to_number(data.get("numberOfInstallments")))
        data["installmentAmount"] = to_number(data.get("installmentAmount"))
        end = installment_end_date(data.get("installmentStartDate"), data["numberOfInstallments"])
        if end is not None:
            data["installmentEndDate"] = end.isoformat()
        elif is_blank(data.get("installmentEndDate")):
            data["installmentEndDate"] = None
    else:
        data["numberOfInstallments"] = None
        data["installmentAmount"] = None
        data["installmentStartDate"] = None
        data["installmentEndDate"] = None
    return data
