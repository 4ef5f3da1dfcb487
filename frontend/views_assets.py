# frontend/views_assets.py
# Office assets and family assets. Both share the installment-aware form.

from typing import Any, Dict, Optional

import streamlit as st

try:
    from frontend.aggregations import asset_summary, records_of
    from frontend.components import FieldSpec, Resource, day, load_list, money, render_resource, text
    from frontend.config import DASHBOARD_FETCH_LIMIT
    from frontend.formatting import asset_type_label, format_currency, format_date_bn, format_number_bn, payment_type_label, status_label
    from frontend.validation import validate_asset, validate_family_asset
except ModuleNotFoundError:
    from aggregations import asset_summary, records_of
    from components import FieldSpec, Resource, day, load_list, money, render_resource, text
    from config import DASHBOARD_FETCH_LIMIT
    from formatting import asset_type_label, format_currency, format_date_bn, format_number_bn, payment_type_label, status_label
    from validation import validate_asset, validate_family_asset

from domains.erp.calculations import installment_end_date
from domains.erp.rules import ASSET_TYPES, PAYMENT_TYPES

ASSET_FIELDS = [
    FieldSpec("name", "নাম", required=True),
    FieldSpec("type", "ধরন", kind="select", options=ASSET_TYPES, required=True),
    FieldSpec("providerCompanyName", "সরবরাহকারী প্রতিষ্ঠান"),
    FieldSpec("totalPaidAmount", "মোট পরিশোধিত (৳)", kind="number", required=True),
    FieldSpec("paymentType", "পেমেন্ট ধরন", kind="select", options=PAYMENT_TYPES, required=True),
    FieldSpec("paymentDate", "পেমেন্ট তারিখ", kind="date"),
    FieldSpec("purchaseDate", "ক্রয়ের তারিখ", kind="date", required=True),
    FieldSpec("numberOfInstallments", "কিস্তির সংখ্যা", kind="number", help="শুধু কিস্তি পেমেন্টের জন্য"),
    FieldSpec("installmentAmount", "কিস্তির পরিমাণ (৳)", kind="number"),
    FieldSpec("installmentStartDate", "কিস্তি শুরুর তারিখ", kind="date"),
    FieldSpec("status", "স্ট্যাটাস", kind="select", options=("active", "inactive")),
    FieldSpec("notes", "নোট", kind="textarea"),
]

ASSET_COLUMNS = [
    ("নাম", text("name")),
    ("ধরন", lambda r: asset_type_label(r.get("type"))),
    ("সরবরাহকারী", text("providerCompanyName")),
    ("মোট মূল্য", money("totalPaidAmount")),
    ("পেমেন্ট", lambda r: payment_type_label(r.get("paymentType"))),
    ("স্ট্যাটাস", lambda r: status_label(r.get("status"))),
    ("ক্রয়ের তারিখ", day("purchaseDate")),
]

ASSET_DETAIL = ASSET_COLUMNS + [
    ("পেমেন্ট তারিখ", day("paymentDate")),
    ("কিস্তির সংখ্যা", lambda r: format_number_bn(r.get("numberOfInstallments")) if r.get("numberOfInstallments") else None),
    ("কিস্তির পরিমাণ", lambda r: format_currency(r.get("installmentAmount")) if r.get("installmentAmount") else None),
    ("কিস্তি শুরু", day("installmentStartDate")),
    ("কিস্তি শেষ", day("installmentEndDate")),
    ("নোট", text("notes")),
]


def installment_preview(form: Dict[str, Any]) -> Optional[str]:
    if form.get("paymentType") != "installment":
        return None
    end = installment_end_date(form.get("installmentStartDate"), form.get("numberOfInstallments"))
    if end is None:
        return None
    return f"📅 শেষ কিস্তির তারিখ: {format_date_bn(end)}"


def _summary_for(path: str):
    def render(_: Dict[str, Any]) -> None:
        body = load_list(path, {"page": 1, "limit": DASHBOARD_FETCH_LIMIT})
        stats = asset_summary(records_of(body))
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("মোট সম্পদ", format_number_bn(stats["totalAssets"]))
        c2.metric("মোট মূল্য", format_currency(stats["totalValue"]))
        c3.metric("সক্রিয়", format_number_bn(stats["activeAssets"]))
        c4.metric("কিস্তিতে", format_number_bn(stats["installmentAssets"]))
    return render


def _type_filter(key: str) -> Dict[str, Any]:
    chosen = st.selectbox("ধরন", ["All"] + list(ASSET_TYPES), key=f"{key}_type")
    return {"type": chosen}


ASSETS = Resource(
    key="assets",
    title="Assets",
    path="/api/assets",
    module="transactions",
    columns=ASSET_COLUMNS,
    detail=ASSET_DETAIL,
    fields=ASSET_FIELDS,
    validate=validate_asset,
    label=lambda r: r.get("name") or "Asset",
    statuses=("active", "inactive"),
    filters=_type_filter,
    live_form=True,
    preview=installment_preview,
    summary=_summary_for("/api/assets"),
    icon="🏢",
)

FAMILY_ASSETS = Resource(
    key="family_assets",
    title="Family Assets",
    path="/api/family-assets",
    module="transactions",
    columns=ASSET_COLUMNS,
    detail=ASSET_DETAIL,
    fields=ASSET_FIELDS,
    validate=validate_family_asset,
    label=lambda r: r.get("name") or "Family asset",
    statuses=("active", "inactive"),
    live_form=True,
    preview=installment_preview,
    summary=_summary_for("/api/family-assets"),
    icon="🏠",
)


def render_assets() -> None:
    render_resource(ASSETS)


def render_family_assets() -> None:
    render_resource(FAMILY_ASSETS)
