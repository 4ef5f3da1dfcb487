# frontend/views_hajj.py
# Hajj & Umrah: pilgrims, SAR rates, the combined dashboard and haji contracts.

from datetime import date
from typing import Any, Dict

import streamlit as st

try:
    from frontend.api_client import api_request, error_message, response_json
    from frontend.components import FieldSpec, Resource, day, money, render_resource, show_flash, text
    from frontend.config import AGENCY_NAME, CONTRACT_FONT_PATH, IS_DEV
    from frontend.contract_pdf import generate_haji_contract_pdf
    from frontend.formatting import format_currency, format_number_bn
    from frontend.validation import validate_pilgrim, validate_sar
except ModuleNotFoundError:
    from api_client import api_request, error_message, response_json
    from components import FieldSpec, Resource, day, money, render_resource, show_flash, text
    from config import AGENCY_NAME, CONTRACT_FONT_PATH, IS_DEV
    from contract_pdf import generate_haji_contract_pdf
    from formatting import format_currency, format_number_bn
    from validation import validate_pilgrim, validate_sar

HAJI_STATUSES = ("আনপেইড", "প্রাক-নিবন্ধিত", "নিবন্ধিত", "হজ্ব সম্পন্ন", "রিফান্ডেড", "আর্কাইভ")
UMRAH_STATUSES = ("আনপেইড", "রেডি ফর উমরাহ", "উমরাহ সম্পন্ন", "রিফান্ডেড", "আর্কাইভ")
PAYMENT_METHODS = ("নগদ", "ব্যাংক", "মোবাইল ব্যাংকিং", "কিস্তি")


def _pilgrim_fields(statuses):
    return [
        FieldSpec("customer_id", "Customer ID", help="Leave empty to assign the next number", create_only=True),
        FieldSpec("name", "Full Name", help="Or fill first and last name"),
        FieldSpec("first_name", "First Name"),
        FieldSpec("last_name", "Last Name"),
        FieldSpec("father_name", "Father's Name"),
        FieldSpec("mother_name", "Mother's Name"),
        FieldSpec("spouse_name", "Spouse Name"),
        FieldSpec("gender", "Gender", kind="select", options=("male", "female")),
        FieldSpec("date_of_birth", "Date of Birth", kind="date"),
        FieldSpec("mobile", "Mobile", required=True),
        FieldSpec("whatsapp_no", "WhatsApp"),
        FieldSpec("email", "Email"),
        FieldSpec("passport_number", "Passport Number"),
        FieldSpec("passport_type", "Passport Type", kind="select", options=("ordinary", "official", "diplomatic")),
        FieldSpec("issue_date", "Passport Issue Date", kind="date"),
        FieldSpec("expiry_date", "Passport Expiry Date", kind="date"),
        FieldSpec("nid_number", "NID"),
        FieldSpec("district", "District"),
        FieldSpec("address", "Address", kind="textarea"),
        FieldSpec("package_name", "Package"),
        FieldSpec("departure_date", "Departure", kind="date"),
        FieldSpec("return_date", "Return", kind="date"),
        FieldSpec("total_amount", "Package Amount (৳)", kind="number"),
        FieldSpec("paid_amount", "Paid (৳)", kind="number"),
        FieldSpec("payment_method", "Payment Method", kind="select", options=PAYMENT_METHODS),
        FieldSpec("service_status", "Service Status", kind="select", options=statuses),
        FieldSpec("notes", "Notes", kind="textarea"),
    ]


PILGRIM_COLUMNS = [
    ("ID", text("customer_id")),
    ("Name", text("name")),
    ("Mobile", text("mobile")),
    ("Passport", text("passport_number")),
    ("Package", text("package_name")),
    ("Total", money("total_amount")),
    ("Paid", money("paid_amount")),
    ("Due", money("due_amount")),
    ("Status", text("service_status")),
]

PILGRIM_DETAIL = PILGRIM_COLUMNS + [
    ("Father", text("father_name")),
    ("Mother", text("mother_name")),
    ("Gender", text("gender")),
    ("Date of Birth", day("date_of_birth")),
    ("Email", text("email")),
    ("WhatsApp", text("whatsapp_no")),
    ("NID", text("nid_number")),
    ("Passport Expiry", day("expiry_date")),
    ("District", text("district")),
    ("Address", text("address")),
    ("Departure", day("departure_date")),
    ("Return", day("return_date")),
    ("Payment Method", text("payment_method")),
    ("Notes", text("notes")),
]


def render_contract_download(haji: Dict[str, Any]) -> None:
    """Generate the contract PDF on demand and offer it for download."""
    st.markdown("### 📄 চুক্তিপত্র")
    cache_key = f"_contract_{haji['id']}"
    if st.button("📝 চুক্তিপত্র তৈরি করুন", key=f"contract_{haji['id']}"):
        with st.spinner("PDF তৈরি হচ্ছে..."):
            result = generate_haji_contract_pdf(
                haji,
                {"package_name": haji.get("package_name")},
                today=date.today(),
                agency_name=AGENCY_NAME,
                font_path=CONTRACT_FONT_PATH,
            )
        if not result["success"]:
            st.error(f"❌ চুক্তিপত্র তৈরি করা যায়নি: {result['error']}")
            return
        st.session_state[cache_key] = result
        if IS_DEV:
            print(f"[PDF] Contract ready for haji id={haji['id']} pages={result['pages']}")

    result = st.session_state.get(cache_key)
    if result:
        st.download_button(
            "⬇️ PDF ডাউনলোড",
            data=result["content"],
            file_name=result["filename"],
            mime="application/pdf",
            key=f"contract_download_{haji['id']}",
        )


HAJIS = Resource(
    key="hajis",
    title="Hajis",
    path="/api/hajj-umrah/hajis",
    module="customers",
    columns=PILGRIM_COLUMNS,
    detail=PILGRIM_DETAIL,
    fields=_pilgrim_fields(HAJI_STATUSES),
    validate=validate_pilgrim,
    label=lambda r: f"{r.get('name') or 'Haji'} ({r.get('customer_id') or '-'})",
    statuses=HAJI_STATUSES,
    detail_actions=render_contract_download,
    icon="🕋",
)

UMRAHS = Resource(
    key="umrahs",
    title="Umrahs",
    path="/api/hajj-umrah/umrahs",
    module="customers",
    columns=PILGRIM_COLUMNS,
    detail=PILGRIM_DETAIL,
    fields=_pilgrim_fields(UMRAH_STATUSES),
    validate=validate_pilgrim,
    label=lambda r: f"{r.get('name') or 'Umrah'} ({r.get('customer_id') or '-'})",
    statuses=UMRAH_STATUSES,
    icon="🌙",
)


def _year_filter(key: str) -> Dict[str, Any]:
    return {"year": st.text_input("সাল", key=f"{key}_year", placeholder="2026")}


SAR_RATES = Resource(
    key="sar",
    title="SAR Rates",
    path="/api/hajj-umrah/sar-management",
    module="settings",
    columns=[
        ("Package", text("packageName")),
        ("Transaction", text("transactionName")),
        ("Year", text("year")),
        ("SAR Rate", lambda r: format_number_bn(r.get("sarRate"))),
        ("BDT Rate", lambda r: format_number_bn(r.get("bdtRate")) if r.get("bdtRate") is not None else None),
        ("Status", text("status")),
    ],
    fields=[
        FieldSpec("packageName", "প্যাকেজের নাম", required=True),
        FieldSpec("transactionName", "Transaction Name"),
        FieldSpec("year", "সাল", required=True),
        FieldSpec("sarRate", "সৌদি রিয়াল রেট", kind="number", required=True),
        FieldSpec("bdtRate", "BDT Rate", kind="number"),
        FieldSpec("status", "Status", kind="select", options=("Active", "Inactive")),
        FieldSpec("description", "Description", kind="textarea"),
    ],
    validate=validate_sar,
    label=lambda r: f"{r.get('packageName') or 'SAR'} · {r.get('year') or '-'}",
    statuses=("Active", "Inactive"),
    filters=_year_filter,
    icon="💱",
)


def render_hajis() -> None:
    render_resource(HAJIS)


def render_umrahs() -> None:
    render_resource(UMRAHS)


def render_sar_rates() -> None:
    render_resource(SAR_RATES)


def render_hajj_dashboard() -> None:
    show_flash()
    st.markdown("## 🕋 Hajj & Umrah Dashboard")

    with st.spinner("Loading dashboard..."):
        resp = api_request("GET", "/api/hajj-umrah/dashboard")
    if resp is None:
        return
    if resp.status_code != 200:
        st.error(error_message(resp, "ড্যাশবোর্ড লোড করতে ব্যর্থ হয়েছে"))
        return

    body = response_json(resp)
    hajj = body.get("hajjStats") or {}
    umrah = body.get("umrahStats") or {}
    agents = body.get("agentStats") or {}

    st.markdown("### হজ্ব")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("মোট হাজী", format_number_bn(hajj.get("totalHajis", 0)))
    c2.metric("প্রাক-নিবন্ধিত", format_number_bn(hajj.get("preRegistered", 0)))
    c3.metric("নিবন্ধিত", format_number_bn(hajj.get("registered", 0)))
    c4.metric("হজ্ব সম্পন্ন", format_number_bn(hajj.get("completedHajis", 0)))
    c1, c2, c3 = st.columns(3)
    c1.metric("প্যাকেজ মূল্য", format_currency(hajj.get("totalPackageAmount")))
    c2.metric("পরিশোধিত", format_currency(hajj.get("totalPaidAmount")))
    c3.metric("বকেয়া", format_currency(hajj.get("totalDueAmount")))

    st.markdown("### উমরাহ")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("মোট উমরাহ", format_number_bn(umrah.get("totalUmrahs", 0)))
    c2.metric("রেডি ফর উমরাহ", format_number_bn(umrah.get("readyForUmrah", 0)))
    c3.metric("উমরাহ সম্পন্ন", format_number_bn(umrah.get("completedUmrahs", 0)))
    c4.metric("বকেয়া", format_currency(umrah.get("totalDueAmount")))

    st.markdown("### এজেন্ট")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("মোট এজেন্ট", format_number_bn(agents.get("totalAgents", 0)))
    c2.metric("মোট বিল", format_currency(agents.get("totalBill")))
    c3.metric("পরিশোধিত", format_currency(agents.get("totalPaid")))
    c4.metric("বকেয়া", format_currency(agents.get("totalDue")))
