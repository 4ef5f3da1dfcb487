# frontend/views_vendors.py
# Vendors (with their bills) and haj agents. Both use the trade-party form.

from typing import Any, Dict

import streamlit as st

try:
    from frontend.api_client import api_request, error_message, response_json
    from frontend.components import FieldSpec, Resource, day, flash, go_to, load_list, money, render_errors, render_resource, render_table, text
    from frontend.formatting import active_label, format_currency, format_number_bn
    from frontend.validation import validate_trade_party
except ModuleNotFoundError:
    from api_client import api_request, error_message, response_json
    from components import FieldSpec, Resource, day, flash, go_to, load_list, money, render_errors, render_resource, render_table, text
    from formatting import active_label, format_currency, format_number_bn
    from validation import validate_trade_party

from domains.erp.calculations import to_number

TRADE_PARTY_FIELDS = [
    FieldSpec("tradeName", "Trade Name", required=True),
    FieldSpec("tradeLocation", "Trade Location", required=True),
    FieldSpec("ownerName", "Owner Name", required=True),
    FieldSpec("contactNo", "Contact No", required=True, help="+8801XXXXXXXXX"),
    FieldSpec("dob", "Date of Birth", kind="date"),
    FieldSpec("nid", "NID"),
    FieldSpec("passport", "Passport"),
    FieldSpec("logo", "Logo URL"),
    FieldSpec("status", "Status", kind="select", options=("active", "inactive")),
]

BILL_TYPES = ("Air Ticket", "Hajj Package", "Umrah Package", "Visa", "Hotel", "Transport", "Other")

VENDOR_COLUMNS = [
    ("Vendor ID", text("vendorId")),
    ("Trade Name", text("tradeName")),
    ("Location", text("tradeLocation")),
    ("Owner", text("ownerName")),
    ("Contact", text("contactNo")),
    ("Status", lambda r: active_label(r.get("status"))),
]

BILL_COLUMNS = [
    ("Bill #", text("billNumber")),
    ("Type", text("billType")),
    ("Date", day("billDate")),
    ("Total", money("totalAmount")),
    ("Paid", money("paidAmount")),
    ("Due", money("dueAmount")),
]

AGENT_COLUMNS = [
    ("Trade Name", text("tradeName")),
    ("Location", text("tradeLocation")),
    ("Owner", text("ownerName")),
    ("Contact", text("contactNo")),
    ("Total Bill", money("totalBill")),
    ("Paid", money("totalPaid")),
    ("Due", money("totalDue")),
    ("Status", lambda r: active_label(r.get("status"))),
]


def validate_bill(form: Dict[str, Any]) -> Dict[str, str]:
    errors = {}
    if to_number(form.get("totalAmount")) <= 0:
        errors["totalAmount"] = "Total amount is required and must be greater than 0"
    if to_number(form.get("paidAmount")) > to_number(form.get("totalAmount")):
        errors["paidAmount"] = "Paid amount cannot exceed the bill total"
    return errors


def render_vendor_dashboard(_: Dict[str, Any]) -> None:
    resp = api_request("GET", "/api/vendors/dashboard")
    if resp is None or resp.status_code != 200:
        return
    data = response_json(resp).get("data") or {}
    stats = data.get("statistics") or {}
    bills = data.get("bills") or {}

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Vendors", format_number_bn(stats.get("totalVendors", 0)))
    c2.metric("Bills", format_number_bn(bills.get("totalBills", 0)))
    c3.metric("Paid", format_currency(bills.get("totalPaid")))
    c4.metric("Due", format_currency(bills.get("totalDue")))

    top = data.get("topVendors") or []
    if top:
        with st.expander("🏆 Top vendors by billing"):
            render_table(top, [
                ("Vendor", text("tradeName")),
                ("Bills", lambda r: format_number_bn(r.get("billCount"))),
                ("Billed", money("totalBillAmount")),
                ("Due", money("dueAmount")),
            ])


def render_vendor_bills(vendor: Dict[str, Any]) -> None:
    """Bills of one vendor plus the add-bill form."""
    st.markdown("### 🧾 Bills")
    body = load_list(f"/api/vendors/{vendor['id']}/bills", {"page": 1, "limit": 100})
    rows = (body or {}).get("data") or []
    if rows:
        render_table(rows, BILL_COLUMNS)
    else:
        st.caption("No bills yet.")

    with st.expander("➕ Add bill"):
        with st.form(f"vendor_{vendor['id']}_bill_form", clear_on_submit=True):
            c1, c2 = st.columns(2)
            with c1:
                bill_number = st.text_input("Bill Number")
                bill_type = st.selectbox("Bill Type", BILL_TYPES)
                bill_date = st.date_input("Bill Date", value=None)
            with c2:
                total = st.number_input("Total Amount (৳) *", min_value=0.0, step=100.0)
                paid = st.number_input("Paid Amount (৳)", min_value=0.0, step=100.0)
                notes = st.text_input("Notes")
            submitted = st.form_submit_button("💾 Save bill")

    if submitted:
        payload = {
            "billNumber": bill_number.strip() or None,
            "billType": bill_type,
            "billDate": bill_date.isoformat() if bill_date else None,
            "totalAmount": total,
            "paidAmount": paid,
            "notes": notes.strip() or None,
        }
        errors = validate_bill(payload)
        if errors:
            render_errors(errors)
            return
        resp = api_request("POST", f"/api/vendors/{vendor['id']}/bills", json=payload)
        if resp is not None and resp.status_code == 201:
            flash("✅ Bill added")
            go_to(st.session_state["nav_page"], "detail", vendor["id"])
        elif resp is not None:
            st.error(error_message(resp, "Failed to add bill"))


VENDORS = Resource(
    key="vendors",
    title="Vendors",
    path="/api/vendors",
    module="agents",
    columns=VENDOR_COLUMNS,
    fields=TRADE_PARTY_FIELDS,
    validate=validate_trade_party,
    label=lambda r: r.get("tradeName") or "Vendor",
    statuses=("active", "inactive"),
    summary=render_vendor_dashboard,
    detail_actions=render_vendor_bills,
    icon="🏭",
)

HAJ_AGENTS = Resource(
    key="haj_agents",
    title="Haj Agents",
    path="/api/agents",
    module="agents",
    columns=AGENT_COLUMNS,
    fields=TRADE_PARTY_FIELDS + [
        FieldSpec("totalBill", "Total Bill (৳)", kind="number"),
        FieldSpec("totalPaid", "Total Paid (৳)", kind="number"),
    ],
    validate=validate_trade_party,
    label=lambda r: r.get("tradeName") or "Agent",
    statuses=("active", "inactive"),
    icon="🕋",
)


def render_vendors() -> None:
    render_resource(VENDORS)


def render_haj_agents() -> None:
    render_resource(HAJ_AGENTS)
