# frontend/views_air.py
# Air ticketing: agents, GDS providers, refunds and reissues.

from typing import Any, Dict, Optional

import streamlit as st

try:
    from frontend.aggregations import records_of, ticketing_summary
    from frontend.api_client import fetch_json_parallel
    from frontend.components import FieldSpec, Resource, day, money, render_resource, text
    from frontend.config import DASHBOARD_FETCH_LIMIT
    from frontend.formatting import active_label, format_currency, format_number_bn, status_label
    from frontend.validation import (
        refund_preview,
        reissue_preview,
        validate_air_agent,
        validate_gds,
        validate_refund,
        validate_reissue,
    )
except ModuleNotFoundError:
    from aggregations import records_of, ticketing_summary
    from api_client import fetch_json_parallel
    from components import FieldSpec, Resource, day, money, render_resource, text
    from config import DASHBOARD_FETCH_LIMIT
    from formatting import active_label, format_currency, format_number_bn, status_label
    from validation import (
        refund_preview,
        reissue_preview,
        validate_air_agent,
        validate_gds,
        validate_refund,
        validate_reissue,
    )

TICKET_STATUSES = ("Pending", "Approved", "Processing", "Completed", "Rejected")
DEFAULT_GDS_PROVIDERS = ("Sabre", "Amadeus", "Galileo", "Travelport", "Worldspan")
REFUND_METHODS = ("Cash", "Bank Transfer", "Mobile Banking", "Cheque", "Credit Note")


# ---------------------------------------------------------
# Air agents
# ---------------------------------------------------------
AIR_AGENTS = Resource(
    key="air_agents",
    title="Air Agents",
    path="/api/air-agents",
    module="agents",
    columns=[
        ("Agent ID", text("agentId")),
        ("Trade Name", text("name")),
        ("Contact Person", text("personalName")),
        ("Mobile", text("mobile")),
        ("Email", text("email")),
        ("City", text("city")),
        ("Status", lambda r: active_label(r.get("status"))),
    ],
    detail=[
        ("Agent ID", text("agentId")),
        ("Trade Name", text("name")),
        ("Contact Person", text("personalName")),
        ("Mobile", text("mobile")),
        ("Email", text("email")),
        ("Address", text("address")),
        ("City", text("city")),
        ("State", text("state")),
        ("Zip", text("zipCode")),
        ("Country", text("country")),
        ("NID", text("nid")),
        ("Passport", text("passport")),
        ("Trade License", text("tradeLicense")),
        ("TIN", text("tinNumber")),
        ("Status", lambda r: active_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("agentId", "Agent ID", help="Leave empty to assign the next AGT number", create_only=True),
        FieldSpec("name", "Trade Name", required=True),
        FieldSpec("personalName", "Contact Person"),
        FieldSpec("email", "Email", required=True),
        FieldSpec("mobile", "Mobile", required=True, help="01XXXXXXXXX"),
        FieldSpec("address", "Address"),
        FieldSpec("city", "City"),
        FieldSpec("state", "State"),
        FieldSpec("zipCode", "Zip Code"),
        FieldSpec("country", "Country"),
        FieldSpec("nid", "NID"),
        FieldSpec("passport", "Passport"),
        FieldSpec("tradeLicense", "Trade License"),
        FieldSpec("tinNumber", "TIN Number"),
        FieldSpec("status", "Status", kind="select", options=("Active", "Inactive")),
    ],
    validate=validate_air_agent,
    label=lambda r: f"{r.get('name') or 'Agent'} ({r.get('agentId') or '-'})",
    statuses=("Active", "Inactive"),
    icon="🧑‍✈️",
)


# ---------------------------------------------------------
# GDS
# ---------------------------------------------------------
def _remember_providers(body: Dict[str, Any]) -> None:
    # The provider filter is rendered before the list loads; reuse the last answer
    providers = body.get("providers") or []
    if providers:
        st.session_state["gds_providers"] = providers


def _provider_filter(key: str) -> Dict[str, Any]:
    known = st.session_state.get("gds_providers") or list(DEFAULT_GDS_PROVIDERS)
    return {"provider": st.selectbox("Provider", ["All"] + list(known), key=f"{key}_provider")}


GDS = Resource(
    key="gds",
    title="GDS",
    path="/api/air-ticketing/gds",
    module="settings",
    columns=[
        ("Name", text("name")),
        ("Provider", text("provider")),
        ("GDS Code", text("gdsCode")),
        ("PCC", text("pccCode")),
        ("Commission %", lambda r: format_number_bn(r.get("commissionRate"))),
        ("Status", lambda r: active_label(r.get("status"))),
    ],
    detail=[
        ("Name", text("name")),
        ("Provider", text("provider")),
        ("GDS Code", text("gdsCode")),
        ("PCC", text("pccCode")),
        ("Queue", text("queueNumber")),
        ("API URL", text("apiUrl")),
        ("Commission %", lambda r: format_number_bn(r.get("commissionRate"))),
        ("Contact Person", text("contactPerson")),
        ("Contact Phone", text("contactPhone")),
        ("Contact Email", text("contactEmail")),
        ("Remarks", text("remarks")),
        ("Status", lambda r: active_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("name", "GDS নাম", required=True),
        FieldSpec("provider", "Provider", kind="select", options=DEFAULT_GDS_PROVIDERS, required=True),
        FieldSpec("gdsCode", "GDS Code", help="Generated from the provider when empty"),
        FieldSpec("pccCode", "PCC Code"),
        FieldSpec("queueNumber", "Queue Number"),
        FieldSpec("apiUrl", "API URL"),
        FieldSpec("commissionRate", "Commission Rate (%)", kind="number"),
        FieldSpec("contactPerson", "Contact Person"),
        FieldSpec("contactPhone", "Contact Phone"),
        FieldSpec("contactEmail", "Contact Email"),
        FieldSpec("status", "Status", kind="select", options=("Active", "Inactive")),
        FieldSpec("remarks", "Remarks", kind="textarea"),
    ],
    validate=validate_gds,
    label=lambda r: f"{r.get('name') or 'GDS'} · {r.get('provider') or '-'}",
    statuses=("Active", "Inactive"),
    filters=_provider_filter,
    summary=_remember_providers,
    icon="🛰️",
)


# ---------------------------------------------------------
# Refunds and reissues
# ---------------------------------------------------------
def render_ticketing_summary(_: Dict[str, Any]) -> None:
    bodies = fetch_json_parallel({
        "refunds": ("/api/air-ticketing/refund", {"limit": DASHBOARD_FETCH_LIMIT}),
        "reissues": ("/api/air-ticketing/reissue", {"limit": DASHBOARD_FETCH_LIMIT}),
    })
    stats = ticketing_summary(records_of(bodies.get("refunds")), records_of(bodies.get("reissues")))
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Refunds", format_number_bn(stats["refundCount"]), f"{format_number_bn(stats['pendingRefunds'])} pending", delta_color="off")
    c2.metric("Refunded", format_currency(stats["refundAmount"]))
    c3.metric("Reissues", format_number_bn(stats["reissueCount"]), f"{format_number_bn(stats['pendingReissues'])} pending", delta_color="off")
    c4.metric("Reissue charges", format_currency(stats["reissueCharges"]))


def _refund_message(form: Dict[str, Any]) -> Optional[str]:
    return f"💸 Refund amount: {format_currency(refund_preview(form))}"


def _reissue_message(form: Dict[str, Any]) -> Optional[str]:
    return f"🔁 Total charge: {format_currency(reissue_preview(form))}"


REFUNDS = Resource(
    key="refunds",
    title="Refunds",
    path="/api/air-ticketing/refund",
    module="customers",
    columns=[
        ("Ticket", text("ticketNumber")),
        ("PNR", text("pnr")),
        ("Passenger", text("passengerName")),
        ("Customer", text("customerName")),
        ("Refund", money("refundAmount")),
        ("Method", text("refundMethod")),
        ("Status", lambda r: status_label(r.get("status"))),
        ("Created", day("createdAt")),
    ],
    detail=[
        ("Ticket", text("ticketNumber")),
        ("PNR", text("pnr")),
        ("Passenger", text("passengerName")),
        ("Customer", text("customerName")),
        ("Actual Fare", money("actualFare")),
        ("Used Amount", money("usedAmount")),
        ("Service Charge", money("serviceCharge")),
        ("Airlines Penalty", money("airlinesPenalty")),
        ("Refund", money("refundAmount")),
        ("Method", text("refundMethod")),
        ("Reason", text("reason")),
        ("Status", lambda r: status_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("ticketNumber", "টিকেট নম্বর", required=True),
        FieldSpec("pnr", "PNR"),
        FieldSpec("passengerName", "Passenger Name"),
        FieldSpec("customerName", "Customer Name"),
        FieldSpec("actualFare", "Actual Fare (৳)", kind="number"),
        FieldSpec("usedAmount", "Used Amount (৳)", kind="number"),
        FieldSpec("serviceCharge", "Service Charge (৳)", kind="number"),
        FieldSpec("airlinesPenalty", "Airlines Penalty (৳)", kind="number"),
        FieldSpec("refundAmount", "রিফান্ড পরিমাণ (৳)", kind="number", help="Used only when no fare breakdown is given"),
        FieldSpec("refundMethod", "Refund Method", kind="select", options=REFUND_METHODS),
        FieldSpec("status", "Status", kind="select", options=TICKET_STATUSES),
        FieldSpec("reason", "Reason", kind="textarea"),
    ],
    validate=validate_refund,
    label=lambda r: f"Refund {r.get('ticketNumber') or '-'} · {r.get('passengerName') or 'N/A'}",
    statuses=TICKET_STATUSES,
    live_form=True,
    preview=_refund_message,
    summary=render_ticketing_summary,
    icon="💸",
)

REISSUES = Resource(
    key="reissues",
    title="Reissues",
    path="/api/air-ticketing/reissue",
    module="customers",
    columns=[
        ("Ticket", text("ticketNumber")),
        ("PNR", text("pnr")),
        ("Passenger", text("passengerName")),
        ("Vendor", text("vendorName")),
        ("Old Date", day("oldTravelDate")),
        ("New Date", day("newTravelDate")),
        ("Charge", money("totalCharge")),
        ("Status", lambda r: status_label(r.get("status"))),
    ],
    detail=[
        ("Ticket", text("ticketNumber")),
        ("PNR", text("pnr")),
        ("Passenger", text("passengerName")),
        ("Vendor", text("vendorName")),
        ("Old Travel Date", day("oldTravelDate")),
        ("New Travel Date", day("newTravelDate")),
        ("Fare Difference", money("fareDifference")),
        ("Tax Difference", money("taxDifference")),
        ("Service Fee", money("serviceFee")),
        ("Airlines Penalty", money("airlinesPenalty")),
        ("Total Charge", money("totalCharge")),
        ("Remarks", text("remarks")),
        ("Status", lambda r: status_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("ticketNumber", "টিকেট নম্বর", required=True),
        FieldSpec("pnr", "PNR"),
        FieldSpec("passengerName", "Passenger Name"),
        FieldSpec("vendorName", "Vendor"),
        FieldSpec("oldTravelDate", "Old Travel Date", kind="date"),
        FieldSpec("newTravelDate", "New Travel Date", kind="date"),
        FieldSpec("fareDifference", "Fare Difference (৳)", kind="number"),
        FieldSpec("taxDifference", "Tax Difference (৳)", kind="number"),
        FieldSpec("serviceFee", "Service Fee (৳)", kind="number"),
        FieldSpec("airlinesPenalty", "Airlines Penalty (৳)", kind="number"),
        FieldSpec("status", "Status", kind="select", options=TICKET_STATUSES),
        FieldSpec("remarks", "Remarks", kind="textarea"),
    ],
    validate=validate_reissue,
    label=lambda r: f"Reissue {r.get('ticketNumber') or '-'} · {r.get('passengerName') or 'N/A'}",
    statuses=TICKET_STATUSES,
    live_form=True,
    preview=_reissue_message,
    summary=render_ticketing_summary,
    icon="🔁",
)


def render_air_agents() -> None:
    render_resource(AIR_AGENTS)


def render_gds() -> None:
    render_resource(GDS)


def render_refunds() -> None:
    render_resource(REFUNDS)


def render_reissues() -> None:
    render_resource(REISSUES)
