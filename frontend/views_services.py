# frontend/views_services.py
# Additional services: walk-in customers, passport / manpower / visa / other
# service records and their combined dashboard.

from typing import Any, Dict

import streamlit as st

try:
    from frontend.aggregations import SERVICE_KINDS, records_of, services_dashboard
    from frontend.api_client import fetch_json_parallel
    from frontend.components import FieldSpec, Resource, day, money, render_resource, render_table, show_flash, text
    from frontend.config import DASHBOARD_FETCH_LIMIT
    from frontend.formatting import format_currency, format_date_bn, format_number_bn, status_label
    from frontend.validation import validate_customer, validate_service
except ModuleNotFoundError:
    from aggregations import SERVICE_KINDS, records_of, services_dashboard
    from api_client import fetch_json_parallel
    from components import FieldSpec, Resource, day, money, render_resource, render_table, show_flash, text
    from config import DASHBOARD_FETCH_LIMIT
    from formatting import format_currency, format_date_bn, format_number_bn, status_label
    from validation import validate_customer, validate_service

from domains.erp.calculations import first_number

SERVICE_STATUSES = ("pending", "processing", "active", "completed", "delivered", "cancelled")

SERVICE_PATHS = {
    "passport": "/api/passport-services",
    "manpower": "/api/manpower-service",
    "visa": "/api/visa-processing",
    "other": "/api/other-services",
}

SERVICE_TITLES = {
    "passport": ("Passport Services", "🛂"),
    "manpower": ("Manpower Services", "👷"),
    "visa": ("Visa Processing", "🛃"),
    "other": ("Other Services", "🧰"),
}

CUSTOMERS = Resource(
    key="customers",
    title="Customers",
    path="/api/other-customers",
    module="customers",
    columns=[
        ("Customer ID", text("customerId")),
        ("Name", text("name")),
        ("Mobile", text("mobile")),
        ("Email", text("email")),
        ("Passport", text("passportNumber")),
        ("Status", lambda r: status_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("name", "Full Name", help="Or fill first and last name"),
        FieldSpec("firstName", "First Name"),
        FieldSpec("lastName", "Last Name"),
        FieldSpec("mobile", "Mobile", required=True),
        FieldSpec("email", "Email"),
        FieldSpec("passportNumber", "Passport Number"),
        FieldSpec("address", "Address", kind="textarea"),
        FieldSpec("status", "Status", kind="select", options=("active", "inactive")),
        FieldSpec("notes", "Notes", kind="textarea"),
    ],
    validate=validate_customer,
    label=lambda r: f"{r.get('name') or 'Customer'} ({r.get('customerId') or '-'})",
    statuses=("active", "inactive"),
    icon="🧑‍🤝‍🧑",
)


def _service_resource(kind: str) -> Resource:
    title, icon = SERVICE_TITLES[kind]
    return Resource(
        key=f"service_{kind}",
        title=title,
        path=SERVICE_PATHS[kind],
        module="customers",
        columns=[
            ("Client", text("clientName")),
            ("Phone", text("phone")),
            ("Service", text("serviceType")),
            ("Date", day("date")),
            ("Delivery", day("deliveryDate")),
            ("Total", lambda r: format_currency(first_number(r, "totalAmount", "totalBill"))),
            ("Paid", money("paidAmount")),
            ("Due", money("dueAmount")),
            ("Status", lambda r: status_label(r.get("status"))),
        ],
        detail=[
            ("Client", text("clientName")),
            ("Client ID", text("clientId")),
            ("Phone", text("phone")),
            ("Email", text("email")),
            ("Address", text("address")),
            ("Service", text("serviceType")),
            ("Country", text("country")),
            ("Passport", text("passportNumber")),
            ("Vendor", text("vendorName")),
            ("Date", day("date")),
            ("Delivery", day("deliveryDate")),
            ("Total", lambda r: format_currency(first_number(r, "totalAmount", "totalBill"))),
            ("Paid", money("paidAmount")),
            ("Due", money("dueAmount")),
            ("Status", lambda r: status_label(r.get("status"))),
            ("Notes", text("notes")),
        ],
        fields=[
            FieldSpec("clientName", "Client Name", required=True),
            FieldSpec("clientId", "Client ID"),
            FieldSpec("phone", "Phone", required=True),
            FieldSpec("email", "Email"),
            FieldSpec("serviceType", "Service Type"),
            FieldSpec("country", "Country"),
            FieldSpec("passportNumber", "Passport Number"),
            FieldSpec("vendorName", "Vendor"),
            FieldSpec("date", "Date", kind="date", required=True),
            FieldSpec("deliveryDate", "Delivery Date", kind="date"),
            FieldSpec("totalAmount", "Total Amount (৳)", kind="number"),
            FieldSpec("paidAmount", "Paid Amount (৳)", kind="number"),
            FieldSpec("status", "Status", kind="select", options=SERVICE_STATUSES),
            FieldSpec("address", "Address", kind="textarea"),
            FieldSpec("notes", "Notes", kind="textarea"),
        ],
        validate=validate_service,
        label=lambda r: f"{r.get('clientName') or 'Client'} · {r.get('serviceType') or title}",
        statuses=SERVICE_STATUSES,
        icon=icon,
    )


SERVICES = {kind: _service_resource(kind) for kind in SERVICE_KINDS}


def render_customers() -> None:
    render_resource(CUSTOMERS)


def render_service(kind: str) -> None:
    render_resource(SERVICES[kind])


def render_services_dashboard() -> None:
    show_flash()
    st.markdown("## 🧾 Additional Services Dashboard")

    wanted: Dict[str, Any] = {"customers": (CUSTOMERS.path, {"limit": DASHBOARD_FETCH_LIMIT})}
    for kind, path in SERVICE_PATHS.items():
        wanted[kind] = (path, {"limit": DASHBOARD_FETCH_LIMIT})

    with st.spinner("Loading dashboard..."):
        bodies = fetch_json_parallel(wanted)

    stats = services_dashboard(
        records_of(bodies.get("customers")),
        {kind: records_of(bodies.get(kind)) for kind in SERVICE_KINDS},
    )

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Customers", format_number_bn(stats["totalCustomers"]))
    c2.metric("Services", format_number_bn(stats["totalServices"]))
    c3.metric("Pending", format_number_bn(stats["pendingServices"]))
    c4.metric("Completed", format_number_bn(stats["completedServices"]))

    c1, c2, c3 = st.columns(3)
    c1.metric("Billed", format_currency(stats["totalAmount"]))
    c2.metric("Collected", format_currency(stats["totalRevenue"]))
    c3.metric("Due", format_currency(stats["totalDue"]))

    cols = st.columns(len(SERVICE_KINDS))
    for col, kind in zip(cols, SERVICE_KINDS):
        title, icon = SERVICE_TITLES[kind]
        col.metric(f"{icon} {title}", format_number_bn(stats["serviceCounts"][kind]))

    st.markdown("### Recent services")
    if stats["recentServices"]:
        render_table(stats["recentServices"], [
            ("Client", text("name")),
            ("Kind", lambda r: SERVICE_TITLES[r["kind"]][0]),
            ("Amount", money("amount")),
            ("Status", lambda r: status_label(r.get("status"))),
            ("Date", lambda r: format_date_bn(r.get("date"))),
        ])
    else:
        st.info("No services recorded yet.")
