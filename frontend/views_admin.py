# frontend/views_admin.py
# Staff users and global search.

from typing import Any, Dict, List

import streamlit as st

try:
    from frontend.api_client import api_request, error_message, response_json
    from frontend.components import FieldSpec, Resource, go_to, render_resource, show_flash, text
    from frontend.config import IS_DEV
    from frontend.formatting import active_label, format_number_bn
    from frontend.validation import validate_user
except ModuleNotFoundError:
    from api_client import api_request, error_message, response_json
    from components import FieldSpec, Resource, go_to, render_resource, show_flash, text
    from config import IS_DEV
    from formatting import active_label, format_number_bn
    from validation import validate_user

ROLES = ("super_admin", "admin", "manager", "accountant", "reservation")

# Search group -> (heading, page that opens the record)
SEARCH_GROUPS = {
    "transactions": ("💳 Transactions", "Expenses"),
    "hajis": ("🕋 Hajis", "Hajis"),
    "umrahs": ("🌙 Umrahs", "Umrahs"),
    "vendors": ("🏭 Vendors", "Vendors"),
    "agents": ("🕋 Haj Agents", "Haj Agents"),
    "airAgents": ("🧑‍✈️ Air Agents", "Air Agents"),
    "refunds": ("💸 Refunds", "Refunds"),
    "reissues": ("🔁 Reissues", "Reissues"),
}


def _validate_user_form(form: Dict[str, Any]) -> Dict[str, str]:
    return validate_user(form, creating=st.session_state.get("view") == "add")


USERS = Resource(
    key="users",
    title="Users",
    path="/api/users",
    module="settings",
    columns=[
        ("Name", text("name")),
        ("Email", text("email")),
        ("Role", text("role")),
        ("Branch", lambda r: r.get("branchName") or r.get("branchId")),
        ("Status", lambda r: active_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("email", "Email", required=True, create_only=True),
        FieldSpec("password", "Password", kind="password", help="At least 6 characters; leave empty to keep the current one"),
        FieldSpec("name", "Name"),
        FieldSpec("phone", "Phone"),
        FieldSpec("role", "Role", kind="select", options=ROLES),
        FieldSpec("branchId", "Branch ID", required=True),
        FieldSpec("branchName", "Branch Name"),
        FieldSpec("status", "Status", kind="select", options=("active", "inactive")),
    ],
    validate=_validate_user_form,
    label=lambda r: f"{r.get('name') or r.get('email') or 'User'} · {r.get('role') or '-'}",
    statuses=("active", "inactive"),
    icon="👥",
)


def render_users() -> None:
    render_resource(USERS)


def render_search_hits(group: str, hits: List[Dict[str, Any]]) -> None:
    heading, page = SEARCH_GROUPS.get(group, (group, None))
    st.markdown(f"#### {heading} ({format_number_bn(len(hits))})")
    for hit in hits:
        col, action = st.columns([5, 1])
        with col:
            st.markdown(f"**{hit.get('title')}**  \n{hit.get('subtitle') or ''}")
            if hit.get("description"):
                st.caption(hit["description"])
        with action:
            if page and st.button("Open", key=f"search_open_{group}_{hit['id']}"):
                go_to(page, "detail", hit["id"])


def render_search() -> None:
    show_flash()
    st.markdown("## 🔍 Search")

    with st.form("search_form"):
        query = st.text_input("Search everything", key="search_q", placeholder="Name, passport, ticket, PNR...")
        limit = st.slider("Results per group", min_value=1, max_value=50, value=10, key="search_limit")
        submitted = st.form_submit_button("Search")

    if submitted:
        st.session_state["search_last"] = (query.strip(), limit)

    last = st.session_state.get("search_last")
    if not last or not last[0]:
        st.info("Type something and press Search.")
        return

    q, limit = last
    resp = api_request("GET", "/api/search", params={"q": q, "limit": limit})
    if resp is None:
        return
    if resp.status_code != 200:
        st.error(error_message(resp, "Search failed"))
        return

    body = response_json(resp)
    total = body.get("total", 0)
    if IS_DEV:
        print(f"[SEARCH] q={q!r} total={total}")
    if not total:
        st.warning(f"No results for “{q}”.")
        return

    st.success(f"{format_number_bn(total)} results for “{q}”")
    for group, hits in (body.get("results") or {}).items():
        if hits:
            render_search_hits(group, hits)
