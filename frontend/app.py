# frontend/app.py
# Travel agency ERP – Hajj/Umrah, air ticketing, vendors, finance
#
# Run from repo root: streamlit run frontend/app.py
# Or from frontend folder: streamlit run app.py

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

import requests
import streamlit as st

# Repo root holds the shared domains/ package
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Import environment config (robust fallback for different run contexts)
try:
    from frontend.config import AGENCY_NAME, ENABLE_DEBUG_UI, ENV, IS_DEV, IS_LOCAL, get_api_base_url
except ModuleNotFoundError:
    from config import AGENCY_NAME, ENABLE_DEBUG_UI, ENV, IS_DEV, IS_LOCAL, get_api_base_url

# Import centralized auth state management
try:
    from frontend.auth import can, clear_auth, get_current_user, init_auth_state, is_authenticated, require_auth, set_auth
except ModuleNotFoundError:
    from auth import can, clear_auth, get_current_user, init_auth_state, is_authenticated, require_auth, set_auth

# Import centralized API client
try:
    from frontend.api_client import api_request, error_message, fetch_json_parallel, response_json
except ModuleNotFoundError:
    from api_client import api_request, error_message, fetch_json_parallel, response_json

try:
    from frontend.aggregations import overview_counts
    from frontend.components import show_flash
    from frontend.formatting import format_number_bn
    from frontend.views_admin import render_search, render_users
    from frontend.views_air import render_air_agents, render_gds, render_refunds, render_reissues
    from frontend.views_assets import render_assets, render_family_assets
    from frontend.views_finance import (
        render_bank_accounts,
        render_capping,
        render_expense_categories,
        render_expenses,
        render_investments,
        render_markups,
        render_personal_dashboard,
    )
    from frontend.views_hajj import render_hajis, render_hajj_dashboard, render_sar_rates, render_umrahs
    from frontend.views_services import render_customers, render_service, render_services_dashboard
    from frontend.views_vendors import render_haj_agents, render_vendors
except ModuleNotFoundError:
    from aggregations import overview_counts
    from components import show_flash
    from formatting import format_number_bn
    from views_admin import render_search, render_users
    from views_air import render_air_agents, render_gds, render_refunds, render_reissues
    from views_assets import render_assets, render_family_assets
    from views_finance import (
        render_bank_accounts,
        render_capping,
        render_expense_categories,
        render_expenses,
        render_investments,
        render_markups,
        render_personal_dashboard,
    )
    from views_hajj import render_hajis, render_hajj_dashboard, render_sar_rates, render_umrahs
    from views_services import render_customers, render_service, render_services_dashboard
    from views_vendors import render_haj_agents, render_vendors

st.set_page_config(page_title="Travel ERP", page_icon="🕋", layout="wide")

# --------------------------------------------------------------------
# Custom CSS for theme
# --------------------------------------------------------------------

CUSTOM_CSS = """
<style>
/* Green theme for all interactive elements */
.stButton > button {
    background-color: #0f766e !important;
    color: white !important;
    border: none !important;
}

.stButton > button:hover {
    background-color: #14b8a6 !important;
}

.stDownloadButton > button {
    background-color: #0f766e !important;
    color: white !important;
}

/* Radio buttons - navigation options */
.stRadio label {
    color: #0f766e !important;
}

/* Select boxes - status and type filters */
.stSelectbox > div > div {
    border-color: #0f766e !important;
}

/* Metric cards on dashboards */
[data-testid="stMetricValue"] {
    color: #0f766e !important;
}
</style>
"""

st.markdown(CUSTOM_CSS, unsafe_allow_html=True)

# --------------------------------------------------------------------
# Navigation map
# --------------------------------------------------------------------

# Section -> [(page, permission module)]
NAV_SECTIONS: Dict[str, List[Tuple[str, str]]] = {
    "🏠 Overview": [("Dashboard", "dashboard"), ("Search", "dashboard")],
    "🕋 Hajj & Umrah": [
        ("Hajj Dashboard", "dashboard"),
        ("Hajis", "customers"),
        ("Umrahs", "customers"),
        ("Haj Agents", "agents"),
        ("SAR Rates", "settings"),
    ],
    "✈️ Air Ticketing": [
        ("Air Agents", "agents"),
        ("GDS", "settings"),
        ("Refunds", "customers"),
        ("Reissues", "customers"),
    ],
    "🧾 Additional Services": [
        ("Services Dashboard", "customers"),
        ("Customers", "customers"),
        ("Passport Services", "customers"),
        ("Manpower Services", "customers"),
        ("Visa Processing", "customers"),
        ("Other Services", "customers"),
    ],
    "🏢 Office": [
        ("Vendors", "agents"),
        ("Assets", "transactions"),
        ("Investments", "transactions"),
        ("IATA & Airlines Capping", "transactions"),
        ("Bank Accounts", "ledger"),
        ("Markup Rules", "settings"),
    ],
    "👛 Personal": [
        ("Personal Dashboard", "dashboard"),
        ("Expenses", "transactions"),
        ("Expense Categories", "transactions"),
        ("Family Assets", "transactions"),
    ],
    "⚙️ Admin": [("Users", "settings")],
}

PAGES: Dict[str, Callable[[], None]] = {
    "Dashboard": lambda: render_home(),
    "Search": render_search,
    "Hajj Dashboard": render_hajj_dashboard,
    "Hajis": render_hajis,
    "Umrahs": render_umrahs,
    "Haj Agents": render_haj_agents,
    "SAR Rates": render_sar_rates,
    "Air Agents": render_air_agents,
    "GDS": render_gds,
    "Refunds": render_refunds,
    "Reissues": render_reissues,
    "Services Dashboard": render_services_dashboard,
    "Customers": render_customers,
    "Passport Services": lambda: render_service("passport"),
    "Manpower Services": lambda: render_service("manpower"),
    "Visa Processing": lambda: render_service("visa"),
    "Other Services": lambda: render_service("other"),
    "Vendors": render_vendors,
    "Assets": render_assets,
    "Investments": render_investments,
    "IATA & Airlines Capping": render_capping,
    "Bank Accounts": render_bank_accounts,
    "Markup Rules": render_markups,
    "Personal Dashboard": render_personal_dashboard,
    "Expenses": render_expenses,
    "Expense Categories": render_expense_categories,
    "Family Assets": render_family_assets,
    "Users": render_users,
}

# Collections counted on the home dashboard: key -> (label, path, module)
OVERVIEW_COLLECTIONS = {
    "hajis": ("হাজী", "/api/hajj-umrah/hajis", "customers"),
    "umrahs": ("উমরাহ", "/api/hajj-umrah/umrahs", "customers"),
    "vendors": ("ভেন্ডর", "/api/vendors", "agents"),
    "airAgents": ("এয়ার এজেন্ট", "/api/air-agents", "agents"),
    "refunds": ("রিফান্ড", "/api/air-ticketing/refund", "customers"),
    "reissues": ("রিইস্যু", "/api/air-ticketing/reissue", "customers"),
    "customers": ("গ্রাহক", "/api/other-customers", "customers"),
    "assets": ("সম্পদ", "/api/assets", "transactions"),
}

# --------------------------------------------------------------------
# State helpers
# --------------------------------------------------------------------


def init_state() -> None:
    ss = st.session_state

    # Auth keys first; every other module reads them
    init_auth_state()

    # Navigation - default is chosen in main() from auth state
    ss.setdefault("nav_page", None)
    ss.setdefault("view", "list")
    ss.setdefault("record_id", None)


init_state()

ss = st.session_state

# --------------------------------------------------------------------
# Navigation helper (single source of truth)
# --------------------------------------------------------------------


def go_to(page: str) -> None:
    """
    Deterministic navigation helper for top-level pages.

    Resets the list/detail view so every page opens on its list.
    """
    ss["nav_page"] = page
    ss["view"] = "list"
    ss["record_id"] = None
    st.rerun()


def visible_sections() -> Dict[str, List[str]]:
    """Sections and pages the current role may open."""
    sections: Dict[str, List[str]] = {}
    for section, pages in NAV_SECTIONS.items():
        allowed = [page for page, module in pages if can(module, "view")]
        if allowed:
            sections[section] = allowed
    return sections


def section_of(page: str) -> str:
    for section, pages in NAV_SECTIONS.items():
        if any(p == page for p, _ in pages):
            return section
    return next(iter(NAV_SECTIONS))


# --------------------------------------------------------------------
# Layout
# --------------------------------------------------------------------


def render_sidebar() -> None:
    with st.sidebar:
        st.markdown(f"## 🕋 {AGENCY_NAME}")

        # Auth status (production-safe: never shows the token)
        st.markdown("---")
        st.markdown("### 🔐 Auth Status")
        try:
            api_base = get_api_base_url()
            if IS_LOCAL:
                st.caption(f"**API:** {api_base}")
            else:
                from urllib.parse import urlparse
                parsed = urlparse(api_base)
                st.caption(f"**API:** {parsed.netloc or parsed.path.split('/')[0]}")
            st.caption(f"**Environment:** {ENV}")
        except (RuntimeError, ValueError) as e:
            st.error(f"⚠️ API config error: {str(e)[:60]}")

        current_user = get_current_user()
        if not is_authenticated() or not isinstance(current_user, dict):
            st.caption("**User:** Not logged in")
            return

        name = current_user.get("name") or current_user.get("email", "User").split("@")[0]
        role = (current_user.get("role") or "staff").replace("_", " ").title()
        st.info(f"Logged in as: **{name}** ({role})")
        if current_user.get("branchName") or current_user.get("branchId"):
            st.caption(f"Branch: {current_user.get('branchName') or current_user.get('branchId')}")
        if ENABLE_DEBUG_UI:
            granted = ss.get("permissions") or {}
            st.caption(f"Permissions: {sum(len(v) for v in granted.values())} across {len(granted)} modules")

        st.markdown("### Navigation")
        sections = visible_sections()
        if not sections:
            st.warning("Your role has no pages assigned.")
        else:
            current_page = ss.get("nav_page") or "Dashboard"
            section_names = list(sections)
            current_section = section_of(current_page)
            section = st.selectbox(
                "Section",
                section_names,
                index=section_names.index(current_section) if current_section in section_names else 0,
            )
            pages = sections[section]
            target_page = st.radio(
                "Go to",
                pages,
                index=pages.index(current_page) if current_page in pages else 0,
            )
            # Update nav_page ONLY if it changed (avoids rerun loops)
            if target_page != current_page:
                if IS_DEV:
                    print(f"[ROUTING] sidebar {current_page} -> {target_page}")
                go_to(target_page)

        st.markdown("---")
        if st.button("🚪 Logout", key="logout_btn", use_container_width=True):
            print(f"[AUTH] Logout user_id={current_user.get('id')}")
            clear_auth()
            go_to("Login")


def handle_api_error(resp: requests.Response, operation: str = "operation") -> None:
    """Show a user-facing message for a failed API call."""
    if resp.status_code == 403:
        st.error(f"🔒 **Permission Denied:** {error_message(resp, 'Insufficient permissions')}")
        st.info("💡 Ask an administrator to grant your role access to this module.")
    elif resp.status_code == 404:
        st.error(f"🔎 {error_message(resp, 'Not found')}")
    else:
        st.error(f"Backend error {resp.status_code} on {operation}: {error_message(resp, resp.reason or 'unknown error')}")


def load_permissions() -> bool:
    """Fetch /api/auth/me and cache the user's permission map."""
    resp = api_request("GET", "/api/auth/me", timeout=10)
    if resp is None:
        return False
    if resp.status_code != 200:
        handle_api_error(resp, "loading permissions")
        return False
    body = response_json(resp)
    set_auth(ss["auth_token"], body.get("user") or get_current_user(), body.get("permissions") or {})
    return True


# --------------------------------------------------------------------
# Pages
# --------------------------------------------------------------------


def render_login() -> None:
    # Widget keys are cleared before the widgets exist; Streamlit forbids it afterwards
    if ss.get("_clear_login_fields"):
        ss.pop("login_email", None)
        ss.pop("login_password", None)
        ss.pop("_clear_login_fields", None)

    st.header(f"🕋 {AGENCY_NAME}")
    st.subheader("Login")

    with st.form("login_form"):
        email = st.text_input("Email", key="login_email")
        password = st.text_input("Password", type="password", key="login_password")
        submitted = st.form_submit_button("Login")

        if submitted:
            if not email or not password:
                st.error("Please enter email and password.")
                return

            resp = api_request("POST", "/api/auth/login", json={"email": email.strip(), "password": password}, timeout=10)
            if resp is None:
                return
            if resp.status_code != 200:
                st.error(f"Login failed: {error_message(resp, str(resp.status_code))}")
                return

            data = response_json(resp)
            token = data.get("access_token")
            if not token:
                st.error("Login failed: no access token returned.")
                return

            set_auth(token, data.get("user") or {})
            if not load_permissions():
                clear_auth()
                return

            ss["_clear_login_fields"] = True
            ss["nav_page"] = "Dashboard"
            ss["view"] = "list"
            st.rerun()


def render_home() -> None:
    if not require_auth():
        return
    show_flash()

    user = get_current_user() or {}
    st.title("📊 Dashboard")
    st.caption(f"স্বাগতম, {user.get('name') or user.get('email', '')}")

    wanted = {
        key: (path, {"page": 1, "limit": 1})
        for key, (_, path, module) in OVERVIEW_COLLECTIONS.items()
        if can(module, "view")
    }
    if not wanted:
        st.info("No modules available for your role.")
        return

    with st.spinner("Loading overview..."):
        counts = overview_counts(fetch_json_parallel(wanted))

    keys = list(counts)
    for start in range(0, len(keys), 4):
        cols = st.columns(4)
        for col, key in zip(cols, keys[start:start + 4]):
            col.metric(OVERVIEW_COLLECTIONS[key][0], format_number_bn(counts[key]))

    st.markdown("---")
    st.markdown("### Quick links")
    shortcuts = [page for page in ("Hajis", "Refunds", "Services Dashboard", "Search") if page in sum(visible_sections().values(), [])]
    cols = st.columns(max(1, len(shortcuts)))
    for col, page in zip(cols, shortcuts):
        with col:
            if st.button(page, key=f"home_link_{page}", use_container_width=True):
                go_to(page)


def render_page(page: str) -> None:
    if not require_auth():
        return
    if ss.get("permissions") is None and not load_permissions():
        return
    PAGES[page]()


def main() -> None:
    # Auth keys must exist before any widget or routing decision
    init_auth_state()

    # Logged-out users always land on Login
    if not ss.get("nav_page") or (ss["nav_page"] != "Login" and not is_authenticated()):
        ss["nav_page"] = "Dashboard" if is_authenticated() else "Login"

    _selected_page = ss.get("nav_page", "UNKNOWN")
    _token_present = bool(ss.get("auth_token"))
    _user = get_current_user()
    _user_role = _user.get("role", "NONE") if isinstance(_user, dict) else None

    # Always print to stdout (no tokens or emails)
    print(f"[ROUTING] page={_selected_page} | view={ss.get('view')} | token_present={_token_present} | role={_user_role}")

    render_sidebar()

    nav_page = ss.get("nav_page", "Login")
    if nav_page == "Login":
        if is_authenticated():
            go_to("Dashboard")
        render_login()
    elif nav_page in PAGES:
        render_page(nav_page)
    else:
        # Fallback to Login for unknown pages
        ss["nav_page"] = "Login"
        render_login()


if __name__ == "__main__":
    main()
