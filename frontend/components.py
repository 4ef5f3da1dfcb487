# frontend/components.py
# Shared list / form / detail building blocks for every CRUD page.
#
# A page is described once as a Resource (endpoint, table columns, form
# fields, validator) and render_resource() drives the list -> add -> detail
# -> edit flow over st.session_state:
#
#   nav_page   : sidebar section ("Assets", "Vendors", ...)
#   view       : "list" | "add" | "detail" | "edit"
#   record_id  : id of the open record (detail / edit)

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd
import streamlit as st

try:
    from frontend.api_client import api_request, error_message, response_json
    from frontend.auth import can
    from frontend.config import IS_DEV, PAGE_SIZE
    from frontend.formatting import NA, display, format_currency, format_date
except ModuleNotFoundError:
    from api_client import api_request, error_message, response_json
    from auth import can
    from config import IS_DEV, PAGE_SIZE
    from formatting import NA, display, format_currency, format_date

from domains.erp.calculations import parse_date, to_number

Column = Tuple[str, Callable[[Dict[str, Any]], Any]]

EMPTY_FILTER_VALUES = (None, "", "All")


# --------------------------------------------------------------------
# Pure helpers
# --------------------------------------------------------------------

def build_list_params(
    page: int = 1,
    limit: int = PAGE_SIZE,
    q: Optional[str] = None,
    status: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """
    Query string for a list endpoint.

    Empty values and the "All" filter choice are dropped so the backend
    applies no filter for them.
    """
    params: Dict[str, Any] = {"page": max(1, int(page or 1)), "limit": limit}
    candidates = dict(extra, q=q, status=status)
    for key, value in candidates.items():
        if isinstance(value, str):
            value = value.strip()
        if value in EMPTY_FILTER_VALUES:
            continue
        params[key] = value
    return params


def page_count(pagination: Optional[Dict[str, Any]]) -> int:
    if not pagination:
        return 1
    pages = pagination.get("totalPages") or pagination.get("pages")
    return max(1, int(to_number(pages)))


def clamp_page(page: int, pagination: Optional[Dict[str, Any]]) -> int:
    return min(max(1, page), page_count(pagination))


def money(key: str) -> Callable[[Dict[str, Any]], str]:
    return lambda r: format_currency(r.get(key))


def text(key: str) -> Callable[[Dict[str, Any]], str]:
    return lambda r: display(r.get(key))


def day(key: str) -> Callable[[Dict[str, Any]], str]:
    return lambda r: format_date(r.get(key))


# --------------------------------------------------------------------
# Page description
# --------------------------------------------------------------------

@dataclass
class FieldSpec:
    name: str
    label: str
    kind: str = "text"  # text | textarea | number | date | select | password
    options: Sequence[str] = ()
    required: bool = False
    help: Optional[str] = None
    # Shown on add only (ids the server assigns, passwords)
    create_only: bool = False
    # Display text for select options whose values are ids
    labels: Optional[Dict[str, str]] = None


@dataclass
class Resource:
    key: str
    title: str
    path: str
    module: str
    columns: List[Column]
    fields: List[FieldSpec]
    validate: Callable[[Dict[str, Any]], Dict[str, str]]
    label: Callable[[Dict[str, Any]], str]
    statuses: Sequence[str] = ()
    filters: Optional[Callable[[str], Dict[str, Any]]] = None
    detail: Optional[List[Column]] = None
    # Re-render on every change instead of inside st.form (live derived fields)
    live_form: bool = False
    preview: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None
    detail_actions: Optional[Callable[[Dict[str, Any]], None]] = None
    summary: Optional[Callable[[Dict[str, Any]], None]] = None
    icon: str = "📄"
    extra_params: Dict[str, Any] = field(default_factory=dict)


# --------------------------------------------------------------------
# Navigation and messages
# --------------------------------------------------------------------

def go_to(page: str, view: str = "list", record_id: Optional[str] = None) -> None:
    """
    Navigation helper - the only way pages change.

    Sets nav_page / view / record_id and reruns immediately.
    """
    ss = st.session_state
    ss["nav_page"] = page
    ss["view"] = view
    ss["record_id"] = record_id
    st.rerun()


def flash(message: str, level: str = "success") -> None:
    """Queue a message for the next rerun (survives go_to)."""
    st.session_state["_flash"] = (level, message)


def show_flash() -> None:
    pending = st.session_state.pop("_flash", None)
    if not pending:
        return
    level, message = pending
    getattr(st, level, st.info)(message)


def render_errors(errors: Dict[str, str]) -> None:
    for message in errors.values():
        st.error(f"⚠️ {message}")


# --------------------------------------------------------------------
# Form widgets
# --------------------------------------------------------------------

def _initial(field_spec: FieldSpec, record: Optional[Dict[str, Any]]) -> Any:
    return (record or {}).get(field_spec.name)


def render_field(field_spec: FieldSpec, record: Optional[Dict[str, Any]], key_prefix: str) -> Any:
    """One input widget; returns a JSON-ready value."""
    key = f"{key_prefix}_{field_spec.name}"
    label = f"{field_spec.label} *" if field_spec.required else field_spec.label
    current = _initial(field_spec, record)

    if field_spec.kind == "number":
        return st.number_input(label, value=float(to_number(current)), min_value=0.0, step=1.0, key=key, help=field_spec.help)
    if field_spec.kind == "date":
        picked = st.date_input(label, value=parse_date(current), key=key, help=field_spec.help)
        return picked.isoformat() if isinstance(picked, date) else None
    if field_spec.kind == "select":
        options = list(field_spec.options)
        if current and current not in options:
            options.append(current)
        index = options.index(current) if current in options else 0
        labels = field_spec.labels or {}
        return st.selectbox(
            label, options, index=index, key=key, help=field_spec.help,
            format_func=lambda v: labels.get(v, str(v)),
        )
    if field_spec.kind == "textarea":
        return st.text_area(label, value=str(current or ""), key=key, help=field_spec.help)
    if field_spec.kind == "password":
        return st.text_input(label, value="", type="password", key=key, help=field_spec.help)
    return st.text_input(label, value=str(current or ""), key=key, help=field_spec.help)


def _render_fields(resource: Resource, record: Optional[Dict[str, Any]], key_prefix: str) -> Dict[str, Any]:
    creating = record is None
    fields = [f for f in resource.fields if creating or not f.create_only]
    values: Dict[str, Any] = {}
    left, right = st.columns(2)
    for index, field_spec in enumerate(fields):
        target = left if index % 2 == 0 else right
        with target:
            values[field_spec.name] = render_field(field_spec, record, key_prefix)
    return values


def _payload(values: Dict[str, Any]) -> Dict[str, Any]:
    # Blank text means "not provided"; the API treats null the same way
    return {k: (v.strip() or None) if isinstance(v, str) else v for k, v in values.items()}


# --------------------------------------------------------------------
# Views
# --------------------------------------------------------------------

def load_list(path: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """GET a list endpoint; None (after an error message) when it fails."""
    resp = api_request("GET", path, params=params)
    if resp is None:
        return None
    if resp.status_code != 200:
        st.error(error_message(resp, "তথ্য লোড করতে ব্যর্থ হয়েছে"))
        return None
    return response_json(resp)


def load_record(path: str, record_id: str) -> Optional[Dict[str, Any]]:
    resp = api_request("GET", f"{path}/{record_id}")
    if resp is None:
        return None
    if resp.status_code != 200:
        st.error(error_message(resp, "Record not found"))
        return None
    return response_json(resp).get("data")


def render_pagination(key: str, pagination: Optional[Dict[str, Any]]) -> None:
    ss = st.session_state
    pages = page_count(pagination)
    current = clamp_page(ss.get(f"{key}_page", 1), pagination)
    total = (pagination or {}).get("total", 0)

    prev_col, info_col, next_col = st.columns([1, 3, 1])
    with prev_col:
        if st.button("◀ Prev", key=f"{key}_prev", disabled=current <= 1):
            ss[f"{key}_page"] = current - 1
            st.rerun()
    with info_col:
        st.caption(f"Page {current} of {pages} · {total} records")
    with next_col:
        if st.button("Next ▶", key=f"{key}_next", disabled=current >= pages):
            ss[f"{key}_page"] = current + 1
            st.rerun()


def table_frame(rows: List[Dict[str, Any]], columns: List[Column]) -> pd.DataFrame:
    """Display values per column label; the header row exists even for no rows."""
    return pd.DataFrame(
        [{label: fn(row) for label, fn in columns} for row in rows],
        columns=[label for label, _ in columns],
    )


def render_table(rows: List[Dict[str, Any]], columns: List[Column]) -> None:
    st.dataframe(table_frame(rows, columns), use_container_width=True, hide_index=True)


def render_list(resource: Resource) -> None:
    ss = st.session_state
    key = resource.key

    header, action = st.columns([4, 1])
    with header:
        st.markdown(f"## {resource.icon} {resource.title}")
    with action:
        if can(resource.module, "create") and st.button("➕ Add", key=f"{key}_add_btn", type="primary"):
            go_to(ss["nav_page"], "add")

    search_col, status_col = st.columns([3, 1])
    with search_col:
        q = st.text_input("🔍 Search", key=f"{key}_q")
    with status_col:
        status = st.selectbox("Status", ["All"] + list(resource.statuses), key=f"{key}_status") if resource.statuses else None
    extra = resource.filters(key) if resource.filters else {}

    # A new filter combination starts again from page 1
    signature = (q, status, tuple(sorted(extra.items())))
    if ss.get(f"{key}_filters") != signature:
        ss[f"{key}_filters"] = signature
        ss[f"{key}_page"] = 1

    params = build_list_params(ss.get(f"{key}_page", 1), PAGE_SIZE, q, status, **dict(resource.extra_params, **extra))
    with st.spinner(f"Loading {resource.title.lower()}..."):
        body = load_list(resource.path, params)
    if body is None:
        return

    if resource.summary:
        resource.summary(body)

    rows = body.get("data") or []
    if not rows:
        st.info("No records found.")
        return

    render_table(rows, resource.columns)
    render_pagination(key, body.get("pagination"))

    choices = {row["id"]: resource.label(row) for row in rows if row.get("id")}
    selected = st.selectbox(
        "Open record",
        options=[None] + list(choices),
        format_func=lambda x: "-- Select --" if x is None else choices[x],
        key=f"{key}_selected",
    )
    if selected and st.button("👁️ View details", key=f"{key}_open"):
        go_to(ss["nav_page"], "detail", selected)


def _delete(resource: Resource, record: Dict[str, Any]) -> None:
    ss = st.session_state
    confirm_key = f"_confirm_delete_{resource.key}"
    if not ss.get(confirm_key):
        if st.button("🗑️ Delete", key=f"{resource.key}_delete"):
            ss[confirm_key] = record["id"]
            st.rerun()
        return

    st.warning(f"নিশ্চিত করুন: {resource.label(record)} মুছে ফেলতে চান?")
    yes, no = st.columns(2)
    with yes:
        if st.button("হ্যাঁ, মুছে ফেলুন", key=f"{resource.key}_delete_yes", type="primary"):
            ss.pop(confirm_key, None)
            resp = api_request("DELETE", f"{resource.path}/{record['id']}")
            if resp is not None and resp.status_code == 200:
                if IS_DEV:
                    print(f"[ROUTING] deleted {resource.key} id={record['id']}")
                flash(error_message(resp, "মুছে ফেলা হয়েছে"))
                go_to(ss["nav_page"], "list")
            elif resp is not None:
                st.error(error_message(resp, "মুছে ফেলতে ব্যর্থ হয়েছে"))
    with no:
        if st.button("বাতিল", key=f"{resource.key}_delete_no"):
            ss.pop(confirm_key, None)
            st.rerun()


def render_detail(resource: Resource) -> None:
    ss = st.session_state
    record_id = ss.get("record_id")
    if st.button("← Back to list", key=f"{resource.key}_back"):
        go_to(ss["nav_page"], "list")
    if not record_id:
        st.info("No record selected.")
        return

    with st.spinner("Loading details..."):
        record = load_record(resource.path, record_id)
    if record is None:
        return

    st.markdown(f"## {resource.icon} {resource.label(record)}")
    items = resource.detail or resource.columns
    cols = st.columns(3)
    for index, (label, fn) in enumerate(items):
        with cols[index % 3]:
            value = fn(record)
            st.markdown(f"**{label}**  \n{value if value not in (None, '') else NA}")

    if resource.detail_actions:
        st.markdown("---")
        resource.detail_actions(record)

    st.markdown("---")
    edit_col, delete_col = st.columns(2)
    with edit_col:
        if can(resource.module, "edit") and st.button("✏️ Edit", key=f"{resource.key}_edit"):
            go_to(ss["nav_page"], "edit", record_id)
    with delete_col:
        if can(resource.module, "delete"):
            _delete(resource, record)


def _submit(resource: Resource, values: Dict[str, Any], record: Optional[Dict[str, Any]]) -> None:
    ss = st.session_state
    payload = _payload(values)
    errors = resource.validate(payload)
    if errors:
        render_errors(errors)
        return

    if record is None:
        resp = api_request("POST", resource.path, json=payload)
        ok_status, success = 201, "সফলভাবে যোগ করা হয়েছে"
    else:
        resp = api_request("PUT", f"{resource.path}/{record['id']}", json=payload)
        ok_status, success = 200, "সফলভাবে আপডেট করা হয়েছে"

    if resp is None:
        return
    if resp.status_code != ok_status:
        st.error(error_message(resp, "সংরক্ষণ করতে ব্যর্থ হয়েছে"))
        return

    saved = response_json(resp).get("data") or {}
    flash(f"✅ {resource.label(saved) if saved else resource.title} {success}")
    if record is None:
        go_to(ss["nav_page"], "list")
    else:
        go_to(ss["nav_page"], "detail", record["id"])


def render_form(resource: Resource, record: Optional[Dict[str, Any]] = None) -> None:
    ss = st.session_state
    editing = record is not None
    key_prefix = f"{resource.key}_{'edit_' + str(record['id']) if editing else 'add'}"

    if st.button("← Back", key=f"{key_prefix}_back"):
        go_to(ss["nav_page"], "detail" if editing else "list", record["id"] if editing else None)
    st.markdown(f"## {resource.icon} {'Edit' if editing else 'Add'} {resource.title}")

    if resource.live_form:
        values = _render_fields(resource, record, key_prefix)
        if resource.preview:
            message = resource.preview(values)
            if message:
                st.info(message)
        if st.button("💾 Save", key=f"{key_prefix}_submit", type="primary"):
            _submit(resource, values, record)
        return

    with st.form(f"{key_prefix}_form"):
        values = _render_fields(resource, record, key_prefix)
        submitted = st.form_submit_button("💾 Save")
    if submitted:
        _submit(resource, values, record)


def render_resource(resource: Resource) -> None:
    """Dispatch the current view for a CRUD page."""
    ss = st.session_state
    show_flash()

    if not can(resource.module, "view"):
        st.warning(f"⛔ Your role cannot view {resource.title.lower()}.")
        return

    view = ss.get("view") or "list"
    if view == "add" and can(resource.module, "create"):
        render_form(resource)
    elif view == "edit" and ss.get("record_id") and can(resource.module, "edit"):
        record = load_record(resource.path, ss["record_id"])
        if record is not None:
            render_form(resource, record)
    elif view == "detail":
        render_detail(resource)
    else:
        render_list(resource)
