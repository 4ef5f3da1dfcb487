# frontend/views_finance.py
# Investments, IATA / Airlines Capping, bank accounts, fare markup rules
# and personal expenses.

from datetime import date
from typing import Any, Dict

import pandas as pd
import streamlit as st

try:
    from frontend.aggregations import investment_summary, records_of
    from frontend.api_client import api_request, error_message, response_json
    from frontend.components import FieldSpec, Resource, day, load_list, money, render_resource, render_table, show_flash, text
    from frontend.config import DASHBOARD_FETCH_LIMIT
    from frontend.formatting import format_currency, format_date_bn, format_number_bn, status_label
    from frontend.validation import validate_bank_account, validate_capping, validate_category, validate_expense, validate_investment
except ModuleNotFoundError:
    from aggregations import investment_summary, records_of
    from api_client import api_request, error_message, response_json
    from components import FieldSpec, Resource, day, load_list, money, render_resource, render_table, show_flash, text
    from config import DASHBOARD_FETCH_LIMIT
    from formatting import format_currency, format_date_bn, format_number_bn, status_label
    from validation import validate_bank_account, validate_capping, validate_category, validate_expense, validate_investment

from domains.erp.calculations import to_number
from domains.erp.rules import BANK_ACCOUNT_CATEGORIES, CAPPING_TYPES

INVESTMENT_TYPES = ("Land", "Building", "Business", "Shares", "Fixed Deposit", "Gold", "Other")
INVESTMENT_STATUSES = ("active", "matured", "closed")
MARKUP_TYPES = ("fixed", "percentage")
CATEGORY_ICONS = ("food", "transport", "utilities", "health", "education", "shopping", "family", "other")
BANK_ACCOUNT_TYPES = ("Current", "Savings", "Salary", "Fixed Deposit")
BANK_CATEGORY_LABELS = {
    "cash": "Cash",
    "bank": "Bank",
    "mobile_banking": "Mobile Banking",
    "check": "Check",
    "others": "Others",
}


# ---------------------------------------------------------
# Investments
# ---------------------------------------------------------
def render_investment_summary(_: Dict[str, Any]) -> None:
    body = load_list("/api/investments/others-invest", {"page": 1, "limit": DASHBOARD_FETCH_LIMIT})
    stats = investment_summary(records_of(body), date.today())
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("মোট বিনিয়োগ", format_number_bn(stats["totalInvestments"]))
    c2.metric("বিনিয়োগকৃত", format_currency(stats["totalInvested"]))
    c3.metric("রিটার্ন", format_currency(stats["totalReturn"]))
    c4.metric("পরিপক্ক", format_number_bn(stats["matured"]))


INVESTMENTS = Resource(
    key="investments",
    title="Investments",
    path="/api/investments/others-invest",
    module="transactions",
    columns=[
        ("নাম", text("investmentName")),
        ("ধরন", text("investmentType")),
        ("পরিমাণ", money("investmentAmount")),
        ("রিটার্ন", money("returnAmount")),
        ("সুদের হার %", lambda r: format_number_bn(r.get("interestRate"))),
        ("বিনিয়োগ তারিখ", day("investmentDate")),
        ("পরিপক্কতা", day("maturityDate")),
        ("স্ট্যাটাস", lambda r: status_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("investmentName", "বিনিয়োগ নাম", required=True),
        FieldSpec("investmentType", "বিনিয়োগ টাইপ", kind="select", options=INVESTMENT_TYPES, required=True),
        FieldSpec("investmentAmount", "বিনিয়োগ পরিমাণ (৳)", kind="number", required=True),
        FieldSpec("returnAmount", "রিটার্ন পরিমাণ (৳)", kind="number"),
        FieldSpec("investmentDate", "বিনিয়োগ তারিখ", kind="date", required=True),
        FieldSpec("maturityDate", "পরিপক্কতার তারিখ", kind="date", required=True),
        FieldSpec("interestRate", "সুদের হার (%)", kind="number", required=True),
        FieldSpec("status", "স্ট্যাটাস", kind="select", options=INVESTMENT_STATUSES),
        FieldSpec("description", "বিবরণ", kind="textarea"),
        FieldSpec("notes", "নোট", kind="textarea"),
    ],
    validate=validate_investment,
    label=lambda r: r.get("investmentName") or "Investment",
    statuses=INVESTMENT_STATUSES,
    summary=render_investment_summary,
    icon="📈",
)


# ---------------------------------------------------------
# IATA / Airlines Capping
# ---------------------------------------------------------
def capping_type_filter(key: str) -> Dict[str, Any]:
    return {"investmentType": st.selectbox("ধরন", ["All", *CAPPING_TYPES], key=f"{key}_ctype")}


CAPPING = Resource(
    key="capping",
    title="IATA & Airlines Capping",
    path="/api/investments/iata-airlines-capping",
    module="transactions",
    columns=[
        ("এয়ারলাইন", text("airlineName")),
        ("ধরন", text("investmentType")),
        ("ক্যাপিং পরিমাণ", money("cappingAmount")),
        ("রিটার্ন", money("returnAmount")),
        ("সুদের হার %", lambda r: format_number_bn(r.get("interestRate"))),
        ("বিনিয়োগ তারিখ", day("investmentDate")),
        ("পরিপক্কতা", day("maturityDate")),
        ("স্ট্যাটাস", lambda r: status_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("investmentType", "বিনিয়োগ টাইপ", kind="select", options=CAPPING_TYPES),
        FieldSpec("airlineName", "এয়ারলাইন নাম", required=True),
        FieldSpec("cappingAmount", "ক্যাপিং পরিমাণ (৳)", kind="number", required=True),
        FieldSpec("returnAmount", "রিটার্ন পরিমাণ (৳)", kind="number"),
        FieldSpec("investmentDate", "বিনিয়োগ তারিখ", kind="date", required=True),
        FieldSpec("maturityDate", "পরিপক্কতার তারিখ", kind="date", required=True),
        FieldSpec("interestRate", "সুদের হার (%)", kind="number", required=True),
        FieldSpec("status", "স্ট্যাটাস", kind="select", options=INVESTMENT_STATUSES),
        FieldSpec("logo", "লোগো URL"),
        FieldSpec("notes", "নোট", kind="textarea"),
    ],
    validate=validate_capping,
    label=lambda r: f"{r.get('airlineName') or 'Airline'} · {r.get('investmentType') or 'IATA'}",
    statuses=INVESTMENT_STATUSES,
    filters=capping_type_filter,
    icon="🛫",
)


# ---------------------------------------------------------
# Bank accounts
# ---------------------------------------------------------
def bank_category_filter(key: str) -> Dict[str, Any]:
    return {
        "accountCategory": st.selectbox(
            "Category",
            ["All", *BANK_ACCOUNT_CATEGORIES],
            format_func=lambda v: BANK_CATEGORY_LABELS.get(v, v),
            key=f"{key}_category",
        )
    }


BANK_ACCOUNTS = Resource(
    key="bank_accounts",
    title="Bank Accounts",
    path="/api/bank-accounts",
    module="ledger",
    columns=[
        ("Bank", text("bankName")),
        ("Account No.", text("accountNumber")),
        ("Title", text("accountTitle")),
        ("Category", lambda r: BANK_CATEGORY_LABELS.get(r.get("accountCategory"), r.get("accountCategory") or "")),
        ("Branch", text("bankBranchName")),
        ("Opening", money("initialBalance")),
        ("Balance", money("currentBalance")),
        ("Status", lambda r: status_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("bankName", "Bank Name", required=True),
        FieldSpec("accountNumber", "Account Number", required=True),
        FieldSpec("accountCategory", "Account Category", kind="select", options=BANK_ACCOUNT_CATEGORIES, labels=BANK_CATEGORY_LABELS, required=True),
        FieldSpec("accountType", "Account Type", kind="select", options=BANK_ACCOUNT_TYPES),
        FieldSpec("bankBranchName", "Branch Name", required=True),
        FieldSpec("routingNumber", "Routing Number", required=True),
        FieldSpec("accountHolder", "Account Holder", required=True),
        FieldSpec("accountTitle", "Account Title", required=True),
        FieldSpec("initialBalance", "Initial Balance (৳)", kind="number", required=True),
        FieldSpec("currency", "Currency", kind="select", options=("BDT", "USD", "SAR")),
        FieldSpec("contactNumber", "Contact Number"),
        FieldSpec("logo", "Logo URL"),
        FieldSpec("status", "Status", kind="select", options=("active", "inactive")),
    ],
    validate=validate_bank_account,
    label=lambda r: f"{r.get('bankName') or 'Account'} · {r.get('accountNumber') or ''}",
    statuses=("active", "inactive"),
    filters=bank_category_filter,
    icon="🏦",
)


# ---------------------------------------------------------
# Markup rules
# ---------------------------------------------------------
def validate_markup(form: Dict[str, Any]) -> Dict[str, str]:
    errors = {}
    if not (form.get("name") or "").strip():
        errors["name"] = "Rule name is required"
    if form.get("markupType") == "percentage" and to_number(form.get("amount")) > 100:
        errors["amount"] = "Percentage markup cannot exceed 100"
    return errors


MARKUPS = Resource(
    key="markups",
    title="Markup Rules",
    path="/api/settings/markup",
    module="settings",
    columns=[
        ("Rule", text("name")),
        ("Airline", text("airline")),
        ("Route", text("route")),
        ("Type", text("markupType")),
        ("Amount", lambda r: format_number_bn(r.get("amount"))),
        ("Priority", lambda r: format_number_bn(r.get("priority"))),
        ("Status", lambda r: status_label(r.get("status"))),
    ],
    fields=[
        FieldSpec("name", "Rule Name", required=True),
        FieldSpec("airline", "Airline"),
        FieldSpec("route", "Route", help="e.g. DAC-JED"),
        FieldSpec("markupType", "Markup Type", kind="select", options=MARKUP_TYPES),
        FieldSpec("amount", "Amount", kind="number"),
        FieldSpec("priority", "Priority", kind="number"),
        FieldSpec("status", "Status", kind="select", options=("active", "inactive")),
        FieldSpec("notes", "Notes", kind="textarea"),
    ],
    validate=validate_markup,
    label=lambda r: r.get("name") or "Markup rule",
    statuses=("active", "inactive"),
    icon="🏷️",
)


# ---------------------------------------------------------
# Personal expenses
# ---------------------------------------------------------
CATEGORIES = Resource(
    key="expense_categories",
    title="Expense Categories",
    path="/api/personal-expense/categories",
    module="transactions",
    columns=[
        ("Category", text("name")),
        ("Icon", text("iconKey")),
        ("Monthly budget", money("monthlyAmount")),
        ("Spent", money("totalAmount")),
        ("Entries", lambda r: format_number_bn(r.get("itemCount"))),
    ],
    fields=[
        FieldSpec("name", "Category Name", required=True),
        FieldSpec("iconKey", "Icon", kind="select", options=CATEGORY_ICONS),
        FieldSpec("monthlyAmount", "Monthly budget (৳)", kind="number"),
        FieldSpec("description", "Description", kind="textarea"),
    ],
    validate=validate_category,
    label=lambda r: r.get("name") or "Category",
    icon="🗂️",
)


def _expense_resource() -> Resource:
    """Expense pages need the category list for their dropdown."""
    body = load_list(CATEGORIES.path, {"page": 1, "limit": DASHBOARD_FETCH_LIMIT})
    categories = records_of(body)
    labels = {c["id"]: c.get("name") or str(c["id"]) for c in categories if c.get("id") is not None}

    def type_filter(key: str) -> Dict[str, Any]:
        return {"type": st.selectbox("Type", ["All", "debit", "credit"], key=f"{key}_type")}

    return Resource(
        key="expenses",
        title="Expenses",
        path="/api/personal-expense",
        module="transactions",
        columns=[
            ("Date", day("date")),
            ("Category", text("categoryName")),
            ("Type", text("transactionType")),
            ("Amount", money("amount")),
            ("Notes", text("notes")),
        ],
        fields=[
            FieldSpec("categoryId", "Category", kind="select", options=list(labels), labels=labels, required=True),
            FieldSpec("transactionType", "Type", kind="select", options=("debit", "credit")),
            FieldSpec("amount", "Amount (৳)", kind="number", required=True),
            FieldSpec("date", "Date", kind="date"),
            FieldSpec("notes", "Notes", kind="textarea"),
        ],
        validate=validate_expense,
        label=lambda r: f"{r.get('categoryName') or 'Expense'} · {format_currency(r.get('amount'))}",
        filters=type_filter,
        icon="💳",
    )


def render_personal_dashboard() -> None:
    show_flash()
    st.markdown("## 👛 Personal Finance")

    with st.spinner("Loading dashboard..."):
        resp = api_request("GET", "/api/personal/dashboard")
    if resp is None:
        return
    if resp.status_code != 200:
        st.error(error_message(resp, "Failed to load dashboard"))
        return

    body = response_json(resp)
    summary = body.get("summary") or {}
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("ব্যয় (৩০ দিন)", format_currency(summary.get("monthlyExpense")))
    c2.metric("আয় (৩০ দিন)", format_currency(summary.get("monthlyIncome")))
    c3.metric("সঞ্চয়", format_currency(summary.get("savings")))
    c4.metric("পারিবারিক সম্পদ", format_currency(summary.get("totalAssets")))

    left, right = st.columns(2)
    with left:
        st.markdown("### সাম্প্রতিক ব্যয়")
        recent = body.get("recentExpenses") or []
        if recent:
            render_table(recent, [
                ("Title", text("title")),
                ("Category", text("category")),
                ("Amount", money("amount")),
                ("Date", lambda r: format_date_bn(r.get("date"))),
            ])
        else:
            st.caption("No expenses yet.")
    with right:
        st.markdown("### বাজেট বিশ্লেষণ")
        insights = body.get("budgetInsights") or []
        if insights:
            frame = pd.DataFrame(insights).set_index("label")
            st.bar_chart(frame["value"])
        else:
            st.caption("Not enough data for the last 30 days.")


def render_investments() -> None:
    render_resource(INVESTMENTS)


def render_capping() -> None:
    render_resource(CAPPING)


def render_bank_accounts() -> None:
    render_resource(BANK_ACCOUNTS)


def render_markups() -> None:
    render_resource(MARKUPS)


def render_expense_categories() -> None:
    render_resource(CATEGORIES)


def render_expenses() -> None:
    render_resource(_expense_resource())
