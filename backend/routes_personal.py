"""
backend/routes_personal.py

Personal finance endpoints:
- /api/personal-expense/categories  expense categories with running totals
- /api/personal-expense             debit (expense) and credit (income) entries
- /api/family-assets                family assets, same payment model as business assets
- /api/personal/dashboard           last-30-day summary

A category's totalAmount and itemCount track its debit entries: they move
when an entry is created, changed or deleted.
"""

from __future__ import annotations

import sqlite3
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

try:
    from backend.auth_context import AuthContext, require_auth_context
    from backend.branch import branch_scope, require_document, stamp_owner
    from backend.config import IS_DEV
    from backend.db import get_db
    from backend.dependencies import ListParams, require_permission
    from backend.documents import (
        all_documents,
        delete_document,
        find_documents,
        find_one,
        get_document,
        insert_document,
        pagination,
        update_document,
    )
    from backend.routes_assets import validate_asset
    from backend.schemas_assets import AssetListResponse, AssetResponse, AssetWriteRequest
    from backend.schemas_common import DeleteResponse
    from backend.schemas_personal import (
        CategoryListResponse,
        CategoryResponse,
        CategoryWriteRequest,
        ExpenseListResponse,
        ExpenseResponse,
        ExpenseWriteRequest,
        PersonalDashboardResponse,
    )
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope, require_document, stamp_owner
    from config import IS_DEV
    from db import get_db
    from dependencies import ListParams, require_permission
    from documents import (
        all_documents,
        delete_document,
        find_documents,
        find_one,
        get_document,
        insert_document,
        pagination,
        update_document,
    )
    from routes_assets import validate_asset
    from schemas_assets import AssetListResponse, AssetResponse, AssetWriteRequest
    from schemas_common import DeleteResponse
    from schemas_personal import (
        CategoryListResponse,
        CategoryResponse,
        CategoryWriteRequest,
        ExpenseListResponse,
        ExpenseResponse,
        ExpenseWriteRequest,
        PersonalDashboardResponse,
    )

from domains.erp.calculations import parse_date, sum_field, to_number
from domains.erp.rules import is_blank

CATEGORIES = "expense_categories"
EXPENSES = "personal_expenses"
FAMILY_ASSETS = "family_assets"
DEFAULT_CATEGORY = "অন্যান্য"
DASHBOARD_WINDOW_DAYS = 30

router = APIRouter(tags=["personal"])


def _db_error(op: str, e: sqlite3.Error) -> HTTPException:
    if IS_DEV:
        print(f"[PERSONAL] DB error on {op}: {e}")
    return HTTPException(status_code=500, detail="Database error")


def _category_id(value: Any) -> Optional[int]:
    text = str(value or "").strip()
    return int(text) if text.isdigit() else None


# ---------------------------------------------------------
# Categories
# ---------------------------------------------------------
@router.get(
    "/api/personal-expense/categories",
    response_model=CategoryListResponse,
    dependencies=[Depends(require_permission("transactions", "view"))],
)
def list_categories(params: ListParams = Depends(), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            CATEGORIES,
            search=params.q,
            search_fields=("name", "description"),
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list categories", e)
    finally:
        conn.close()


@router.post(
    "/api/personal-expense/categories",
    status_code=201,
    response_model=CategoryResponse,
    dependencies=[Depends(require_permission("transactions", "create"))],
)
def create_category(request: CategoryWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    data = request.dict()
    if is_blank(data.get("name")):
        raise HTTPException(status_code=400, detail="Category name is required")

    conn = get_db()
    try:
        if find_one(conn, CATEGORIES, "name", data["name"], case_insensitive=True):
            raise HTTPException(status_code=400, detail="Category with this name already exists")
        data["iconKey"] = data.get("iconKey") or "FileText"
        data["monthlyAmount"] = to_number(data.get("monthlyAmount"))
        data["totalAmount"] = 0
        data["itemCount"] = 0
        record = insert_document(conn, CATEGORIES, stamp_owner(data, ctx))
        if IS_DEV:
            print(f"[PERSONAL] Created category id={record['id']} name={record['name']!r}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("create category", e)
    finally:
        conn.close()


@router.get(
    "/api/personal-expense/categories/{category_id}",
    response_model=CategoryResponse,
    dependencies=[Depends(require_permission("transactions", "view"))],
)
def get_category(category_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, CATEGORIES, category_id, ctx, "Category not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get category", e)
    finally:
        conn.close()


@router.put(
    "/api/personal-expense/categories/{category_id}",
    response_model=CategoryResponse,
    dependencies=[Depends(require_permission("transactions", "edit"))],
)
def update_category(
    request: CategoryWriteRequest,
    category_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    """Rename or re-describe a category. Running totals are not client-editable."""
    changes = request.dict(exclude_unset=True)
    conn = get_db()
    try:
        current = require_document(conn, CATEGORIES, category_id, ctx, "Category not found")
        merged = {**current, **changes}
        if is_blank(merged.get("name")):
            raise HTTPException(status_code=400, detail="Category name is required")
        if find_one(conn, CATEGORIES, "name", merged["name"], case_insensitive=True, exclude_id=category_id):
            raise HTTPException(status_code=400, detail="Category with this name already exists")
        merged["iconKey"] = merged.get("iconKey") or "FileText"
        merged["monthlyAmount"] = to_number(merged.get("monthlyAmount"))
        record = update_document(conn, CATEGORIES, category_id, merged, branch_scope(ctx))
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update category", e)
    finally:
        conn.close()


@router.delete(
    "/api/personal-expense/categories/{category_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_permission("transactions", "delete"))],
)
def delete_category(category_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        if not delete_document(conn, CATEGORIES, category_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="Category not found")
        return {"success": True, "message": "Category deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete category", e)
    finally:
        conn.close()


# ---------------------------------------------------------
# Expense entries
# ---------------------------------------------------------
def _apply_to_category(conn: sqlite3.Connection, entry: Dict[str, Any], sign: int) -> None:
    """Add (sign=1) or remove (sign=-1) a debit entry from its category totals."""
    if entry.get("transactionType", "debit") != "debit":
        return
    category_id = _category_id(entry.get("categoryId"))
    if category_id is None:
        return
    category = get_document(conn, CATEGORIES, category_id)
    if category is None:
        return
    update_document(
        conn,
        CATEGORIES,
        category_id,
        {
            "totalAmount": max(0.0, to_number(category.get("totalAmount")) + sign * to_number(entry.get("amount"))),
            "itemCount": max(0, int(to_number(category.get("itemCount"))) + sign),
        },
    )


def _prepare_entry(conn: sqlite3.Connection, data: Dict[str, Any], ctx: AuthContext) -> Dict[str, Any]:
    if is_blank(data.get("categoryId")) and is_blank(data.get("categoryName")):
        raise HTTPException(status_code=400, detail="Category is required")
    if not to_number(data.get("amount")):
        raise HTTPException(status_code=400, detail="Amount is required")

    category_id = _category_id(data.get("categoryId"))
    if not is_blank(data.get("categoryId")):
        category = get_document(conn, CATEGORIES, category_id, branch_scope(ctx)) if category_id else None
        if category is None:
            raise HTTPException(status_code=404, detail="Category not found")
        data["categoryId"] = category["id"]
        data["categoryName"] = category.get("name") or DEFAULT_CATEGORY

    data["categoryName"] = data.get("categoryName") or DEFAULT_CATEGORY
    data["transactionType"] = data.get("transactionType") or "debit"
    data["amount"] = to_number(data["amount"])
    data["date"] = data.get("date") or date.today().isoformat()
    return data


@router.get(
    "/api/personal-expense",
    response_model=ExpenseListResponse,
    dependencies=[Depends(require_permission("transactions", "view"))],
)
def list_expenses(
    params: ListParams = Depends(),
    transaction_type: Optional[str] = Query(None, alias="type", max_length=10),
    category_id: Optional[str] = Query(None, alias="categoryId", max_length=30),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            EXPENSES,
            search=params.q,
            search_fields=("categoryName", "notes"),
            equals={"transactionType": transaction_type, "categoryId": category_id},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list expenses", e)
    finally:
        conn.close()


@router.post(
    "/api/personal-expense",
    status_code=201,
    response_model=ExpenseResponse,
    dependencies=[Depends(require_permission("transactions", "create"))],
)
def create_expense(request: ExpenseWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    """
    Record an expense (debit) or income (credit).

    Raises:
        HTTPException(400): Category or amount missing
        HTTPException(404): categoryId does not exist in the caller's branch
    """
    conn = get_db()
    try:
        data = stamp_owner(_prepare_entry(conn, request.dict(), ctx), ctx)
        record = insert_document(conn, EXPENSES, data)
        _apply_to_category(conn, record, 1)
        if IS_DEV:
            print(f"[PERSONAL] Created {record['transactionType']} id={record['id']} amount={record['amount']}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("create expense", e)
    finally:
        conn.close()


@router.get(
    "/api/personal-expense/{expense_id}",
    response_model=ExpenseResponse,
    dependencies=[Depends(require_permission("transactions", "view"))],
)
def get_expense(expense_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, EXPENSES, expense_id, ctx, "Expense not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get expense", e)
    finally:
        conn.close()


@router.put(
    "/api/personal-expense/{expense_id}",
    response_model=ExpenseResponse,
    dependencies=[Depends(require_permission("transactions", "edit"))],
)
def update_expense(
    request: ExpenseWriteRequest,
    expense_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    changes = request.dict(exclude_unset=True)
    conn = get_db()
    try:
        current = require_document(conn, EXPENSES, expense_id, ctx, "Expense not found")
        merged = _prepare_entry(conn, {**current, **changes}, ctx)
        _apply_to_category(conn, current, -1)
        record = update_document(conn, EXPENSES, expense_id, merged, branch_scope(ctx))
        _apply_to_category(conn, record, 1)
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update expense", e)
    finally:
        conn.close()


@router.delete(
    "/api/personal-expense/{expense_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_permission("transactions", "delete"))],
)
def delete_expense(expense_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        current = require_document(conn, EXPENSES, expense_id, ctx, "Expense not found")
        delete_document(conn, EXPENSES, expense_id, branch_scope(ctx))
        _apply_to_category(conn, current, -1)
        return {"success": True, "message": "Expense deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete expense", e)
    finally:
        conn.close()


# ---------------------------------------------------------
# Family assets
# ---------------------------------------------------------
@router.get(
    "/api/family-assets",
    response_model=AssetListResponse,
    dependencies=[Depends(require_permission("transactions", "view"))],
)
def list_family_assets(
    params: ListParams = Depends(),
    asset_type: Optional[str] = Query(None, alias="type", max_length=100),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            FAMILY_ASSETS,
            search=params.q,
            search_fields=("name", "type", "providerCompanyName", "notes"),
            equals={"status": params.status, "type": asset_type},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list family assets", e)
    finally:
        conn.close()


@router.post(
    "/api/family-assets",
    status_code=201,
    response_model=AssetResponse,
    dependencies=[Depends(require_permission("transactions", "create"))],
)
def create_family_asset(request: AssetWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    data = stamp_owner(validate_asset(request.dict()), ctx)
    conn = get_db()
    try:
        record = insert_document(conn, FAMILY_ASSETS, data)
        if IS_DEV:
            print(f"[PERSONAL] Created family asset id={record['id']} type={record['type']}")
        return {"success": True, "data": record}
    except sqlite3.Error as e:
        raise _db_error("create family asset", e)
    finally:
        conn.close()


@router.get(
    "/api/family-assets/{asset_id}",
    response_model=AssetResponse,
    dependencies=[Depends(require_permission("transactions", "view"))],
)
def get_family_asset(asset_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, FAMILY_ASSETS, asset_id, ctx, "Family asset not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get family asset", e)
    finally:
        conn.close()


@router.put(
    "/api/family-assets/{asset_id}",
    response_model=AssetResponse,
    dependencies=[Depends(require_permission("transactions", "edit"))],
)
def update_family_asset(
    request: AssetWriteRequest,
    asset_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        current = require_document(conn, FAMILY_ASSETS, asset_id, ctx, "Family asset not found")
        merged = validate_asset({**current, **request.dict(exclude_unset=True)})
        record = update_document(conn, FAMILY_ASSETS, asset_id, merged, branch_scope(ctx))
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update family asset", e)
    finally:
        conn.close()


@router.delete(
    "/api/family-assets/{asset_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_permission("transactions", "delete"))],
)
def delete_family_asset(asset_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        if not delete_document(conn, FAMILY_ASSETS, asset_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="Family asset not found")
        return {"success": True, "message": "Family asset deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete family asset", e)
    finally:
        conn.close()


# ---------------------------------------------------------
# Dashboard
# ---------------------------------------------------------
def personal_summary(
    entries: List[Dict[str, Any]],
    family_assets: List[Dict[str, Any]],
    category_count: int,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Build the dashboard payload from raw records.

    monthly figures cover the last 30 days (inclusive of today); budget
    insights are the four largest debit categories in that window, as
    whole percentages of their combined total.
    """
    today = today or date.today()
    since = today - timedelta(days=DASHBOARD_WINDOW_DAYS)

    def in_window(entry: Dict[str, Any]) -> bool:
        day = parse_date(entry.get("date"))
        return day is not None and since <= day <= today

    recent = [e for e in entries if in_window(e)]
    expense = sum(to_number(e.get("amount")) for e in recent if e.get("transactionType") == "debit")
    income = sum(to_number(e.get("amount")) for e in recent if e.get("transactionType") == "credit")

    debits = [e for e in entries if e.get("transactionType") == "debit"]
    debits.sort(key=lambda e: (str(e.get("date") or ""), str(e.get("createdAt") or "")), reverse=True)
    recent_expenses = [
        {
            "id": e["id"],
            "title": e.get("notes") or e.get("categoryName") or "ব্যয়",
            "category": e.get("categoryName") or DEFAULT_CATEGORY,
            "amount": to_number(e.get("amount")),
            "date": e.get("date") or e.get("createdAt"),
        }
        for e in debits[:5]
    ]

    by_category: Dict[str, float] = {}
    for e in recent:
        if e.get("transactionType") == "debit":
            label = e.get("categoryName") or DEFAULT_CATEGORY
            by_category[label] = by_category.get(label, 0.0) + to_number(e.get("amount"))
    top = sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)[:4]
    top_total = sum(amount for _, amount in top)
    insights = [
        {"label": label, "value": int(amount * 100 / top_total + 0.5) if top_total > 0 else 0}
        for label, amount in top
    ]

    return {
        "summary": {
            "monthlyExpense": expense,
            "monthlyIncome": income,
            "savings": income - expense,
            "totalAssets": sum_field(family_assets, "totalPaidAmount"),
            "totalCategories": category_count,
        },
        "recentExpenses": recent_expenses,
        "budgetInsights": insights,
    }


@router.get(
    "/api/personal/dashboard",
    response_model=PersonalDashboardResponse,
    dependencies=[Depends(require_permission("dashboard", "view"))],
)
def personal_dashboard(ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        scope = branch_scope(ctx)
        entries = all_documents(conn, EXPENSES, branch_id=scope)
        family_assets = all_documents(conn, FAMILY_ASSETS, branch_id=scope)
        categories = all_documents(conn, CATEGORIES, branch_id=scope)
    except sqlite3.Error as e:
        raise _db_error("dashboard", e)
    finally:
        conn.close()

    if IS_DEV:
        print(f"[PERSONAL] Dashboard entries={len(entries)} family_assets={len(family_assets)}")
    return {"success": True, **personal_summary(entries, family_assets, len(categories))}
