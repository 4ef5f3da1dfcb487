"""
backend/routes_bank_accounts.py

Agency bank, cash and mobile-banking accounts.

Account numbers are unique across all branches. The bank's own branch is
stored as bankBranchName; branchName stays the agency branch that owns
the record.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

try:
    from backend.auth_context import AuthContext, require_auth_context
    from backend.branch import branch_scope, require_document, stamp_owner
    from backend.config import IS_DEV
    from backend.db import get_db
    from backend.dependencies import ListParams, require_permission
    from backend.documents import delete_document, find_documents, find_one, insert_document, pagination, update_document
    from backend.schemas_common import DeleteResponse
    from backend.schemas_finance import BankAccountListResponse, BankAccountResponse, BankAccountWriteRequest
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope, require_document, stamp_owner
    from config import IS_DEV
    from db import get_db
    from dependencies import ListParams, require_permission
    from documents import delete_document, find_documents, find_one, insert_document, pagination, update_document
    from schemas_common import DeleteResponse
    from schemas_finance import BankAccountListResponse, BankAccountResponse, BankAccountWriteRequest

from domains.erp.calculations import to_number
from domains.erp.rules import BANK_ACCOUNT_CATEGORIES, CONTACT_NUMBER_RE, is_blank

COLLECTION = "bank_accounts"
SEARCH_FIELDS = ("bankName", "accountNumber", "accountTitle", "accountHolder", "bankBranchName")
NOT_FOUND = "Bank account not found"
DUPLICATE = "Bank account with this account number already exists"

REQUIRED_TEXT = (
    ("bankName", "Bank name is required"),
    ("accountNumber", "Account number is required"),
    ("routingNumber", "Routing number is required"),
    ("accountCategory", "Account category is required"),
    ("bankBranchName", "Branch name is required"),
    ("accountHolder", "Account holder is required"),
    ("accountTitle", "Account title is required"),
)

router = APIRouter(
    prefix="/api/bank-accounts",
    tags=["bank-accounts"],
)


def _account_error(data: Dict[str, Any]) -> Optional[str]:
    for field, message in REQUIRED_TEXT:
        if is_blank(data.get(field)):
            return message
    balance = data.get("initialBalance")
    if balance is None or to_number(balance) < 0:
        return "Valid initial balance is required"
    if data["accountCategory"] not in BANK_ACCOUNT_CATEGORIES:
        return "Please select a valid account category"
    contact = data.get("contactNumber")
    if contact and not CONTACT_NUMBER_RE.match(contact):
        return "Please enter a valid contact number"
    return None


def _validated(data: Dict[str, Any]) -> Dict[str, Any]:
    error = _account_error(data)
    if error:
        raise HTTPException(status_code=400, detail=error)
    data["initialBalance"] = to_number(data["initialBalance"])
    # A new account starts at its opening balance
    if data.get("currentBalance") is None:
        data["currentBalance"] = data["initialBalance"]
    data["currentBalance"] = to_number(data["currentBalance"])
    data["accountType"] = data.get("accountType") or "Current"
    data["currency"] = data.get("currency") or "BDT"
    data["status"] = data.get("status") or "active"
    return data


def _ensure_unique(conn: sqlite3.Connection, account_number: str, exclude_id: Optional[int] = None) -> None:
    if find_one(conn, COLLECTION, "accountNumber", account_number, exclude_id=exclude_id):
        raise HTTPException(status_code=400, detail=DUPLICATE)


def _db_error(op: str, e: sqlite3.Error) -> HTTPException:
    if IS_DEV:
        print(f"[BANK] DB error on {op}: {e}")
    return HTTPException(status_code=500, detail="Database error")


@router.get("", response_model=BankAccountListResponse, dependencies=[Depends(require_permission("ledger", "view"))])
def list_bank_accounts(
    params: ListParams = Depends(),
    category: Optional[str] = Query(None, alias="accountCategory", max_length=50),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            COLLECTION,
            search=params.q,
            search_fields=SEARCH_FIELDS,
            equals={"status": params.status, "accountCategory": category},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        if IS_DEV:
            print(f"[BANK] Listed {len(items)}/{total} category={category!r}")
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list", e)
    finally:
        conn.close()


@router.post("", status_code=201, response_model=BankAccountResponse, dependencies=[Depends(require_permission("ledger", "create"))])
def create_bank_account(
    request: BankAccountWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    Open an account. currentBalance defaults to initialBalance.

    Raises:
        HTTPException(400): Validation failed or the account number is taken
    """
    data = stamp_owner(_validated(request.dict()), ctx)
    conn = get_db()
    try:
        _ensure_unique(conn, data["accountNumber"])
        record = insert_document(conn, COLLECTION, data)
        if IS_DEV:
            print(f"[BANK] Created id={record['id']} bank={record['bankName']!r}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("create", e)
    finally:
        conn.close()


@router.get("/{account_id}", response_model=BankAccountResponse, dependencies=[Depends(require_permission("ledger", "view"))])
def get_bank_account(
    account_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, COLLECTION, account_id, ctx, NOT_FOUND)}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get", e)
    finally:
        conn.close()


@router.put("/{account_id}", response_model=BankAccountResponse, dependencies=[Depends(require_permission("ledger", "edit"))])
def update_bank_account(
    request: BankAccountWriteRequest,
    account_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        current = require_document(conn, COLLECTION, account_id, ctx, NOT_FOUND)
        merged = _validated({**current, **request.dict(exclude_unset=True)})
        if merged["accountNumber"] != current.get("accountNumber"):
            _ensure_unique(conn, merged["accountNumber"], exclude_id=account_id)
        record = update_document(conn, COLLECTION, account_id, merged, branch_scope(ctx))
        if IS_DEV:
            print(f"[BANK] Updated id={account_id}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update", e)
    finally:
        conn.close()


@router.delete("/{account_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("ledger", "delete"))])
def delete_bank_account(
    account_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        require_document(conn, COLLECTION, account_id, ctx, NOT_FOUND)
        delete_document(conn, COLLECTION, account_id, branch_scope(ctx))
        if IS_DEV:
            print(f"[BANK] Deleted id={account_id}")
        return {"success": True, "message": "Bank account deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete", e)
    finally:
        conn.close()
