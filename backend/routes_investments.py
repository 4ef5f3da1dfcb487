"""
backend/routes_investments.py

"Others invest" investments and the IATA / Airlines Capping ledger.

Both live in the investments collection. Each router only sees its own
types: a capping record is a 404 on the others-invest routes and the
other way round.
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
    from backend.documents import delete_document, find_documents, insert_document, pagination, update_document
    from backend.schemas_common import DeleteResponse
    from backend.schemas_finance import (
        CappingListResponse,
        CappingResponse,
        CappingWriteRequest,
        InvestmentListResponse,
        InvestmentResponse,
        InvestmentWriteRequest,
    )
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope, require_document, stamp_owner
    from config import IS_DEV
    from db import get_db
    from dependencies import ListParams, require_permission
    from documents import delete_document, find_documents, insert_document, pagination, update_document
    from schemas_common import DeleteResponse
    from schemas_finance import (
        CappingListResponse,
        CappingResponse,
        CappingWriteRequest,
        InvestmentListResponse,
        InvestmentResponse,
        InvestmentWriteRequest,
    )

from domains.erp.calculations import parse_date, to_number
from domains.erp.rules import CAPPING_TYPES, INVESTMENT_EXCLUDED_TYPES, is_blank

COLLECTION = "investments"
SEARCH_FIELDS = ("investmentName", "investmentType")
NOT_FOUND = "Investment not found"
CAPPING_SEARCH_FIELDS = ("airlineName", "investmentType", "notes")

router = APIRouter(
    prefix="/api/investments/others-invest",
    tags=["investments"],
)

capping_router = APIRouter(
    prefix="/api/investments/iata-airlines-capping",
    tags=["investments"],
)


def _term_error(data: Dict[str, Any]) -> Optional[str]:
    """Date and interest rules shared by both investment ledgers."""
    invested = parse_date(data.get("investmentDate"))
    if invested is None:
        return "বিনিয়োগ তারিখ আবশ্যক"
    matures = parse_date(data.get("maturityDate"))
    if matures is None:
        return "পরিপক্কতার তারিখ আবশ্যক"
    if matures <= invested:
        return "পরিপক্কতার তারিখ বিনিয়োগ তারিখের পরে হতে হবে"
    rate = data.get("interestRate")
    if rate is None or not 0 <= to_number(rate) <= 100:
        return "সুদের হার ০ থেকে ১০০ এর মধ্যে হতে হবে"
    return None


def _investment_error(data: Dict[str, Any]) -> Optional[str]:
    """First failing rule, in the form's field order."""
    if is_blank(data.get("investmentName")):
        return "বিনিয়োগ নাম আবশ্যক"
    if is_blank(data.get("investmentType")):
        return "বিনিয়োগ টাইপ আবশ্যক"
    if data["investmentType"] in INVESTMENT_EXCLUDED_TYPES:
        return "এই বিনিয়োগ টাইপ এখানে গ্রহণযোগ্য নয়"
    if to_number(data.get("investmentAmount")) <= 0:
        return "বিনিয়োগ পরিমাণ আবশ্যক এবং ০ এর চেয়ে বেশি হতে হবে"
    return _term_error(data)


def _validated(data: Dict[str, Any]) -> Dict[str, Any]:
    error = _investment_error(data)
    if error:
        raise HTTPException(status_code=400, detail=error)
    data["investmentAmount"] = to_number(data["investmentAmount"])
    data["returnAmount"] = to_number(data.get("returnAmount"))
    data["interestRate"] = to_number(data["interestRate"])
    data["status"] = data.get("status") or "active"
    return data


def _visible(conn: sqlite3.Connection, investment_id: int, ctx: AuthContext) -> Dict[str, Any]:
    record = require_document(conn, COLLECTION, investment_id, ctx, NOT_FOUND)
    if record.get("investmentType") in INVESTMENT_EXCLUDED_TYPES:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return record


def _db_error(op: str, e: sqlite3.Error) -> HTTPException:
    if IS_DEV:
        print(f"[INVESTMENTS] DB error on {op}: {e}")
    return HTTPException(status_code=500, detail="Database error")


@router.get("", response_model=InvestmentListResponse, dependencies=[Depends(require_permission("transactions", "view"))])
def list_investments(
    params: ListParams = Depends(),
    investment_type: Optional[str] = Query(None, alias="type", max_length=100),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            COLLECTION,
            search=params.q,
            search_fields=SEARCH_FIELDS,
            equals={"status": params.status, "investmentType": investment_type},
            not_in={"investmentType": INVESTMENT_EXCLUDED_TYPES},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        if IS_DEV:
            print(f"[INVESTMENTS] Listed {len(items)}/{total} q={params.q!r} type={investment_type!r}")
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list", e)
    finally:
        conn.close()


@router.post("", status_code=201, response_model=InvestmentResponse, dependencies=[Depends(require_permission("transactions", "create"))])
def create_investment(
    request: InvestmentWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    Create an investment.

    Raises:
        HTTPException(400): Validation failed or the type belongs to the
            IATA / Airlines Capping ledger
    """
    data = stamp_owner(_validated(request.dict()), ctx)
    conn = get_db()
    try:
        record = insert_document(conn, COLLECTION, data)
        if IS_DEV:
            print(f"[INVESTMENTS] Created id={record['id']} type={record['investmentType']}")
        return {"success": True, "data": record}
    except sqlite3.Error as e:
        raise _db_error("create", e)
    finally:
        conn.close()


@router.get("/{investment_id}", response_model=InvestmentResponse, dependencies=[Depends(require_permission("transactions", "view"))])
def get_investment(
    investment_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        return {"success": True, "data": _visible(conn, investment_id, ctx)}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get", e)
    finally:
        conn.close()


@router.put("/{investment_id}", response_model=InvestmentResponse, dependencies=[Depends(require_permission("transactions", "edit"))])
def update_investment(
    request: InvestmentWriteRequest,
    investment_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        current = _visible(conn, investment_id, ctx)
        merged = _validated({**current, **request.dict(exclude_unset=True)})
        record = update_document(conn, COLLECTION, investment_id, merged, branch_scope(ctx))
        if IS_DEV:
            print(f"[INVESTMENTS] Updated id={investment_id}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update", e)
    finally:
        conn.close()


@router.delete("/{investment_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("transactions", "delete"))])
def delete_investment(
    investment_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        _visible(conn, investment_id, ctx)
        delete_document(conn, COLLECTION, investment_id, branch_scope(ctx))
        if IS_DEV:
            print(f"[INVESTMENTS] Deleted id={investment_id}")
        return {"success": True, "message": "Investment deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete", e)
    finally:
        conn.close()


# ---------------------------------------------------------
# IATA / Airlines Capping
# ---------------------------------------------------------
def _capping_error(data: Dict[str, Any]) -> Optional[str]:
    if is_blank(data.get("airlineName")):
        return "এয়ারলাইন নাম আবশ্যক"
    if data.get("investmentType") not in CAPPING_TYPES:
        return "এই বিনিয়োগ টাইপ এখানে গ্রহণযোগ্য নয়"
    if to_number(data.get("cappingAmount")) <= 0:
        return "বিনিয়োগ পরিমাণ আবশ্যক এবং ০ এর চেয়ে বেশি হতে হবে"
    return _term_error(data)


def _capping_validated(data: Dict[str, Any]) -> Dict[str, Any]:
    data["investmentType"] = data.get("investmentType") or "IATA"
    error = _capping_error(data)
    if error:
        raise HTTPException(status_code=400, detail=error)
    data["cappingAmount"] = to_number(data["cappingAmount"])
    data["returnAmount"] = to_number(data.get("returnAmount"))
    data["interestRate"] = to_number(data["interestRate"])
    data["status"] = data.get("status") or "active"
    return data


def _capping_visible(conn: sqlite3.Connection, investment_id: int, ctx: AuthContext) -> Dict[str, Any]:
    record = require_document(conn, COLLECTION, investment_id, ctx, NOT_FOUND)
    if record.get("investmentType") not in CAPPING_TYPES:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return record


@capping_router.get("", response_model=CappingListResponse, dependencies=[Depends(require_permission("transactions", "view"))])
def list_capping(
    params: ListParams = Depends(),
    investment_type: Optional[str] = Query(None, alias="investmentType", max_length=100),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            COLLECTION,
            search=params.q,
            search_fields=CAPPING_SEARCH_FIELDS,
            equals={"status": params.status, "investmentType": investment_type},
            one_of={"investmentType": CAPPING_TYPES},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        if IS_DEV:
            print(f"[INVESTMENTS] Listed capping {len(items)}/{total} type={investment_type!r}")
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list capping", e)
    finally:
        conn.close()


@capping_router.post("", status_code=201, response_model=CappingResponse, dependencies=[Depends(require_permission("transactions", "create"))])
def create_capping(
    request: CappingWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    Create an IATA or Airlines Capping investment (type defaults to IATA).

    Raises:
        HTTPException(400): Validation failed or the type is not a capping type
    """
    data = stamp_owner(_capping_validated(request.dict()), ctx)
    conn = get_db()
    try:
        record = insert_document(conn, COLLECTION, data)
        if IS_DEV:
            print(f"[INVESTMENTS] Created capping id={record['id']} airline={record['airlineName']!r}")
        return {"success": True, "data": record}
    except sqlite3.Error as e:
        raise _db_error("create capping", e)
    finally:
        conn.close()


@capping_router.get("/{investment_id}", response_model=CappingResponse, dependencies=[Depends(require_permission("transactions", "view"))])
def get_capping(
    investment_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        return {"success": True, "data": _capping_visible(conn, investment_id, ctx)}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get capping", e)
    finally:
        conn.close()


@capping_router.put("/{investment_id}", response_model=CappingResponse, dependencies=[Depends(require_permission("transactions", "edit"))])
def update_capping(
    request: CappingWriteRequest,
    investment_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        current = _capping_visible(conn, investment_id, ctx)
        merged = _capping_validated({**current, **request.dict(exclude_unset=True)})
        record = update_document(conn, COLLECTION, investment_id, merged, branch_scope(ctx))
        if IS_DEV:
            print(f"[INVESTMENTS] Updated capping id={investment_id}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update capping", e)
    finally:
        conn.close()


@capping_router.delete("/{investment_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("transactions", "delete"))])
def delete_capping(
    investment_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        _capping_visible(conn, investment_id, ctx)
        delete_document(conn, COLLECTION, investment_id, branch_scope(ctx))
        if IS_DEV:
            print(f"[INVESTMENTS] Deleted capping id={investment_id}")
        return {"success": True, "message": "Investment deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete capping", e)
    finally:
        conn.close()
