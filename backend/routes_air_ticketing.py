"""
backend/routes_air_ticketing.py

Ticket refunds and reissues.

Derived amounts are recomputed server-side from their components so the
stored totals always match the fare breakdown:
- refundAmount = max(0, actualFare - usedAmount - serviceCharge - airlinesPenalty)
- totalCharge  = fareDifference + taxDifference + serviceFee + airlinesPenalty
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path

try:
    from backend.auth_context import AuthContext, require_auth_context
    from backend.branch import branch_scope, require_document, stamp_owner
    from backend.config import IS_DEV
    from backend.db import get_db
    from backend.dependencies import ListParams, require_permission
    from backend.documents import delete_document, find_documents, insert_document, now_iso, pagination, update_document
    from backend.schemas_air import (
        RefundListResponse,
        RefundResponse,
        RefundWriteRequest,
        ReissueListResponse,
        ReissueResponse,
        ReissueWriteRequest,
    )
    from backend.schemas_common import DeleteResponse
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope, require_document, stamp_owner
    from config import IS_DEV
    from db import get_db
    from dependencies import ListParams, require_permission
    from documents import delete_document, find_documents, insert_document, now_iso, pagination, update_document
    from schemas_air import (
        RefundListResponse,
        RefundResponse,
        RefundWriteRequest,
        ReissueListResponse,
        ReissueResponse,
        ReissueWriteRequest,
    )
    from schemas_common import DeleteResponse

from domains.erp.calculations import refund_total, reissue_total, to_number
from domains.erp.rules import is_blank

REFUNDS = "air_refunds"
REISSUES = "air_reissues"
REFUND_SEARCH_FIELDS = ("ticketNumber", "pnr", "passengerName", "customerName")
REISSUE_SEARCH_FIELDS = ("ticketNumber", "pnr", "passengerName", "vendorName")
REFUND_COMPONENTS = ("actualFare", "usedAmount", "serviceCharge", "airlinesPenalty")
REISSUE_COMPONENTS = ("fareDifference", "taxDifference", "serviceFee", "airlinesPenalty")

router = APIRouter(
    prefix="/api/air-ticketing",
    tags=["air-ticketing"],
)


def _prepare_refund(data: Dict[str, Any]) -> Dict[str, Any]:
    if any(to_number(data.get(k)) for k in REFUND_COMPONENTS):
        data["refundAmount"] = refund_total(*(data.get(k) for k in REFUND_COMPONENTS))
    if is_blank(data.get("ticketNumber")) or not to_number(data.get("refundAmount")):
        raise HTTPException(status_code=400, detail="টিকেট নম্বর এবং রিফান্ড পরিমাণ আবশ্যক")
    for key in REFUND_COMPONENTS + ("refundAmount",):
        data[key] = to_number(data.get(key))
    data["refundMethod"] = data.get("refundMethod") or "cash"
    data["status"] = data.get("status") or "Pending"
    return data


def _prepare_reissue(data: Dict[str, Any]) -> Dict[str, Any]:
    if is_blank(data.get("ticketNumber")):
        raise HTTPException(status_code=400, detail="টিকেট নম্বর আবশ্যক")
    for key in REISSUE_COMPONENTS:
        data[key] = to_number(data.get(key))
    data["totalCharge"] = reissue_total(*(data[k] for k in REISSUE_COMPONENTS))
    data["status"] = data.get("status") or "Pending"
    return data


def _db_error(op: str, e: sqlite3.Error) -> HTTPException:
    if IS_DEV:
        print(f"[AIR_TICKETING] DB error on {op}: {e}")
    return HTTPException(status_code=500, detail="Database error")


def _list(collection: str, fields, params: ListParams, ctx: AuthContext) -> Dict[str, Any]:
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            collection,
            search=params.q,
            search_fields=fields,
            equals={"status": params.status},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error(f"list {collection}", e)
    finally:
        conn.close()


def _create(collection: str, data: Dict[str, Any], ctx: AuthContext) -> Dict[str, Any]:
    stamp_owner(data, ctx)
    conn = get_db()
    try:
        record = insert_document(conn, collection, data)
        if IS_DEV:
            print(f"[AIR_TICKETING] Created {collection} id={record['id']} ticket={record.get('ticketNumber')}")
        return {"success": True, "data": record}
    except sqlite3.Error as e:
        raise _db_error(f"create {collection}", e)
    finally:
        conn.close()


def _get(collection: str, record_id: int, ctx: AuthContext, not_found: str) -> Dict[str, Any]:
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, collection, record_id, ctx, not_found)}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error(f"get {collection}", e)
    finally:
        conn.close()


def _update(collection: str, record_id: int, changes: Dict[str, Any], ctx: AuthContext, not_found: str, prepare) -> Dict[str, Any]:
    conn = get_db()
    try:
        current = require_document(conn, collection, record_id, ctx, not_found)
        merged = prepare({**current, **changes})
        record = update_document(conn, collection, record_id, merged, branch_scope(ctx))
        if IS_DEV:
            print(f"[AIR_TICKETING] Updated {collection} id={record_id}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error(f"update {collection}", e)
    finally:
        conn.close()


def _delete(collection: str, record_id: int, ctx: AuthContext, not_found: str, message: str) -> Dict[str, Any]:
    conn = get_db()
    try:
        if not delete_document(conn, collection, record_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail=not_found)
        if IS_DEV:
            print(f"[AIR_TICKETING] Deleted {collection} id={record_id}")
        return {"success": True, "message": message}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error(f"delete {collection}", e)
    finally:
        conn.close()


# ---------------------------------------------------------
# Refunds
# ---------------------------------------------------------
@router.get("/refund", response_model=RefundListResponse, dependencies=[Depends(require_permission("customers", "view"))])
def list_refunds(params: ListParams = Depends(), ctx: AuthContext = Depends(require_auth_context)):
    return _list(REFUNDS, REFUND_SEARCH_FIELDS, params, ctx)


@router.post("/refund", status_code=201, response_model=RefundResponse, dependencies=[Depends(require_permission("customers", "create"))])
def create_refund(request: RefundWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    """
    Create a refund request.

    Raises:
        HTTPException(400): ticketNumber or a non-zero refund amount missing
    """
    data = _prepare_refund(request.dict())
    data["refundDate"] = now_iso()
    return _create(REFUNDS, data, ctx)


@router.get("/refund/{refund_id}", response_model=RefundResponse, dependencies=[Depends(require_permission("customers", "view"))])
def get_refund(refund_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _get(REFUNDS, refund_id, ctx, "Refund record not found")


@router.put("/refund/{refund_id}", response_model=RefundResponse, dependencies=[Depends(require_permission("customers", "edit"))])
def update_refund(
    request: RefundWriteRequest,
    refund_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    return _update(REFUNDS, refund_id, request.dict(exclude_unset=True), ctx, "Refund record not found", _prepare_refund)


@router.delete("/refund/{refund_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("customers", "delete"))])
def delete_refund(refund_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _delete(REFUNDS, refund_id, ctx, "Refund record not found", "রিফান্ড রেকর্ড মুছে ফেলা হয়েছে")


# ---------------------------------------------------------
# Reissues
# ---------------------------------------------------------
@router.get("/reissue", response_model=ReissueListResponse, dependencies=[Depends(require_permission("customers", "view"))])
def list_reissues(params: ListParams = Depends(), ctx: AuthContext = Depends(require_auth_context)):
    return _list(REISSUES, REISSUE_SEARCH_FIELDS, params, ctx)


@router.post("/reissue", status_code=201, response_model=ReissueResponse, dependencies=[Depends(require_permission("customers", "create"))])
def create_reissue(request: ReissueWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    return _create(REISSUES, _prepare_reissue(request.dict()), ctx)


@router.get("/reissue/{reissue_id}", response_model=ReissueResponse, dependencies=[Depends(require_permission("customers", "view"))])
def get_reissue(reissue_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _get(REISSUES, reissue_id, ctx, "Reissue record not found")


@router.put("/reissue/{reissue_id}", response_model=ReissueResponse, dependencies=[Depends(require_permission("customers", "edit"))])
def update_reissue(
    request: ReissueWriteRequest,
    reissue_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    return _update(REISSUES, reissue_id, request.dict(exclude_unset=True), ctx, "Reissue record not found", _prepare_reissue)


@router.delete("/reissue/{reissue_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("customers", "delete"))])
def delete_reissue(reissue_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _delete(REISSUES, reissue_id, ctx, "Reissue record not found", "রিইস্যু রেকর্ড মুছে ফেলা হয়েছে")
