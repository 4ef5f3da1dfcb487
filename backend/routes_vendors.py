"""
backend/routes_vendors.py

Vendor management: vendors, vendor bills and the vendor dashboard.

Security guarantees:
- All endpoints require authentication and an "agents:*" permission
- Queries are filtered by the caller's branch
- Vendor IDs (VN00001...) are generated server-side
"""

from __future__ import annotations

import sqlite3
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
        insert_document,
        pagination,
        update_document,
    )
    from backend.schemas_common import DeleteResponse
    from backend.schemas_vendors import (
        BillListResponse,
        BillResponse,
        BillWriteRequest,
        TradePartyWriteRequest,
        VendorBulkRequest,
        VendorBulkResponse,
        VendorDashboardResponse,
        VendorListResponse,
        VendorResponse,
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
        insert_document,
        pagination,
        update_document,
    )
    from schemas_common import DeleteResponse
    from schemas_vendors import (
        BillListResponse,
        BillResponse,
        BillWriteRequest,
        TradePartyWriteRequest,
        VendorBulkRequest,
        VendorBulkResponse,
        VendorDashboardResponse,
        VendorListResponse,
        VendorResponse,
    )

from domains.erp.calculations import to_number
from domains.erp.rules import next_sequence_id, trade_party_errors

VENDORS = "vendors"
BILLS = "vendor_bills"
VENDOR_SEARCH_FIELDS = ("tradeName", "tradeLocation", "ownerName", "contactNo", "vendorId")
BILL_SEARCH_FIELDS = ("billNumber", "vendorName")
TRADE_PARTY_FIELDS = ("tradeName", "tradeLocation", "ownerName", "contactNo", "dob", "nid", "passport", "logo", "status")

router = APIRouter(
    prefix="/api/vendors",
    tags=["vendors"],
)


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------
def _vendor_error(conn: sqlite3.Connection, data: Dict[str, Any], exclude_id: Optional[int] = None) -> Optional[str]:
    """First validation or duplicate-name error for a vendor, or None."""
    errors = trade_party_errors(data)
    if errors:
        return next(iter(errors.values()))
    if find_one(conn, VENDORS, "tradeName", str(data["tradeName"]).strip(), case_insensitive=True, exclude_id=exclude_id):
        return "Vendor with this trade name already exists"
    return None


def _new_vendor(conn: sqlite3.Connection, data: Dict[str, Any], ctx: AuthContext) -> Dict[str, Any]:
    existing = [v.get("vendorId") for v in all_documents(conn, VENDORS)]
    data["vendorId"] = next_sequence_id(existing, "VN", 5)
    data["status"] = data.get("status") or "active"
    data["totalPaid"] = 0
    data["totalDue"] = 0
    stamp_owner(data, ctx)
    return insert_document(conn, VENDORS, data)


def _clean(raw: Any) -> Dict[str, Any]:
    """Keep only vendor fields from a bulk row; values are stringified and trimmed."""
    if not isinstance(raw, dict):
        return {}
    cleaned = {}
    for key in TRADE_PARTY_FIELDS:
        value = raw.get(key)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            cleaned[key] = value
    return cleaned


def _bill_error(data: Dict[str, Any]) -> Optional[str]:
    if to_number(data.get("totalAmount")) <= 0:
        return "Total amount is required and must be greater than 0"
    if to_number(data.get("paidAmount")) < 0:
        return "Paid amount cannot be negative"
    return None


def _create_bill(conn: sqlite3.Connection, vendor: Dict[str, Any], data: Dict[str, Any], ctx: AuthContext) -> Dict[str, Any]:
    total = to_number(data.get("totalAmount"))
    paid = to_number(data.get("paidAmount"))
    data.update(
        vendorId=vendor["id"],
        vendorName=vendor.get("tradeName"),
        totalAmount=total,
        paidAmount=paid,
        dueAmount=total - paid,
    )
    stamp_owner(data, ctx)
    bill = insert_document(conn, BILLS, data)

    # Unpaid part of the bill is owed to the vendor
    due = total - paid
    if due > 0:
        changes = {"totalDue": to_number(vendor.get("totalDue")) + due}
        bill_type = (data.get("billType") or "").lower()
        for kind, key in (("hajj", "hajDue"), ("umrah", "umrahDue")):
            if kind in bill_type:
                changes[key] = to_number(vendor.get(key)) + due
        update_document(conn, VENDORS, int(vendor["id"]), changes)
        if IS_DEV:
            print(f"[VENDORS] Vendor id={vendor['id']} due +{due} -> {changes['totalDue']}")
    return bill


def _db_error(op: str, e: sqlite3.Error) -> HTTPException:
    if IS_DEV:
        print(f"[VENDORS] DB error on {op}: {e}")
    return HTTPException(status_code=500, detail="Database error")


# ---------------------------------------------------------
# Vendors
# ---------------------------------------------------------
@router.get("", response_model=VendorListResponse, dependencies=[Depends(require_permission("agents", "view"))])
def list_vendors(
    params: ListParams = Depends(),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            VENDORS,
            search=params.q,
            search_fields=VENDOR_SEARCH_FIELDS,
            equals={"status": params.status},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list", e)
    finally:
        conn.close()


@router.post("", status_code=201, response_model=VendorResponse, dependencies=[Depends(require_permission("agents", "create"))])
def create_vendor(
    request: TradePartyWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    Create a vendor with the next VN00001-style vendorId.

    Raises:
        HTTPException(400): Missing fields, bad phone/NID/passport, duplicate trade name
    """
    data = request.dict()
    conn = get_db()
    try:
        error = _vendor_error(conn, data)
        if error:
            raise HTTPException(status_code=400, detail=error)
        vendor = _new_vendor(conn, data, ctx)
        if IS_DEV:
            print(f"[VENDORS] Created vendor id={vendor['id']} vendorId={vendor['vendorId']}")
        return {"success": True, "data": vendor}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("create", e)
    finally:
        conn.close()


@router.put("", response_model=VendorBulkResponse, dependencies=[Depends(require_permission("agents", "create"))])
def bulk_create_vendors(
    request: VendorBulkRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    Bulk import (spreadsheet upload). Each vendor is validated on its own;
    failures are reported by index and do not stop the batch.
    """
    if not request.vendors:
        raise HTTPException(status_code=400, detail="No vendors provided")

    created: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []
    conn = get_db()
    try:
        for index, raw in enumerate(request.vendors):
            data = _clean(raw)
            error = _vendor_error(conn, data)
            if error:
                errors.append({"index": index, "error": error})
                continue
            created.append(_new_vendor(conn, data, ctx))

        print(f"[VENDORS] Bulk import: {len(created)} created, {len(errors)} failed (user_id={ctx.user_id})")
        return {"success": True, "created": created, "errors": errors}
    except sqlite3.Error as e:
        raise _db_error("bulk create", e)
    finally:
        conn.close()


@router.get("/dashboard", response_model=VendorDashboardResponse, dependencies=[Depends(require_permission("agents", "view"))])
def vendor_dashboard(ctx: AuthContext = Depends(require_auth_context)):
    """
    Vendor counts, bill totals and the five vendors with the largest bills.
    """
    conn = get_db()
    try:
        scope = branch_scope(ctx)
        vendors = all_documents(conn, VENDORS, branch_id=scope)
        bills = all_documents(conn, BILLS, branch_id=scope)
    except sqlite3.Error as e:
        raise _db_error("dashboard", e)
    finally:
        conn.close()

    total_amount = sum(to_number(b.get("totalAmount")) for b in bills)
    total_paid = sum(to_number(b.get("paidAmount")) for b in bills)

    per_vendor: Dict[str, Dict[str, float]] = {}
    for bill in bills:
        key = str(bill.get("vendorId") or "")
        if not key:
            continue
        stats = per_vendor.setdefault(key, {"billCount": 0, "totalBillAmount": 0.0, "paidAmount": 0.0, "dueAmount": 0.0})
        amount = to_number(bill.get("totalAmount"))
        paid = to_number(bill.get("paidAmount"))
        stats["billCount"] += 1
        stats["totalBillAmount"] += amount
        stats["paidAmount"] += paid
        stats["dueAmount"] += max(0.0, amount - paid)

    top = []
    for vendor in vendors:
        stats = per_vendor.get(vendor["id"]) or per_vendor.get(str(vendor.get("vendorId"))) or {}
        top.append({
            "id": vendor["id"],
            "vendorId": vendor.get("vendorId"),
            "tradeName": vendor.get("tradeName"),
            "billCount": int(stats.get("billCount", 0)),
            "totalBillAmount": stats.get("totalBillAmount", 0.0),
            "paidAmount": stats.get("paidAmount", 0.0),
            "dueAmount": stats.get("dueAmount", 0.0),
        })
    top.sort(key=lambda v: v["totalBillAmount"], reverse=True)

    return {
        "success": True,
        "data": {
            "statistics": {
                "totalVendors": len(vendors),
                "active": sum(1 for v in vendors if (v.get("status") or "active") == "active"),
                "inactive": sum(1 for v in vendors if v.get("status") == "inactive"),
            },
            "bills": {
                "totalBills": len(bills),
                "totalAmount": total_amount,
                "totalPaid": total_paid,
                "totalDue": max(0.0, total_amount - total_paid),
            },
            "topVendors": top[:5],
        },
    }


# ---------------------------------------------------------
# Bills (static paths before /{vendor_id})
# ---------------------------------------------------------
@router.get("/bills", response_model=BillListResponse, dependencies=[Depends(require_permission("agents", "view"))])
def list_bills(
    params: ListParams = Depends(),
    vendor_id: Optional[str] = Query(None, alias="vendorId", max_length=50),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            BILLS,
            search=params.q,
            search_fields=BILL_SEARCH_FIELDS,
            equals={"vendorId": vendor_id},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list bills", e)
    finally:
        conn.close()


@router.post("/bills", status_code=201, response_model=BillResponse, dependencies=[Depends(require_permission("agents", "create"))])
def create_bill(
    request: BillWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    """Create a bill; body.vendorId must reference an existing vendor."""
    data = request.dict()
    vendor_ref = data.get("vendorId")
    if not vendor_ref or not str(vendor_ref).isdigit():
        raise HTTPException(status_code=400, detail="Vendor ID is required")
    error = _bill_error(data)
    if error:
        raise HTTPException(status_code=400, detail=error)

    conn = get_db()
    try:
        vendor = require_document(conn, VENDORS, int(vendor_ref), ctx, "Vendor not found")
        bill = _create_bill(conn, vendor, data, ctx)
        if IS_DEV:
            print(f"[VENDORS] Created bill id={bill['id']} vendor={vendor['id']} amount={bill['totalAmount']}")
        return {"success": True, "data": bill}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("create bill", e)
    finally:
        conn.close()


# ---------------------------------------------------------
# Single vendor
# ---------------------------------------------------------
@router.get("/{vendor_id}", response_model=VendorResponse, dependencies=[Depends(require_permission("agents", "view"))])
def get_vendor(
    vendor_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, VENDORS, vendor_id, ctx, "Vendor not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get", e)
    finally:
        conn.close()


@router.put("/{vendor_id}", response_model=VendorResponse, dependencies=[Depends(require_permission("agents", "edit"))])
def update_vendor(
    request: TradePartyWriteRequest,
    vendor_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        current = require_document(conn, VENDORS, vendor_id, ctx, "Vendor not found")
        merged = {**current, **request.dict(exclude_unset=True)}
        error = _vendor_error(conn, merged, exclude_id=vendor_id)
        if error:
            raise HTTPException(status_code=400, detail=error)
        vendor = update_document(conn, VENDORS, vendor_id, merged, branch_scope(ctx))
        if IS_DEV:
            print(f"[VENDORS] Updated vendor id={vendor_id}")
        return {"success": True, "data": vendor}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update", e)
    finally:
        conn.close()


@router.delete("/{vendor_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("agents", "delete"))])
def delete_vendor(
    vendor_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        if not delete_document(conn, VENDORS, vendor_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="Vendor not found")
        if IS_DEV:
            print(f"[VENDORS] Deleted vendor id={vendor_id}")
        return {"success": True, "message": "Vendor deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete", e)
    finally:
        conn.close()


@router.get("/{vendor_id}/bills", response_model=BillListResponse, dependencies=[Depends(require_permission("agents", "view"))])
def list_vendor_bills(
    vendor_id: int = Path(..., ge=1),
    params: ListParams = Depends(),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        require_document(conn, VENDORS, vendor_id, ctx, "Vendor not found")
        items, total = find_documents(
            conn,
            BILLS,
            search=params.q,
            search_fields=BILL_SEARCH_FIELDS,
            equals={"vendorId": str(vendor_id)},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("list vendor bills", e)
    finally:
        conn.close()


@router.post("/{vendor_id}/bills", status_code=201, response_model=BillResponse, dependencies=[Depends(require_permission("agents", "create"))])
def create_vendor_bill(
    request: BillWriteRequest,
    vendor_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    data = request.dict()
    error = _bill_error(data)
    if error:
        raise HTTPException(status_code=400, detail=error)

    conn = get_db()
    try:
        vendor = require_document(conn, VENDORS, vendor_id, ctx, "Vendor not found")
        bill = _create_bill(conn, vendor, data, ctx)
        if IS_DEV:
            print(f"[VENDORS] Created bill id={bill['id']} vendor={vendor_id}")
        return {"success": True, "data": bill}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("create vendor bill", e)
    finally:
        conn.close()
