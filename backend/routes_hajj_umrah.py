"""
backend/routes_hajj_umrah.py

Hajj & Umrah module: haji and umrah pilgrim records, SAR (Saudi Riyal)
rates and the summary dashboard.

Pilgrim customer IDs are HAJ0001 / UMR0001 style and generated when the
client does not send one. Due amount is always total_amount - paid_amount.
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
    from backend.schemas_hajj import (
        HajjDashboardResponse,
        PilgrimListResponse,
        PilgrimResponse,
        PilgrimWriteRequest,
        SarListResponse,
        SarResponse,
        SarWriteRequest,
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
    from schemas_hajj import (
        HajjDashboardResponse,
        PilgrimListResponse,
        PilgrimResponse,
        PilgrimWriteRequest,
        SarListResponse,
        SarResponse,
        SarWriteRequest,
    )

from domains.erp.calculations import first_number, to_number
from domains.erp.rules import is_blank, next_sequence_id

PILGRIM_SEARCH_FIELDS = ("name", "mobile", "customer_id", "passport_number")
SAR = "sar_rates"
SAR_SEARCH_FIELDS = ("packageName", "transactionName")

# kind -> (collection, id prefix, label used in messages)
PILGRIM_KINDS = {
    "hajj": ("hajis", "HAJ", "Haji"),
    "umrah": ("umrahs", "UMR", "Umrah"),
}

router = APIRouter(
    prefix="/api/hajj-umrah",
    tags=["hajj-umrah"],
)


def _db_error(op: str, e: sqlite3.Error) -> HTTPException:
    if IS_DEV:
        print(f"[HAJJ] DB error on {op}: {e}")
    return HTTPException(status_code=500, detail="Database error")


# ---------------------------------------------------------
# Pilgrim helpers
# ---------------------------------------------------------
def _pilgrim_error(data: Dict[str, Any]) -> Optional[str]:
    if is_blank(data.get("name")) and (is_blank(data.get("first_name")) or is_blank(data.get("last_name"))):
        return "Name or first name and last name are required"
    if is_blank(data.get("mobile")):
        return "Mobile number is required"
    return None


def _prepare_pilgrim(data: Dict[str, Any], kind: str) -> Dict[str, Any]:
    if is_blank(data.get("name")):
        data["name"] = f"{data.get('first_name') or ''} {data.get('last_name') or ''}".strip()
    total = to_number(data.get("total_amount"))
    paid = to_number(data.get("paid_amount"))
    data["total_amount"] = total
    data["paid_amount"] = paid
    data["due_amount"] = total - paid
    data["service_type"] = kind
    data["service_status"] = data.get("service_status") or "আনপেইড"
    return data


def _list_pilgrims(kind: str, params: ListParams, ctx: AuthContext) -> Dict[str, Any]:
    collection = PILGRIM_KINDS[kind][0]
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            collection,
            search=params.q,
            search_fields=PILGRIM_SEARCH_FIELDS,
            equals={"service_status": params.status},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        if IS_DEV:
            print(f"[HAJJ] Listed {len(items)}/{total} {collection} q={params.q!r}")
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error(f"list {collection}", e)
    finally:
        conn.close()


def _create_pilgrim(kind: str, request: PilgrimWriteRequest, ctx: AuthContext) -> Dict[str, Any]:
    collection, prefix, label = PILGRIM_KINDS[kind]
    data = request.dict()
    error = _pilgrim_error(data)
    if error:
        raise HTTPException(status_code=400, detail=error)

    conn = get_db()
    try:
        if is_blank(data.get("customer_id")):
            existing = [p.get("customer_id") for p in all_documents(conn, collection)]
            data["customer_id"] = next_sequence_id(existing, prefix, 4)
        elif find_one(conn, collection, "customer_id", data["customer_id"]):
            raise HTTPException(status_code=400, detail=f"{label} with this customer ID already exists")

        _prepare_pilgrim(data, kind)
        stamp_owner(data, ctx)
        record = insert_document(conn, collection, data)
        if IS_DEV:
            print(f"[HAJJ] Created {kind} id={record['id']} customer_id={record['customer_id']}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error(f"create {collection}", e)
    finally:
        conn.close()


def _get_pilgrim(kind: str, record_id: int, ctx: AuthContext) -> Dict[str, Any]:
    collection, _, label = PILGRIM_KINDS[kind]
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, collection, record_id, ctx, f"{label} not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error(f"get {collection}", e)
    finally:
        conn.close()


def _update_pilgrim(kind: str, record_id: int, request: PilgrimWriteRequest, ctx: AuthContext) -> Dict[str, Any]:
    collection, _, label = PILGRIM_KINDS[kind]
    changes = request.dict(exclude_unset=True)
    conn = get_db()
    try:
        current = require_document(conn, collection, record_id, ctx, f"{label} not found")
        merged = {**current, **changes}
        if "name" not in changes and ("first_name" in changes or "last_name" in changes):
            merged["name"] = None
        error = _pilgrim_error(merged)
        if error:
            raise HTTPException(status_code=400, detail=error)
        if is_blank(merged.get("customer_id")):
            merged["customer_id"] = current.get("customer_id")
        elif find_one(conn, collection, "customer_id", merged["customer_id"], exclude_id=record_id):
            raise HTTPException(status_code=400, detail=f"{label} with this customer ID already exists")
        record = update_document(conn, collection, record_id, _prepare_pilgrim(merged, kind), branch_scope(ctx))
        if IS_DEV:
            print(f"[HAJJ] Updated {kind} id={record_id}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error(f"update {collection}", e)
    finally:
        conn.close()


def _delete_pilgrim(kind: str, record_id: int, ctx: AuthContext) -> Dict[str, Any]:
    collection, _, label = PILGRIM_KINDS[kind]
    conn = get_db()
    try:
        if not delete_document(conn, collection, record_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail=f"{label} not found")
        if IS_DEV:
            print(f"[HAJJ] Deleted {kind} id={record_id}")
        return {"success": True, "message": f"{label} deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error(f"delete {collection}", e)
    finally:
        conn.close()


# ---------------------------------------------------------
# Hajis
# ---------------------------------------------------------
@router.get("/hajis", response_model=PilgrimListResponse, dependencies=[Depends(require_permission("customers", "view"))])
def list_hajis(params: ListParams = Depends(), ctx: AuthContext = Depends(require_auth_context)):
    return _list_pilgrims("hajj", params, ctx)


@router.post("/hajis", status_code=201, response_model=PilgrimResponse, dependencies=[Depends(require_permission("customers", "create"))])
def create_haji(request: PilgrimWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    return _create_pilgrim("hajj", request, ctx)


@router.get("/hajis/{haji_id}", response_model=PilgrimResponse, dependencies=[Depends(require_permission("customers", "view"))])
def get_haji(haji_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _get_pilgrim("hajj", haji_id, ctx)


@router.put("/hajis/{haji_id}", response_model=PilgrimResponse, dependencies=[Depends(require_permission("customers", "edit"))])
def update_haji(request: PilgrimWriteRequest, haji_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _update_pilgrim("hajj", haji_id, request, ctx)


@router.delete("/hajis/{haji_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("customers", "delete"))])
def delete_haji(haji_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _delete_pilgrim("hajj", haji_id, ctx)


# ---------------------------------------------------------
# Umrahs
# ---------------------------------------------------------
@router.get("/umrahs", response_model=PilgrimListResponse, dependencies=[Depends(require_permission("customers", "view"))])
def list_umrahs(params: ListParams = Depends(), ctx: AuthContext = Depends(require_auth_context)):
    return _list_pilgrims("umrah", params, ctx)


@router.post("/umrahs", status_code=201, response_model=PilgrimResponse, dependencies=[Depends(require_permission("customers", "create"))])
def create_umrah(request: PilgrimWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    return _create_pilgrim("umrah", request, ctx)


@router.get("/umrahs/{umrah_id}", response_model=PilgrimResponse, dependencies=[Depends(require_permission("customers", "view"))])
def get_umrah(umrah_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _get_pilgrim("umrah", umrah_id, ctx)


@router.put("/umrahs/{umrah_id}", response_model=PilgrimResponse, dependencies=[Depends(require_permission("customers", "edit"))])
def update_umrah(request: PilgrimWriteRequest, umrah_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _update_pilgrim("umrah", umrah_id, request, ctx)


@router.delete("/umrahs/{umrah_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("customers", "delete"))])
def delete_umrah(umrah_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    return _delete_pilgrim("umrah", umrah_id, ctx)


# ---------------------------------------------------------
# SAR management
# ---------------------------------------------------------
def _prepare_sar(data: Dict[str, Any]) -> Dict[str, Any]:
    if is_blank(data.get("packageName")) or is_blank(data.get("year")) or not to_number(data.get("sarRate")):
        raise HTTPException(status_code=400, detail="প্যাকেজের নাম, সাল এবং সৌদি রিয়াল রেট আবশ্যক")
    data["transactionName"] = data.get("transactionName") or data["packageName"]
    data["year"] = str(data["year"])
    data["sarRate"] = to_number(data["sarRate"])
    if data.get("bdtRate") is not None:
        data["bdtRate"] = to_number(data["bdtRate"])
    data["status"] = data.get("status") or "Active"
    return data


@router.get("/sar-management", response_model=SarListResponse, dependencies=[Depends(require_permission("settings", "view"))])
def list_sar_rates(
    params: ListParams = Depends(),
    year: Optional[str] = Query(None, max_length=10),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            SAR,
            search=params.q,
            search_fields=SAR_SEARCH_FIELDS,
            equals={"year": year, "status": params.status},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list sar", e)
    finally:
        conn.close()


@router.post("/sar-management", status_code=201, response_model=SarResponse, dependencies=[Depends(require_permission("settings", "create"))])
def create_sar_rate(request: SarWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    data = stamp_owner(_prepare_sar(request.dict()), ctx)
    conn = get_db()
    try:
        record = insert_document(conn, SAR, data)
        if IS_DEV:
            print(f"[HAJJ] Created SAR rate id={record['id']} year={record['year']} rate={record['sarRate']}")
        return {"success": True, "data": record}
    except sqlite3.Error as e:
        raise _db_error("create sar", e)
    finally:
        conn.close()


@router.get("/sar-management/{sar_id}", response_model=SarResponse, dependencies=[Depends(require_permission("settings", "view"))])
def get_sar_rate(sar_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, SAR, sar_id, ctx, "SAR record not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get sar", e)
    finally:
        conn.close()


@router.put("/sar-management/{sar_id}", response_model=SarResponse, dependencies=[Depends(require_permission("settings", "edit"))])
def update_sar_rate(request: SarWriteRequest, sar_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        current = require_document(conn, SAR, sar_id, ctx, "SAR record not found")
        merged = _prepare_sar({**current, **request.dict(exclude_unset=True)})
        record = update_document(conn, SAR, sar_id, merged, branch_scope(ctx))
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update sar", e)
    finally:
        conn.close()


@router.delete("/sar-management/{sar_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("settings", "delete"))])
def delete_sar_rate(sar_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        if not delete_document(conn, SAR, sar_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="SAR record not found")
        return {"success": True, "message": "SAR রেকর্ড মুছে ফেলা হয়েছে"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete sar", e)
    finally:
        conn.close()


# ---------------------------------------------------------
# Dashboard
# ---------------------------------------------------------
def _status_of(record: Dict[str, Any]) -> str:
    return str(record.get("service_status") or record.get("status") or "")


def _count_status(records: List[Dict[str, Any]], *needles: str) -> int:
    return sum(1 for r in records if any(n in _status_of(r).lower() for n in needles))


def _money(records: List[Dict[str, Any]]) -> Dict[str, float]:
    package = sum(first_number(r, "total_amount", "totalAmount") for r in records)
    paid = sum(first_number(r, "paid_amount", "paidAmount") for r in records)
    return {
        "totalPackageAmount": package,
        "totalPaidAmount": paid,
        "totalDueAmount": max(0.0, package - paid),
    }


@router.get("/dashboard", response_model=HajjDashboardResponse, dependencies=[Depends(require_permission("dashboard", "view"))])
def hajj_umrah_dashboard(ctx: AuthContext = Depends(require_auth_context)):
    """
    Pilgrim counts by service status plus package/paid/due totals and haj
    agent balances. Status matching is by substring (Bengali or English).
    """
    conn = get_db()
    try:
        scope = branch_scope(ctx)
        hajis = all_documents(conn, "hajis", branch_id=scope)
        umrahs = all_documents(conn, "umrahs", branch_id=scope)
        agents = all_documents(conn, "agents", branch_id=scope)
    except sqlite3.Error as e:
        raise _db_error("dashboard", e)
    finally:
        conn.close()

    hajj_stats = {
        "totalHajis": len(hajis),
        "completedHajis": _count_status(hajis, "হজ্ব সম্পন্ন", "hajj completed"),
        "preRegistered": _count_status(hajis, "প্রাক-নিবন্ধিত"),
        "registered": sum(
            1 for h in hajis
            if "নিবন্ধিত" in _status_of(h) or _status_of(h).lower() == "registered"
        ),
        **_money(hajis),
    }
    umrah_stats = {
        "totalUmrahs": len(umrahs),
        "completedUmrahs": _count_status(umrahs, "উমরাহ সম্পন্ন", "umrah completed"),
        "readyForUmrah": _count_status(umrahs, "রেডি ফর উমরাহ", "ready for umrah"),
        **_money(umrahs),
    }
    agent_stats = {
        "totalAgents": len(agents),
        "totalPaid": sum(to_number(a.get("totalPaid")) for a in agents),
        "totalBill": sum(to_number(a.get("totalBill")) for a in agents),
        "totalDue": sum(to_number(a.get("totalDue")) for a in agents),
    }
    if IS_DEV:
        print(f"[HAJJ] Dashboard hajis={len(hajis)} umrahs={len(umrahs)} agents={len(agents)}")
    return {"success": True, "hajjStats": hajj_stats, "umrahStats": umrah_stats, "agentStats": agent_stats}
