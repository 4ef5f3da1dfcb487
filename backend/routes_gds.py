"""
backend/routes_gds.py

GDS (Global Distribution System) provider records used for ticketing.
GDS codes are stored uppercase and are unique within a branch.
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
    from backend.documents import (
        delete_document,
        distinct_values,
        find_documents,
        insert_document,
        pagination,
        update_document,
    )
    from backend.schemas_air import GdsListResponse, GdsResponse, GdsWriteRequest
    from backend.schemas_common import DeleteResponse
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope, require_document, stamp_owner
    from config import IS_DEV
    from db import get_db
    from dependencies import ListParams, require_permission
    from documents import (
        delete_document,
        distinct_values,
        find_documents,
        insert_document,
        pagination,
        update_document,
    )
    from schemas_air import GdsListResponse, GdsResponse, GdsWriteRequest
    from schemas_common import DeleteResponse

from domains.erp.calculations import to_number
from domains.erp.rules import is_blank

COLLECTION = "gds_records"
SEARCH_FIELDS = ("name", "gdsCode", "pccCode", "provider")

router = APIRouter(
    prefix="/api/air-ticketing/gds",
    tags=["gds"],
)


def _code_taken(conn: sqlite3.Connection, code: str, ctx: AuthContext, exclude_id: Optional[int] = None) -> bool:
    items, _ = find_documents(conn, COLLECTION, equals={"gdsCode": code}, branch_id=branch_scope(ctx), limit=2)
    return any(int(item["id"]) != exclude_id for item in items)


def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
    data["gdsCode"] = (data.get("gdsCode") or "").upper()
    data["commissionRate"] = to_number(data.get("commissionRate"))
    data["status"] = data.get("status") or "Active"
    return data


@router.get("", response_model=GdsListResponse, dependencies=[Depends(require_permission("settings", "view"))])
def list_gds(
    params: ListParams = Depends(),
    provider: Optional[str] = Query(None, max_length=100),
    ctx: AuthContext = Depends(require_auth_context),
):
    """List GDS records plus the distinct provider names (for the filter dropdown)."""
    conn = get_db()
    try:
        scope = branch_scope(ctx)
        items, total = find_documents(
            conn,
            COLLECTION,
            search=params.q,
            search_fields=SEARCH_FIELDS,
            equals={"status": params.status, "provider": provider},
            branch_id=scope,
            page=params.page,
            limit=params.limit,
        )
        providers = [str(p) for p in distinct_values(conn, COLLECTION, "provider", scope)]
        return {
            "success": True,
            "data": items,
            "providers": providers,
            "pagination": pagination(params.page, params.limit, total),
        }
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[GDS] DB error on list: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.post("", status_code=201, response_model=GdsResponse, dependencies=[Depends(require_permission("settings", "create"))])
def create_gds(
    request: GdsWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    data = request.dict()
    if is_blank(data.get("name")) or is_blank(data.get("provider")):
        raise HTTPException(status_code=400, detail="GDS নাম এবং Provider আবশ্যক")
    _normalize(data)

    conn = get_db()
    try:
        if data["gdsCode"] and _code_taken(conn, data["gdsCode"], ctx):
            raise HTTPException(status_code=400, detail="এই GDS কোড আগে থেকেই আছে")
        data["ticketCount"] = 0
        data["totalRevenue"] = 0
        stamp_owner(data, ctx)
        record = insert_document(conn, COLLECTION, data)
        if IS_DEV:
            print(f"[GDS] Created id={record['id']} code={record['gdsCode']} provider={record['provider']}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[GDS] DB error on create: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.get("/{gds_id}", response_model=GdsResponse, dependencies=[Depends(require_permission("settings", "view"))])
def get_gds(
    gds_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, COLLECTION, gds_id, ctx, "GDS record not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[GDS] DB error on get: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.put("/{gds_id}", response_model=GdsResponse, dependencies=[Depends(require_permission("settings", "edit"))])
def update_gds(
    request: GdsWriteRequest,
    gds_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        current = require_document(conn, COLLECTION, gds_id, ctx, "GDS record not found")
        merged = {**current, **request.dict(exclude_unset=True)}
        if is_blank(merged.get("name")) or is_blank(merged.get("provider")):
            raise HTTPException(status_code=400, detail="GDS নাম এবং Provider আবশ্যক")
        _normalize(merged)
        if merged["gdsCode"] and _code_taken(conn, merged["gdsCode"], ctx, exclude_id=gds_id):
            raise HTTPException(status_code=400, detail="এই GDS কোড আগে থেকেই আছে")
        record = update_document(conn, COLLECTION, gds_id, merged, branch_scope(ctx))
        if IS_DEV:
            print(f"[GDS] Updated id={gds_id}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[GDS] DB error on update: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.delete("/{gds_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("settings", "delete"))])
def delete_gds(
    gds_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        if not delete_document(conn, COLLECTION, gds_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="GDS record not found")
        if IS_DEV:
            print(f"[GDS] Deleted id={gds_id}")
        return {"success": True, "message": "GDS রেকর্ড মুছে ফেলা হয়েছে"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[GDS] DB error on delete: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()
