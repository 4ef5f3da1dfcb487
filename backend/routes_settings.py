"""
backend/routes_settings.py

Fare markup rules. Rules are free-form JSON documents (airline, route,
priority, amounts ...) edited by the settings screen; the server only
stores them.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path

try:
    from backend.auth_context import AuthContext, require_auth_context
    from backend.branch import branch_scope, require_document, stamp_owner
    from backend.config import IS_DEV
    from backend.db import get_db
    from backend.dependencies import ListParams, require_permission
    from backend.documents import META_KEYS, delete_document, find_documents, insert_document, pagination, update_document
    from backend.models import MarkupListResponse, MarkupResponse
    from backend.schemas_common import DeleteResponse
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope, require_document, stamp_owner
    from config import IS_DEV
    from db import get_db
    from dependencies import ListParams, require_permission
    from documents import META_KEYS, delete_document, find_documents, insert_document, pagination, update_document
    from models import MarkupListResponse, MarkupResponse
    from schemas_common import DeleteResponse

COLLECTION = "markups"
SEARCH_FIELDS = ("name", "airline", "route")
OWNER_KEYS = ("branchId", "branchName", "createdBy", "createdByName")

router = APIRouter(
    prefix="/api/settings/markup",
    tags=["settings"],
)


def _clean_body(body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not body:
        raise HTTPException(status_code=400, detail="Missing request body")
    return {k: v for k, v in body.items() if k not in META_KEYS and k not in OWNER_KEYS}


def _db_error(op: str, e: sqlite3.Error) -> HTTPException:
    if IS_DEV:
        print(f"[MARKUP] DB error on {op}: {e}")
    return HTTPException(status_code=500, detail="Database error")


@router.get("", response_model=MarkupListResponse, dependencies=[Depends(require_permission("settings", "view"))])
def list_markups(params: ListParams = Depends(), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            COLLECTION,
            search=params.q,
            search_fields=SEARCH_FIELDS,
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


@router.post("", status_code=201, response_model=MarkupResponse, dependencies=[Depends(require_permission("settings", "create"))])
def create_markup(
    body: Optional[Dict[str, Any]] = Body(None),
    ctx: AuthContext = Depends(require_auth_context),
):
    data = stamp_owner(_clean_body(body), ctx)
    conn = get_db()
    try:
        record = insert_document(conn, COLLECTION, data)
        if IS_DEV:
            print(f"[MARKUP] Created id={record['id']} keys={len(data)}")
        return {"success": True, "data": record}
    except sqlite3.Error as e:
        raise _db_error("create", e)
    finally:
        conn.close()


@router.get("/{markup_id}", response_model=MarkupResponse, dependencies=[Depends(require_permission("settings", "view"))])
def get_markup(markup_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, COLLECTION, markup_id, ctx, "Markup not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get", e)
    finally:
        conn.close()


@router.put("/{markup_id}", response_model=MarkupResponse, dependencies=[Depends(require_permission("settings", "edit"))])
def update_markup(
    body: Optional[Dict[str, Any]] = Body(None),
    markup_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    changes = _clean_body(body)
    conn = get_db()
    try:
        require_document(conn, COLLECTION, markup_id, ctx, "Markup not found")
        record = update_document(conn, COLLECTION, markup_id, changes, branch_scope(ctx))
        if IS_DEV:
            print(f"[MARKUP] Updated id={markup_id}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update", e)
    finally:
        conn.close()


@router.delete("/{markup_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("settings", "delete"))])
def delete_markup(markup_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        if not delete_document(conn, COLLECTION, markup_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="Markup not found")
        return {"success": True, "message": "Markup deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete", e)
    finally:
        conn.close()
