"""
backend/routes_assets.py

Business asset CRUD endpoints with branch-safe queries and RBAC enforcement.

Security guarantees:
- All endpoints require authentication (require_auth_context)
- Read operations require permission "transactions:view"
- Writes require "transactions:create" / "transactions:edit" / "transactions:delete"
- Queries are filtered by the caller's branch (see branch.branch_scope)
- branchId/createdBy come from the auth context, never from the client
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
    from backend.schemas_assets import AssetListResponse, AssetResponse, AssetWriteRequest
    from backend.schemas_common import DeleteResponse
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope, require_document, stamp_owner
    from config import IS_DEV
    from db import get_db
    from dependencies import ListParams, require_permission
    from documents import delete_document, find_documents, insert_document, pagination, update_document
    from schemas_assets import AssetListResponse, AssetResponse, AssetWriteRequest
    from schemas_common import DeleteResponse

from domains.erp.assets import ASSET_MESSAGES_EN, asset_errors, normalize_asset_payment

COLLECTION = "assets"
SEARCH_FIELDS = ("name", "type", "providerCompanyName", "notes")

router = APIRouter(
    prefix="/api/assets",
    tags=["assets"],
)


def validate_asset(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Raise 400 with the first failing rule, else return the normalized payload.

    Shared with the family-assets routes (same payment model).
    """
    errors = asset_errors(data, ASSET_MESSAGES_EN)
    if errors:
        raise HTTPException(status_code=400, detail=next(iter(errors.values())))
    data["status"] = data.get("status") or "active"
    return normalize_asset_payment(data)


@router.get("", response_model=AssetListResponse, dependencies=[Depends(require_permission("transactions", "view"))])
def list_assets(
    params: ListParams = Depends(),
    asset_type: Optional[str] = Query(None, alias="type", max_length=100, description="Asset type filter"),
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    List assets for the caller's branch, newest first.

    Filters:
        q/search: name, type, provider company, notes
        status, type: exact match (All/empty ignored)
    """
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            COLLECTION,
            search=params.q,
            search_fields=SEARCH_FIELDS,
            equals={"status": params.status, "type": asset_type},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        if IS_DEV:
            print(f"[ASSETS] Listed {len(items)}/{total} assets, branch={branch_scope(ctx)}, q={params.q!r}")
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[ASSETS] DB error on list: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.post(
    "",
    status_code=201,
    response_model=AssetResponse,
    dependencies=[Depends(require_permission("transactions", "create"))],
)
def create_asset(
    request: AssetWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    Create an asset.

    Raises:
        HTTPException(400): Missing name/type/amount/dates for the payment type
        HTTPException(500): Database error
    """
    data = validate_asset(request.dict())
    stamp_owner(data, ctx)

    conn = get_db()
    try:
        asset = insert_document(conn, COLLECTION, data)
        if IS_DEV:
            print(f"[ASSETS] Created asset_id={asset['id']}, branch={ctx.branch_id}, user_id={ctx.user_id}")
        return {"success": True, "data": asset}
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[ASSETS] DB error on create: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.get("/{asset_id}", response_model=AssetResponse, dependencies=[Depends(require_permission("transactions", "view"))])
def get_asset(
    asset_id: int = Path(..., ge=1, description="Asset ID"),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        asset = require_document(conn, COLLECTION, asset_id, ctx, "Asset not found")
        return {"success": True, "data": asset}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[ASSETS] DB error on get: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.put("/{asset_id}", response_model=AssetResponse, dependencies=[Depends(require_permission("transactions", "edit"))])
def update_asset(
    request: AssetWriteRequest,
    asset_id: int = Path(..., ge=1, description="Asset ID"),
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    Update an asset. The merged record must still satisfy the create rules.
    """
    conn = get_db()
    try:
        current = require_document(conn, COLLECTION, asset_id, ctx, "Asset not found")
        merged = validate_asset({**current, **request.dict(exclude_unset=True)})
        asset = update_document(conn, COLLECTION, asset_id, merged, branch_scope(ctx))
        if IS_DEV:
            print(f"[ASSETS] Updated asset_id={asset_id}, user_id={ctx.user_id}")
        return {"success": True, "data": asset}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[ASSETS] DB error on update: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.delete("/{asset_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("transactions", "delete"))])
def delete_asset(
    asset_id: int = Path(..., ge=1, description="Asset ID"),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        if not delete_document(conn, COLLECTION, asset_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="Asset not found")
        if IS_DEV:
            print(f"[ASSETS] Deleted asset_id={asset_id}, user_id={ctx.user_id}")
        return {"success": True, "message": "Asset deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[ASSETS] DB error on delete: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()
