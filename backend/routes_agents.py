"""
backend/routes_agents.py

Haj agents (trade parties that bring pilgrims). Same trade fields and
checks as vendors, plus running bill/paid/due totals.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Path

try:
    from backend.auth_context import AuthContext, require_auth_context
    from backend.branch import branch_scope, require_document, stamp_owner
    from backend.config import IS_DEV
    from backend.db import get_db
    from backend.dependencies import ListParams, require_permission
    from backend.documents import delete_document, find_documents, find_one, insert_document, pagination, update_document
    from backend.schemas_common import DeleteResponse
    from backend.schemas_vendors import AgentListResponse, AgentResponse, AgentWriteRequest
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope, require_document, stamp_owner
    from config import IS_DEV
    from db import get_db
    from dependencies import ListParams, require_permission
    from documents import delete_document, find_documents, find_one, insert_document, pagination, update_document
    from schemas_common import DeleteResponse
    from schemas_vendors import AgentListResponse, AgentResponse, AgentWriteRequest

from domains.erp.calculations import to_number
from domains.erp.rules import trade_party_errors

COLLECTION = "agents"
SEARCH_FIELDS = ("tradeName", "tradeLocation", "ownerName", "contactNo")

router = APIRouter(
    prefix="/api/agents",
    tags=["agents"],
)


def _agent_error(conn: sqlite3.Connection, data: Dict[str, Any], exclude_id: Optional[int] = None) -> Optional[str]:
    errors = trade_party_errors(data)
    if errors:
        return next(iter(errors.values()))
    if find_one(conn, COLLECTION, "tradeName", str(data["tradeName"]).strip(), case_insensitive=True, exclude_id=exclude_id):
        return "Agent with this trade name already exists"
    return None


def _normalize_totals(data: Dict[str, Any]) -> Dict[str, Any]:
    for key in ("totalBill", "totalPaid", "totalDue"):
        data[key] = to_number(data.get(key))
    return data


@router.get("", response_model=AgentListResponse, dependencies=[Depends(require_permission("agents", "view"))])
def list_agents(
    params: ListParams = Depends(),
    ctx: AuthContext = Depends(require_auth_context),
):
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
        if IS_DEV:
            print(f"[AGENTS] DB error on list: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.post("", status_code=201, response_model=AgentResponse, dependencies=[Depends(require_permission("agents", "create"))])
def create_agent(
    request: AgentWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    data = request.dict()
    conn = get_db()
    try:
        error = _agent_error(conn, data)
        if error:
            raise HTTPException(status_code=400, detail=error)
        data["status"] = data.get("status") or "active"
        _normalize_totals(data)
        stamp_owner(data, ctx)
        agent = insert_document(conn, COLLECTION, data)
        if IS_DEV:
            print(f"[AGENTS] Created agent id={agent['id']}, branch={ctx.branch_id}")
        return {"success": True, "data": agent}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[AGENTS] DB error on create: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.get("/{agent_id}", response_model=AgentResponse, dependencies=[Depends(require_permission("agents", "view"))])
def get_agent(
    agent_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, COLLECTION, agent_id, ctx, "Agent not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[AGENTS] DB error on get: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.put("/{agent_id}", response_model=AgentResponse, dependencies=[Depends(require_permission("agents", "edit"))])
def update_agent(
    request: AgentWriteRequest,
    agent_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        current = require_document(conn, COLLECTION, agent_id, ctx, "Agent not found")
        merged = {**current, **request.dict(exclude_unset=True)}
        error = _agent_error(conn, merged, exclude_id=agent_id)
        if error:
            raise HTTPException(status_code=400, detail=error)
        agent = update_document(conn, COLLECTION, agent_id, _normalize_totals(merged), branch_scope(ctx))
        if IS_DEV:
            print(f"[AGENTS] Updated agent id={agent_id}")
        return {"success": True, "data": agent}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[AGENTS] DB error on update: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.delete("/{agent_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("agents", "delete"))])
def delete_agent(
    agent_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        if not delete_document(conn, COLLECTION, agent_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="Agent not found")
        if IS_DEV:
            print(f"[AGENTS] Deleted agent id={agent_id}")
        return {"success": True, "message": "Agent deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[AGENTS] DB error on delete: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()
