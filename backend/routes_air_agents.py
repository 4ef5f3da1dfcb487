"""
backend/routes_air_agents.py

Air ticketing agents (sub-agents who buy tickets through the agency).

Agent IDs follow AGT0001; a client-supplied ID is validated and must be
unique, otherwise the next free number is generated.
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
    from backend.documents import (
        all_documents,
        delete_document,
        find_documents,
        find_one,
        insert_document,
        pagination,
        update_document,
    )
    from backend.schemas_air import AirAgentListResponse, AirAgentResponse, AirAgentWriteRequest
    from backend.schemas_common import DeleteResponse
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
    from schemas_air import AirAgentListResponse, AirAgentResponse, AirAgentWriteRequest
    from schemas_common import DeleteResponse

from domains.erp.rules import AGENT_ID_RE, is_blank, is_valid_bd_mobile, is_valid_email, next_sequence_id, normalize_mobile

COLLECTION = "air_agents"
SEARCH_FIELDS = ("name", "personalName", "email", "mobile", "tradeLicense", "tinNumber", "agentId")

router = APIRouter(
    prefix="/api/air-agents",
    tags=["air-agents"],
)


def _contact_error(data: Dict[str, Any]) -> Optional[str]:
    """Required fields and email/mobile formats, in the form's order."""
    if is_blank(data.get("name")):
        return "Trade Name is required"
    if is_blank(data.get("email")):
        return "Email is required"
    if is_blank(data.get("mobile")):
        return "Mobile number is required"
    if not is_valid_email(data.get("email")):
        return "Invalid email format"
    if not is_valid_bd_mobile(data.get("mobile")):
        return "Invalid mobile number format. Please use format: 01XXXXXXXXX"
    return None


def _duplicate_contact(conn: sqlite3.Connection, data: Dict[str, Any], exclude_id: Optional[int] = None) -> bool:
    return bool(
        find_one(conn, COLLECTION, "email", data["email"], case_insensitive=True, exclude_id=exclude_id)
        or find_one(conn, COLLECTION, "mobile", data["mobile"], exclude_id=exclude_id)
    )


def _assign_agent_id(conn: sqlite3.Connection, requested: Optional[str]) -> str:
    if is_blank(requested):
        existing = [a.get("agentId") for a in all_documents(conn, COLLECTION)]
        return next_sequence_id(existing, "AGT", 4)

    agent_id = requested.strip().upper()
    if not AGENT_ID_RE.match(agent_id):
        raise HTTPException(status_code=400, detail="Invalid agent ID format. Must be in format AGT0001")
    if find_one(conn, COLLECTION, "agentId", agent_id):
        raise HTTPException(status_code=400, detail=f"Agent ID {agent_id} already exists")
    return agent_id


@router.get("", response_model=AirAgentListResponse, dependencies=[Depends(require_permission("agents", "view"))])
def list_air_agents(
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
        if IS_DEV:
            print(f"[AIR_AGENTS] Listed {len(items)}/{total} agents q={params.q!r}")
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[AIR_AGENTS] DB error on list: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.post("", status_code=201, response_model=AirAgentResponse, dependencies=[Depends(require_permission("agents", "create"))])
def create_air_agent(
    request: AirAgentWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    Create an air agent.

    Raises:
        HTTPException(400): Missing/invalid fields, duplicate email or
            mobile, malformed or taken agentId
    """
    data = request.dict()
    error = _contact_error(data)
    if error:
        raise HTTPException(status_code=400, detail=error)
    data["mobile"] = normalize_mobile(data["mobile"])

    conn = get_db()
    try:
        if _duplicate_contact(conn, data):
            raise HTTPException(status_code=400, detail="Agent with this email or mobile number already exists")
        data["agentId"] = _assign_agent_id(conn, data.get("agentId"))
        data["country"] = data.get("country") or "Bangladesh"
        data["status"] = data.get("status") or "Active"
        stamp_owner(data, ctx)
        agent = insert_document(conn, COLLECTION, data)
        if IS_DEV:
            print(f"[AIR_AGENTS] Created agent id={agent['id']} agentId={agent['agentId']}")
        return {"success": True, "data": agent}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[AIR_AGENTS] DB error on create: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.get("/{agent_id}", response_model=AirAgentResponse, dependencies=[Depends(require_permission("agents", "view"))])
def get_air_agent(
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
            print(f"[AIR_AGENTS] DB error on get: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.put("/{agent_id}", response_model=AirAgentResponse, dependencies=[Depends(require_permission("agents", "edit"))])
def update_air_agent(
    request: AirAgentWriteRequest,
    agent_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    """Update an air agent. agentId is immutable once assigned."""
    changes = request.dict(exclude_unset=True)
    changes.pop("agentId", None)

    conn = get_db()
    try:
        current = require_document(conn, COLLECTION, agent_id, ctx, "Agent not found")
        merged = {**current, **changes}
        error = _contact_error(merged)
        if error:
            raise HTTPException(status_code=400, detail=error)
        merged["mobile"] = normalize_mobile(merged["mobile"])
        if _duplicate_contact(conn, merged, exclude_id=agent_id):
            raise HTTPException(status_code=400, detail="Agent with this email or mobile number already exists")
        agent = update_document(conn, COLLECTION, agent_id, merged, branch_scope(ctx))
        if IS_DEV:
            print(f"[AIR_AGENTS] Updated agent id={agent_id}")
        return {"success": True, "data": agent}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[AIR_AGENTS] DB error on update: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()


@router.delete("/{agent_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("agents", "delete"))])
def delete_air_agent(
    agent_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    conn = get_db()
    try:
        if not delete_document(conn, COLLECTION, agent_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="Agent not found")
        if IS_DEV:
            print(f"[AIR_AGENTS] Deleted agent id={agent_id}")
        return {"success": True, "message": "Agent deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[AIR_AGENTS] DB error on delete: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()
