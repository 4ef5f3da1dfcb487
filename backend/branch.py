"""
backend/branch.py

Branch guardrails for multi-branch data.

Every business record carries the branch it was created in. Reads and
writes are scoped to the caller's branch unless the caller is a
super admin or belongs to head office (no branch).
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Optional

from fastapi import HTTPException

try:
    from backend.auth_context import AuthContext
    from backend.config import IS_DEV
    from backend.documents import get_document
    from backend.permissions import Role
except ModuleNotFoundError:
    from auth_context import AuthContext
    from config import IS_DEV
    from documents import get_document
    from permissions import Role


def branch_scope(ctx: AuthContext) -> Optional[str]:
    """
    Return the branch_id a query must be filtered by, or None for no filter.

    - super_admin sees every branch
    - users without a branch (head office) see every branch
    - everyone else only sees their own branch
    """
    if ctx.role == Role.SUPER_ADMIN:
        return None
    if not ctx.branch_id:
        return None
    return ctx.branch_id


def stamp_owner(doc: Dict[str, Any], ctx: AuthContext) -> Dict[str, Any]:
    """Attach branch and creator fields taken from the auth context (never from the client)."""
    doc["branchId"] = ctx.branch_id
    doc["branchName"] = ctx.branch_name
    doc["createdBy"] = str(ctx.user_id)
    doc["createdByName"] = ctx.name or ctx.email
    return doc


def require_document(
    conn: sqlite3.Connection,
    collection: str,
    doc_id: int,
    ctx: AuthContext,
    not_found: str = "Record not found",
) -> Dict[str, Any]:
    """
    Fetch a record inside the caller's branch or raise 404.

    Records from another branch answer exactly like missing ones.
    """
    doc = get_document(conn, collection, doc_id, branch_scope(ctx))
    if doc is None:
        if IS_DEV:
            print(f"[BRANCH] {collection} id={doc_id} not visible to user_id={ctx.user_id}")
        raise HTTPException(status_code=404, detail=not_found)
    return doc
