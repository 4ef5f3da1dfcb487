"""
backend/routes_users.py

Staff user management (settings module).

Users live in the relational users table, not in a document collection.
The password hash never leaves this module.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

try:
    from backend.auth_context import AuthContext, require_auth_context
    from backend.branch import branch_scope
    from backend.config import IS_DEV
    from backend.db import get_db, hash_password
    from backend.dependencies import ListParams, require_permission
    from backend.documents import escape_like, pagination
    from backend.models import UserListResponse, UserResponse, UserRole, UserWriteRequest
    from backend.schemas_common import DeleteResponse
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope
    from config import IS_DEV
    from db import get_db, hash_password
    from dependencies import ListParams, require_permission
    from documents import escape_like, pagination
    from models import UserListResponse, UserResponse, UserRole, UserWriteRequest
    from schemas_common import DeleteResponse

MIN_PASSWORD_LENGTH = 6
USER_COLUMNS = "id, email, name, phone, role, branch_id, branch_name, status, created_at, updated_at"

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
)


def user_public(row: sqlite3.Row) -> Dict[str, Any]:
    """API shape of a users row (camelCase, no password hash)."""
    return {
        "id": str(row["id"]),
        "email": row["email"],
        "name": row["name"],
        "phone": row["phone"],
        "role": row["role"],
        "branchId": row["branch_id"],
        "branchName": row["branch_name"],
        "status": row["status"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


def _check_role(role: Optional[str]) -> str:
    role = (role or UserRole.reservation.value).lower()
    try:
        return UserRole(role).value
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown role: {role}")


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")


def _fetch_user(conn: sqlite3.Connection, user_id: int, ctx: AuthContext) -> sqlite3.Row:
    scope = branch_scope(ctx)
    cur = conn.cursor()
    if scope:
        cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ? AND branch_id = ?", (user_id, scope))
    else:
        cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,))
    row = cur.fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    return row


def _db_error(op: str, e: sqlite3.Error) -> HTTPException:
    if IS_DEV:
        print(f"[USERS] DB error on {op}: {e}")
    return HTTPException(status_code=500, detail="Database error")


@router.get("", response_model=UserListResponse, dependencies=[Depends(require_permission("settings", "view"))])
def list_users(
    params: ListParams = Depends(),
    role: Optional[str] = Query(None, max_length=30),
    ctx: AuthContext = Depends(require_auth_context),
):
    clauses: List[str] = []
    values: List[Any] = []
    scope = branch_scope(ctx)
    if scope:
        clauses.append("branch_id = ?")
        values.append(scope)
    if role and role != "All":
        clauses.append("role = ?")
        values.append(role)
    if params.status and params.status != "All":
        clauses.append("status = ?")
        values.append(params.status)
    if params.q:
        pattern = f"%{escape_like(params.q)}%"
        clauses.append("(name LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\' OR phone LIKE ? ESCAPE '\\')")
        values.extend([pattern, pattern, pattern])
    where_sql = " WHERE " + " AND ".join(clauses) if clauses else ""

    conn = get_db()
    try:
        cur = conn.cursor()
        cur.execute(f"SELECT COUNT(*) FROM users{where_sql}", values)
        total = cur.fetchone()[0]
        cur.execute(
            f"SELECT {USER_COLUMNS} FROM users{where_sql} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            values + [params.limit, (params.page - 1) * params.limit],
        )
        users = [user_public(row) for row in cur.fetchall()]
        return {"success": True, "data": users, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list", e)
    finally:
        conn.close()


@router.post("", status_code=201, response_model=UserResponse, dependencies=[Depends(require_permission("settings", "create"))])
def create_user(request: UserWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    """
    Create a staff user.

    Raises:
        HTTPException(400): Missing email/password/branch, short password,
            unknown role or duplicate email
    """
    if not request.email or not request.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    _check_password(request.password)
    if not request.branchId:
        raise HTTPException(status_code=400, detail="Branch is required")
    role = _check_role(request.role)
    email = request.email.lower()

    conn = get_db()
    try:
        cur = conn.cursor()
        cur.execute("SELECT id FROM users WHERE email = ?", (email,))
        if cur.fetchone():
            raise HTTPException(status_code=400, detail="User with this email already exists")

        now = datetime.utcnow().isoformat()
        cur.execute(
            """
            INSERT INTO users (email, password_hash, name, phone, role, branch_id, branch_name, status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                email,
                hash_password(request.password),
                request.name,
                request.phone,
                role,
                request.branchId,
                request.branchName,
                request.status.value if request.status else "active",
                now,
                now,
            ),
        )
        conn.commit()
        user_id = cur.lastrowid
        cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,))
        user = user_public(cur.fetchone())
        print(f"[USERS] Created user_id={user_id} role={role} branch={request.branchId} by user_id={ctx.user_id}")
        return {"success": True, "data": user}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("create", e)
    finally:
        conn.close()


@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_permission("settings", "view"))])
def get_user(user_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        return {"success": True, "data": user_public(_fetch_user(conn, user_id, ctx))}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get", e)
    finally:
        conn.close()


@router.put("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_permission("settings", "edit"))])
def update_user(
    request: UserWriteRequest,
    user_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    """Update profile fields, role, status or password. Email is fixed."""
    changes = request.dict(exclude_unset=True)
    updates: Dict[str, Any] = {}
    for field, column in (("name", "name"), ("phone", "phone"), ("branchId", "branch_id"), ("branchName", "branch_name")):
        if field in changes:
            updates[column] = changes[field]
    if "role" in changes:
        updates["role"] = _check_role(changes["role"])
    if changes.get("status") is not None:
        updates["status"] = request.status.value
    if changes.get("password"):
        _check_password(changes["password"])
        updates["password_hash"] = hash_password(changes["password"])

    conn = get_db()
    try:
        _fetch_user(conn, user_id, ctx)
        cur = conn.cursor()
        if updates:
            updates["updated_at"] = datetime.utcnow().isoformat()
            assignments = ", ".join(f"{column} = ?" for column in updates)
            cur.execute(f"UPDATE users SET {assignments} WHERE id = ?", list(updates.values()) + [user_id])
            conn.commit()
            changed = sorted(k for k in updates if k not in ("updated_at", "password_hash"))
            if "password_hash" in updates:
                changed.append("password")
            print(f"[USERS] Updated user_id={user_id} fields={changed} by user_id={ctx.user_id}")
        cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,))
        return {"success": True, "data": user_public(cur.fetchone())}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update", e)
    finally:
        conn.close()


@router.delete("/{user_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("settings", "delete"))])
def delete_user(user_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    if user_id == ctx.user_id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    conn = get_db()
    try:
        _fetch_user(conn, user_id, ctx)
        cur = conn.cursor()
        cur.execute("DELETE FROM users WHERE id = ?", (user_id,))
        conn.commit()
        print(f"[USERS] Deleted user_id={user_id} by user_id={ctx.user_id}")
        return {"success": True, "message": "User deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete", e)
    finally:
        conn.close()
