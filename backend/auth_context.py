"""
backend/auth_context.py

Shared authentication context primitives for FastAPI dependency injection.
This module breaks the circular import between main.py and dependencies.py.

Contains:
- AuthContext: Immutable per-request identity with role, branch and permissions
- require_auth_context: FastAPI dependency for auth enforcement
- create_access_token / verify_token: JWT helpers

This module MUST NOT import backend.main to avoid circular dependencies.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Set

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

try:
    from backend.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_MINUTES, IS_DEV
    from backend.db import get_db
    from backend.permissions import role_permissions
except ModuleNotFoundError:
    from config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_MINUTES, IS_DEV
    from db import get_db
    from permissions import role_permissions

# Security scheme for HTTPBearer
security = HTTPBearer()


# ---------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------
def create_access_token(data: dict, minutes: Optional[int] = None) -> str:
    """Sign a JWT carrying data plus an expiry claim."""
    payload = dict(data)
    payload["exp"] = datetime.utcnow() + timedelta(minutes=minutes or ACCESS_TOKEN_MINUTES)
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Verify JWT access token and return decoded payload.

    Raises:
        HTTPException(401): If token is expired or invalid
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


# ---------------------------------------------------------
# AuthContext
# ---------------------------------------------------------
class AuthContext(BaseModel):
    """
    Identity derived from the JWT and the users table.
    This is the ONLY source of truth for user_id, role and branch in protected endpoints.
    Never trust branchId/createdBy from request bodies.

    Fields:
        user_id: User ID from JWT token
        email: User email
        name: Display name (falls back to email)
        role: super_admin/admin/manager/accountant/reservation
        branch_id: Branch the user belongs to (None for head office)
        branch_name: Branch display name
        permissions: Set of "module:action" strings for the role
    """
    user_id: int
    email: str
    name: str = ""
    role: str
    branch_id: Optional[str] = None
    branch_name: Optional[str] = None
    permissions: Set[str] = set()

    class Config:
        frozen = True


def require_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthContext:
    """
    Auth context dependency for FastAPI routes.

    Process:
    1. Verify JWT token signature and expiration
    2. Extract user_id from token payload
    3. Fetch user record from database (source of truth)
    4. Validate user is active
    5. Return AuthContext with role permissions

    Raises:
        HTTPException(401): If token is invalid, expired, or user not found
        HTTPException(403): If user is inactive
    """
    payload = verify_token(credentials.credentials)
    user_id = payload.get("sub")

    if not user_id:
        print("[AUTH] Missing user_id in token payload")
        raise HTTPException(status_code=401, detail="Invalid token payload")

    conn = get_db()
    try:
        cur = conn.cursor()
        cur.execute(
            "SELECT id, email, name, role, branch_id, branch_name, status FROM users WHERE id = ?",
            (user_id,),
        )
        user_row = cur.fetchone()
    finally:
        conn.close()

    if not user_row:
        print(f"[AUTH] User not found: user_id={user_id}")
        raise HTTPException(status_code=401, detail="User not found")

    if (user_row["status"] or "active") != "active":
        print(f"[AUTH] Inactive user attempted access: user_id={user_id}")
        raise HTTPException(status_code=403, detail="Account inactive")

    role = user_row["role"] or "reservation"
    ctx = AuthContext(
        user_id=user_row["id"],
        email=user_row["email"],
        name=user_row["name"] or user_row["email"],
        role=role,
        branch_id=user_row["branch_id"] or None,
        branch_name=user_row["branch_name"] or None,
        permissions=role_permissions(role),
    )

    if IS_DEV:
        print(f"[AUTH] Authenticated: user_id={ctx.user_id}, role={ctx.role}, "
              f"branch_id={ctx.branch_id}, permissions={len(ctx.permissions)}")

    return ctx
