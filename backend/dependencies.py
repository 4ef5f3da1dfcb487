"""
backend/dependencies.py

Reusable FastAPI dependencies: permission enforcement and the common
list query parameters.
"""

from typing import Callable, Optional

from fastapi import Depends, HTTPException, Query

try:
    from backend.auth_context import require_auth_context, AuthContext
    from backend.config import IS_DEV, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
except ModuleNotFoundError:
    from auth_context import require_auth_context, AuthContext
    from config import IS_DEV, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT


def require_permission(module: str, action: str) -> Callable:
    """
    FastAPI dependency factory for role-based permission checks.

    Usage in routes:
        @router.post("", dependencies=[Depends(require_permission("transactions", "create"))])
        def create_asset(ctx: AuthContext = Depends(require_auth_context)):
            ...

    Args:
        module: ERP module (dashboard, transactions, customers, agents, ...)
        action: view/create/edit/delete/approve/export

    Raises:
        HTTPException(403): If the user's role lacks the permission
    """
    permission = f"{module}:{action}"

    def _check_permission(ctx: AuthContext = Depends(require_auth_context)) -> AuthContext:
        if permission not in ctx.permissions:
            print(f"[AUTHZ] Permission denied: permission={permission}, "
                  f"user_id={ctx.user_id}, role={ctx.role}")
            raise HTTPException(
                status_code=403,
                detail="Insufficient permissions - your role cannot perform this action",
            )

        if IS_DEV:
            print(f"[AUTHZ] Permission granted: permission={permission}, role={ctx.role}")

        return ctx

    return _check_permission


class ListParams:
    """
    Query parameters shared by every list endpoint.

    `q` and `search` are aliases; `status=All` (or empty) means no filter.
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)"),
        limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT, description="Page size"),
        q: Optional[str] = Query(None, max_length=200, description="Search text"),
        search: Optional[str] = Query(None, max_length=200, description="Alias of q"),
        status: Optional[str] = Query(None, max_length=50, description="Exact status filter"),
    ):
        self.page = page
        self.limit = limit
        self.q = (q or search or "").strip() or None
        self.status = status
