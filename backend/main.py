# ---------------------------------------------------------
# backend/main.py
# Travel Agency ERP - Backend API
#
# Run: uvicorn backend.main:app --reload (from repo root)
#
# - FastAPI + SQLite
# - /api/auth/login, /api/auth/me     : JWT login and current user
# - /api/assets, /api/vendors, ...    : module routers (see include_router below)
# - Errors are always {"success": false, "error": "..."}
# ---------------------------------------------------------

from __future__ import annotations

import sqlite3
from typing import Dict

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import local modules (robust fallback for different run contexts)
try:
    from backend.config import CORS_ORIGINS, IS_DEV, IS_PROD
    from backend.auth_context import AuthContext, create_access_token, require_auth_context
    from backend.db import get_db, init_db, verify_password
    from backend.models import LoginRequest, LoginResponse, MeResponse
    from backend.permissions import permissions_by_module
    from backend import (
        routes_additional_services,
        routes_agents,
        routes_air_agents,
        routes_air_ticketing,
        routes_assets,
        routes_bank_accounts,
        routes_gds,
        routes_hajj_umrah,
        routes_investments,
        routes_personal,
        routes_search,
        routes_settings,
        routes_users,
        routes_vendors,
    )
except ModuleNotFoundError:
    from config import CORS_ORIGINS, IS_DEV, IS_PROD
    from auth_context import AuthContext, create_access_token, require_auth_context
    from db import get_db, init_db, verify_password
    from models import LoginRequest, LoginResponse, MeResponse
    from permissions import permissions_by_module
    import routes_additional_services
    import routes_agents
    import routes_air_agents
    import routes_air_ticketing
    import routes_assets
    import routes_bank_accounts
    import routes_gds
    import routes_hajj_umrah
    import routes_investments
    import routes_personal
    import routes_search
    import routes_settings
    import routes_users
    import routes_vendors


# ---------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------
app = FastAPI(title="Travel Agency ERP Backend", version="0.1")

# CORS configuration from config module
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_db()


# ---------------------------------------------------------
# Error envelope
# ---------------------------------------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def _describe(error: dict) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = _describe(errors[0]) if errors else "Invalid request"
    if IS_DEV:
        print(f"[API] Validation error {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": message, "errors": jsonable_encoder(errors)},
    )


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


def _user_payload(row: sqlite3.Row) -> dict:
    return routes_users.user_public(row)


@app.post("/api/auth/login", response_model=LoginResponse)
def login(req: LoginRequest):
    email_norm = req.email.strip().lower()

    conn = get_db()
    try:
        cur = conn.cursor()
        cur.execute("SELECT * FROM users WHERE email = ?", (email_norm,))
        row = cur.fetchone()
    finally:
        conn.close()

    if not row or not verify_password(req.password, row["password_hash"]):
        print("[AUTH] Login failed: invalid credentials")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if (row["status"] or "active") != "active":
        print(f"[AUTH] Login refused for inactive user_id={row['id']}")
        raise HTTPException(status_code=403, detail="Account inactive")

    access_token = create_access_token({"sub": str(row["id"]), "email": row["email"], "role": row["role"]})
    if IS_DEV:
        print(f"[AUTH] Login ok: user_id={row['id']}, role={row['role']}")

    return {
        "success": True,
        "access_token": access_token,
        "token_type": "bearer",
        "user": _user_payload(row),
    }


@app.get("/api/auth/me", response_model=MeResponse)
def me(ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        cur = conn.cursor()
        cur.execute("SELECT * FROM users WHERE id = ?", (ctx.user_id,))
        row = cur.fetchone()
    finally:
        conn.close()

    if not row:
        raise HTTPException(status_code=401, detail="User not found")

    return {"success": True, "user": _user_payload(row), "permissions": permissions_by_module(ctx.role)}


# Module routers
app.include_router(routes_assets.router)
app.include_router(routes_vendors.router)
app.include_router(routes_agents.router)
app.include_router(routes_air_agents.router)
app.include_router(routes_gds.router)
app.include_router(routes_air_ticketing.router)
app.include_router(routes_hajj_umrah.router)
app.include_router(routes_investments.router)
app.include_router(routes_investments.capping_router)
app.include_router(routes_bank_accounts.router)
app.include_router(routes_settings.router)
app.include_router(routes_personal.router)
for service_router in routes_additional_services.routers:
    app.include_router(service_router)
app.include_router(routes_users.router)
app.include_router(routes_search.router)
