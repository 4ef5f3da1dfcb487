"""
frontend/auth.py
Authentication state for the ERP frontend.

Streamlit reruns the whole script on every interaction, so auth state lives
in st.session_state and init_auth_state() must run at the top of main().
Every other module reads auth through these helpers:

- init_auth_state(): ensure keys exist on every rerun
- set_auth(): store token, user and permissions after login
- clear_auth(): wipe auth state on logout or 401
- require_auth(): guard for protected pages
- get_auth_header(): Authorization header for api_request
- can(): role permission check against the /api/auth/me matrix
"""

from typing import Any, Dict, List, Optional

import streamlit as st


def init_auth_state() -> None:
    """
    Initialize authentication-related session state keys.

    Idempotent - safe to call multiple times.
    """
    ss = st.session_state

    ss.setdefault("auth_token", None)
    ss.setdefault("current_user", None)
    ss.setdefault("is_authenticated", False)

    # {module: [actions]} as returned by /api/auth/me
    ss.setdefault("permissions", None)

    ss.setdefault("role", None)
    ss.setdefault("branch_id", None)

    # Keep the flag in sync with actual token presence
    if ss["auth_token"] and not ss["is_authenticated"]:
        ss["is_authenticated"] = True
    elif not ss["auth_token"] and ss["is_authenticated"]:
        ss["is_authenticated"] = False


def set_auth(
    auth_token: str,
    current_user: Dict[str, Any],
    permissions: Optional[Dict[str, List[str]]] = None,
) -> None:
    """
    Set authentication state after a successful login.

    Args:
        auth_token: JWT access token (Bearer token for API calls)
        current_user: User object from the backend (id, email, name, role, branchId, branchName)
        permissions: Module -> actions map; loaded later from /api/auth/me when omitted
    """
    ss = st.session_state

    ss["auth_token"] = auth_token
    ss["current_user"] = current_user
    ss["is_authenticated"] = True
    ss["permissions"] = permissions

    if isinstance(current_user, dict):
        ss["role"] = current_user.get("role")
        ss["branch_id"] = current_user.get("branchId")


def clear_auth() -> None:
    """Clear all authentication state. Safe to call multiple times."""
    ss = st.session_state

    ss["auth_token"] = None
    ss["current_user"] = None
    ss["is_authenticated"] = False
    ss["permissions"] = None
    ss["role"] = None
    ss["branch_id"] = None


def is_authenticated() -> bool:
    return bool(st.session_state.get("auth_token"))


def get_current_user() -> Optional[Dict[str, Any]]:
    return st.session_state.get("current_user")


def get_auth_header() -> Dict[str, str]:
    """
    Authorization header dict for API requests.

    Returns:
        {"Authorization": "Bearer <token>"} if authenticated, {} otherwise
    """
    token = st.session_state.get("auth_token")
    if token:
        return {"Authorization": f"Bearer {token}"}
    return {}


def require_auth(redirect_to_login: bool = True) -> bool:
    """
    Guard for protected pages.

    Usage at top of page render functions:
        if not require_auth():
            return
    """
    if not is_authenticated():
        st.warning("⚠️ You must be logged in to access this page.")

        if redirect_to_login:
            st.session_state["nav_page"] = "Login"

        if st.button("Go to Login", type="primary"):
            st.session_state["nav_page"] = "Login"
            st.rerun()

        return False

    return True


def get_role() -> Optional[str]:
    user = get_current_user()
    if user and isinstance(user, dict):
        return user.get("role")
    return st.session_state.get("role")


def has_permission(permissions: Optional[Dict[str, List[str]]], module: str, action: str) -> bool:
    """Pure check against a {module: [actions]} map."""
    if not permissions:
        return False
    return action in (permissions.get(module) or [])


def can(module: str, action: str = "view") -> bool:
    """True when the logged-in role may perform action on module."""
    return has_permission(st.session_state.get("permissions"), module, action)
