"""
frontend/api_client.py
Centralized API client for all backend requests.

This module ensures:
1. Every call to a protected endpoint carries the Authorization header
2. 401 responses clear auth and send the user back to Login
3. Network failures surface as a message, never as an exception
4. Dashboards can fetch several list endpoints in parallel
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Literal, Optional, Tuple

import requests
import streamlit as st

try:
    from frontend.config import get_api_base_url, IS_DEV, REQUEST_TIMEOUT
except ModuleNotFoundError:
    from config import get_api_base_url, IS_DEV, REQUEST_TIMEOUT

try:
    from frontend.auth import get_auth_header, clear_auth
except ModuleNotFoundError:
    from auth import get_auth_header, clear_auth


__all__ = ["api_request", "error_message", "fetch_json_parallel", "get_api_base_url"]

Method = Literal["GET", "POST", "PUT", "DELETE"]

PUBLIC_PATHS = ("/api/auth/login", "/health")


def is_public_endpoint(path: str) -> bool:
    """Login and health are the only endpoints that work without a token."""
    return path in PUBLIC_PATHS


def _headers(path: str, with_body: bool) -> Dict[str, str]:
    headers = {"Accept": "application/json"}
    if with_body:
        headers["Content-Type"] = "application/json"
    if not is_public_endpoint(path):
        headers.update(get_auth_header())
    return headers


def _send(
    method: Method,
    url: str,
    headers: Dict[str, str],
    json: Optional[Any],
    params: Optional[Dict[str, Any]],
    timeout: int,
) -> requests.Response:
    """Raw HTTP call. Raises requests exceptions; safe to run off the script thread."""
    if method == "GET":
        return requests.get(url, headers=headers, params=params, timeout=timeout)
    if method == "POST":
        return requests.post(url, json=json, headers=headers, params=params, timeout=timeout)
    if method == "PUT":
        return requests.put(url, json=json, headers=headers, params=params, timeout=timeout)
    if method == "DELETE":
        return requests.delete(url, headers=headers, params=params, timeout=timeout)
    raise ValueError(f"Unsupported HTTP method: {method}")


def api_request(
    method: Method,
    path: str,
    json: Optional[Any] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: int = REQUEST_TIMEOUT,
) -> Optional[requests.Response]:
    """
    Make an API request with automatic auth header attachment and error handling.

    This is the ONLY function pages should use for single backend calls.

    Args:
        method: HTTP method (GET, POST, PUT, DELETE)
        path: API path including the /api prefix (e.g., "/api/assets")
        json: JSON body for POST/PUT requests
        params: Query parameters
        timeout: Request timeout in seconds

    Returns:
        Response object for any HTTP status, None on connection problems or 401

    Raises:
        Does NOT raise - shows a user-facing message and returns None instead
    """
    try:
        base_url = get_api_base_url()
    except (RuntimeError, ValueError) as e:
        st.error(f"⚙️ Configuration error: {str(e)}")
        return None

    headers = _headers(path, json is not None)
    if not is_public_endpoint(path) and "Authorization" not in headers:
        st.error("🔒 Authentication required. Please log in.")
        return None

    try:
        resp = _send(method, f"{base_url}{path}", headers, json, params, timeout)
    except requests.exceptions.Timeout:
        if IS_DEV:
            print(f"[API] Timeout on {method} {path}")
        st.error(f"⏱️ Request timed out after {timeout}s. Please try again.")
        return None
    except requests.exceptions.ConnectionError:
        if IS_DEV:
            print(f"[API] Connection error on {method} {path}")
        st.error(f"🔌 Cannot connect to backend at {base_url}. Please check your connection.")
        return None
    except requests.exceptions.RequestException as e:
        if IS_DEV:
            print(f"[API] Request error on {method} {path}: {type(e).__name__}")
        st.error(f"❌ Request failed: {type(e).__name__}")
        return None

    if resp.status_code == 401 and not is_public_endpoint(path):
        print(f"[API] 401 on {method} {path}, clearing session")
        _handle_session_expired()
        return None

    if resp.status_code == 403:
        print(f"[API] 403 Forbidden on {method} {path}")

    if IS_DEV:
        print(f"[API] {method} {path} -> {resp.status_code}")
    return resp


def response_json(resp: Optional[requests.Response]) -> Dict[str, Any]:
    """Body as a dict; {} for missing, non-JSON or non-object bodies."""
    if resp is None:
        return {}
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def error_message(resp: Optional[requests.Response], fallback: str = "Something went wrong") -> str:
    """
    The server's error text for display.

    Every backend error uses {"success": false, "error": "..."}; FastAPI's
    default {"detail": ...} is accepted too.
    """
    body = response_json(resp)
    message = body.get("error") or body.get("message") or body.get("detail")
    if isinstance(message, list):
        message = "; ".join(str(m.get("msg", m)) if isinstance(m, dict) else str(m) for m in message)
    return str(message) if message else fallback


def fetch_json_parallel(
    requests_by_key: Dict[str, Tuple[str, Optional[Dict[str, Any]]]],
    timeout: int = REQUEST_TIMEOUT,
) -> Dict[str, Optional[Dict[str, Any]]]:
    """
    GET several endpoints at once and return their JSON bodies by key.

    requests_by_key maps a name to (path, params). A failed request yields
    None for its key and one warning, so dashboards still render the rest.
    """
    if not requests_by_key:
        return {}
    try:
        base_url = get_api_base_url()
    except (RuntimeError, ValueError) as e:
        st.error(f"⚙️ Configuration error: {str(e)}")
        return dict.fromkeys(requests_by_key)

    # Session state is only readable on the script thread
    headers = {path: _headers(path, False) for path, _ in requests_by_key.values()}

    with ThreadPoolExecutor(max_workers=min(8, len(requests_by_key))) as pool:
        futures = {
            key: pool.submit(_send, "GET", f"{base_url}{path}", headers[path], None, params, timeout)
            for key, (path, params) in requests_by_key.items()
        }

    results: Dict[str, Optional[Dict[str, Any]]] = {}
    failed = []
    for key, future in futures.items():
        try:
            resp = future.result()
        except requests.exceptions.RequestException as e:
            if IS_DEV:
                print(f"[API] Parallel fetch {key} failed: {type(e).__name__}")
            failed.append(key)
            results[key] = None
            continue
        if resp.status_code == 401:
            print(f"[API] 401 on parallel fetch {key}, clearing session")
            _handle_session_expired()
            return dict.fromkeys(requests_by_key)
        if resp.status_code >= 400:
            if IS_DEV:
                print(f"[API] Parallel fetch {key} -> {resp.status_code}")
            failed.append(key)
            results[key] = None
            continue
        results[key] = response_json(resp)

    if failed:
        st.warning(f"⚠️ Some data could not be loaded: {', '.join(failed)}")
    return results


def _handle_session_expired() -> None:
    """Clear auth and return to Login."""
    st.warning("🔒 Your session has expired. Please log in again.")
    clear_auth()
    st.session_state["nav_page"] = "Login"
    st.rerun()
