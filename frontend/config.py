# frontend/config.py
# Environment-aware configuration for the travel agency ERP frontend

import os
from typing import Literal

# Environment detection - normalize to lowercase
_raw_env = os.environ.get("ENV", "production").lower()
ENV: Literal["local", "staging", "production"] = _raw_env if _raw_env in ("local", "staging", "production") else "production"  # type: ignore

IS_LOCAL = (ENV == "local")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "production")

IS_DEV = IS_LOCAL


def get_env() -> Literal["local", "staging", "production"]:
    return ENV


def validate_api_url(url: str, env: str) -> None:
    """
    Validate API base URL according to environment security rules.

    Args:
        url: The API base URL to validate
        env: Current environment ("local", "staging", "production")

    Raises:
        ValueError: If URL violates security constraints for the environment
    """
    if not url:
        raise ValueError("API base URL cannot be empty")

    # Staging/production must use HTTPS and never localhost
    if env in ("staging", "production"):
        if not url.startswith("https://"):
            raise ValueError(f"Production/staging must use HTTPS. Got: {url}")
        if "127.0.0.1" in url or "localhost" in url:
            raise ValueError(f"Production/staging cannot use localhost URLs. Got: {url}")


def get_api_base_url() -> str:
    """
    Get API base URL with strict priority and validation.

    Priority:
    1. BACKEND_URL environment variable
    2. API_BASE_URL environment variable
    3. Local dev default (http://127.0.0.1:8000) ONLY if ENV == "local"
    4. Raise error if production/staging with no configured URL

    Returns:
        Validated API base URL with trailing slash removed. Paths passed to
        api_request already start with /api.
    """
    backend_url = os.environ.get("BACKEND_URL", "").strip()
    if backend_url:
        url = backend_url.rstrip("/")
        validate_api_url(url, ENV)
        return url

    api_base_url = os.environ.get("API_BASE_URL", "").strip()
    if api_base_url:
        url = api_base_url.rstrip("/")
        validate_api_url(url, ENV)
        return url

    if ENV == "local":
        return "http://127.0.0.1:8000"

    raise RuntimeError(
        f"Backend URL not configured for {ENV.upper()} environment. "
        f"Set BACKEND_URL to the ERP API service URL. "
        f"Production/staging MUST use HTTPS and cannot fall back to localhost."
    )


try:
    BACKEND_URL = get_api_base_url()
except RuntimeError as e:
    print(f"[CONFIG] CRITICAL: {e}")
    BACKEND_URL = ""  # API calls will fail with a visible configuration error

# List pages
PAGE_SIZE = int(os.environ.get("PAGE_SIZE", "20"))
# Dashboards pull whole collections in one request
DASHBOARD_FETCH_LIMIT = int(os.environ.get("DASHBOARD_FETCH_LIMIT", "1000"))
REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "20"))

# Contract PDF: a Bengali TTF (Kalpurush, Noto Sans Bengali, ...) is needed
# for Bengali glyphs; without it reportlab falls back to Helvetica.
CONTRACT_FONT_PATH = os.environ.get("CONTRACT_FONT_PATH", "").strip()
AGENCY_NAME = os.environ.get("AGENCY_NAME", "সালমা এয়ার ট্রাভেলস")

ENABLE_DEBUG_UI = IS_DEV

print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Backend URL: {BACKEND_URL}")
print(f"[CONFIG] Contract font: {CONTRACT_FONT_PATH or 'built-in'}")
print(f"[CONFIG] Debug UI: {'enabled' if ENABLE_DEBUG_UI else 'disabled'}")
