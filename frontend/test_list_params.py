# frontend/test_list_params.py
# Unit tests for list query building, permissions and API error text

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.api_client import error_message, is_public_endpoint, response_json
from frontend.auth import has_permission
from frontend.components import build_list_params, clamp_page, page_count


class FakeResponse:
    """Just enough of requests.Response for the JSON helpers."""

    def __init__(self, body=None, raises=False):
        self._body = body
        self._raises = raises

    def json(self):
        if self._raises:
            raise ValueError("not json")
        return self._body


def test_build_list_params_drops_empty_filters():
    params = build_list_params(2, 20, q="  ", status="All", type=None, provider="")
    assert params == {"page": 2, "limit": 20}


def test_build_list_params_keeps_real_filters():
    params = build_list_params(1, 50, q=" karim ", status="active", year="2026")
    assert params == {"page": 1, "limit": 50, "q": "karim", "status": "active", "year": "2026"}


def test_build_list_params_page_floor():
    assert build_list_params(0, 10)["page"] == 1
    assert build_list_params(None, 10)["page"] == 1


def test_page_count_and_clamp():
    assert page_count(None) == 1
    assert page_count({"totalPages": 0}) == 1
    assert page_count({"totalPages": 4}) == 4
    assert clamp_page(9, {"totalPages": 4}) == 4
    assert clamp_page(0, {"totalPages": 4}) == 1


def test_has_permission():
    granted = {"customers": ["view", "create"], "settings": []}
    assert has_permission(granted, "customers", "create")
    assert not has_permission(granted, "customers", "delete")
    assert not has_permission(granted, "settings", "view")
    assert not has_permission(granted, "agents", "view")
    assert not has_permission(None, "customers", "view")


def test_error_message_reads_error_then_detail():
    assert error_message(FakeResponse({"success": False, "error": "Vendor not found"})) == "Vendor not found"
    assert error_message(FakeResponse({"detail": "Invalid credentials"})) == "Invalid credentials"
    assert error_message(FakeResponse({"success": True, "message": "Deleted"})) == "Deleted"


def test_error_message_joins_validation_details():
    body = {"detail": [{"msg": "field required"}, {"msg": "value is not a valid float"}]}
    assert error_message(FakeResponse(body)) == "field required; value is not a valid float"


def test_error_message_fallbacks():
    assert error_message(None, "offline") == "offline"
    assert error_message(FakeResponse(raises=True), "bad body") == "bad body"
    assert error_message(FakeResponse({}), "empty") == "empty"


def test_response_json_only_returns_objects():
    assert response_json(FakeResponse([1, 2])) == {}
    assert response_json(FakeResponse({"a": 1})) == {"a": 1}


def test_public_endpoints():
    assert is_public_endpoint("/api/auth/login")
    assert is_public_endpoint("/health")
    assert not is_public_endpoint("/api/auth/me")
