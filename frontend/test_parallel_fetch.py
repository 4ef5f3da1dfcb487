# frontend/test_parallel_fetch.py
# Unit tests for concurrent dashboard fetches

import sys
from pathlib import Path

import requests

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend import api_client
from frontend.aggregations import overview_counts, records_of


class FakeResponse:
    def __init__(self, status_code, body=None):
        self.status_code = status_code
        self._body = body

    def json(self):
        return self._body


def _fake_backend(monkeypatch, responses):
    """Route GETs by path; a response that is an exception gets raised."""
    warnings = []

    def fake_send(method, url, headers, json, params, timeout):
        outcome = responses[url.replace("http://api.test", "")]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(api_client, "get_api_base_url", lambda: "http://api.test")
    monkeypatch.setattr(api_client, "_headers", lambda path, with_body: {})
    monkeypatch.setattr(api_client, "_send", fake_send)
    monkeypatch.setattr(api_client.st, "warning", warnings.append)
    return warnings


def test_failed_keys_come_back_as_none(monkeypatch):
    warnings = _fake_backend(monkeypatch, {
        "/api/assets": FakeResponse(200, {"data": [{"id": "1"}], "pagination": {"total": 7}}),
        "/api/vendors": FakeResponse(500, {"success": False, "error": "Database error"}),
        "/api/agents": requests.exceptions.ConnectTimeout(),
    })
    bodies = api_client.fetch_json_parallel({
        "assets": ("/api/assets", {"limit": 1}),
        "vendors": ("/api/vendors", None),
        "agents": ("/api/agents", None),
    })

    assert bodies["vendors"] is None
    assert bodies["agents"] is None
    assert records_of(bodies["assets"]) == [{"id": "1"}]
    assert len(warnings) == 1
    assert "vendors" in warnings[0] and "agents" in warnings[0]


def test_dashboard_counts_treat_failures_as_zero(monkeypatch):
    _fake_backend(monkeypatch, {
        "/api/assets": FakeResponse(200, {"data": [], "pagination": {"total": 3}}),
        "/api/vendors": FakeResponse(503),
    })
    bodies = api_client.fetch_json_parallel({
        "assets": ("/api/assets", None),
        "vendors": ("/api/vendors", None),
    })
    assert overview_counts(bodies) == {"assets": 3, "vendors": 0}


def test_no_requests_no_calls():
    assert api_client.fetch_json_parallel({}) == {}
