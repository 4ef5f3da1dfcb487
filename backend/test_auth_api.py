"""
Authentication, RBAC and branch scoping across the API.

Run: pytest backend/test_auth_api.py -v
"""

from backend.permissions import has_permission, permissions_by_module, role_permissions


ASSET = {
    "name": "Office Printer",
    "type": "Office Equipment",
    "totalPaidAmount": 18000,
    "paymentType": "one-time",
    "paymentDate": "2026-02-01",
    "purchaseDate": "2026-02-01",
}


class TestLogin:
    def test_login_returns_token_and_public_user(self, client, create_user):
        create_user("agent@agency.test", role="reservation", password="secret123")
        resp = client.post("/api/auth/login", json={"email": " Agent@Agency.test ", "password": "secret123"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["user"]["email"] == "agent@agency.test"
        assert body["user"]["role"] == "reservation"
        assert "password_hash" not in body["user"]

    def test_wrong_password_is_401(self, client, create_user):
        create_user("agent@agency.test", password="secret123")
        resp = client.post("/api/auth/login", json={"email": "agent@agency.test", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "error": "Invalid credentials"}

    def test_inactive_user_is_403(self, client, create_user):
        create_user("gone@agency.test", password="secret123", status="inactive")
        resp = client.post("/api/auth/login", json={"email": "gone@agency.test", "password": "secret123"})
        assert resp.status_code == 403

    def test_me_lists_permissions_by_module(self, client, auth_headers):
        resp = client.get("/api/auth/me", headers=auth_headers("accountant"))
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["role"] == "accountant"
        assert body["permissions"]["transactions"] == ["view", "create", "edit"]
        assert "settings" not in body["permissions"]


class TestPermissions:
    def test_missing_token_is_rejected(self, client):
        resp = client.get("/api/assets")
        assert resp.status_code in (401, 403)
        assert resp.json()["success"] is False

    def test_garbage_token_is_401(self, client):
        resp = client.get("/api/assets", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid token"

    def test_reservation_cannot_create_assets(self, client, auth_headers):
        resp = client.post("/api/assets", json=ASSET, headers=auth_headers("reservation"))
        assert resp.status_code == 403
        assert resp.json()["error"] == "Insufficient permissions - your role cannot perform this action"

    def test_manager_cannot_touch_settings(self, client, auth_headers):
        resp = client.get("/api/users", headers=auth_headers("manager"))
        assert resp.status_code == 403

    def test_role_table(self):
        assert has_permission("admin", "settings", "delete")
        assert not has_permission("manager", "audit", "view")
        assert has_permission("reservation", "customers", "edit")
        assert not has_permission("reservation", "customers", "delete")
        assert role_permissions("intern") == set()
        assert permissions_by_module("reservation") == {
            "dashboard": ["view"],
            "customers": ["view", "create", "edit"],
            "agents": ["view"],
        }


class TestBranchScoping:
    def test_other_branch_gets_404(self, client, auth_headers):
        dhaka = auth_headers("admin", "BR-1", "Dhaka")
        ctg = auth_headers("admin", "BR-2", "Chattogram")
        asset_id = client.post("/api/assets", json=ASSET, headers=dhaka).json()["data"]["id"]

        assert client.get(f"/api/assets/{asset_id}", headers=ctg).status_code == 404
        assert client.delete(f"/api/assets/{asset_id}", headers=ctg).status_code == 404
        assert client.get("/api/assets", headers=ctg).json()["pagination"]["total"] == 0
        assert client.get(f"/api/assets/{asset_id}", headers=dhaka).status_code == 200

    def test_super_admin_sees_every_branch(self, client, auth_headers):
        dhaka = auth_headers("admin", "BR-1", "Dhaka")
        client.post("/api/assets", json=ASSET, headers=dhaka)
        root = auth_headers("super_admin", None, None)
        assert client.get("/api/assets", headers=root).json()["pagination"]["total"] == 1

    def test_owner_fields_come_from_the_token(self, client, auth_headers):
        headers = auth_headers("admin", "BR-7", "Sylhet")
        payload = dict(ASSET, branchId="BR-1", createdBy="999")
        record = client.post("/api/assets", json=payload, headers=headers).json()["data"]
        assert record["branchId"] == "BR-7"
        assert record["branchName"] == "Sylhet"
        assert record["createdBy"] != "999"


class TestErrorEnvelope:
    def test_non_numeric_id_is_400(self, client, admin):
        resp = client.get("/api/assets/abc", headers=admin)
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_bad_number_in_body_is_400(self, client, admin):
        resp = client.post("/api/assets", json=dict(ASSET, totalPaidAmount="lots"), headers=admin)
        assert resp.status_code == 400
        assert "totalPaidAmount" in resp.json()["error"]

    def test_limit_above_max_is_400(self, client, admin):
        assert client.get("/api/assets?limit=5000", headers=admin).status_code == 400

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestAppStartup:
    def test_app_imports_with_every_router_mounted(self):
        import importlib

        main = importlib.import_module("backend.main")
        paths = {route.path for route in main.app.routes}
        for path in (
            "/api/assets",
            "/api/vendors",
            "/api/agents",
            "/api/air-agents",
            "/api/air-ticketing/gds",
            "/api/air-ticketing/refund",
            "/api/hajj-umrah/hajis",
            "/api/investments/others-invest",
            "/api/investments/iata-airlines-capping",
            "/api/bank-accounts",
            "/api/settings/markup",
            "/api/personal-expense",
            "/api/family-assets",
            "/api/other-customers",
            "/api/passport-services",
            "/api/users",
            "/api/search",
        ):
            assert path in paths, path

    def test_list_query_params_resolve(self, client, admin):
        client.post("/api/assets", json=ASSET, headers=admin)
        body = client.get("/api/assets?page=1&limit=5&search=printer&status=All", headers=admin).json()
        assert body["pagination"]["limit"] == 5
        assert [a["name"] for a in body["data"]] == ["Office Printer"]
