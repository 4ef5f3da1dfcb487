"""
Additional services (other customers, passport/manpower/visa/other service
records), staff users and global search.

Run: pytest backend/test_services_users_search_api.py -v
"""

import pytest

from backend.auth_context import create_access_token

CUSTOMER = {"firstName": "Nusrat", "lastName": "Jahan", "mobile": "01911000000", "email": "nusrat@example.com"}

PASSPORT_JOB = {
    "clientName": "Tanvir Hasan",
    "phone": "01611000000",
    "date": "2026-09-01",
    "totalBill": 8000,
    "paidAmount": 5000,
}

SERVICE_PREFIXES = [
    ("/api/passport-services", "new_passport", "Passport service"),
    ("/api/manpower-service", "recruitment", "Manpower service"),
    ("/api/visa-processing", "tourist", "Visa processing service"),
    ("/api/other-services", "other", "Service"),
]


class TestOtherCustomers:
    def test_create_builds_name_and_id(self, client, admin):
        resp = client.post("/api/other-customers", json=CUSTOMER, headers=admin)
        assert resp.status_code == 201
        customer = resp.json()["data"]
        assert customer["name"] == "Nusrat Jahan"
        assert customer["customerId"] == "OSC0001"
        assert customer["status"] == "active"

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"firstName": "", "lastName": ""}, "Name is required"),
            ({"mobile": ""}, "Mobile number is required"),
            ({"email": "nusrat-at-example"}, "Invalid email format"),
        ],
    )
    def test_validation(self, client, admin, overrides, message):
        resp = client.post("/api/other-customers", json=dict(CUSTOMER, **overrides), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == message

    def test_duplicates(self, client, admin):
        client.post("/api/other-customers", json=CUSTOMER, headers=admin)
        same_mobile = client.post("/api/other-customers", json=dict(CUSTOMER, firstName="Other"), headers=admin)
        assert same_mobile.json()["error"] == "Customer with this mobile number already exists"

        taken_id = client.post(
            "/api/other-customers",
            json=dict(CUSTOMER, mobile="01911000009", customerId="OSC0001"),
            headers=admin,
        )
        assert taken_id.json()["error"] == "Customer ID OSC0001 already exists"

    def test_customer_id_is_kept_on_update(self, client, admin):
        customer = client.post("/api/other-customers", json=CUSTOMER, headers=admin).json()["data"]
        resp = client.put(
            f"/api/other-customers/{customer['id']}",
            json={"customerId": "OSC9999", "address": "Mirpur"},
            headers=admin,
        )
        assert resp.json()["data"]["customerId"] == "OSC0001"
        assert resp.json()["data"]["address"] == "Mirpur"


class TestServiceRecords:
    @pytest.mark.parametrize("prefix, default_type, label", SERVICE_PREFIXES)
    def test_crud_per_service(self, client, admin, prefix, default_type, label):
        created = client.post(prefix, json=PASSPORT_JOB, headers=admin)
        assert created.status_code == 201
        record = created.json()["data"]
        assert record["serviceType"] == default_type
        assert record["totalAmount"] == 8000
        assert record["dueAmount"] == 3000
        assert record["status"] == "pending"

        updated = client.put(f"{prefix}/{record['id']}", json={"totalAmount": 10000}, headers=admin).json()["data"]
        assert updated["totalBill"] == 10000
        assert updated["dueAmount"] == 5000

        deleted = client.delete(f"{prefix}/{record['id']}", headers=admin)
        assert deleted.json()["message"] == f"{label} deleted successfully"
        assert client.get(f"{prefix}/{record['id']}", headers=admin).json()["error"] == f"{label} not found"

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"clientName": ""}, "Client name is required"),
            ({"phone": None}, "Phone number is required"),
            ({"date": ""}, "Date is required"),
            ({"email": "bad"}, "Invalid email format"),
        ],
    )
    def test_validation(self, client, admin, overrides, message):
        resp = client.post("/api/passport-services", json=dict(PASSPORT_JOB, **overrides), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == message

    def test_service_type_filter(self, client, admin):
        client.post("/api/visa-processing", json=PASSPORT_JOB, headers=admin)
        client.post("/api/visa-processing", json=dict(PASSPORT_JOB, serviceType="work"), headers=admin)
        rows = client.get("/api/visa-processing", params={"serviceType": "work"}, headers=admin).json()["data"]
        assert len(rows) == 1
        assert rows[0]["serviceType"] == "work"

    def test_collections_are_separate(self, client, admin):
        client.post("/api/passport-services", json=PASSPORT_JOB, headers=admin)
        assert client.get("/api/manpower-service", headers=admin).json()["pagination"]["total"] == 0


class TestUsers:
    NEW_USER = {
        "email": "Rina@Agency.test",
        "password": "secret123",
        "name": "Rina",
        "role": "accountant",
        "branchId": "BR-1",
        "branchName": "Dhaka",
    }

    def test_create_list_and_login(self, client, admin):
        resp = client.post("/api/users", json=self.NEW_USER, headers=admin)
        assert resp.status_code == 201
        user = resp.json()["data"]
        assert user["email"] == "rina@agency.test"
        assert user["status"] == "active"
        assert "password_hash" not in user

        listing = client.get("/api/users", params={"role": "accountant"}, headers=admin).json()
        assert [u["email"] for u in listing["data"]] == ["rina@agency.test"]

        login = client.post("/api/auth/login", json={"email": "rina@agency.test", "password": "secret123"})
        assert login.status_code == 200

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"password": None}, "Email and password are required"),
            ({"password": "123"}, "Password must be at least 6 characters"),
            ({"branchId": None}, "Branch is required"),
            ({"role": "intern"}, "Unknown role: intern"),
        ],
    )
    def test_create_validation(self, client, admin, overrides, message):
        resp = client.post("/api/users", json=dict(self.NEW_USER, **overrides), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == message

    def test_duplicate_email(self, client, admin):
        client.post("/api/users", json=self.NEW_USER, headers=admin)
        resp = client.post("/api/users", json=dict(self.NEW_USER, email="rina@agency.test"), headers=admin)
        assert resp.json()["error"] == "User with this email already exists"

    def test_deactivate_blocks_login(self, client, admin):
        user_id = client.post("/api/users", json=self.NEW_USER, headers=admin).json()["data"]["id"]
        resp = client.put(f"/api/users/{user_id}", json={"status": "inactive", "role": "manager"}, headers=admin)
        assert resp.json()["data"]["status"] == "inactive"
        assert resp.json()["data"]["role"] == "manager"
        login = client.post("/api/auth/login", json={"email": "rina@agency.test", "password": "secret123"})
        assert login.status_code == 403

    def test_cannot_delete_self(self, client, create_user):
        my_id = create_user("boss@agency.test", role="admin")
        headers = {"Authorization": f"Bearer {create_access_token({'sub': str(my_id)})}"}
        resp = client.delete(f"/api/users/{my_id}", headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "You cannot delete your own account"

    def test_delete_and_branch_scope(self, client, auth_headers):
        dhaka = auth_headers("admin", "BR-1", "Dhaka")
        ctg = auth_headers("admin", "BR-2", "Chattogram")
        user_id = client.post("/api/users", json=self.NEW_USER, headers=dhaka).json()["data"]["id"]
        assert client.get(f"/api/users/{user_id}", headers=ctg).status_code == 404
        resp = client.delete(f"/api/users/{user_id}", headers=dhaka)
        assert resp.json() == {"success": True, "message": "User deleted successfully"}
        assert client.get(f"/api/users/{user_id}", headers=dhaka).json()["error"] == "User not found"


class TestGlobalSearch:
    def test_empty_query_returns_empty_groups(self, client, admin):
        body = client.get("/api/search", params={"q": "  "}, headers=admin).json()
        assert body["total"] == 0
        assert set(body["results"]) == {
            "transactions", "hajis", "umrahs", "vendors", "agents", "airAgents", "refunds", "reissues",
        }
        assert all(hits == [] for hits in body["results"].values())

    def test_hits_are_grouped(self, client, admin):
        client.post(
            "/api/hajj-umrah/hajis",
            json={"first_name": "Karim", "last_name": "Ullah", "mobile": "01711000000"},
            headers=admin,
        )
        client.post(
            "/api/vendors",
            json={"tradeName": "Karim Travels", "tradeLocation": "Dhaka", "ownerName": "Karim", "contactNo": "01712345678"},
            headers=admin,
        )
        client.post("/api/air-ticketing/refund", json={"ticketNumber": "T-9", "passengerName": "Rahim", "refundAmount": 10}, headers=admin)

        body = client.get("/api/search", params={"q": "karim"}, headers=admin).json()
        assert body["query"] == "karim"
        assert body["total"] == 2

        haji = body["results"]["hajis"][0]
        assert haji["title"] == "Karim Ullah"
        assert haji["subtitle"] == "ID: HAJ0001 | Mobile: 01711000000"
        assert haji["link"] == f"/hajj-umrah/hajis/{haji['id']}"

        vendor = body["results"]["vendors"][0]
        assert vendor["type"] == "vendor"
        assert vendor["subtitle"] == "ID: VN00001 | Phone: 01712345678"
        assert body["results"]["refunds"] == []

    def test_limit_per_group(self, client, admin):
        for i in range(3):
            client.post(
                "/api/hajj-umrah/umrahs",
                json={"name": f"Pilgrim {i}", "mobile": f"0171100000{i}"},
                headers=admin,
            )
        body = client.get("/api/search", params={"q": "pilgrim", "limit": 2}, headers=admin).json()
        assert len(body["results"]["umrahs"]) == 2

    def test_search_is_branch_scoped(self, client, auth_headers):
        dhaka = auth_headers("admin", "BR-1", "Dhaka")
        ctg = auth_headers("admin", "BR-2", "Chattogram")
        client.post("/api/hajj-umrah/hajis", json={"name": "Karim", "mobile": "01711000000"}, headers=dhaka)
        assert client.get("/api/search", params={"q": "karim"}, headers=ctg).json()["total"] == 0
