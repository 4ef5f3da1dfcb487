"""
Vendors (with bills and dashboard), haj agents and air agents.

Run: pytest backend/test_vendors_agents_api.py -v
"""

import pytest

VENDOR = {
    "tradeName": "Sky Travels",
    "tradeLocation": "Motijheel, Dhaka",
    "ownerName": "Karim Uddin",
    "contactNo": "01712345678",
}

AIR_AGENT = {
    "name": "Jet Wings",
    "personalName": "Rafiq",
    "email": "ops@jetwings.test",
    "mobile": "01812 345678",
}


def _vendor(client, headers, **overrides):
    resp = client.post("/api/vendors", json=dict(VENDOR, **overrides), headers=headers)
    assert resp.status_code == 201, resp.json()
    return resp.json()["data"]


class TestVendors:
    def test_ids_are_sequential(self, client, admin):
        first = _vendor(client, admin)
        second = _vendor(client, admin, tradeName="Sea Travels")
        assert first["vendorId"] == "VN00001"
        assert second["vendorId"] == "VN00002"
        assert first["status"] == "active"
        assert first["totalPaid"] == 0 and first["totalDue"] == 0

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"tradeName": ""}, "Trade Name is required"),
            ({"tradeLocation": "  "}, "Trade Location is required"),
            ({"ownerName": None}, "Owner's Name is required"),
            ({"contactNo": ""}, "Contact No is required"),
            ({"contactNo": "call me"}, "Enter a valid phone number"),
            ({"nid": "12ab"}, "NID should be 8-20 digits"),
            ({"passport": "A1"}, "Passport should be 6-12 alphanumeric characters"),
        ],
    )
    def test_validation_messages(self, client, admin, overrides, message):
        resp = client.post("/api/vendors", json=dict(VENDOR, **overrides), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == message

    def test_duplicate_trade_name_ignores_case(self, client, admin):
        _vendor(client, admin)
        resp = client.post("/api/vendors", json=dict(VENDOR, tradeName="SKY TRAVELS"), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Vendor with this trade name already exists"

    def test_update_keeps_duplicate_rule(self, client, admin):
        _vendor(client, admin)
        other = _vendor(client, admin, tradeName="Sea Travels")
        resp = client.put(f"/api/vendors/{other['id']}", json={"tradeName": "sky travels"}, headers=admin)
        assert resp.status_code == 400
        resp = client.put(f"/api/vendors/{other['id']}", json={"ownerName": "Nadia"}, headers=admin)
        assert resp.json()["data"]["ownerName"] == "Nadia"
        assert resp.json()["data"]["vendorId"] == "VN00002"

    def test_bulk_create_reports_errors_by_index(self, client, admin):
        rows = [
            VENDOR,
            dict(VENDOR, tradeName="Sea Travels", contactNo=""),
            dict(VENDOR, tradeName="Land Travels", contactNo=1712345678),
            dict(VENDOR),
        ]
        resp = client.put("/api/vendors", json={"vendors": rows}, headers=admin)
        body = resp.json()
        assert resp.status_code == 200
        assert [v["tradeName"] for v in body["created"]] == ["Sky Travels", "Land Travels"]
        assert body["errors"] == [
            {"index": 1, "error": "Contact No is required"},
            {"index": 3, "error": "Vendor with this trade name already exists"},
        ]

    def test_bulk_create_needs_rows(self, client, admin):
        resp = client.put("/api/vendors", json={"vendors": []}, headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == "No vendors provided"

    def test_search(self, client, admin):
        _vendor(client, admin)
        _vendor(client, admin, tradeName="Sea Travels", ownerName="Nadia Islam")
        hits = client.get("/api/vendors", params={"q": "nadia"}, headers=admin).json()["data"]
        assert [v["tradeName"] for v in hits] == ["Sea Travels"]


class TestVendorBills:
    def test_bill_due_and_dashboard(self, client, admin):
        sky = _vendor(client, admin)
        sea = _vendor(client, admin, tradeName="Sea Travels")

        bill = client.post(
            f"/api/vendors/{sky['id']}/bills",
            json={"billNumber": "B-1", "totalAmount": 10000, "paidAmount": 4000},
            headers=admin,
        ).json()["data"]
        assert bill["vendorId"] == sky["id"]
        assert bill["vendorName"] == "Sky Travels"
        assert bill["dueAmount"] == 6000

        resp = client.post(
            "/api/vendors/bills",
            json={"vendorId": sea["id"], "billNumber": "B-2", "totalAmount": 25000, "paidAmount": 25000},
            headers=admin,
        )
        assert resp.status_code == 201

        own = client.get(f"/api/vendors/{sky['id']}/bills", headers=admin).json()["data"]
        assert [b["billNumber"] for b in own] == ["B-1"]

        dash = client.get("/api/vendors/dashboard", headers=admin).json()["data"]
        assert dash["statistics"] == {"totalVendors": 2, "active": 2, "inactive": 0}
        assert dash["bills"] == {"totalBills": 2, "totalAmount": 35000, "totalPaid": 29000, "totalDue": 6000}
        assert [v["tradeName"] for v in dash["topVendors"]] == ["Sea Travels", "Sky Travels"]

    def test_bill_due_accumulates_on_vendor(self, client, admin):
        sky = _vendor(client, admin)
        url = f"/api/vendors/{sky['id']}/bills"

        client.post(url, json={"totalAmount": 10000, "paidAmount": 4000}, headers=admin)
        vendor = client.get(f"/api/vendors/{sky['id']}", headers=admin).json()["data"]
        assert vendor["totalDue"] == 6000

        client.post(url, json={"totalAmount": 5000, "paidAmount": 5000}, headers=admin)
        client.post(
            "/api/vendors/bills",
            json={"vendorId": sky["id"], "billType": "Hajj Package", "totalAmount": 30000, "paidAmount": 10000},
            headers=admin,
        )
        vendor = client.get(f"/api/vendors/{sky['id']}", headers=admin).json()["data"]
        assert vendor["totalDue"] == 26000
        assert vendor["hajDue"] == 20000
        assert "umrahDue" not in vendor

    def test_bill_rules(self, client, admin):
        sky = _vendor(client, admin)
        resp = client.post("/api/vendors/bills", json={"totalAmount": 100}, headers=admin)
        assert resp.json()["error"] == "Vendor ID is required"
        resp = client.post(f"/api/vendors/{sky['id']}/bills", json={"totalAmount": 0}, headers=admin)
        assert resp.json()["error"] == "Total amount is required and must be greater than 0"
        resp = client.post("/api/vendors/bills", json={"vendorId": "4040", "totalAmount": 100}, headers=admin)
        assert resp.status_code == 404
        assert resp.json()["error"] == "Vendor not found"


class TestHajAgents:
    def test_create_and_duplicate(self, client, admin):
        resp = client.post("/api/agents", json=dict(VENDOR, tradeName="Al Noor Hajj"), headers=admin)
        assert resp.status_code == 201
        agent = resp.json()["data"]
        assert agent["totalBill"] == 0 and agent["totalPaid"] == 0 and agent["totalDue"] == 0

        resp = client.post("/api/agents", json=dict(VENDOR, tradeName="al noor hajj"), headers=admin)
        assert resp.json()["error"] == "Agent with this trade name already exists"

    def test_reservation_can_view_but_not_create(self, client, auth_headers):
        reservation = auth_headers("reservation")
        assert client.get("/api/agents", headers=reservation).status_code == 200
        assert client.post("/api/agents", json=VENDOR, headers=reservation).status_code == 403


class TestAirAgents:
    def test_generated_id_and_defaults(self, client, admin):
        agent = client.post("/api/air-agents", json=AIR_AGENT, headers=admin).json()["data"]
        assert agent["agentId"] == "AGT0001"
        assert agent["mobile"] == "01812345678"
        assert agent["country"] == "Bangladesh"
        assert agent["status"] == "Active"

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"name": ""}, "Trade Name is required"),
            ({"email": ""}, "Email is required"),
            ({"mobile": ""}, "Mobile number is required"),
            ({"email": "not-an-email"}, "Invalid email format"),
            ({"mobile": "12345"}, "Invalid mobile number format. Please use format: 01XXXXXXXXX"),
            ({"agentId": "AG-1"}, "Invalid agent ID format. Must be in format AGT0001"),
        ],
    )
    def test_validation(self, client, admin, overrides, message):
        resp = client.post("/api/air-agents", json=dict(AIR_AGENT, **overrides), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == message

    def test_duplicates(self, client, admin):
        client.post("/api/air-agents", json=dict(AIR_AGENT, agentId="agt0007"), headers=admin)
        same_email = dict(AIR_AGENT, email="OPS@jetwings.test", mobile="01999999999")
        assert client.post("/api/air-agents", json=same_email, headers=admin).json()["error"] == (
            "Agent with this email or mobile number already exists"
        )
        taken = dict(AIR_AGENT, email="new@jetwings.test", mobile="01999999999", agentId="AGT0007")
        assert client.post("/api/air-agents", json=taken, headers=admin).json()["error"] == "Agent ID AGT0007 already exists"

    def test_agent_id_is_immutable(self, client, admin):
        agent = client.post("/api/air-agents", json=AIR_AGENT, headers=admin).json()["data"]
        resp = client.put(f"/api/air-agents/{agent['id']}", json={"agentId": "AGT9999", "city": "Dhaka"}, headers=admin)
        assert resp.json()["data"]["agentId"] == "AGT0001"
        assert resp.json()["data"]["city"] == "Dhaka"
