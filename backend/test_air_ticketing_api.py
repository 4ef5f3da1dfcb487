"""
GDS setup, ticket refunds and reissues.

Run: pytest backend/test_air_ticketing_api.py -v
"""

SABRE = {"name": "Sabre Main", "provider": "Sabre", "gdsCode": "sab1", "pccCode": "7X2K"}


class TestGds:
    def test_code_is_uppercased_and_defaults_applied(self, client, admin):
        resp = client.post("/api/air-ticketing/gds", json=SABRE, headers=admin)
        assert resp.status_code == 201
        record = resp.json()["data"]
        assert record["gdsCode"] == "SAB1"
        assert record["status"] == "Active"
        assert record["ticketCount"] == 0
        assert record["commissionRate"] == 0

    def test_name_and_provider_required(self, client, admin):
        resp = client.post("/api/air-ticketing/gds", json=dict(SABRE, provider=""), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == "GDS নাম এবং Provider আবশ্যক"

    def test_code_unique_within_branch(self, client, auth_headers):
        dhaka = auth_headers("admin", "BR-1", "Dhaka")
        ctg = auth_headers("admin", "BR-2", "Chattogram")
        client.post("/api/air-ticketing/gds", json=SABRE, headers=dhaka)

        again = client.post("/api/air-ticketing/gds", json=dict(SABRE, gdsCode="SAB1"), headers=dhaka)
        assert again.status_code == 400
        assert again.json()["error"] == "এই GDS কোড আগে থেকেই আছে"

        other_branch = client.post("/api/air-ticketing/gds", json=SABRE, headers=ctg)
        assert other_branch.status_code == 201

    def test_list_returns_providers_and_filters(self, client, admin):
        client.post("/api/air-ticketing/gds", json=SABRE, headers=admin)
        client.post(
            "/api/air-ticketing/gds",
            json={"name": "Amadeus Backup", "provider": "Amadeus", "gdsCode": "AMA1"},
            headers=admin,
        )
        body = client.get("/api/air-ticketing/gds", headers=admin).json()
        assert body["providers"] == ["Amadeus", "Sabre"]
        assert body["pagination"]["total"] == 2

        only = client.get("/api/air-ticketing/gds", params={"provider": "Sabre"}, headers=admin).json()
        assert [g["name"] for g in only["data"]] == ["Sabre Main"]

    def test_delete(self, client, admin):
        gds_id = client.post("/api/air-ticketing/gds", json=SABRE, headers=admin).json()["data"]["id"]
        resp = client.delete(f"/api/air-ticketing/gds/{gds_id}", headers=admin)
        assert resp.json() == {"success": True, "message": "GDS রেকর্ড মুছে ফেলা হয়েছে"}
        assert client.get(f"/api/air-ticketing/gds/{gds_id}", headers=admin).json()["error"] == "GDS record not found"

    def test_reservation_has_no_access(self, client, auth_headers):
        assert client.get("/api/air-ticketing/gds", headers=auth_headers("reservation")).status_code == 403


class TestRefunds:
    def test_amount_is_computed_from_components(self, client, admin):
        payload = {
            "ticketNumber": "997-1234567890",
            "passengerName": "Abdul Karim",
            "actualFare": 50000,
            "usedAmount": 10000,
            "serviceCharge": 2000,
            "airlinesPenalty": 3000,
        }
        resp = client.post("/api/air-ticketing/refund", json=payload, headers=admin)
        assert resp.status_code == 201
        refund = resp.json()["data"]
        assert refund["refundAmount"] == 35000
        assert refund["refundMethod"] == "cash"
        assert refund["status"] == "Pending"
        assert refund["refundDate"]

    def test_refund_never_negative(self, client, admin):
        payload = {"ticketNumber": "T-1", "actualFare": 1000, "usedAmount": 5000}
        resp = client.post("/api/air-ticketing/refund", json=payload, headers=admin)
        assert resp.status_code == 400

    def test_direct_amount_is_accepted(self, client, admin):
        resp = client.post("/api/air-ticketing/refund", json={"ticketNumber": "T-2", "refundAmount": 1500}, headers=admin)
        assert resp.json()["data"]["refundAmount"] == 1500

    def test_ticket_and_amount_required(self, client, admin):
        resp = client.post("/api/air-ticketing/refund", json={"refundAmount": 100}, headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == "টিকেট নম্বর এবং রিফান্ড পরিমাণ আবশ্যক"

    def test_update_recomputes(self, client, admin):
        payload = {"ticketNumber": "T-3", "actualFare": 20000, "serviceCharge": 1000}
        refund_id = client.post("/api/air-ticketing/refund", json=payload, headers=admin).json()["data"]["id"]
        resp = client.put(f"/api/air-ticketing/refund/{refund_id}", json={"usedAmount": 4000}, headers=admin)
        assert resp.json()["data"]["refundAmount"] == 15000

    def test_delete_message(self, client, admin):
        refund_id = client.post(
            "/api/air-ticketing/refund", json={"ticketNumber": "T-4", "refundAmount": 10}, headers=admin
        ).json()["data"]["id"]
        resp = client.delete(f"/api/air-ticketing/refund/{refund_id}", headers=admin)
        assert resp.json()["message"] == "রিফান্ড রেকর্ড মুছে ফেলা হয়েছে"
        assert client.get(f"/api/air-ticketing/refund/{refund_id}", headers=admin).status_code == 404


class TestReissues:
    def test_total_charge(self, client, admin):
        payload = {
            "ticketNumber": "997-555",
            "fareDifference": 4000,
            "taxDifference": 500,
            "serviceFee": 300,
            "airlinesPenalty": 1200,
        }
        reissue = client.post("/api/air-ticketing/reissue", json=payload, headers=admin).json()["data"]
        assert reissue["totalCharge"] == 6000
        assert reissue["status"] == "Pending"

        resp = client.put(f"/api/air-ticketing/reissue/{reissue['id']}", json={"serviceFee": 800}, headers=admin)
        assert resp.json()["data"]["totalCharge"] == 6500

    def test_ticket_required(self, client, admin):
        resp = client.post("/api/air-ticketing/reissue", json={"fareDifference": 10}, headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == "টিকেট নম্বর আবশ্যক"

    def test_search(self, client, admin):
        client.post("/api/air-ticketing/reissue", json={"ticketNumber": "A-1", "pnr": "XK9P2L"}, headers=admin)
        client.post("/api/air-ticketing/reissue", json={"ticketNumber": "B-1", "pnr": "QQ1234"}, headers=admin)
        hits = client.get("/api/air-ticketing/reissue", params={"q": "xk9"}, headers=admin).json()["data"]
        assert [r["ticketNumber"] for r in hits] == ["A-1"]
