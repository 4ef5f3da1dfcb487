"""
Business asset and family asset endpoints.

Run: pytest backend/test_assets_api.py -v
"""

import pytest

LAPTOP = {
    "name": "Laptop",
    "type": "IT Equipment",
    "totalPaidAmount": 50000,
    "paymentDate": "2026-03-05",
    "purchaseDate": "2026-03-05",
    "status": "active",
}

INSTALLMENT_CAR = {
    "name": "Office Car",
    "type": "Vehicle",
    "totalPaidAmount": 1200000,
    "paymentType": "installment",
    "paymentDate": "2026-01-01",
    "numberOfInstallments": 12,
    "installmentAmount": 100000,
    "installmentStartDate": "2026-01-31",
    "purchaseDate": "2026-01-15",
}


def test_create_and_list_laptop(client, admin):
    resp = client.post("/api/assets", json=LAPTOP, headers=admin)
    assert resp.status_code == 201
    asset = resp.json()["data"]
    assert isinstance(asset["id"], str)
    assert asset["totalPaidAmount"] == 50000
    assert asset["paymentType"] == "one-time"
    assert asset["numberOfInstallments"] is None

    listing = client.get("/api/assets", headers=admin).json()
    assert listing["success"] is True
    assert [a["name"] for a in listing["data"]] == ["Laptop"]
    assert listing["pagination"] == {"page": 1, "limit": 50, "total": 1, "totalPages": 1}


@pytest.mark.parametrize(
    "missing, message",
    [
        ("name", "Asset name is required"),
        ("type", "Asset type is required"),
        ("totalPaidAmount", "Total paid amount is required and must be greater than 0"),
        ("paymentDate", "Payment date is required for one-time payment"),
        ("purchaseDate", "Purchase date is required"),
    ],
)
def test_required_fields(client, admin, missing, message):
    payload = {k: v for k, v in LAPTOP.items() if k != missing}
    resp = client.post("/api/assets", json=payload, headers=admin)
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": message}


def test_installment_plan_is_normalized(client, admin):
    asset = client.post("/api/assets", json=INSTALLMENT_CAR, headers=admin).json()["data"]
    assert asset["paymentDate"] is None
    assert asset["numberOfInstallments"] == 12
    # 2026-01-31 + 11 months, clamped to the end of the month
    assert asset["installmentEndDate"] == "2026-12-31"


def test_installment_requires_its_fields(client, admin):
    payload = dict(INSTALLMENT_CAR, installmentAmount=None)
    resp = client.post("/api/assets", json=payload, headers=admin)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Installment amount is required"


def test_installment_count_is_bounded(client, admin):
    resp = client.post("/api/assets", json=dict(INSTALLMENT_CAR, numberOfInstallments=200000), headers=admin)
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert "numberOfInstallments" in resp.json()["error"]

    longest = client.post("/api/assets", json=dict(INSTALLMENT_CAR, numberOfInstallments=600), headers=admin)
    assert longest.status_code == 201
    assert longest.json()["data"]["installmentEndDate"] == "2075-12-31"


def test_one_time_asset_accepts_zero_installments(client, admin):
    resp = client.post("/api/assets", json=dict(LAPTOP, numberOfInstallments=0, installmentAmount=0), headers=admin)
    assert resp.status_code == 201
    assert resp.json()["data"]["numberOfInstallments"] is None


def test_update_validates_the_merged_record(client, admin):
    asset_id = client.post("/api/assets", json=LAPTOP, headers=admin).json()["data"]["id"]

    resp = client.put(f"/api/assets/{asset_id}", json={"totalPaidAmount": 0}, headers=admin)
    assert resp.status_code == 400

    resp = client.put(f"/api/assets/{asset_id}", json={"notes": "Dell XPS", "status": "inactive"}, headers=admin)
    assert resp.status_code == 200
    asset = resp.json()["data"]
    assert asset["notes"] == "Dell XPS"
    assert asset["status"] == "inactive"
    assert asset["name"] == "Laptop"


def test_switching_to_one_time_clears_installments(client, admin):
    asset_id = client.post("/api/assets", json=INSTALLMENT_CAR, headers=admin).json()["data"]["id"]
    resp = client.put(
        f"/api/assets/{asset_id}",
        json={"paymentType": "one-time", "paymentDate": "2026-02-01"},
        headers=admin,
    )
    asset = resp.json()["data"]
    assert asset["paymentDate"] == "2026-02-01"
    assert asset["installmentStartDate"] is None
    assert asset["installmentEndDate"] is None


def test_filters_and_search(client, admin):
    client.post("/api/assets", json=LAPTOP, headers=admin)
    client.post("/api/assets", json=INSTALLMENT_CAR, headers=admin)

    by_type = client.get("/api/assets", params={"type": "Vehicle"}, headers=admin).json()
    assert [a["name"] for a in by_type["data"]] == ["Office Car"]

    by_q = client.get("/api/assets", params={"q": "lapt"}, headers=admin).json()
    assert [a["name"] for a in by_q["data"]] == ["Laptop"]

    everything = client.get("/api/assets", params={"status": "All", "type": ""}, headers=admin).json()
    assert everything["pagination"]["total"] == 2


def test_search_treats_wildcards_literally(client, admin):
    client.post("/api/assets", json=LAPTOP, headers=admin)
    assert client.get("/api/assets", params={"q": "%"}, headers=admin).json()["pagination"]["total"] == 0


def test_pagination_is_stable(client, admin):
    for i in range(5):
        client.post("/api/assets", json=dict(LAPTOP, name=f"Laptop {i}"), headers=admin)
    first = client.get("/api/assets", params={"page": 2, "limit": 2}, headers=admin).json()
    again = client.get("/api/assets", params={"page": 2, "limit": 2}, headers=admin).json()
    assert first["data"] == again["data"]
    assert first["pagination"]["totalPages"] == 3


def test_delete_then_absent(client, admin):
    asset_id = client.post("/api/assets", json=LAPTOP, headers=admin).json()["data"]["id"]
    resp = client.delete(f"/api/assets/{asset_id}", headers=admin)
    assert resp.json() == {"success": True, "message": "Asset deleted successfully"}
    assert client.get(f"/api/assets/{asset_id}", headers=admin).status_code == 404
    assert client.get("/api/assets", headers=admin).json()["data"] == []
    assert client.delete(f"/api/assets/{asset_id}", headers=admin).json()["error"] == "Asset not found"


def test_family_assets_share_the_payment_rules(client, admin):
    resp = client.post("/api/family-assets", json=dict(LAPTOP, name="Family Flat", type="Other"), headers=admin)
    assert resp.status_code == 201

    bad = client.post("/api/family-assets", json=dict(INSTALLMENT_CAR, numberOfInstallments=None), headers=admin)
    assert bad.json()["error"] == "Number of installments is required"

    missing = client.get("/api/family-assets/999", headers=admin)
    assert missing.status_code == 404
    assert missing.json()["error"] == "Family asset not found"
