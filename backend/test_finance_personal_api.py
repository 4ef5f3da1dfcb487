"""
Other investments, IATA / Airlines Capping, bank accounts, markup
settings and personal finance (categories, expense entries, personal
dashboard).

Run: pytest backend/test_finance_personal_api.py -v
"""

from datetime import date, timedelta

import pytest

from backend.routes_personal import personal_summary

FDR = {
    "investmentName": "Bank FDR",
    "investmentType": "Fixed Deposit",
    "investmentAmount": 500000,
    "investmentDate": "2026-01-01",
    "maturityDate": "2027-01-01",
    "interestRate": 8.5,
}


class TestInvestments:
    def test_create_defaults(self, client, admin):
        resp = client.post("/api/investments/others-invest", json=FDR, headers=admin)
        assert resp.status_code == 201
        record = resp.json()["data"]
        assert record["status"] == "active"
        assert record["returnAmount"] == 0
        assert record["interestRate"] == 8.5

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"investmentName": ""}, "বিনিয়োগ নাম আবশ্যক"),
            ({"investmentType": None}, "বিনিয়োগ টাইপ আবশ্যক"),
            ({"investmentType": "IATA"}, "এই বিনিয়োগ টাইপ এখানে গ্রহণযোগ্য নয়"),
            ({"investmentAmount": 0}, "বিনিয়োগ পরিমাণ আবশ্যক এবং ০ এর চেয়ে বেশি হতে হবে"),
            ({"investmentDate": None}, "বিনিয়োগ তারিখ আবশ্যক"),
            ({"maturityDate": ""}, "পরিপক্কতার তারিখ আবশ্যক"),
            ({"maturityDate": "2026-01-01"}, "পরিপক্কতার তারিখ বিনিয়োগ তারিখের পরে হতে হবে"),
            ({"interestRate": 120}, "সুদের হার ০ থেকে ১০০ এর মধ্যে হতে হবে"),
            ({"interestRate": None}, "সুদের হার ০ থেকে ১০০ এর মধ্যে হতে হবে"),
        ],
    )
    def test_validation(self, client, admin, overrides, message):
        resp = client.post("/api/investments/others-invest", json=dict(FDR, **overrides), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == message

    def test_zero_interest_is_allowed(self, client, admin):
        resp = client.post("/api/investments/others-invest", json=dict(FDR, interestRate=0), headers=admin)
        assert resp.status_code == 201

    def test_type_filter(self, client, admin):
        client.post("/api/investments/others-invest", json=FDR, headers=admin)
        client.post(
            "/api/investments/others-invest",
            json=dict(FDR, investmentName="Land", investmentType="Real Estate"),
            headers=admin,
        )
        rows = client.get("/api/investments/others-invest", params={"type": "Real Estate"}, headers=admin).json()
        assert [r["investmentName"] for r in rows["data"]] == ["Land"]
        assert client.get("/api/investments/others-invest", headers=admin).json()["pagination"]["total"] == 2

    def test_update_revalidates(self, client, admin):
        inv_id = client.post("/api/investments/others-invest", json=FDR, headers=admin).json()["data"]["id"]
        bad = client.put(f"/api/investments/others-invest/{inv_id}", json={"investmentType": "Airlines Capping"}, headers=admin)
        assert bad.status_code == 400
        ok = client.put(f"/api/investments/others-invest/{inv_id}", json={"returnAmount": 42500}, headers=admin)
        assert ok.json()["data"]["returnAmount"] == 42500

    def test_delete(self, client, admin):
        inv_id = client.post("/api/investments/others-invest", json=FDR, headers=admin).json()["data"]["id"]
        resp = client.delete(f"/api/investments/others-invest/{inv_id}", headers=admin)
        assert resp.json() == {"success": True, "message": "Investment deleted successfully"}
        again = client.delete(f"/api/investments/others-invest/{inv_id}", headers=admin)
        assert again.status_code == 404
        assert again.json()["error"] == "Investment not found"

    def test_reservation_has_no_access(self, client, auth_headers):
        assert client.get("/api/investments/others-invest", headers=auth_headers("reservation")).status_code == 403


CAPPING = {
    "airlineName": "Biman Bangladesh",
    "cappingAmount": 1000000,
    "investmentDate": "2026-01-01",
    "maturityDate": "2027-01-01",
    "interestRate": 0,
}

CAPPING_URL = "/api/investments/iata-airlines-capping"


class TestCappingInvestments:
    def test_create_defaults_to_iata(self, client, admin):
        resp = client.post(CAPPING_URL, json=CAPPING, headers=admin)
        assert resp.status_code == 201
        record = resp.json()["data"]
        assert record["investmentType"] == "IATA"
        assert record["cappingAmount"] == 1000000
        assert record["status"] == "active"

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"airlineName": " "}, "এয়ারলাইন নাম আবশ্যক"),
            ({"investmentType": "Fixed Deposit"}, "এই বিনিয়োগ টাইপ এখানে গ্রহণযোগ্য নয়"),
            ({"cappingAmount": 0}, "বিনিয়োগ পরিমাণ আবশ্যক এবং ০ এর চেয়ে বেশি হতে হবে"),
            ({"investmentDate": ""}, "বিনিয়োগ তারিখ আবশ্যক"),
            ({"maturityDate": "2025-12-31"}, "পরিপক্কতার তারিখ বিনিয়োগ তারিখের পরে হতে হবে"),
            ({"interestRate": -1}, "সুদের হার ০ থেকে ১০০ এর মধ্যে হতে হবে"),
        ],
    )
    def test_validation(self, client, admin, overrides, message):
        resp = client.post(CAPPING_URL, json=dict(CAPPING, **overrides), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == message

    def test_ledgers_do_not_mix(self, client, admin):
        cap_id = client.post(CAPPING_URL, json=dict(CAPPING, investmentType="Airlines Capping"), headers=admin).json()["data"]["id"]
        fdr_id = client.post("/api/investments/others-invest", json=FDR, headers=admin).json()["data"]["id"]

        caps = client.get(CAPPING_URL, headers=admin).json()
        assert [r["id"] for r in caps["data"]] == [cap_id]
        others = client.get("/api/investments/others-invest", headers=admin).json()
        assert [r["id"] for r in others["data"]] == [fdr_id]

        assert client.get(f"{CAPPING_URL}/{fdr_id}", headers=admin).status_code == 404
        assert client.get(f"/api/investments/others-invest/{cap_id}", headers=admin).status_code == 404

    def test_type_filter(self, client, admin):
        client.post(CAPPING_URL, json=CAPPING, headers=admin)
        client.post(CAPPING_URL, json=dict(CAPPING, investmentType="Airlines Capping", airlineName="Emirates"), headers=admin)
        rows = client.get(CAPPING_URL, params={"investmentType": "Airlines Capping"}, headers=admin).json()
        assert [r["airlineName"] for r in rows["data"]] == ["Emirates"]

    def test_update_and_delete(self, client, admin):
        cap_id = client.post(CAPPING_URL, json=CAPPING, headers=admin).json()["data"]["id"]
        ok = client.put(f"{CAPPING_URL}/{cap_id}", json={"returnAmount": 50000}, headers=admin)
        assert ok.json()["data"]["returnAmount"] == 50000
        bad = client.put(f"{CAPPING_URL}/{cap_id}", json={"cappingAmount": 0}, headers=admin)
        assert bad.status_code == 400

        resp = client.delete(f"{CAPPING_URL}/{cap_id}", headers=admin)
        assert resp.json()["message"] == "Investment deleted successfully"
        assert client.get(f"{CAPPING_URL}/{cap_id}", headers=admin).status_code == 404


ACCOUNT = {
    "bankName": "Dutch-Bangla Bank",
    "accountNumber": "1011100012345",
    "accountCategory": "bank",
    "bankBranchName": "Motijheel",
    "accountHolder": "Agency Ltd",
    "accountTitle": "Agency Ltd Operating",
    "routingNumber": "090274725",
    "initialBalance": 250000,
    "contactNumber": "+880 (2) 955-1234",
}


class TestBankAccounts:
    def test_create_defaults(self, client, admin):
        resp = client.post("/api/bank-accounts", json=ACCOUNT, headers=admin)
        assert resp.status_code == 201
        record = resp.json()["data"]
        assert record["currentBalance"] == 250000
        assert record["accountType"] == "Current"
        assert record["currency"] == "BDT"
        assert record["bankBranchName"] == "Motijheel"
        assert record["branchName"] == "Dhaka"

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"bankName": ""}, "Bank name is required"),
            ({"routingNumber": None}, "Routing number is required"),
            ({"bankBranchName": " "}, "Branch name is required"),
            ({"accountTitle": ""}, "Account title is required"),
            ({"initialBalance": -5}, "Valid initial balance is required"),
            ({"initialBalance": None}, "Valid initial balance is required"),
            ({"accountCategory": "crypto"}, "Please select a valid account category"),
            ({"contactNumber": "call me"}, "Please enter a valid contact number"),
        ],
    )
    def test_validation(self, client, admin, overrides, message):
        resp = client.post("/api/bank-accounts", json=dict(ACCOUNT, **overrides), headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == message

    def test_account_number_is_unique(self, client, admin):
        first = client.post("/api/bank-accounts", json=ACCOUNT, headers=admin).json()["data"]["id"]
        dup = client.post("/api/bank-accounts", json=ACCOUNT, headers=admin)
        assert dup.status_code == 400
        assert dup.json()["error"] == "Bank account with this account number already exists"

        other = client.post(
            "/api/bank-accounts", json=dict(ACCOUNT, accountNumber="2022200054321"), headers=admin
        ).json()["data"]["id"]
        clash = client.put(f"/api/bank-accounts/{other}", json={"accountNumber": ACCOUNT["accountNumber"]}, headers=admin)
        assert clash.status_code == 400
        same = client.put(f"/api/bank-accounts/{first}", json={"accountTitle": "Renamed"}, headers=admin)
        assert same.json()["data"]["accountTitle"] == "Renamed"

    def test_category_filter_and_delete(self, client, admin):
        client.post("/api/bank-accounts", json=ACCOUNT, headers=admin)
        bkash = client.post(
            "/api/bank-accounts",
            json=dict(ACCOUNT, bankName="bKash", accountNumber="01711000000", accountCategory="mobile_banking"),
            headers=admin,
        ).json()["data"]["id"]
        rows = client.get("/api/bank-accounts", params={"accountCategory": "mobile_banking"}, headers=admin).json()
        assert [r["bankName"] for r in rows["data"]] == ["bKash"]

        resp = client.delete(f"/api/bank-accounts/{bkash}", headers=admin)
        assert resp.json() == {"success": True, "message": "Bank account deleted successfully"}
        again = client.get(f"/api/bank-accounts/{bkash}", headers=admin)
        assert again.status_code == 404
        assert again.json()["error"] == "Bank account not found"

    def test_accountant_views_but_cannot_open(self, client, auth_headers):
        accountant = auth_headers("accountant")
        assert client.get("/api/bank-accounts", headers=accountant).status_code == 200
        assert client.post("/api/bank-accounts", json=ACCOUNT, headers=accountant).status_code == 403


class TestMarkup:
    def test_free_form_body_round_trip(self, client, admin):
        body = {"name": "Eid fares", "airline": "BG", "route": "DAC-JED", "percent": 7, "id": "999"}
        resp = client.post("/api/settings/markup", json=body, headers=admin)
        assert resp.status_code == 201
        record = resp.json()["data"]
        assert record["percent"] == 7
        assert record["id"] != "999"
        assert record["branchId"] == "BR-1"

        updated = client.put(f"/api/settings/markup/{record['id']}", json={"percent": 9}, headers=admin).json()["data"]
        assert updated["percent"] == 9
        assert updated["route"] == "DAC-JED"

    def test_empty_body_is_rejected(self, client, admin):
        resp = client.post("/api/settings/markup", json={}, headers=admin)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Missing request body"

    def test_missing_and_delete(self, client, admin):
        assert client.get("/api/settings/markup/77", headers=admin).json()["error"] == "Markup not found"
        markup_id = client.post("/api/settings/markup", json={"name": "x"}, headers=admin).json()["data"]["id"]
        resp = client.delete(f"/api/settings/markup/{markup_id}", headers=admin)
        assert resp.json()["message"] == "Markup deleted successfully"


class TestPersonalExpenses:
    def _category(self, client, headers, name="Food"):
        resp = client.post("/api/personal-expense/categories", json={"name": name}, headers=headers)
        assert resp.status_code == 201
        return resp.json()["data"]

    def test_category_defaults_and_duplicates(self, client, admin):
        food = self._category(client, admin)
        assert food["iconKey"] == "FileText"
        assert food["totalAmount"] == 0 and food["itemCount"] == 0

        dup = client.post("/api/personal-expense/categories", json={"name": "FOOD"}, headers=admin)
        assert dup.status_code == 400
        assert dup.json()["error"] == "Category with this name already exists"

        blank = client.post("/api/personal-expense/categories", json={"name": " "}, headers=admin)
        assert blank.json()["error"] == "Category name is required"

    def test_debits_move_category_totals(self, client, admin):
        food = self._category(client, admin)

        first = client.post(
            "/api/personal-expense",
            json={"categoryId": food["id"], "amount": 1200, "date": "2026-10-01"},
            headers=admin,
        ).json()["data"]
        assert first["categoryName"] == "Food"
        assert first["transactionType"] == "debit"
        client.post("/api/personal-expense", json={"categoryId": food["id"], "amount": 800}, headers=admin)
        client.post(
            "/api/personal-expense",
            json={"categoryId": food["id"], "amount": 5000, "transactionType": "credit"},
            headers=admin,
        )

        totals = client.get(f"/api/personal-expense/categories/{food['id']}", headers=admin).json()["data"]
        assert totals["totalAmount"] == 2000
        assert totals["itemCount"] == 2

        client.put(f"/api/personal-expense/{first['id']}", json={"amount": 1500}, headers=admin)
        totals = client.get(f"/api/personal-expense/categories/{food['id']}", headers=admin).json()["data"]
        assert totals["totalAmount"] == 2300
        assert totals["itemCount"] == 2

        client.delete(f"/api/personal-expense/{first['id']}", headers=admin)
        totals = client.get(f"/api/personal-expense/categories/{food['id']}", headers=admin).json()["data"]
        assert totals["totalAmount"] == 800
        assert totals["itemCount"] == 1

    def test_entry_rules(self, client, admin):
        resp = client.post("/api/personal-expense", json={"amount": 10}, headers=admin)
        assert resp.json()["error"] == "Category is required"
        resp = client.post("/api/personal-expense", json={"categoryName": "Misc"}, headers=admin)
        assert resp.json()["error"] == "Amount is required"
        resp = client.post("/api/personal-expense", json={"categoryId": "404", "amount": 10}, headers=admin)
        assert resp.status_code == 404
        assert resp.json()["error"] == "Category not found"
        resp = client.post(
            "/api/personal-expense",
            json={"categoryName": "Misc", "amount": 10, "transactionType": "refund"},
            headers=admin,
        )
        assert resp.status_code == 400

    def test_type_filter(self, client, admin):
        client.post("/api/personal-expense", json={"categoryName": "Salary", "amount": 90000, "transactionType": "credit"}, headers=admin)
        client.post("/api/personal-expense", json={"categoryName": "Rent", "amount": 25000}, headers=admin)
        credits = client.get("/api/personal-expense", params={"type": "credit"}, headers=admin).json()["data"]
        assert [e["categoryName"] for e in credits] == ["Salary"]

    def test_dashboard(self, client, admin):
        today = date.today().isoformat()
        client.post("/api/personal-expense", json={"categoryName": "Salary", "amount": 90000, "transactionType": "credit", "date": today}, headers=admin)
        client.post("/api/personal-expense", json={"categoryName": "Rent", "amount": 25000, "date": today}, headers=admin)
        client.post(
            "/api/family-assets",
            json={"name": "Flat", "type": "Other", "totalPaidAmount": 3000000, "paymentDate": today, "purchaseDate": today},
            headers=admin,
        )
        body = client.get("/api/personal/dashboard", headers=admin).json()
        assert body["summary"] == {
            "monthlyExpense": 25000,
            "monthlyIncome": 90000,
            "savings": 65000,
            "totalAssets": 3000000,
            "totalCategories": 0,
        }
        assert [e["category"] for e in body["recentExpenses"]] == ["Rent"]
        assert body["budgetInsights"] == [{"label": "Rent", "value": 100}]


def test_personal_summary_window_and_insights():
    today = date(2026, 10, 19)
    old = (today - timedelta(days=45)).isoformat()
    entries = [
        {"id": "1", "transactionType": "debit", "categoryName": "Food", "amount": 300, "date": "2026-10-18"},
        {"id": "2", "transactionType": "debit", "categoryName": "Rent", "amount": 600, "date": "2026-10-01"},
        {"id": "3", "transactionType": "debit", "categoryName": "Travel", "amount": 100, "date": "2026-10-10"},
        {"id": "4", "transactionType": "debit", "categoryName": "Old", "amount": 9999, "date": old},
        {"id": "5", "transactionType": "credit", "categoryName": "Salary", "amount": 2000, "date": "2026-10-05"},
    ]
    result = personal_summary(entries, [], 3, today=today)

    assert result["summary"]["monthlyExpense"] == 1000
    assert result["summary"]["monthlyIncome"] == 2000
    assert result["summary"]["savings"] == 1000
    assert result["summary"]["totalCategories"] == 3
    # recent expenses are newest debits regardless of the window
    assert [e["id"] for e in result["recentExpenses"]] == ["1", "3", "2", "4"]
    assert result["budgetInsights"] == [
        {"label": "Rent", "value": 60},
        {"label": "Food", "value": 30},
        {"label": "Travel", "value": 10},
    ]
