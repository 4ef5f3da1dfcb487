# frontend/test_aggregations.py
# Unit tests for dashboard aggregation helpers

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.aggregations import (
    asset_summary,
    investment_summary,
    overview_counts,
    pilgrim_money,
    records_of,
    services_dashboard,
    ticketing_summary,
    total_of,
)


def test_records_of_reads_data_then_fallback_keys():
    assert records_of({"data": [{"id": 1}, "junk"]}) == [{"id": 1}]
    assert records_of({"items": [{"id": 2}]}, "items") == [{"id": 2}]
    assert records_of({}) == []
    assert records_of(None) == []


def test_total_of_prefers_pagination():
    assert total_of({"data": [{"id": 1}], "pagination": {"total": 42}}) == 42
    assert total_of({"data": [{"id": 1}, {"id": 2}]}) == 2
    assert total_of({}) == 0


def test_services_dashboard_counts_and_money():
    customers = [{"id": 1}, {"id": 2}, {"id": 3}]
    services = {
        "passport": [
            {"id": 10, "clientName": "A", "totalAmount": 5000, "paidAmount": 5000, "status": "completed",
             "createdAt": "2026-10-01T09:00:00"},
            {"id": 11, "clientName": "B", "totalAmount": 3000, "paidAmount": 1000, "status": "pending",
             "createdAt": "2026-10-03T09:00:00"},
        ],
        "visa": [
            {"id": 20, "clientName": "C", "totalBill": 12000, "paidAmount": 2000, "status": "processing",
             "createdAt": "2026-10-02T09:00:00"},
        ],
        "manpower": [
            {"id": 30, "clientName": "D", "totalAmount": 8000, "status": "delivered", "createdAt": "2026-09-30T09:00:00"},
        ],
    }

    stats = services_dashboard(customers, services)

    assert stats["totalCustomers"] == 3
    assert stats["serviceCounts"] == {"passport": 2, "manpower": 1, "visa": 1, "other": 0}
    assert stats["totalServices"] == 4
    assert stats["pendingServices"] == 2
    assert stats["completedServices"] == 2
    assert stats["totalAmount"] == 28000
    assert stats["totalRevenue"] == 8000
    assert stats["totalDue"] == 20000
    assert stats["totalAmount"] == stats["totalRevenue"] + stats["totalDue"]


def test_services_dashboard_recent_is_newest_first_and_limited():
    services = {
        "other": [
            {"id": i, "clientName": f"Client {i}", "createdAt": f"2026-10-{i:02d}T00:00:00"}
            for i in range(1, 16)
        ]
    }
    recent = services_dashboard([], services, recent_limit=10)["recentServices"]

    assert len(recent) == 10
    assert recent[0]["id"] == 15
    assert recent[-1]["id"] == 6
    assert recent[0]["kind"] == "other"
    assert recent[0]["status"] == "pending"


def test_services_dashboard_empty():
    stats = services_dashboard([], {})
    assert stats["totalServices"] == 0
    assert stats["totalAmount"] == 0
    assert stats["recentServices"] == []


def test_asset_summary():
    stats = asset_summary([
        {"type": "Vehicle", "totalPaidAmount": 1200000, "paymentType": "installment"},
        {"type": "Furniture", "totalPaidAmount": 40000, "status": "inactive"},
        {"type": "Vehicle", "totalPaidAmount": 800000},
    ])
    assert stats["totalAssets"] == 3
    assert stats["totalValue"] == 2040000
    assert stats["activeAssets"] == 2
    assert stats["installmentAssets"] == 1
    assert stats["byType"] == {"Vehicle": 2, "Furniture": 1}


def test_investment_summary_counts_matured():
    rows = [
        {"investmentType": "Land", "investmentAmount": 100000, "returnAmount": 130000, "maturityDate": "2026-06-30"},
        {"investmentType": "Shares", "investmentAmount": 50000, "maturityDate": "2027-01-01"},
    ]
    stats = investment_summary(rows, "2026-10-19")
    assert stats["totalInvestments"] == 2
    assert stats["totalInvested"] == 150000
    assert stats["totalReturn"] == 130000
    assert stats["netGain"] == -20000
    assert stats["matured"] == 1

    assert investment_summary(rows)["matured"] == 0


def test_ticketing_summary():
    stats = ticketing_summary(
        [{"refundAmount": 3000, "status": "Pending"}, {"refundAmount": 7000, "status": "Completed"}],
        [{"totalCharge": 2500}],
    )
    assert stats == {
        "refundCount": 2,
        "refundAmount": 10000,
        "pendingRefunds": 1,
        "reissueCount": 1,
        "reissueCharges": 2500,
        "pendingReissues": 1,
    }


def test_pilgrim_money_reads_snake_case():
    money = pilgrim_money([{"total_amount": 650000, "paid_amount": 400000}, {"total_amount": 150000}])
    assert money == {"totalAmount": 800000, "paidAmount": 400000, "dueAmount": 400000}


def test_overview_counts():
    counts = overview_counts({
        "hajis": {"data": [{}], "pagination": {"total": 120}},
        "vendors": {},
    })
    assert counts == {"hajis": 120, "vendors": 0}
