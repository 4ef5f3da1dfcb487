# frontend/aggregations.py
# Dashboard arithmetic over list responses.
#
# Pages fetch several endpoints in parallel, pass the JSON bodies here and
# render whatever comes back. Missing arrays count as empty.

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional

from domains.erp.calculations import first_number, parse_date, payment_summary, sum_field, to_number
from domains.erp.rules import SERVICE_COMPLETED, SERVICE_PENDING

Record = Mapping[str, Any]

SERVICE_KINDS = ("passport", "manpower", "visa", "other")


def records_of(body: Optional[Mapping[str, Any]], *keys: str) -> List[Dict[str, Any]]:
    """The record list of a response body; `data` first, then any extra keys."""
    if not body:
        return []
    for key in ("data",) + keys:
        value = body.get(key)
        if isinstance(value, list):
            return [r for r in value if isinstance(r, dict)]
    return []


def total_of(body: Optional[Mapping[str, Any]]) -> int:
    """Server-side row count from pagination, falling back to the page length."""
    if not body:
        return 0
    pagination = body.get("pagination") or {}
    if "total" in pagination:
        return int(to_number(pagination["total"]))
    return len(records_of(body))


def _sort_key(record: Record) -> str:
    # ISO strings sort chronologically
    return str(record.get("createdAt") or record.get("date") or "")


def services_dashboard(
    customers: Iterable[Record],
    services_by_kind: Mapping[str, Iterable[Record]],
    recent_limit: int = 10,
) -> Dict[str, Any]:
    """
    Summary for the additional-services dashboard.

    totalRevenue is what was collected and totalDue what is still owed, so
    totalAmount == totalRevenue + totalDue.
    """
    by_kind = {kind: list(services_by_kind.get(kind) or []) for kind in SERVICE_KINDS}
    everything = [dict(r, kind=kind) for kind, rows in by_kind.items() for r in rows]
    money = payment_summary(everything)
    statuses = [str(r.get("status") or "pending").lower() for r in everything]

    recent = sorted(everything, key=_sort_key, reverse=True)[:recent_limit]
    return {
        "totalCustomers": len(list(customers)),
        "serviceCounts": {kind: len(rows) for kind, rows in by_kind.items()},
        "totalServices": len(everything),
        "pendingServices": sum(1 for s in statuses if s in SERVICE_PENDING),
        "completedServices": sum(1 for s in statuses if s in SERVICE_COMPLETED),
        "totalAmount": money["totalAmount"],
        "totalRevenue": money["paidAmount"],
        "totalDue": money["dueAmount"],
        "recentServices": [
            {
                "id": r.get("id"),
                "kind": r["kind"],
                "name": r.get("clientName") or "N/A",
                "status": r.get("status") or "pending",
                "date": r.get("createdAt") or r.get("date") or "",
                "amount": first_number(r, "totalAmount", "totalBill"),
            }
            for r in recent
        ],
    }


def asset_summary(assets: Iterable[Record]) -> Dict[str, Any]:
    rows = list(assets)
    return {
        "totalAssets": len(rows),
        "totalValue": sum_field(rows, "totalPaidAmount"),
        "activeAssets": sum(1 for r in rows if (r.get("status") or "active") == "active"),
        "installmentAssets": sum(1 for r in rows if r.get("paymentType") == "installment"),
        "byType": dict(Counter(r.get("type") or "Other" for r in rows)),
    }


def investment_summary(investments: Iterable[Record], today: Any = None) -> Dict[str, Any]:
    """Totals plus how many investments have already reached maturity."""
    rows = list(investments)
    as_of = parse_date(today)
    matured = 0
    if as_of is not None:
        for r in rows:
            maturity = parse_date(r.get("maturityDate"))
            if maturity is not None and maturity <= as_of:
                matured += 1
    invested = sum_field(rows, "investmentAmount")
    returned = sum_field(rows, "returnAmount")
    return {
        "totalInvestments": len(rows),
        "totalInvested": invested,
        "totalReturn": returned,
        "netGain": returned - invested if returned else 0.0,
        "matured": matured,
        "byType": dict(Counter(r.get("investmentType") or "Other" for r in rows)),
    }


def ticketing_summary(refunds: Iterable[Record], reissues: Iterable[Record]) -> Dict[str, Any]:
    refund_rows = list(refunds)
    reissue_rows = list(reissues)
    return {
        "refundCount": len(refund_rows),
        "refundAmount": sum_field(refund_rows, "refundAmount"),
        "pendingRefunds": sum(1 for r in refund_rows if str(r.get("status") or "Pending").lower() == "pending"),
        "reissueCount": len(reissue_rows),
        "reissueCharges": sum_field(reissue_rows, "totalCharge"),
        "pendingReissues": sum(1 for r in reissue_rows if str(r.get("status") or "Pending").lower() == "pending"),
    }


def pilgrim_money(pilgrims: Iterable[Record]) -> Dict[str, float]:
    return payment_summary(pilgrims)


def overview_counts(bodies: Mapping[str, Optional[Mapping[str, Any]]]) -> Dict[str, int]:
    """Row counts per collection for the home dashboard."""
    return {key: total_of(body) for key, body in bodies.items()}
