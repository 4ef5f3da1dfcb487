"""
backend/routes_search.py

Global search across the main record types (header search box).

Each group runs the same case-insensitive substring query on its own
collection, scoped to the caller's branch, and maps hits to a common
{id, type, title, subtitle, description, link} shape.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Callable, Dict, List, NamedTuple, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query

try:
    from backend.auth_context import AuthContext, require_auth_context
    from backend.branch import branch_scope
    from backend.config import IS_DEV, SEARCH_DEFAULT_LIMIT
    from backend.db import get_db
    from backend.dependencies import require_permission
    from backend.documents import find_documents
    from backend.models import SearchResponse
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope
    from config import IS_DEV, SEARCH_DEFAULT_LIMIT
    from db import get_db
    from dependencies import require_permission
    from documents import find_documents
    from models import SearchResponse

Record = Dict[str, Any]

router = APIRouter(
    prefix="/api/search",
    tags=["search"],
)


def _na(value: Any) -> str:
    return str(value) if value not in (None, "") else "N/A"


def _person(record: Record, fallback: str) -> str:
    full = f"{record.get('first_name') or ''} {record.get('last_name') or ''}".strip()
    return record.get("name") or full or fallback


class SearchGroup(NamedTuple):
    key: str
    collection: str
    type: str
    fields: Tuple[str, ...]
    title: Callable[[Record], str]
    subtitle: Callable[[Record], str]
    description: Callable[[Record], str]
    link: Callable[[Record], str]


SEARCH_GROUPS: Tuple[SearchGroup, ...] = (
    SearchGroup(
        "transactions", "personal_expenses", "transaction",
        ("categoryName", "notes", "transactionType"),
        lambda r: r.get("categoryName") or "Transaction",
        lambda r: f"{_na(r.get('transactionType'))} - {_na(r.get('date'))}",
        lambda r: r.get("notes") or "",
        lambda r: f"/personal-expense/{r['id']}",
    ),
    SearchGroup(
        "hajis", "hajis", "haji",
        ("name", "first_name", "last_name", "customer_id", "mobile", "passport_number"),
        lambda r: _person(r, "Haji"),
        lambda r: f"ID: {_na(r.get('customer_id'))} | Mobile: {_na(r.get('mobile'))}",
        lambda r: r.get("address") or "",
        lambda r: f"/hajj-umrah/hajis/{r['id']}",
    ),
    SearchGroup(
        "umrahs", "umrahs", "umrah",
        ("name", "first_name", "last_name", "customer_id", "mobile", "passport_number"),
        lambda r: _person(r, "Umrah"),
        lambda r: f"ID: {_na(r.get('customer_id'))} | Mobile: {_na(r.get('mobile'))}",
        lambda r: r.get("address") or "",
        lambda r: f"/hajj-umrah/umrahs/{r['id']}",
    ),
    SearchGroup(
        "vendors", "vendors", "vendor",
        ("tradeName", "ownerName", "vendorId", "contactNo", "tradeLocation"),
        lambda r: r.get("tradeName") or r.get("ownerName") or "Vendor",
        lambda r: f"ID: {_na(r.get('vendorId'))} | Phone: {_na(r.get('contactNo'))}",
        lambda r: r.get("tradeLocation") or "",
        lambda r: f"/vendors/{r['id']}",
    ),
    SearchGroup(
        "agents", "agents", "agent",
        ("tradeName", "ownerName", "contactNo", "tradeLocation"),
        lambda r: r.get("tradeName") or r.get("ownerName") or "Agent",
        lambda r: f"Owner: {_na(r.get('ownerName'))} | Phone: {_na(r.get('contactNo'))}",
        lambda r: r.get("tradeLocation") or "",
        lambda r: f"/hajj-umrah/agents/{r['id']}",
    ),
    SearchGroup(
        "airAgents", "air_agents", "airAgent",
        ("name", "personalName", "agentId", "email", "mobile"),
        lambda r: r.get("name") or r.get("personalName") or "Air Agent",
        lambda r: f"ID: {_na(r.get('agentId'))} | Mobile: {_na(r.get('mobile'))}",
        lambda r: r.get("email") or r.get("address") or "",
        lambda r: f"/air-ticketing/agents/{r['id']}",
    ),
    SearchGroup(
        "refunds", "air_refunds", "refund",
        ("ticketNumber", "pnr", "passengerName", "customerName"),
        lambda r: f"Refund: {_na(r.get('ticketNumber'))}",
        lambda r: f"Passenger: {_na(r.get('passengerName'))} | PNR: {_na(r.get('pnr'))}",
        lambda r: r.get("reason") or "",
        lambda r: f"/air-ticketing/refund/{r['id']}",
    ),
    SearchGroup(
        "reissues", "air_reissues", "reissue",
        ("ticketNumber", "pnr", "passengerName", "vendorName"),
        lambda r: f"Reissue: {_na(r.get('ticketNumber'))}",
        lambda r: f"Passenger: {_na(r.get('passengerName'))} | PNR: {_na(r.get('pnr'))}",
        lambda r: r.get("remarks") or "",
        lambda r: f"/air-ticketing/reissue/{r['id']}",
    ),
)


def _hit(group: SearchGroup, record: Record) -> Dict[str, str]:
    return {
        "id": record["id"],
        "type": group.type,
        "title": group.title(record),
        "subtitle": group.subtitle(record),
        "description": group.description(record),
        "link": group.link(record),
    }


@router.get("", response_model=SearchResponse, dependencies=[Depends(require_permission("dashboard", "view"))])
def global_search(
    q: str = Query("", max_length=200, description="Search text"),
    limit: int = Query(SEARCH_DEFAULT_LIMIT, ge=1, le=100, description="Max hits per group"),
    ctx: AuthContext = Depends(require_auth_context),
):
    """
    Search every group for q.

    An empty query returns every group with no hits.
    """
    query = q.strip()
    results: Dict[str, List[Dict[str, str]]] = {group.key: [] for group in SEARCH_GROUPS}
    if not query:
        return {"success": True, "query": "", "total": 0, "results": results}

    conn = get_db()
    try:
        scope = branch_scope(ctx)
        for group in SEARCH_GROUPS:
            items, _ = find_documents(
                conn,
                group.collection,
                search=query,
                search_fields=group.fields,
                branch_id=scope,
                limit=limit,
            )
            results[group.key] = [_hit(group, item) for item in items]
    except sqlite3.Error as e:
        if IS_DEV:
            print(f"[SEARCH] DB error: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    finally:
        conn.close()

    total = sum(len(hits) for hits in results.values())
    if IS_DEV:
        print(f"[SEARCH] q={query!r} total={total} branch={scope}")
    return {"success": True, "query": query, "total": total, "results": results}
