"""
backend/documents.py

JSON document storage on top of SQLite.

Each business collection is a table of (id, branch_id, data, created_at,
updated_at) where data holds the record body as JSON. Search and filters
run through json_extract with bound parameters; collection names come from
the fixed COLLECTIONS allow-list and field names are checked before use.

Records are returned as plain dicts with the storage metadata merged in:
id (string), branchId, createdAt, updatedAt.
"""

from __future__ import annotations

import json
import math
import re
import sqlite3
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

try:
    from backend.db import COLLECTIONS
except ModuleNotFoundError:
    from db import COLLECTIONS

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Keys owned by the storage layer; never persisted inside the JSON body
META_KEYS = ("id", "_id", "createdAt", "updatedAt")

# Filter values that mean "no filter" in list querystrings
IGNORED_FILTER_VALUES = ("", "All", "all")


def now_iso() -> str:
    return datetime.utcnow().isoformat()


def _table(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")
    return collection


def _path(field: str) -> str:
    if not _FIELD_RE.match(field):
        raise ValueError(f"Invalid field name: {field!r}")
    return f"$.{field}"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_record(row: sqlite3.Row) -> Dict[str, Any]:
    try:
        data = json.loads(row["data"]) if row["data"] else {}
    except (json.JSONDecodeError, TypeError):
        data = {}
    if not isinstance(data, dict):
        data = {}
    for key in META_KEYS:
        data.pop(key, None)
    data["id"] = str(row["id"])
    data["branchId"] = row["branch_id"]
    data["createdAt"] = row["created_at"]
    data["updatedAt"] = row["updated_at"]
    return data


def _body(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k not in META_KEYS}


def _dump(doc: Dict[str, Any]) -> str:
    return json.dumps(_body(doc), ensure_ascii=False, default=str)


def _where(
    *,
    branch_id: Optional[str] = None,
    equals: Optional[Dict[str, Any]] = None,
    not_in: Optional[Dict[str, Sequence[Any]]] = None,
    one_of: Optional[Dict[str, Sequence[Any]]] = None,
    search: Optional[str] = None,
    search_fields: Iterable[str] = (),
) -> Tuple[str, List[Any]]:
    clauses: List[str] = []
    params: List[Any] = []

    if branch_id:
        clauses.append("branch_id = ?")
        params.append(branch_id)

    for field, value in (equals or {}).items():
        if value is None or value in IGNORED_FILTER_VALUES:
            continue
        clauses.append("json_extract(data, ?) = ?")
        params.extend([_path(field), value])

    for field, values in (not_in or {}).items():
        values = list(values)
        if not values:
            continue
        placeholders = ", ".join("?" for _ in values)
        clauses.append(f"COALESCE(json_extract(data, ?), '') NOT IN ({placeholders})")
        params.append(_path(field))
        params.extend(values)

    for field, values in (one_of or {}).items():
        values = list(values)
        placeholders = ", ".join("?" for _ in values) or "NULL"
        clauses.append(f"json_extract(data, ?) IN ({placeholders})")
        params.append(_path(field))
        params.extend(values)

    search = (search or "").strip()
    fields = list(search_fields)
    if search and fields:
        pattern = f"%{escape_like(search)}%"
        ors = []
        for field in fields:
            ors.append("json_extract(data, ?) LIKE ? ESCAPE '\\'")
            params.extend([_path(field), pattern])
        clauses.append("(" + " OR ".join(ors) + ")")

    where_sql = " WHERE " + " AND ".join(clauses) if clauses else ""
    return where_sql, params


def insert_document(conn: sqlite3.Connection, collection: str, doc: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a document and return the stored record (with id and timestamps)."""
    table = _table(collection)
    now = now_iso()
    cur = conn.cursor()
    cur.execute(
        f"INSERT INTO {table} (branch_id, data, created_at, updated_at) VALUES (?, ?, ?, ?)",
        (doc.get("branchId"), _dump(doc), now, now),
    )
    conn.commit()
    return get_document(conn, collection, cur.lastrowid)


def get_document(
    conn: sqlite3.Connection,
    collection: str,
    doc_id: int,
    branch_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Fetch one record; None when missing or outside branch_id."""
    table = _table(collection)
    cur = conn.cursor()
    if branch_id:
        cur.execute(f"SELECT * FROM {table} WHERE id = ? AND branch_id = ?", (doc_id, branch_id))
    else:
        cur.execute(f"SELECT * FROM {table} WHERE id = ?", (doc_id,))
    row = cur.fetchone()
    return _row_to_record(row) if row else None


def update_document(
    conn: sqlite3.Connection,
    collection: str,
    doc_id: int,
    changes: Dict[str, Any],
    branch_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Merge changes into an existing record.

    branchId is kept from the stored record. Returns the updated record,
    or None when the record does not exist in the caller's scope.
    """
    current = get_document(conn, collection, doc_id, branch_id)
    if current is None:
        return None

    merged = {**current, **_body(changes)}
    merged["branchId"] = current.get("branchId")

    table = _table(collection)
    cur = conn.cursor()
    cur.execute(
        f"UPDATE {table} SET data = ?, updated_at = ? WHERE id = ?",
        (_dump(merged), now_iso(), doc_id),
    )
    conn.commit()
    return get_document(conn, collection, doc_id)


def delete_document(
    conn: sqlite3.Connection,
    collection: str,
    doc_id: int,
    branch_id: Optional[str] = None,
) -> bool:
    """Delete one record. Returns False when nothing matched."""
    table = _table(collection)
    cur = conn.cursor()
    if branch_id:
        cur.execute(f"DELETE FROM {table} WHERE id = ? AND branch_id = ?", (doc_id, branch_id))
    else:
        cur.execute(f"DELETE FROM {table} WHERE id = ?", (doc_id,))
    conn.commit()
    return cur.rowcount > 0


def find_documents(
    conn: sqlite3.Connection,
    collection: str,
    *,
    search: Optional[str] = None,
    search_fields: Iterable[str] = (),
    equals: Optional[Dict[str, Any]] = None,
    not_in: Optional[Dict[str, Sequence[Any]]] = None,
    one_of: Optional[Dict[str, Sequence[Any]]] = None,
    branch_id: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Paginated, newest-first query.

    Returns:
        (records for the requested page, total matching count)
    """
    table = _table(collection)
    where_sql, params = _where(
        branch_id=branch_id,
        equals=equals,
        not_in=not_in,
        one_of=one_of,
        search=search,
        search_fields=search_fields,
    )
    cur = conn.cursor()
    cur.execute(f"SELECT COUNT(*) FROM {table}{where_sql}", params)
    total = cur.fetchone()[0]

    offset = (max(page, 1) - 1) * limit
    cur.execute(
        f"SELECT * FROM {table}{where_sql} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
        params + [limit, offset],
    )
    return [_row_to_record(row) for row in cur.fetchall()], total


def all_documents(
    conn: sqlite3.Connection,
    collection: str,
    *,
    branch_id: Optional[str] = None,
    equals: Optional[Dict[str, Any]] = None,
    not_in: Optional[Dict[str, Sequence[Any]]] = None,
    one_of: Optional[Dict[str, Sequence[Any]]] = None,
) -> List[Dict[str, Any]]:
    """Every matching record, newest first (dashboards and aggregates)."""
    table = _table(collection)
    where_sql, params = _where(branch_id=branch_id, equals=equals, not_in=not_in, one_of=one_of)
    cur = conn.cursor()
    cur.execute(f"SELECT * FROM {table}{where_sql} ORDER BY created_at DESC, id DESC", params)
    return [_row_to_record(row) for row in cur.fetchall()]


def find_one(
    conn: sqlite3.Connection,
    collection: str,
    field: str,
    value: Any,
    *,
    case_insensitive: bool = False,
    exclude_id: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """First record whose field equals value (used for uniqueness checks)."""
    table = _table(collection)
    collate = " COLLATE NOCASE" if case_insensitive else ""
    sql = f"SELECT * FROM {table} WHERE json_extract(data, ?) = ?{collate}"
    params: List[Any] = [_path(field), value]
    if exclude_id is not None:
        sql += " AND id != ?"
        params.append(exclude_id)
    cur = conn.cursor()
    cur.execute(sql + " LIMIT 1", params)
    row = cur.fetchone()
    return _row_to_record(row) if row else None


def distinct_values(
    conn: sqlite3.Connection,
    collection: str,
    field: str,
    branch_id: Optional[str] = None,
) -> List[Any]:
    """Sorted distinct non-empty values of a field."""
    table = _table(collection)
    where_sql, params = _where(branch_id=branch_id)
    cur = conn.cursor()
    cur.execute(
        f"SELECT DISTINCT json_extract(data, ?) AS value FROM {table}{where_sql}",
        [_path(field)] + params,
    )
    values = [row["value"] for row in cur.fetchall() if row["value"] not in (None, "")]
    return sorted(values, key=str)


def pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    """Pagination block of the list envelope."""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }
