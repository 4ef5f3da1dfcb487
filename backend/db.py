# backend/db.py
# SQLite connection helpers and schema bootstrap

import hashlib
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path as FsPath
from typing import Generator

try:
    from backend import config
except ModuleNotFoundError:
    import config

# Document collections (one table each). Table names are never taken from requests.
COLLECTIONS = (
    "assets",
    "vendors",
    "vendor_bills",
    "agents",
    "air_agents",
    "gds_records",
    "air_refunds",
    "air_reissues",
    "hajis",
    "umrahs",
    "sar_rates",
    "investments",
    "bank_accounts",
    "markups",
    "expense_categories",
    "personal_expenses",
    "family_assets",
    "service_customers",
    "passport_services",
    "manpower_services",
    "visa_services",
    "other_services",
)


def resolve_db_path() -> str:
    """Absolute path of the SQLite file, read from config on every call."""
    return str(FsPath(__file__).resolve().parent / config.DATABASE_PATH)


def get_db() -> sqlite3.Connection:
    """
    Create and return a SQLite connection with Row factory.
    Callers own the connection and must close it.
    """
    conn = sqlite3.connect(resolve_db_path(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """Context manager variant of get_db() that always closes the connection."""
    conn = get_db()
    try:
        yield conn
    finally:
        conn.close()


def row_to_dict(row) -> dict:
    """
    Safely convert a sqlite3.Row to dict.

    Returns {} for None so callers can use .get() without guards.
    """
    if row is None:
        return {}
    return dict(row)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    return hash_password(password) == password_hash


def init_db() -> None:
    """Create tables and indexes (idempotent) and seed the first super admin."""
    with get_db_connection() as conn:
        cur = conn.cursor()

        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                name TEXT,
                phone TEXT,
                role TEXT NOT NULL DEFAULT 'reservation',
                branch_id TEXT,
                branch_name TEXT,
                status TEXT NOT NULL DEFAULT 'active',
                created_at TEXT,
                updated_at TEXT
            )
            """
        )

        for table in COLLECTIONS:
            cur.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    branch_id TEXT,
                    data TEXT NOT NULL DEFAULT '{{}}',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            cur.execute(f"CREATE INDEX IF NOT EXISTS idx_{table}_branch_created ON {table}(branch_id, created_at)")

        conn.commit()
        print(f"[MIGRATION] Ensured users table and {len(COLLECTIONS)} collection tables")

        if config.SEED_ADMIN_EMAIL and config.SEED_ADMIN_PASSWORD:
            cur.execute("SELECT COUNT(*) FROM users")
            if cur.fetchone()[0] == 0:
                now = datetime.utcnow().isoformat()
                cur.execute(
                    """
                    INSERT INTO users (email, password_hash, name, role, status, created_at, updated_at)
                    VALUES (?, ?, ?, 'super_admin', 'active', ?, ?)
                    """,
                    (config.SEED_ADMIN_EMAIL, hash_password(config.SEED_ADMIN_PASSWORD), "Super Admin", now, now),
                )
                conn.commit()
                print(f"[MIGRATION] Seeded super admin user ({config.SEED_ADMIN_EMAIL})")
