"""
Shared fixtures for the backend API tests.

Every test gets a fresh SQLite file; users are real rows and tokens are
real JWTs, so the full auth -> permission -> branch chain is exercised.
"""

import os
import tempfile
from datetime import datetime

import pytest

# Must be set before backend.config is imported anywhere
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.mkdtemp(), "import_time.db"))

from fastapi.testclient import TestClient

from backend import config
from backend.auth_context import create_access_token
from backend.db import get_db, hash_password, init_db
from backend.main import app


@pytest.fixture(autouse=True)
def fresh_db(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DATABASE_PATH", str(tmp_path / "erp_test.db"))
    init_db()
    yield


@pytest.fixture
def client():
    return TestClient(app)


def _insert_user(email, role="admin", branch_id="BR-1", branch_name="Dhaka", password="secret123", status="active"):
    now = datetime.utcnow().isoformat()
    conn = get_db()
    try:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO users (email, password_hash, name, role, branch_id, branch_name, status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (email, hash_password(password), email.split("@")[0], role, branch_id, branch_name, status, now, now),
        )
        conn.commit()
        return cur.lastrowid
    finally:
        conn.close()


@pytest.fixture
def auth_headers():
    """Factory: auth_headers(role="admin", branch_id="BR-1") -> Authorization header dict."""
    counter = {"n": 0}

    def _make(role="admin", branch_id="BR-1", branch_name="Dhaka"):
        counter["n"] += 1
        user_id = _insert_user(f"{role}{counter['n']}@agency.test", role=role, branch_id=branch_id, branch_name=branch_name)
        token = create_access_token({"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def admin(auth_headers):
    return auth_headers("admin", "BR-1", "Dhaka")


@pytest.fixture
def create_user():
    """create_user(email, role=..., branch_id=..., password=..., status=...) -> user id."""
    return _insert_user
