# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch
from typing import Generator

from main import create_app
from dependencies.auth import CurrentUser, get_current_user


# ============================================================
# In-memory stand-in for the Supabase table API
# ============================================================

class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Supports the PostgREST builder calls the app makes."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.filters = []
        self.columns = "*"
        self.payload = None
        self.on_conflict = None
        self.row_limit = None

    def select(self, columns="*"):
        self.op = "select"
        self.columns = columns
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    def upsert(self, row, on_conflict=None):
        self.op = "upsert"
        self.payload = dict(row)
        self.on_conflict = on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    def _matches(self, row):
        return all(row.get(c) == v for c, v in self.filters)

    def execute(self):
        self.db.calls.append((self.table_name, self.op, list(self.filters)))
        if self.db.fail_with is not None:
            raise self.db.fail_with

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "select":
            found = [r for r in rows if self._matches(r)]
            if self.row_limit is not None:
                found = found[: self.row_limit]
            if self.columns != "*":
                wanted = [c.strip() for c in self.columns.split(",")]
                found = [{c: r.get(c) for c in wanted} for r in found]
            return FakeResponse([dict(r) for r in found])

        if self.op == "upsert":
            keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
            for r in rows:
                if all(r.get(k) == self.payload.get(k) for k in keys):
                    r.update(self.payload)
                    return FakeResponse([dict(r)])
            new_row = {
                "id": f"perm-{len(rows) + 1}",
                "created_at": self.payload.get("updated_at"),
                **self.payload,
            }
            rows.append(new_row)
            return FakeResponse([dict(new_row)])

        if self.op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            return FakeResponse(removed)

        raise AssertionError(f"Unsupported op {self.op}")


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.calls = []
        self.fail_with = None

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    """Patch the data visibility module to talk to an in-memory Supabase."""
    fake = FakeSupabase()
    with patch("core.data_visibility.get_supabase_client", return_value=fake):
        yield fake


# ============================================================
# App + users
# ============================================================

@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mock_admin_user():
    return CurrentUser(
        id="admin-user-id",
        email="admin@example.com",
        organization_id="org-1",
        role="admin",
    )


@pytest.fixture
def mock_viewer_user():
    return CurrentUser(
        id="viewer-user-id",
        email="viewer@example.com",
        organization_id="org-1",
        role="viewer",
    )


@pytest.fixture
def login_as(app):
    """Override authentication with the given user."""
    def _login(user: CurrentUser):
        app.dependency_overrides[get_current_user] = lambda: user
    yield _login
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset cache before each test."""
    from core.cache import clear_all_cache
    clear_all_cache()
    yield
    clear_all_cache()
