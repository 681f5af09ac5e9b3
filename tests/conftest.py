# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - FakeSupabase: in-memory stand-in for the Supabase query builder, so
#   services run their real queries against plain Python lists
# - FakeAuthAdmin: the Supabase Auth admin API used for account management
# - Authenticated TestClient with dependency overrides
# =============================================================================

import os
from collections import defaultdict
from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import UUID, uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from unittest.mock import patch

import pytest

from app.auth.models import CRMUser, UserRole
from lib.supabase_client import SupabaseClient


# =============================================================================
# In-memory Supabase
# =============================================================================

class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable query mimicking postgrest's builder on top of a dict of lists."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.orders = []
        self.row_range = None
        self.row_limit = None
        self.is_single = False
        self.count_mode = None
        self.on_conflict = None

    # --- operations ---------------------------------------------------------

    def select(self, columns="*", count=None):
        self.op = "select"
        self.count_mode = count
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def upsert(self, payload, on_conflict=None):
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    # --- filters ------------------------------------------------------------

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] >= value)
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] <= value)
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] < value)
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def range(self, start, end):
        self.row_range = (start, end)
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def single(self):
        self.is_single = True
        return self

    # --- execution ----------------------------------------------------------

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.op, self.payload))
        if (self.table, self.op) in self.db.failures:
            raise Exception(f"simulated {self.op} failure on {self.table}")

        rows = self.db.tables[self.table]

        if self.op == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self.db.add(self.table, row) for row in payload]
            return FakeResponse([dict(row) for row in inserted])

        if self.op == "upsert":
            keys = [key.strip() for key in (self.on_conflict or "id").split(",")]
            for row in rows:
                if all(row.get(key) == self.payload.get(key) for key in keys):
                    row.update(self.payload)
                    return FakeResponse([dict(row)])
            return FakeResponse([dict(self.db.add(self.table, self.payload))])

        matched = [row for row in rows if self._matches(row)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.op == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return FakeResponse([dict(row) for row in matched])

        for column, desc in reversed(self.orders):
            matched.sort(
                key=lambda row: (row.get(column) is None, row.get(column) or ""),
                reverse=desc,
            )
        count = len(matched) if self.count_mode else None
        if self.row_range:
            start, end = self.row_range
            matched = matched[start:end + 1]
        if self.row_limit is not None:
            matched = matched[:self.row_limit]

        if self.is_single:
            if len(matched) != 1:
                raise Exception(
                    "{'code': 'PGRST116', 'message': 'JSON object requested, "
                    "multiple (or no) rows returned'}"
                )
            return FakeResponse(dict(matched[0]), count)

        return FakeResponse([dict(row) for row in matched], count)


class FakeAuthAdmin:
    """Supabase Auth admin API: accounts keyed by id, emails unique."""

    def __init__(self):
        self.users = {}
        self.calls = []

    def _email_taken(self, email, user_id=None):
        return any(u["email"] == email and uid != user_id for uid, u in self.users.items())

    def create_user(self, attributes):
        self.calls.append(("create_user", attributes))
        if self._email_taken(attributes["email"]):
            raise Exception("A user with this email address has already been registered")
        user_id = str(uuid4())
        self.users[user_id] = dict(attributes)
        return SimpleNamespace(user=SimpleNamespace(id=user_id, email=attributes["email"]))

    def update_user_by_id(self, user_id, attributes):
        self.calls.append(("update_user_by_id", user_id, attributes))
        if user_id not in self.users:
            raise Exception("User not found")
        if "email" in attributes and self._email_taken(attributes["email"], user_id):
            raise Exception("A user with this email address has already been registered")
        self.users[user_id].update(attributes)
        return SimpleNamespace(user=SimpleNamespace(id=user_id))

    def delete_user(self, user_id):
        self.calls.append(("delete_user", user_id))
        self.users.pop(user_id, None)


class FakeSupabase:
    """Minimal Supabase client: client.table(name) returns a FakeQuery."""

    def __init__(self):
        self.tables = defaultdict(list)
        self.calls = []
        self.failures = set()
        self.auth = SimpleNamespace(admin=FakeAuthAdmin())

    def table(self, name):
        return FakeQuery(self, name)

    def add(self, table, row):
        stored = dict(row)
        stored.setdefault("id", str(uuid4()))
        stored.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self.tables[table].append(stored)
        return stored

    def fail(self, table, op):
        """Make every `op` on `table` raise."""
        self.failures.add((table, op))

    def writes(self, table, op):
        return [payload for name, kind, payload in self.calls if name == table and kind == op]


# =============================================================================
# Fixtures
# =============================================================================

ADMIN_ID = UUID("00000000-0000-0000-0000-00000000000a")
CLOSER_ID = UUID("00000000-0000-0000-0000-00000000000c")
TRAINER_ID = UUID("00000000-0000-0000-0000-00000000000f")


@pytest.fixture
def fake_db():
    """Replace the Supabase singleton with an in-memory database."""
    db = FakeSupabase()
    with patch.object(SupabaseClient, "_instance", db):
        yield db


@pytest.fixture
def make_lead(fake_db):
    """Insert a lead and return it."""
    def _make(**fields):
        row = {
            "first_name": "Ana",
            "last_name": "Diaz",
            "phone": "0612345678",
            "email": None,
            "formation": "beatmaking",
            "source": "instagram",
            "status": "closing",
            "closer_id": None,
            "price_fixed": None,
            "price_deposit": None,
            "formation_format": None,
            "formation_day": None,
            "formation_start_date": None,
        }
        row.update(fields)
        return fake_db.add("leads", row)
    return _make


@pytest.fixture
def admin_user():
    return CRMUser(id=ADMIN_ID, email="admin@example.com", role=UserRole.ADMIN, full_name="Admin")


@pytest.fixture
def closer_user():
    return CRMUser(id=CLOSER_ID, email="closer@example.com", role=UserRole.CLOSER, full_name="Sam Closer")


@pytest.fixture
def trainer_user():
    return CRMUser(id=TRAINER_ID, email="trainer@example.com", role=UserRole.FORMATEUR, full_name="Tom Trainer")


@pytest.fixture
def api_client(fake_db, admin_user):
    """
    TestClient authenticated as an admin.

    Use `api_client.as_user(user)` to switch the authenticated user.
    """
    from fastapi.testclient import TestClient

    from app.auth.dependencies import get_current_user_with_role
    from app.main import app

    def as_user(user):
        app.dependency_overrides[get_current_user_with_role] = lambda: user

    as_user(admin_user)
    with TestClient(app) as client:
        client.as_user = as_user
        yield client
    app.dependency_overrides.clear()
