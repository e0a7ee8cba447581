import os
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-key")

from fastapi.testclient import TestClient
from supabase import PostgrestAPIError

from app.main import app
from app.core.database import get_database
from app.core.security import verify_token

USER_ID = "user-1"
OTHER_USER_ID = "user-2"

# Columns with a unique constraint per table
UNIQUE_KEYS = {
    "user_points": ("user_id",),
    "study_streaks": ("user_id",),
    "user_badges": ("user_id", "badge_type"),
}

ROW_DEFAULTS = {
    "scheduled_reviews": {"is_completed": False, "was_rescheduled": False, "completed_at": None},
    "user_badges": {"metadata": {}},
    "study_content": {"content": None, "file_path": None, "file_name": None},
}


class FakeQuery:
    """Just enough of the PostgREST query builder for the services"""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.row_limit = None
        self.on_conflict = None

    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.op))
        payload = self.payload if isinstance(self.payload, dict) else {}
        for table, op, code, match in self.db.failures:
            if (table, op) == (self.table, self.op) and all(payload.get(k) == v for k, v in match.items()):
                raise PostgrestAPIError({"code": code, "message": f"{self.op} on {self.table} failed"})

        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            return SimpleNamespace(data=[self.db.insert_row(self.table, dict(self.payload))])

        if self.op == "upsert":
            keys = (self.on_conflict or "id").split(",")
            for row in rows:
                if all(row.get(key) == self.payload.get(key) for key in keys):
                    row.update(self.payload)
                    return SimpleNamespace(data=[dict(row)])
            return SimpleNamespace(data=[self.db.insert_row(self.table, dict(self.payload))])

        matched = [row for row in rows if self._matches(row)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(row) for row in matched])

        if self.op == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return SimpleNamespace(data=[dict(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: str(row.get(column) or ""), reverse=desc)
        if self.row_limit is not None:
            matched = matched[:self.row_limit]
        return SimpleNamespace(data=[dict(row) for row in matched])


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        self.storage.files[path] = file
        return SimpleNamespace(path=path)

    def remove(self, paths):
        if self.storage.fail_remove:
            raise RuntimeError("storage unavailable")
        for path in paths:
            self.storage.files.pop(path, None)
        return [{"name": path} for path in paths]

    def create_signed_url(self, path, expires_in):
        return {"signedURL": f"https://storage.test/{self.name}/{path}?expires={expires_in}"}


class FakeStorage:
    def __init__(self):
        self.files = {}
        self.fail_remove = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeAuth:
    def __init__(self):
        self.tokens = {"valid-token": USER_ID}

    def get_user(self, jwt):
        if jwt not in self.tokens:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=self.tokens[jwt]))


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failures = []
        self.calls = []
        self.storage = FakeStorage()
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)

    def fail_on(self, table, op, code="XX000", **match):
        """Make matching calls raise; ``match`` narrows it to payloads with those values"""
        self.failures.append((table, op, code, match))

    def rows(self, table, **filters):
        return [
            row for row in self.tables.get(table, [])
            if all(row.get(k) == v for k, v in filters.items())
        ]

    def insert_row(self, table, row):
        for column, value in ROW_DEFAULTS.get(table, {}).items():
            row.setdefault(column, value)
        keys = UNIQUE_KEYS.get(table)
        if keys:
            for existing in self.tables.get(table, []):
                if all(existing.get(k) == row.get(k) for k in keys):
                    raise PostgrestAPIError({"code": "23505", "message": "duplicate key value"})
        row.setdefault("id", str(uuid.uuid4()))
        now = datetime.now(timezone.utc).isoformat()
        row.setdefault("created_at", now)
        if table == "user_badges":
            row.setdefault("earned_at", now)
        self.tables.setdefault(table, []).append(row)
        return dict(row)


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    """Test client authenticated as USER_ID"""
    app.dependency_overrides[get_database] = lambda: fake_db
    app.dependency_overrides[verify_token] = lambda: USER_ID
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(fake_db):
    """Test client that goes through real token verification"""
    app.dependency_overrides[get_database] = lambda: fake_db
    yield TestClient(app)
    app.dependency_overrides.clear()
