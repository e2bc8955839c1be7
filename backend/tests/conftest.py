"""
Shared fixtures: settings from env, and an in-memory stand-in for the
Supabase fluent query builder.
"""

import os

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length")

import itertools
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError


class FakeQuery:
    """Records a chain like .table().select().eq().order() and runs it on execute()."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.orders = []

    # ── Operations ───────────────────────────────────────

    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, data):
        self.op, self.payload = "insert", data
        return self

    def update(self, data):
        self.op, self.payload = "update", data
        return self

    def delete(self):
        self.op = "delete"
        return self

    def upsert(self, data, on_conflict: str = ""):
        self.op, self.payload, self.on_conflict = "upsert", data, on_conflict
        return self

    # ── Filters ──────────────────────────────────────────

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] >= value)
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] < value)
        return self

    def order(self, column, desc: bool = False):
        self.orders.append((column, desc))
        return self

    # ── Execution ────────────────────────────────────────

    def _matches(self, row) -> bool:
        return all(f(row) for f in self.filters)

    def execute(self):
        self.db.executed.append((self.table, self.op))
        if self.db.on_execute is not None:
            self.db.on_execute(self.table, self.op)
        if self.table in self.db.failing:
            raise APIError({"message": "connection reset", "code": "500", "hint": None, "details": None})

        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "select":
            data = [dict(r) for r in rows if self._matches(r)]
            for column, desc in reversed(self.orders):
                data.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
            return SimpleNamespace(data=data)

        if self.op == "insert":
            row = {"id": self.db.next_id(), **self.payload}
            rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        if self.op == "update":
            changed = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    changed.append(dict(row))
            return SimpleNamespace(data=changed)

        if self.op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=[dict(r) for r in removed])

        if self.op == "upsert":
            keys = [k.strip() for k in self.on_conflict.split(",") if k.strip()]
            for row in rows:
                if keys and all(row.get(k) == self.payload.get(k) for k in keys):
                    row.update(self.payload)
                    return SimpleNamespace(data=[dict(row)])
            row = {"id": self.db.next_id(), **self.payload}
            rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        raise AssertionError(f"unsupported operation {self.op}")


class FakeSupabase:
    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.failing: set[str] = set()
        self.executed: list[tuple[str, str]] = []
        self.on_execute = None
        self._ids = itertools.count(1)

    def next_id(self) -> str:
        return f"row-{next(self._ids)}"

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, *rows: dict):
        for row in rows:
            self.tables.setdefault(table, []).append({"id": self.next_id(), **row})


USER_ID = "11111111-2222-3333-4444-555555555555"


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def user_id() -> str:
    return USER_ID
