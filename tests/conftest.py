"""Shared fixtures: an in-memory stand-in for the Supabase table API."""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from fieldtrack.data.pincode_repository import PincodeTable, get_pincode_table
from fieldtrack.db.supabase import get_supabase_client
from fieldtrack.models.domain import Coordinate


class FakeResponse:
    def __init__(self, data: list[dict], count: int | None = None) -> None:
        self.data = data
        self.count = count


class FakeQuery:
    """Covers the subset of the postgrest query builder the app uses."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table_name = table
        self.action = "select"
        self.payload: Any = None
        self.filters: list = []
        self.order_by: tuple[str, bool] | None = None
        self.row_limit: int | None = None
        self.count_mode: str | None = None

    def select(self, *columns: str, count: str | None = None) -> "FakeQuery":
        self.action = "select"
        self.count_mode = count
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self.action = "update"
        self.payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self.action = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: str(row.get(column)) == str(value))
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: str(row.get(column)) != str(value))
        return self

    def in_(self, column: str, values: list) -> "FakeQuery":
        wanted = {str(value) for value in values}
        self.filters.append(lambda row: str(row.get(column)) in wanted)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.row_limit = size
        return self

    def _matching(self) -> list[dict]:
        rows = self.db.tables.setdefault(self.table_name, [])
        return [row for row in rows if all(check(row) for check in self.filters)]

    def execute(self) -> FakeResponse:
        if self.db.fail_on == (self.table_name, self.action):
            raise RuntimeError(f"{self.action} on {self.table_name} failed")
        self.db.calls.append((self.table_name, self.action))

        if self.action == "insert":
            records = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for record in records:
                row = dict(record)
                row.setdefault("id", next(self.db.ids))
                row.setdefault("created_at", self.db.next_timestamp())
                self.db.tables.setdefault(self.table_name, []).append(row)
                created.append(dict(row))
            return FakeResponse(created)

        matched = self._matching()
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])
        if self.action == "delete":
            rows = self.db.tables[self.table_name]
            self.db.tables[self.table_name] = [row for row in rows if row not in matched]
            return FakeResponse([dict(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: str(row.get(column) or ""), reverse=desc)
        total = len(matched)
        if self.row_limit is not None:
            matched = matched[: self.row_limit]
        return FakeResponse([dict(row) for row in matched], total if self.count_mode else None)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {"users": [], "tasks": [], "activity_logs": []}
        self.ids = itertools.count(1)
        self._clock = itertools.count(1)
        self.calls: list[tuple[str, str]] = []
        self.fail_on: tuple[str, str] | None = None

    def next_timestamp(self) -> str:
        tick = next(self._clock)
        return f"2026-01-01T00:{tick // 60:02d}:{tick % 60:02d}+00:00"

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add_user(self, **fields: Any) -> dict:
        row = {"role": "employee", "is_active": True, **fields}
        row.setdefault("id", next(self.ids))
        self.tables["users"].append(row)
        return row

    def add_task(self, **fields: Any) -> dict:
        row = {"status": "Unassigned", **fields}
        row.setdefault("id", next(self.ids))
        row.setdefault("created_at", self.next_timestamp())
        self.tables["tasks"].append(row)
        return row


@pytest.fixture(autouse=True)
def clear_caches():
    get_pincode_table.cache_clear()
    get_supabase_client.cache_clear()
    yield
    get_pincode_table.cache_clear()
    get_supabase_client.cache_clear()


@pytest.fixture
def fake_db(monkeypatch: pytest.MonkeyPatch) -> FakeSupabase:
    from fieldtrack.persistence import database

    fake = FakeSupabase()
    monkeypatch.setattr(database, "get_supabase_client", lambda: fake)
    return fake


@pytest.fixture
def pincodes() -> PincodeTable:
    return PincodeTable(
        {
            "560001": Coordinate(12.9716, 77.5946),
            "560002": Coordinate(12.9844, 77.5908),
            "560100": Coordinate(12.845, 77.661),
        }
    )
