"""
Pytest configuration and shared fixtures.

Adds the project root to sys.path so the top-level packages import without an
install, and provides an in-memory stand-in for the Supabase client that
understands the subset of the query builder the repositories use.
"""

from __future__ import annotations

import copy
import sys
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Optional
from uuid import uuid4

import httpx
import pytest
from postgrest.exceptions import APIError

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.bracket_config import BracketConfig, load_bracket_config  # noqa: E402
from domain.time import parse_utc_datetime, to_iso_utc  # noqa: E402

# Columns with a unique index in migrations/0001_lead_capture.sql.
UNIQUE_COLUMNS = {
    "quiz_sessions": ("session_id",),
    "quiz_leads": ("email",),
    "contact_submissions": ("email",),
    "lead_submissions": ("email",),
}


class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data
        self.count = None


class FakeQuery:
    """Chainable query builder over FakeSupabase's tables."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self._db = db
        self._table = table
        self._operation = "select"
        self._columns = "*"
        self._payload: Any = None
        self._filters: list[Callable[[dict[str, Any]], bool]] = []
        self._order: Optional[tuple[str, bool]] = None
        self._limit: Optional[int] = None

    def select(self, columns: str = "*") -> "FakeQuery":
        self._operation = "select"
        self._columns = columns
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._operation = "insert"
        self._payload = payload
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def gte(self, column: str, value: str) -> "FakeQuery":
        threshold = parse_utc_datetime(value)
        self._filters.append(lambda row: parse_utc_datetime(row[column]) >= threshold)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def execute(self) -> FakeResponse:
        failure = self._db.failures.get((self._table, self._operation))
        if failure is not None:
            raise failure
        if self._operation == "insert":
            return FakeResponse(self._db.insert_rows(self._table, self._payload))
        return FakeResponse(self._select())

    def _select(self) -> list[dict[str, Any]]:
        rows = [row for row in self._db.tables[self._table] if all(f(row) for f in self._filters)]
        if self._order is not None:
            column, desc = self._order
            rows.sort(key=lambda row: parse_utc_datetime(row[column]), reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        if self._columns != "*":
            wanted = [name.strip() for name in self._columns.split(",")]
            rows = [{name: row.get(name) for name in wanted} for row in rows]
        return copy.deepcopy(rows)


class FakeSupabase:
    """
    In-memory Supabase client.

    - Inserts get an `id` and, when absent, a `created_at`
    - Unique columns (case-insensitive, like the lower(email) indexes) raise
      APIError with SQLSTATE 23505
    - fail_on(table, operation) makes the next matching queries raise
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.failures: dict[tuple[str, str], Exception] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail_on(self, table: str, operation: str, error: Optional[Exception] = None) -> None:
        self.failures[(table, operation)] = error or httpx.ConnectError("connection refused")

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables[table]

    def insert_rows(self, table: str, payload: Any) -> list[dict[str, Any]]:
        items = payload if isinstance(payload, list) else [payload]
        inserted = []
        for item in items:
            row = dict(item)
            self._check_unique(table, row)
            row.setdefault("id", str(uuid4()))
            row.setdefault("created_at", to_iso_utc(datetime.now(timezone.utc)))
            self.tables[table].append(row)
            inserted.append(copy.deepcopy(row))
        return inserted

    def _check_unique(self, table: str, row: dict[str, Any]) -> None:
        for column in UNIQUE_COLUMNS.get(table, ()):
            value = str(row.get(column, "")).lower()
            if any(str(existing.get(column, "")).lower() == value for existing in self.tables[table]):
                raise APIError(
                    {
                        "message": f'duplicate key value violates unique constraint "{table}_{column}_key"',
                        "code": "23505",
                        "hint": None,
                        "details": f"Key ({column})=({value}) already exists.",
                    }
                )


class FakeClock:
    """Settable UTC clock for window arithmetic."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture(scope="session")
def bracket_config() -> BracketConfig:
    return load_bracket_config()


@pytest.fixture
def quiz_payload() -> Callable[..., dict[str, Any]]:
    """Factory for a valid quiz submission body; keyword args override fields."""

    def build(session_id: str = "session-1", **overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "session_id": session_id,
            "first_name": "Dana",
            "email": "dana.levy@gmail.com",
            "sms_consent": False,
            "answers": {
                "housing_status": "rent",
                "monthly_cost": "3.5k_5k",
                "income_bracket": "250k_400k",
                "frustration": ["taxes", "winters"],
                "benefit": ["no_tax"],
                "timeline": "0-6mo",
            },
        }
        answers = overrides.pop("answers", None)
        if answers is not None:
            payload["answers"].update(answers)
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def contact_payload() -> dict[str, Any]:
    return {
        "firstName": "Dana",
        "lastName": "Levy",
        "email": "dana.levy@gmail.com",
        "phone": "(917) 555-0134",
        "location": "Upper West Side",
        "investmentRange": "$1M - $2M",
        "message": "Thinking about Coconut Grove next spring.",
    }
