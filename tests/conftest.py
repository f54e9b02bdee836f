from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from src.adapters.db import Backend, DatabaseAdapter
from src.adapters.db_local import LocalTranslator, SqliteDatabase
from src.adapters.db_supabase import RemoteTranslator

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "database" / "schema_sqlite.sql"


class FakeResponse:
    def __init__(self, data: Any, count: Optional[int] = None) -> None:
        self.data = data
        self.count = count


def _null_last_key(value: Any) -> Tuple[bool, Any]:
    # PostgreSQL sorts NULL above every value: last on ascending, first on descending.
    return (value is None, "" if value is None else value)


class FakeQuery:
    """Minimal PostgREST request builder evaluating filters over in-memory rows."""

    def __init__(self, client: "FakeSupabaseClient", table: str) -> None:
        self.client = client
        self.table = table
        self.mode = "select"
        self.columns = "*"
        self.count_mode: Optional[str] = None
        self.head = False
        self.payload: Any = None
        self.returning = "representation"
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.order_spec: Optional[Tuple[str, bool]] = None
        self.range_spec: Optional[Tuple[int, int]] = None
        self.limit_value: Optional[int] = None

    def _record(self, *call: Any) -> "FakeQuery":
        self.client.calls.append(call)
        return self

    # builders -----------------------------------------------------------
    def select(self, *columns: str, count: Optional[str] = None, head: Optional[bool] = None) -> "FakeQuery":
        self.columns = columns[0] if columns else "*"
        self.count_mode = count
        self.head = bool(head)
        return self._record("select", self.table, self.columns, count)

    def insert(self, json: Any, *, returning: str = "representation") -> "FakeQuery":
        self.mode, self.payload, self.returning = "insert", json, returning
        return self._record("insert", self.table, returning)

    def update(self, json: Any, *, returning: str = "representation") -> "FakeQuery":
        self.mode, self.payload, self.returning = "update", json, returning
        return self._record("update", self.table, returning)

    def delete(self, *, returning: str = "representation") -> "FakeQuery":
        self.mode, self.returning = "delete", returning
        return self._record("delete", self.table, returning)

    # filters ------------------------------------------------------------
    def _compare(self, name: str, column: str, value: Any, check: Callable[[Any, Any], bool]) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is not None and check(row.get(column), value))
        return self._record(name, column, value)

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._compare("eq", column, value, lambda a, b: a == b)

    def gt(self, column: str, value: Any) -> "FakeQuery":
        return self._compare("gt", column, value, lambda a, b: a > b)

    def gte(self, column: str, value: Any) -> "FakeQuery":
        return self._compare("gte", column, value, lambda a, b: a >= b)

    def lt(self, column: str, value: Any) -> "FakeQuery":
        return self._compare("lt", column, value, lambda a, b: a < b)

    def lte(self, column: str, value: Any) -> "FakeQuery":
        return self._compare("lte", column, value, lambda a, b: a <= b)

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        allowed = list(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self._record("in_", column, allowed)

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        needle = pattern.strip("%").casefold()
        self.filters.append(lambda row: needle in str(row.get(column) or "").casefold())
        return self._record("ilike", column, pattern)

    def is_(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is None)
        return self._record("is_", column, value)

    def or_(self, expression: str) -> "FakeQuery":
        return self._record("or_", expression)

    def order(self, column: str, *, desc: bool = False) -> "FakeQuery":
        self.order_spec = (column, desc)
        return self._record("order", column, desc)

    def range(self, start: int, end: int) -> "FakeQuery":
        self.range_spec = (start, end)
        return self._record("range", start, end)

    def limit(self, size: int) -> "FakeQuery":
        self.limit_value = size
        return self._record("limit", size)

    # execution ----------------------------------------------------------
    def _matches(self) -> List[Dict[str, Any]]:
        rows = self.client.tables.setdefault(self.table, [])
        return [row for row in rows if all(check(row) for check in self.filters)]

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns == "*":
            return copy.deepcopy(row)
        return {name.strip(): row.get(name.strip()) for name in self.columns.split(",")}

    def execute(self) -> FakeResponse:
        if self.client.error is not None:
            raise self.client.error
        rows = self.client.tables.setdefault(self.table, [])
        if self.mode == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in items:
                self.client.sequence += 1
                row = {"id": self.client.sequence, **copy.deepcopy(item)}
                rows.append(row)
                created.append(copy.deepcopy(row))
            return FakeResponse(created if self.returning == "representation" else [])
        if self.mode == "update":
            updated = []
            for row in self._matches():
                row.update(copy.deepcopy(self.payload))
                updated.append(copy.deepcopy(row))
            return FakeResponse(updated if self.returning == "representation" else [])
        if self.mode == "delete":
            doomed = self._matches()
            self.client.tables[self.table] = [row for row in rows if row not in doomed]
            return FakeResponse([])

        matches = self._matches()
        total = len(matches) if self.count_mode else None
        if self.order_spec:
            column, desc = self.order_spec
            matches = sorted(matches, key=lambda row: _null_last_key(row.get(column)), reverse=desc)
        if self.range_spec:
            start, end = self.range_spec
            matches = matches[start : end + 1]
        elif self.limit_value is not None:
            matches = matches[: self.limit_value]
        data = [] if self.head else [self._project(row) for row in matches]
        return FakeResponse(data, total)


class FakeSupabaseClient:
    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[Tuple[Any, ...]] = []
        self.sequence = 0
        self.error: Optional[Exception] = None

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def sqlite_db(tmp_path: Path) -> SqliteDatabase:
    database = SqliteDatabase(tmp_path / "fleet.sqlite3")
    database.apply_script(SCHEMA_PATH.read_text(encoding="utf-8"))
    with database.cursor() as cur:
        cur.execute("INSERT INTO companies (id, name, email) VALUES (1, 'Test Fleet', 'ops@test.example')")
    return database


@pytest.fixture
def fake_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def local_adapter(sqlite_db: SqliteDatabase) -> DatabaseAdapter:
    return DatabaseAdapter(Backend.LOCAL, local=LocalTranslator(sqlite_db))


@pytest.fixture
def remote_adapter(sqlite_db: SqliteDatabase, fake_client: FakeSupabaseClient) -> DatabaseAdapter:
    return DatabaseAdapter(Backend.REMOTE, local=LocalTranslator(sqlite_db), remote=RemoteTranslator(fake_client))


@pytest.fixture(params=["local", "remote"])
def adapter(request: pytest.FixtureRequest) -> DatabaseAdapter:
    return request.getfixturevalue(f"{request.param}_adapter")


def driver_row(index: int, risk_score: float, **overrides: Any) -> Dict[str, Any]:
    row = {
        "company_id": 1,
        "driver_license": f"DL-{index:04d}",
        "first_name": f"Driver{index}",
        "last_name": f"Surname{index}",
        "status": "active",
        "risk_score": risk_score,
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_driver() -> Callable[..., Dict[str, Any]]:
    return driver_row
