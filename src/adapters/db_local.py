from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from src.adapters.db_local_builder import POSTGRES, SQLITE, Dialect, LocalQuery
from src.adapters.db_shared import to_records
from src.config import Settings, get_settings
from src.domain.query import (
    COMPARISONS,
    DatabaseConfigError,
    Eq,
    Filter,
    In,
    Like,
    QueryOptions,
    QueryResult,
    QueryTranslationError,
    RawOr,
    normalize_columns,
    normalize_conditions,
    normalize_equality_conditions,
)

logger = logging.getLogger(__name__)

_SQL_COMPARISONS = {"gt": ">", "gte": ">=", "lt": "<", "lte": "<="}


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


class SqliteDatabase:
    """Embedded SQLite file; every call gets its own short-lived connection."""

    dialect: Dialect = SQLITE

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.path))
        conn.row_factory = sqlite3.Row
        conn.create_function(SQLITE.fold_function, 1, _casefold, deterministic=True)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextlib.contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        conn = self._connect()
        cur = conn.cursor()
        try:
            yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cur.close()
            conn.close()

    def apply_script(self, script: str) -> None:
        conn = self._connect()
        try:
            conn.executescript(script)
        finally:
            conn.close()


class PostgresDatabase:
    """PostgreSQL server reached through one shared autocommit connection."""

    dialect: Dialect = POSTGRES

    def __init__(self, settings: Optional[Settings] = None, connection: Optional[psycopg.Connection] = None) -> None:
        self._settings = settings or get_settings()
        self._conn = connection
        self._lock = threading.Lock()

    def _connect(self) -> psycopg.Connection:
        settings = self._settings
        if settings.database_url:
            conn = psycopg.connect(settings.database_url, autocommit=True)
        else:
            conn = psycopg.connect(
                host=settings.db_host,
                port=settings.db_port,
                user=settings.db_user,
                password=settings.db_password,
                dbname=settings.db_name,
                autocommit=True,
            )
        schema = settings.db_schema or "public"
        with conn.cursor() as cur:
            cur.execute(sql.SQL("SET search_path TO {}").format(sql.Identifier(schema)))
        return conn

    @contextlib.contextmanager
    def cursor(self) -> Iterator[psycopg.Cursor]:
        # A psycopg connection runs one transaction at a time.
        with self._lock:
            if self._conn is None or self._conn.closed:
                self._conn = self._connect()
            with self._conn.transaction():
                with self._conn.cursor(row_factory=dict_row) as cur:
                    yield cur

    def apply_script(self, script: str) -> None:
        with self.cursor() as cur:
            cur.execute(script)


LocalDatabase = Union[SqliteDatabase, PostgresDatabase]


def build_local_database(settings: Optional[Settings] = None) -> LocalDatabase:
    settings = settings or get_settings()
    engine = settings.local_engine
    if engine == "sqlite":
        return SqliteDatabase(settings.sqlite_path)
    if engine == "postgresql":
        return PostgresDatabase(settings)
    raise DatabaseConfigError(f"Unsupported local database engine: {engine}")


def apply_filters(query: LocalQuery, filters: Sequence[Filter]) -> LocalQuery:
    for field, condition in filters:
        if isinstance(condition, In):
            query.where_in(field, condition.value)
        elif isinstance(condition, COMPARISONS):
            query.where_op(field, _SQL_COMPARISONS[condition.operator], condition.value)
        elif isinstance(condition, Like):
            query.where_like(field, condition.value)
        elif isinstance(condition, RawOr):
            query.where_raw(condition.value)
        elif isinstance(condition, Eq):
            query.where(field, condition.value)
        else:
            raise QueryTranslationError(f"Unsupported condition {type(condition).__name__} for '{field}'")
    return query


class LocalTranslator:
    """Runs adapter operations through `LocalQuery` against a local database."""

    def __init__(self, database: LocalDatabase) -> None:
        self.database = database

    @property
    def client_type(self) -> str:
        return self.database.dialect.name

    def _query(self, table: str) -> LocalQuery:
        return LocalQuery(table, self.database.dialect)

    def select(
        self,
        table: str,
        columns: Union[str, Sequence[str], None] = "*",
        conditions: Optional[Mapping[str, Any]] = None,
        options: Union[QueryOptions, Mapping[str, Any], None] = None,
    ) -> QueryResult:
        opts = QueryOptions.from_value(options)
        query = apply_filters(self._query(table).select(normalize_columns(columns)), normalize_conditions(conditions))
        if opts.order_by:
            query.order_by(opts.order_by.column, opts.order_by.direction)
        query.limit(opts.effective_limit).offset(opts.offset)

        select_sql, select_params = query.to_select()
        count: Optional[int] = None
        with self.database.cursor() as cur:
            cur.execute(select_sql, select_params)
            rows = to_records(cur.fetchall())
            if opts.count:
                count_sql, count_params = query.to_count()
                cur.execute(count_sql, count_params)
                count = int(cur.fetchone()["count"])
        return QueryResult(data=rows, count=count)

    def insert(self, table: str, data: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]], returning: bool = True) -> QueryResult:
        many = isinstance(data, (list, tuple))
        rows = list(data) if many else [data]
        inserted: List[Dict[str, Any]] = []
        # One transaction for the whole batch so a failing row rolls back the rest.
        with self.database.cursor() as cur:
            for row in rows:
                statement, params = self._query(table).to_insert(row, returning=returning)
                cur.execute(statement, params)
                if returning:
                    inserted.extend(to_records(cur.fetchall()))
        if not returning:
            return QueryResult(data=None)
        if many:
            return QueryResult(data=inserted)
        return QueryResult(data=inserted[0] if inserted else None)

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
        returning: bool = True,
    ) -> QueryResult:
        filters = normalize_equality_conditions(conditions, operation="update")
        statement, params = apply_filters(self._query(table), filters).to_update(data, returning=returning)
        with self.database.cursor() as cur:
            cur.execute(statement, params)
            rows = to_records(cur.fetchall()) if returning else None
        return QueryResult(data=rows)

    def delete(self, table: str, conditions: Mapping[str, Any]) -> QueryResult:
        filters = normalize_equality_conditions(conditions, operation="delete")
        statement, params = apply_filters(self._query(table), filters).to_delete()
        with self.database.cursor() as cur:
            cur.execute(statement, params)
        return QueryResult()

    def count(self, table: str, conditions: Optional[Mapping[str, Any]] = None) -> QueryResult:
        statement, params = apply_filters(self._query(table), normalize_conditions(conditions)).to_count()
        with self.database.cursor() as cur:
            cur.execute(statement, params)
            row = cur.fetchone()
        return QueryResult(count=int(row["count"]))

    def ping(self) -> None:
        with self.database.cursor() as cur:
            cur.execute("SELECT 1")
            cur.fetchone()


__all__ = [
    "LocalDatabase",
    "LocalTranslator",
    "PostgresDatabase",
    "SqliteDatabase",
    "apply_filters",
    "build_local_database",
]
