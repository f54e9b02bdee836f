from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from supabase import Client, ClientOptions, create_client

from src.config import Settings, get_settings
from src.domain.query import (
    COMPARISONS,
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

_client: Optional[Client] = None


def _build_client(settings: Settings) -> Optional[Client]:
    if not settings.supabase_url or not settings.supabase_key:
        return None
    options = ClientOptions(schema=settings.supabase_db_schema or "public")
    return create_client(settings.supabase_url, settings.supabase_key, options=options)


def get_client(settings: Optional[Settings] = None) -> Optional[Client]:
    """Return a shared Supabase client, or ``None`` when credentials are missing."""

    global _client
    if _client is None:
        _client = _build_client(settings or get_settings())
    return _client


def _column_expression(columns: Union[str, Sequence[str], None]) -> str:
    # Strings pass through untouched so PostgREST embeds like `company:companies(name)` survive.
    if isinstance(columns, str) and columns.strip():
        return columns.strip()
    return ",".join(normalize_columns(columns)) or "*"


def apply_filters(query: Any, filters: Sequence[Filter]) -> Any:
    for field, condition in filters:
        if isinstance(condition, In):
            query = query.in_(field, list(condition.value))
        elif isinstance(condition, COMPARISONS):
            query = getattr(query, condition.operator)(field, condition.value)
        elif isinstance(condition, Like):
            query = query.ilike(field, f"%{condition.value}%")
        elif isinstance(condition, RawOr):
            query = query.or_(condition.value)
        elif isinstance(condition, Eq):
            if condition.value is None:
                query = query.is_(field, "null")
            else:
                query = query.eq(field, condition.value)
        else:
            raise QueryTranslationError(f"Unsupported condition {type(condition).__name__} for '{field}'")
    return query


class RemoteTranslator:
    """Runs adapter operations as chained PostgREST calls on a Supabase client."""

    client_type = "supabase"

    def __init__(self, client: Optional[Client], *, probe_table: str = "companies") -> None:
        self.client = client
        self.probe_table = probe_table

    @property
    def available(self) -> bool:
        return self.client is not None

    def select(
        self,
        table: str,
        columns: Union[str, Sequence[str], None] = "*",
        conditions: Optional[Mapping[str, Any]] = None,
        options: Union[QueryOptions, Mapping[str, Any], None] = None,
    ) -> QueryResult:
        opts = QueryOptions.from_value(options)
        filters = normalize_conditions(conditions)
        query = self.client.table(table).select(_column_expression(columns), count="exact" if opts.count else None)
        query = apply_filters(query, filters)
        if opts.order_by:
            query = query.order(opts.order_by.column, desc=opts.order_by.descending)
        bounds = opts.page_bounds()
        if bounds is not None:
            query = query.range(*bounds)
        elif opts.effective_limit is not None:
            query = query.limit(opts.effective_limit)

        resp = query.execute()
        count = int(resp.count or 0) if opts.count else None
        return QueryResult(data=resp.data or [], count=count)

    def insert(self, table: str, data: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]], returning: bool = True) -> QueryResult:
        many = isinstance(data, (list, tuple))
        payload = [dict(row) for row in data] if many else dict(data)
        resp = (
            self.client
            .table(table)
            .insert(payload, returning="representation" if returning else "minimal")
            .execute()
        )
        if not returning:
            return QueryResult(data=None)
        rows = resp.data or []
        if many:
            return QueryResult(data=rows)
        return QueryResult(data=rows[0] if rows else None)

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
        returning: bool = True,
    ) -> QueryResult:
        filters = normalize_equality_conditions(conditions, operation="update")
        if not data:
            raise QueryTranslationError("update requires at least one column to set")
        query = self.client.table(table).update(dict(data), returning="representation" if returning else "minimal")
        resp = apply_filters(query, filters).execute()
        return QueryResult(data=(resp.data or []) if returning else None)

    def delete(self, table: str, conditions: Mapping[str, Any]) -> QueryResult:
        filters = normalize_equality_conditions(conditions, operation="delete")
        query = self.client.table(table).delete(returning="minimal")
        apply_filters(query, filters).execute()
        return QueryResult()

    def count(self, table: str, conditions: Optional[Mapping[str, Any]] = None) -> QueryResult:
        query = self.client.table(table).select("*", count="exact", head=True)
        resp = apply_filters(query, normalize_conditions(conditions)).execute()
        return QueryResult(count=int(resp.count or 0))

    def ping(self) -> None:
        self.client.table(self.probe_table).select("*", count="exact", head=True).limit(1).execute()


__all__ = ["RemoteTranslator", "apply_filters", "get_client"]
