"""Domain-level objects shared across the adapters and the console."""

from __future__ import annotations

from .query import (
    DEFAULT_PAGE_SIZE,
    Condition,
    DatabaseConfigError,
    Eq,
    Gt,
    Gte,
    In,
    Like,
    Lt,
    Lte,
    OrderBy,
    QueryOptions,
    QueryResult,
    QueryTranslationError,
    RawOr,
    normalize_columns,
    normalize_conditions,
    normalize_equality_conditions,
    parse_condition,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "Condition",
    "DatabaseConfigError",
    "Eq",
    "Gt",
    "Gte",
    "In",
    "Like",
    "Lt",
    "Lte",
    "OrderBy",
    "QueryOptions",
    "QueryResult",
    "QueryTranslationError",
    "RawOr",
    "normalize_columns",
    "normalize_conditions",
    "normalize_equality_conditions",
    "parse_condition",
]
