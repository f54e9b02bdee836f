from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from src.domain.query import QueryTranslationError

Statement = Tuple[str, List[Any]]

_COMPARISON_OPERATORS = frozenset({"=", ">", ">=", "<", "<="})


@dataclass(frozen=True)
class Dialect:
    name: str
    placeholder: str
    like_operator: str
    # Drivers with pyformat placeholders treat a bare `%` in raw SQL as a marker.
    escape_percent: bool = False
    # SQLite refuses OFFSET without LIMIT; -1 means "no limit" there.
    unbounded_limit: Optional[str] = None
    # SQL function applied to both LIKE operands when the native operator only folds ASCII.
    fold_function: Optional[str] = None
    # Spell out PostgreSQL null placement (last on ASC, first on DESC) where the engine defaults differ.
    explicit_nulls: bool = False


SQLITE = Dialect(
    name="sqlite",
    placeholder="?",
    like_operator="LIKE",
    unbounded_limit="-1",
    fold_function="casefold",
    explicit_nulls=True,
)
POSTGRES = Dialect(name="postgresql", placeholder="%s", like_operator="ILIKE", escape_percent=True)


def quote_identifier(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise QueryTranslationError("Identifier cannot be empty")
    parts = cleaned.split(".")
    if any(not part for part in parts):
        raise QueryTranslationError(f"Malformed identifier '{name}'")
    return ".".join('"' + part.replace('"', '""') + '"' for part in parts)


class LocalQuery:
    """Chainable SQL builder rendered into ``(sql, params)`` for one dialect."""

    def __init__(self, table: str, dialect: Dialect = SQLITE) -> None:
        self.table = table
        self.dialect = dialect
        self._columns: List[str] = []
        self._wheres: List[Tuple[str, List[Any]]] = []
        self._order: List[Tuple[str, str]] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    # ------------------------------------------------------------------
    # Chain
    # ------------------------------------------------------------------
    def select(self, columns: Sequence[str]) -> "LocalQuery":
        self._columns = list(columns)
        return self

    def where(self, column: str, value: Any) -> "LocalQuery":
        if value is None:
            return self.where_null(column)
        return self.where_op(column, "=", value)

    def where_op(self, column: str, operator: str, value: Any) -> "LocalQuery":
        if operator not in _COMPARISON_OPERATORS:
            raise QueryTranslationError(f"Unsupported comparison '{operator}'")
        self._wheres.append((f"{quote_identifier(column)} {operator} {self.dialect.placeholder}", [value]))
        return self

    def where_in(self, column: str, values: Sequence[Any]) -> "LocalQuery":
        values = list(values)
        if not values:
            self._wheres.append(("1 = 0", []))
            return self
        marks = ", ".join([self.dialect.placeholder] * len(values))
        self._wheres.append((f"{quote_identifier(column)} IN ({marks})", values))
        return self

    def where_like(self, column: str, value: Any) -> "LocalQuery":
        target, pattern = quote_identifier(column), self.dialect.placeholder
        fold = self.dialect.fold_function
        if fold:
            target, pattern = f"{fold}({target})", f"{fold}({pattern})"
        clause = f"{target} {self.dialect.like_operator} {pattern}"
        self._wheres.append((clause, [f"%{value}%"]))
        return self

    def where_null(self, column: str) -> "LocalQuery":
        self._wheres.append((f"{quote_identifier(column)} IS NULL", []))
        return self

    def where_raw(self, expression: str) -> "LocalQuery":
        text = (expression or "").strip()
        if not text:
            raise QueryTranslationError("Raw condition cannot be empty")
        if self.dialect.escape_percent:
            text = text.replace("%", "%%")
        elif self.dialect.placeholder in text:
            # A literal placeholder would shift the positional parameters of the other clauses.
            raise QueryTranslationError(f"Raw condition cannot contain '{self.dialect.placeholder}' for {self.dialect.name}")
        self._wheres.append((f"({text})", []))
        return self

    def order_by(self, column: str, direction: str = "asc") -> "LocalQuery":
        self._order.append((quote_identifier(column), "DESC" if direction.lower() == "desc" else "ASC"))
        return self

    def limit(self, value: Optional[int]) -> "LocalQuery":
        self._limit = value
        return self

    def offset(self, value: Optional[int]) -> "LocalQuery":
        self._offset = value
        return self

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _where_sql(self) -> Statement:
        if not self._wheres:
            return "", []
        params: List[Any] = []
        for _, values in self._wheres:
            params.extend(values)
        return " WHERE " + " AND ".join(clause for clause, _ in self._wheres), params

    def _columns_sql(self) -> str:
        if not self._columns:
            return "*"
        return ", ".join(quote_identifier(column) for column in self._columns)

    def _order_term(self, column: str, direction: str) -> str:
        if not self.dialect.explicit_nulls:
            return f"{column} {direction}"
        nulls = "NULLS FIRST" if direction == "DESC" else "NULLS LAST"
        return f"{column} {direction} {nulls}"

    def to_select(self) -> Statement:
        where_sql, params = self._where_sql()
        sql = f"SELECT {self._columns_sql()} FROM {quote_identifier(self.table)}{where_sql}"
        if self._order:
            sql += " ORDER BY " + ", ".join(self._order_term(column, direction) for column, direction in self._order)
        if self._limit is not None:
            sql += f" LIMIT {int(self._limit)}"
        elif self._offset and self.dialect.unbounded_limit:
            sql += f" LIMIT {self.dialect.unbounded_limit}"
        if self._offset:
            sql += f" OFFSET {int(self._offset)}"
        return sql, params

    def to_count(self) -> Statement:
        where_sql, params = self._where_sql()
        return f"SELECT COUNT(*) AS count FROM {quote_identifier(self.table)}{where_sql}", params

    def to_insert(self, row: Mapping[str, Any], *, returning: bool = False) -> Statement:
        table = quote_identifier(self.table)
        if row:
            columns = ", ".join(quote_identifier(str(key)) for key in row)
            marks = ", ".join([self.dialect.placeholder] * len(row))
            sql = f"INSERT INTO {table} ({columns}) VALUES ({marks})"
        else:
            sql = f"INSERT INTO {table} DEFAULT VALUES"
        if returning:
            sql += " RETURNING *"
        return sql, list(row.values())

    def to_update(self, patch: Mapping[str, Any], *, returning: bool = False) -> Statement:
        if not patch:
            raise QueryTranslationError("update requires at least one column to set")
        assignments = ", ".join(f"{quote_identifier(str(key))} = {self.dialect.placeholder}" for key in patch)
        where_sql, where_params = self._where_sql()
        sql = f"UPDATE {quote_identifier(self.table)} SET {assignments}{where_sql}"
        if returning:
            sql += " RETURNING *"
        return sql, list(patch.values()) + where_params

    def to_delete(self) -> Statement:
        where_sql, params = self._where_sql()
        return f"DELETE FROM {quote_identifier(self.table)}{where_sql}", params


__all__ = ["Dialect", "LocalQuery", "POSTGRES", "SQLITE", "Statement", "quote_identifier"]
