"""Backend-neutral query descriptors shared by the remote and local translators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

DEFAULT_PAGE_SIZE = 10


class QueryTranslationError(ValueError):
    """Raised when a descriptor cannot be mapped onto a backend query."""


class DatabaseConfigError(RuntimeError):
    """Raised when a backend cannot be built from the current settings."""


@dataclass(frozen=True)
class Condition:
    value: Any
    operator: ClassVar[str] = ""


@dataclass(frozen=True)
class Eq(Condition):
    operator: ClassVar[str] = "eq"


@dataclass(frozen=True)
class In(Condition):
    operator: ClassVar[str] = "in"

    def __post_init__(self) -> None:
        # Freeze the membership list so descriptors stay hashable and immutable.
        object.__setattr__(self, "value", tuple(self.value))


@dataclass(frozen=True)
class Gt(Condition):
    operator: ClassVar[str] = "gt"


@dataclass(frozen=True)
class Gte(Condition):
    operator: ClassVar[str] = "gte"


@dataclass(frozen=True)
class Lt(Condition):
    operator: ClassVar[str] = "lt"


@dataclass(frozen=True)
class Lte(Condition):
    operator: ClassVar[str] = "lte"


@dataclass(frozen=True)
class Like(Condition):
    """Case-insensitive substring match."""

    operator: ClassVar[str] = "like"


@dataclass(frozen=True)
class RawOr(Condition):
    """Opaque disjunction written in the active backend's own filter syntax."""

    operator: ClassVar[str] = "or"


COMPARISONS: Tuple[Type[Condition], ...] = (Gt, Gte, Lt, Lte)

_OPERATORS: Dict[str, Type[Condition]] = {
    cls.operator: cls for cls in (Gt, Gte, Lt, Lte, Like, RawOr)
}

ConditionValue = Union[Condition, Mapping[str, Any], Sequence[Any], Any]
Filter = Tuple[str, Condition]


def parse_condition(field: str, value: ConditionValue) -> Condition:
    """Disambiguate a raw condition value by its shape.

    Lists and tuples mean membership, mappings must carry an ``operator`` tag,
    everything else (including ``None``) is equality.
    """
    if isinstance(value, Condition):
        return value
    if isinstance(value, (list, tuple)):
        return In(value)
    if isinstance(value, Mapping):
        operator = value.get("operator")
        if not operator:
            raise QueryTranslationError(f"Condition for '{field}' is a mapping without an operator")
        cls = _OPERATORS.get(str(operator).lower())
        if cls is None:
            raise QueryTranslationError(f"Unsupported operator '{operator}' for '{field}'")
        if "value" not in value:
            raise QueryTranslationError(f"Operator '{operator}' for '{field}' has no value")
        operand = value["value"]
        if cls is RawOr and not isinstance(operand, str):
            raise QueryTranslationError(f"'or' condition for '{field}' expects an expression string")
        return cls(operand)
    return Eq(value)


def normalize_conditions(conditions: Optional[Mapping[str, ConditionValue]]) -> List[Filter]:
    if not conditions:
        return []
    return [(str(field), parse_condition(str(field), value)) for field, value in conditions.items()]


def normalize_equality_conditions(
    conditions: Optional[Mapping[str, Any]],
    *,
    operation: str,
) -> List[Filter]:
    """Equality-only filters for mutations; an empty filter set is refused."""
    filters = normalize_conditions(conditions)
    if not filters:
        raise QueryTranslationError(f"{operation} requires at least one condition")
    for field, condition in filters:
        if not isinstance(condition, Eq):
            raise QueryTranslationError(
                f"{operation} only supports equality conditions (got '{condition.operator}' for '{field}')"
            )
    return filters


def normalize_columns(columns: Union[str, Sequence[str], None]) -> List[str]:
    """Return an explicit column list, or an empty list meaning all columns."""
    if columns is None:
        return []
    if isinstance(columns, str):
        parts = [part.strip() for part in columns.split(",")]
    else:
        parts = [str(part).strip() for part in columns]
    parts = [part for part in parts if part]
    if not parts or parts == ["*"]:
        return []
    return parts


@dataclass(frozen=True)
class OrderBy:
    column: str
    direction: str = "asc"

    def __post_init__(self) -> None:
        direction = (self.direction or "asc").lower()
        if direction not in {"asc", "desc"}:
            raise QueryTranslationError(f"Unsupported order direction '{self.direction}'")
        if not self.column:
            raise QueryTranslationError("orderBy requires a column")
        object.__setattr__(self, "direction", direction)

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


def _optional_int(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise QueryTranslationError(f"{name} must be an integer (got {value!r})") from exc


@dataclass(frozen=True)
class QueryOptions:
    limit: Optional[int] = None
    offset: Optional[int] = None
    order_by: Optional[OrderBy] = None
    count: bool = False

    def __post_init__(self) -> None:
        for name in ("limit", "offset"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise QueryTranslationError(f"{name} must be non-negative")

    @classmethod
    def from_value(cls, options: Union["QueryOptions", Mapping[str, Any], None]) -> "QueryOptions":
        if options is None:
            return cls()
        if isinstance(options, QueryOptions):
            return options
        raw_order = options.get("order_by", options.get("orderBy"))
        order_by: Optional[OrderBy]
        if raw_order is None or isinstance(raw_order, OrderBy):
            order_by = raw_order
        elif isinstance(raw_order, str):
            order_by = OrderBy(raw_order)
        else:
            order_by = OrderBy(raw_order.get("column", ""), raw_order.get("direction") or "asc")
        return cls(
            limit=_optional_int(options.get("limit"), "limit"),
            offset=_optional_int(options.get("offset"), "offset"),
            order_by=order_by,
            count=bool(options.get("count", False)),
        )

    @property
    def effective_limit(self) -> Optional[int]:
        # An offset without a limit still needs an upper bound on the remote side.
        if self.limit is None and self.offset:
            return DEFAULT_PAGE_SIZE
        return self.limit

    def page_bounds(self) -> Optional[Tuple[int, int]]:
        """Inclusive ``(start, end)`` row bounds for an offset window.

        Returns ``None`` when there is no offset or the window is empty; callers
        fall back to a plain limit in that case.
        """
        size = self.effective_limit
        if not self.offset or not size:
            return None
        return self.offset, self.offset + size - 1


@dataclass(frozen=True)
class QueryResult:
    data: Any = None
    count: Optional[int] = None
    success: bool = True

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.data is not None:
            payload["data"] = self.data
        if self.count is not None:
            payload["count"] = self.count
        payload["success"] = self.success
        return payload


__all__ = [
    "COMPARISONS",
    "DEFAULT_PAGE_SIZE",
    "Condition",
    "ConditionValue",
    "DatabaseConfigError",
    "Eq",
    "Filter",
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
