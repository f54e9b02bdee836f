from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping


def json_safe(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def to_record(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Plain JSON-friendly dict, matching what the remote service returns."""
    return {str(key): json_safe(row[key]) for key in row.keys()}


def to_records(rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return [to_record(row) for row in rows]


__all__ = ["json_safe", "to_record", "to_records"]
