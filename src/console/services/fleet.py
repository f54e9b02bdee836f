from __future__ import annotations

import logging
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict, List, Optional, Sequence

from src.adapters.db import get_adapter
from src.domain.query import Gte, Like, OrderBy, QueryOptions

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


def _to_float(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _serialize_driver(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row.get("id"),
        "company_id": row.get("company_id"),
        "driver_license": row.get("driver_license"),
        "first_name": row.get("first_name"),
        "last_name": row.get("last_name"),
        "email": row.get("email"),
        "phone": row.get("phone"),
        "status": row.get("status"),
        "risk_score": _to_float(row.get("risk_score")),
        "total_violations": _to_int(row.get("total_violations")),
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    }


def _serialize_alert(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row.get("id"),
        "alert_type": row.get("alert_type") or "unknown",
        "severity": row.get("severity") or "medium",
        "vehicle_id": row.get("vehicle_id"),
        "driver_id": row.get("driver_id"),
        "alert_message": row.get("alert_message") or "",
        "risk_score": _to_float(row.get("risk_score")),
        "status": row.get("status") or "open",
        "resolved_at": row.get("resolved_at"),
        "created_at": row.get("created_at"),
    }


def _membership(values: Optional[Sequence[str]]) -> Any:
    cleaned = [value for value in (values or []) if value]
    if len(cleaned) == 1:
        return cleaned[0]
    return cleaned


def _page(rows: List[Dict[str, Any]], total: Optional[int], limit: int, offset: int) -> Dict[str, Any]:
    return {"items": rows, "total": int(total or 0), "limit": limit, "offset": offset}


def list_drivers(
    *,
    statuses: Optional[Sequence[str]] = None,
    min_risk: Optional[float] = None,
    search: Optional[str] = None,
    limit: int = DEFAULT_PAGE_LIMIT,
    offset: int = 0,
    sort: str = "risk_score",
    direction: str = "desc",
) -> Dict[str, Any]:
    limit = max(1, min(limit, MAX_PAGE_LIMIT))
    conditions: Dict[str, Any] = {}
    if statuses:
        conditions["status"] = _membership(statuses)
    if min_risk is not None:
        conditions["risk_score"] = Gte(min_risk)
    if search:
        conditions["last_name"] = Like(search.strip())
    options = QueryOptions(limit=limit, offset=offset, order_by=OrderBy(sort, direction), count=True)
    logger.info("Listing drivers: conditions=%s limit=%s offset=%s", sorted(conditions), limit, offset)
    result = get_adapter().select("drivers", "*", conditions, options)
    return _page([_serialize_driver(row) for row in result.data], result.count, limit, offset)


def get_driver(driver_id: Any) -> Optional[Dict[str, Any]]:
    result = get_adapter().select("drivers", "*", {"id": driver_id}, {"limit": 1})
    if not result.data:
        return None
    return _serialize_driver(result.data[0])


def list_fraud_alerts(
    *,
    statuses: Optional[Sequence[str]] = None,
    severities: Optional[Sequence[str]] = None,
    vehicle_id: Optional[Any] = None,
    limit: int = DEFAULT_PAGE_LIMIT,
    offset: int = 0,
) -> Dict[str, Any]:
    limit = max(1, min(limit, MAX_PAGE_LIMIT))
    conditions: Dict[str, Any] = {}
    if statuses:
        conditions["status"] = _membership(statuses)
    if severities:
        conditions["severity"] = _membership(severities)
    if vehicle_id is not None:
        conditions["vehicle_id"] = vehicle_id
    options = QueryOptions(limit=limit, offset=offset, order_by=OrderBy("id", "desc"), count=True)
    result = get_adapter().select("fraud_alerts", "*", conditions, options)
    return _page([_serialize_alert(row) for row in result.data], result.count, limit, offset)


def database_health() -> Dict[str, Any]:
    start = perf_counter()
    adapter = get_adapter()
    healthy = adapter.test_connection()
    return {
        "status": "healthy" if healthy else "unhealthy",
        "database": adapter.client_type,
        "response_time_ms": round((perf_counter() - start) * 1000, 2),
        "timestamp": datetime.now(timezone.utc),
        "error": None if healthy else "Database connection failed",
    }


__all__ = ["DEFAULT_PAGE_LIMIT", "MAX_PAGE_LIMIT", "database_health", "get_driver", "list_drivers", "list_fraud_alerts"]
