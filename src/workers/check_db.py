from __future__ import annotations

from typing import Dict, Optional, Sequence

from src.adapters.db import DatabaseAdapter, get_adapter
from src.workers import log_info, worker_session

WORKER = "check"
DEFAULT_TABLES = ("companies", "drivers", "vehicles", "fraud_alerts")


def run(*, tables: Sequence[str] = DEFAULT_TABLES, adapter: Optional[DatabaseAdapter] = None) -> Dict[str, int]:
    """Probe the active backend and report row counts for the core tables."""
    adapter = adapter or get_adapter()
    counts: Dict[str, int] = {}
    with worker_session(WORKER):
        log_info(WORKER, f"client={adapter.client_type}")
        if not adapter.test_connection():
            raise RuntimeError(f"Database connection failed ({adapter.client_type})")
        for table in tables:
            counts[table] = adapter.count(table).count or 0
            log_info(WORKER, f"{table}: {counts[table]} rows")
    return counts


__all__ = ["DEFAULT_TABLES", "run"]
