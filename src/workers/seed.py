from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from src.adapters.db import DatabaseAdapter, get_adapter
from src.workers import log_info, log_summary, worker_session

WORKER = "seed"
DEFAULT_SEED_PATH = Path(__file__).resolve().parents[2] / "database" / "seed.json"


def _load_seed(path: Path) -> Dict[str, List[Dict[str, Any]]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Seed file {path} must contain a JSON object")
    return data


def _ensure(adapter: DatabaseAdapter, table: str, key: str, row: Mapping[str, Any]) -> tuple[Dict[str, Any], bool]:
    """Return the existing row matching ``key`` or insert ``row``."""
    existing = adapter.select(table, "*", {key: row[key]}, {"limit": 1}).data
    if existing:
        return existing[0], False
    return adapter.insert(table, dict(row)).data, True


def run(*, seed_path: Optional[Path] = None, adapter: Optional[DatabaseAdapter] = None) -> Dict[str, int]:
    adapter = adapter or get_adapter()
    seed = _load_seed(seed_path or DEFAULT_SEED_PATH)
    inserted: Dict[str, int] = {"companies": 0, "drivers": 0, "vehicles": 0, "fraud_alerts": 0}
    skipped = 0

    with worker_session(WORKER):
        company_ids: Dict[str, Any] = {}
        for item in seed.get("companies", []):
            payload = {k: v for k, v in item.items() if k != "key"}
            row, created = _ensure(adapter, "companies", "email", payload)
            company_ids[item["key"]] = row["id"]
            inserted["companies"] += int(created)
            skipped += int(not created)

        driver_ids: Dict[str, Any] = {}
        for item in seed.get("drivers", []):
            payload = {k: v for k, v in item.items() if k != "company"}
            payload["company_id"] = company_ids[item["company"]]
            row, created = _ensure(adapter, "drivers", "driver_license", payload)
            driver_ids[item["driver_license"]] = row["id"]
            inserted["drivers"] += int(created)
            skipped += int(not created)

        vehicle_ids: Dict[str, Any] = {}
        for item in seed.get("vehicles", []):
            payload = {k: v for k, v in item.items() if k != "company"}
            payload["company_id"] = company_ids[item["company"]]
            row, created = _ensure(adapter, "vehicles", "license_plate", payload)
            vehicle_ids[item["license_plate"]] = row["id"]
            inserted["vehicles"] += int(created)
            skipped += int(not created)

        alerts: List[Dict[str, Any]] = []
        for item in seed.get("fraud_alerts", []):
            payload = {k: v for k, v in item.items() if k not in {"vehicle", "driver"}}
            payload["vehicle_id"] = vehicle_ids.get(item.get("vehicle"))
            payload["driver_id"] = driver_ids.get(item.get("driver"))
            duplicates = adapter.count(
                "fraud_alerts",
                {"vehicle_id": payload["vehicle_id"], "alert_message": payload["alert_message"]},
            ).count
            if duplicates:
                skipped += 1
                continue
            alerts.append(payload)
        inserted["fraud_alerts"] = len(adapter.insert("fraud_alerts", alerts).data or [])

    log_summary(WORKER, ok=sum(inserted.values()), failed=0, skipped=skipped)
    log_info(WORKER, ", ".join(f"{table}={n}" for table, n in inserted.items()))
    return inserted


__all__ = ["DEFAULT_SEED_PATH", "run"]
