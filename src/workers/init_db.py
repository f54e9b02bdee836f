from __future__ import annotations

from pathlib import Path
from typing import Optional

from src.adapters.db_local import build_local_database
from src.config import get_settings
from src.workers import log_info, worker_session

WORKER = "init-db"
_SCHEMA_DIR = Path(__file__).resolve().parents[2] / "database"


def schema_path_for(engine: str) -> Path:
    return _SCHEMA_DIR / f"schema_{engine}.sql"


def run(*, schema_path: Optional[Path] = None) -> Path:
    """Apply the local schema; the remote service manages its own."""
    settings = get_settings()
    database = build_local_database(settings)
    path = schema_path or schema_path_for(settings.local_engine)
    with worker_session(WORKER):
        database.apply_script(path.read_text(encoding="utf-8"))
        log_info(WORKER, f"applied {path.name} to local {settings.local_engine} database")
    return path


__all__ = ["run", "schema_path_for"]
