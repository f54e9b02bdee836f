from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

_REPO_ROOT = Path(__file__).resolve().parent.parent
_ENV_LOADED = False
_ENV_FILES = (
    _REPO_ROOT / ".env.local",
    _REPO_ROOT / ".env",
    _REPO_ROOT / "config" / "abstract.env",
)

LOCAL_DB_TYPES = frozenset({"sqlite", "postgresql"})
REMOTE_DB_TYPES = frozenset({"supabase"})


def _load_env_file(path: Path) -> None:
    """Best-effort `.env` loader that respects already-set variables."""
    if not path.exists():
        return
    try:
        for raw in path.read_text(encoding="utf-8").splitlines():
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()
            if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                value = value[1:-1]
            if key and key not in os.environ:
                os.environ[key] = value
    except (OSError, UnicodeDecodeError):
        # Malformed env files are ignored; explicit env vars win anyway.
        pass


def load_environment() -> None:
    """Load environment files once, preferring explicitly exported values."""
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    for candidate in _ENV_FILES:
        _load_env_file(candidate)
    _ENV_LOADED = True


def _get_env(*keys: str) -> Optional[str]:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _bool_from_env(value: Optional[str], *, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    supabase_db_schema: str
    db_type: Optional[str]
    use_local_db: bool
    sqlite_path: Path
    database_url: Optional[str]
    db_host: str
    db_port: int
    db_name: str
    db_user: str
    db_password: Optional[str]
    db_schema: str
    log_level: str

    @property
    def has_remote_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def prefers_remote(self) -> bool:
        """Whether the remote backend should serve queries.

        An explicit local override always wins; otherwise either an explicit
        ``DB_TYPE=supabase`` or the mere presence of credentials selects the
        remote service.
        """
        if self.use_local_db or self.db_type in LOCAL_DB_TYPES:
            return False
        return self.db_type in REMOTE_DB_TYPES or self.has_remote_credentials

    @property
    def local_engine(self) -> str:
        # Unknown DB_TYPE values are surfaced so the local backend factory can reject them.
        if self.db_type is None:
            return "postgresql" if self.database_url else "sqlite"
        if self.db_type in REMOTE_DB_TYPES:
            return "sqlite"
        return self.db_type


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached project settings sourced from env variables."""
    load_environment()

    supabase_url = _get_env("SUPABASE_URL")
    supabase_key = _get_env("SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_KEY", "SUPABASE_ANON_KEY")
    supabase_db_schema = _get_env("SUPABASE_DB_SCHEMA") or "public"

    raw_db_type = _get_env("DB_TYPE")
    db_type = raw_db_type.strip().lower() if raw_db_type else None
    use_local_db = _bool_from_env(os.getenv("USE_LOCAL_DB"), default=False)

    raw_sqlite_path = _get_env("SQLITE_DB_PATH")
    if raw_sqlite_path:
        candidate = Path(raw_sqlite_path).expanduser()
        sqlite_path = candidate if candidate.is_absolute() else (_REPO_ROOT / candidate)
    else:
        sqlite_path = _REPO_ROOT / "database" / "fleet_fraud.db"

    database_url = _get_env("DATABASE_URL")
    db_host = _get_env("DB_HOST", "POSTGRES_HOST") or "localhost"
    db_port = _optional_int(_get_env("DB_PORT", "POSTGRES_PORT")) or 5432
    db_name = _get_env("DB_NAME", "POSTGRES_DB") or "postgres"
    db_user = _get_env("DB_USER", "POSTGRES_USER") or "postgres"
    db_password = _get_env("DB_PASSWORD", "POSTGRES_PASSWORD")
    db_schema = _get_env("DB_SCHEMA", "POSTGRES_SCHEMA") or "public"

    log_level = (os.getenv("LOG_LEVEL") or "INFO").upper()

    return Settings(
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        supabase_db_schema=supabase_db_schema,
        db_type=db_type,
        use_local_db=use_local_db,
        sqlite_path=sqlite_path,
        database_url=database_url,
        db_host=db_host,
        db_port=db_port,
        db_name=db_name,
        db_user=db_user,
        db_password=db_password,
        db_schema=db_schema,
        log_level=log_level,
    )


__all__ = ["LOCAL_DB_TYPES", "REMOTE_DB_TYPES", "Settings", "get_settings", "load_environment"]
