"""Backend-agnostic CRUD adapter.

`DatabaseAdapter` exposes select/insert/update/delete/count over either the
Supabase service (`RemoteTranslator`) or a local SQL database
(`LocalTranslator`). The backend is resolved once from settings; the only
per-call branching is the fallback to the local translator when the remote
backend was chosen but its client is missing.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, TypeVar, Union

from src.adapters.db_local import LocalTranslator, build_local_database
from src.adapters.db_supabase import RemoteTranslator, get_client
from src.config import Settings, get_settings
from src.domain.query import QueryOptions, QueryResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

Columns = Union[str, Sequence[str], None]
Options = Union[QueryOptions, Mapping[str, Any], None]
Records = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]


class Backend(str, enum.Enum):
    REMOTE = "remote"
    LOCAL = "local"


class QueryTranslator(Protocol):
    client_type: str

    def select(self, table: str, columns: Columns, conditions: Optional[Mapping[str, Any]], options: Options) -> QueryResult: ...

    def insert(self, table: str, data: Records, returning: bool) -> QueryResult: ...

    def update(self, table: str, data: Mapping[str, Any], conditions: Mapping[str, Any], returning: bool) -> QueryResult: ...

    def delete(self, table: str, conditions: Mapping[str, Any]) -> QueryResult: ...

    def count(self, table: str, conditions: Optional[Mapping[str, Any]]) -> QueryResult: ...

    def ping(self) -> None: ...


def resolve_backend(settings: Settings) -> Backend:
    return Backend.REMOTE if settings.prefers_remote else Backend.LOCAL


class DatabaseAdapter:
    """Single CRUD entry point shared by routes, services and the CLI."""

    def __init__(
        self,
        backend: Backend,
        *,
        local: LocalTranslator,
        remote: Optional[RemoteTranslator] = None,
    ) -> None:
        self.backend = Backend(backend)
        self._local = local
        self._remote = remote
        logger.info(
            "Database adapter initialized with client: %s (backend=%s, remote available=%s)",
            self.client_type,
            self.backend.value,
            self._remote_available,
        )

    @property
    def _remote_available(self) -> bool:
        return self._remote is not None and self._remote.available

    @property
    def client_type(self) -> str:
        if self.backend is Backend.REMOTE and self._remote_available:
            return RemoteTranslator.client_type
        return self._local.client_type

    def _translator(self) -> QueryTranslator:
        if self.backend is Backend.REMOTE:
            if self._remote_available:
                return self._remote
            logger.warning("Supabase client not available, falling back to local %s database", self._local.client_type)
        return self._local

    def _run(self, action: str, table: str, call: Callable[[QueryTranslator], T]) -> T:
        translator = self._translator()
        try:
            return call(translator)
        except Exception as exc:
            logger.error("Database %s error on %s (%s): %s", action, table, translator.client_type, exc)
            raise

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    def select(
        self,
        table: str,
        columns: Columns = "*",
        conditions: Optional[Mapping[str, Any]] = None,
        options: Options = None,
    ) -> QueryResult:
        return self._run("select", table, lambda t: t.select(table, columns, conditions or {}, options))

    def insert(self, table: str, data: Records, returning: bool = True) -> QueryResult:
        if isinstance(data, (list, tuple)) and not data:
            return QueryResult(data=[] if returning else None)
        return self._run("insert", table, lambda t: t.insert(table, data, returning))

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
        returning: bool = True,
    ) -> QueryResult:
        return self._run("update", table, lambda t: t.update(table, data, conditions, returning))

    def delete(self, table: str, conditions: Mapping[str, Any]) -> QueryResult:
        return self._run("delete", table, lambda t: t.delete(table, conditions))

    def count(self, table: str, conditions: Optional[Mapping[str, Any]] = None) -> QueryResult:
        return self._run("count", table, lambda t: t.count(table, conditions or {}))

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def test_connection(self) -> bool:
        translator = self._translator()
        try:
            translator.ping()
        except Exception as exc:
            logger.error("Database connection failed (%s): %s", translator.client_type, exc)
            return False
        logger.info("Database connection successful (%s)", translator.client_type)
        return True


def build_adapter(settings: Optional[Settings] = None) -> DatabaseAdapter:
    settings = settings or get_settings()
    backend = resolve_backend(settings)
    remote = RemoteTranslator(get_client(settings)) if backend is Backend.REMOTE else None
    local = LocalTranslator(build_local_database(settings))
    return DatabaseAdapter(backend, local=local, remote=remote)


_ADAPTER: Optional[DatabaseAdapter] = None


def get_adapter() -> DatabaseAdapter:
    """Return the process-wide adapter, built from settings on first use."""
    global _ADAPTER
    if _ADAPTER is None:
        _ADAPTER = build_adapter()
    return _ADAPTER


__all__ = [
    "Backend",
    "DatabaseAdapter",
    "QueryTranslator",
    "build_adapter",
    "get_adapter",
    "resolve_backend",
]
