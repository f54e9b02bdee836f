from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


def log_info(worker: str, message: str) -> None:
    logger.info("[%s] %s", worker, message)


def log_error(worker: str, item: str, error: Exception) -> None:
    logger.error("[%s] ERROR %s: %s", worker, item, error)


def log_summary(worker: str, *, ok: int, failed: int, skipped: Optional[int] = None) -> None:
    parts = [f"ok={ok}", f"failed={failed}"]
    if skipped is not None:
        parts.append(f"skipped={skipped}")
    log_info(worker, "result: " + " ".join(parts))


@contextmanager
def worker_session(worker: str) -> Iterator[None]:
    start = perf_counter()
    log_info(worker, "start")
    try:
        yield
    finally:
        elapsed = perf_counter() - start
        log_info(worker, f"finished in {elapsed:.2f}s")


__all__ = ["log_info", "log_error", "log_summary", "worker_session"]
