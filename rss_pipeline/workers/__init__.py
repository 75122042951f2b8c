"""Console logging shared by the ingestion and pipeline workers.

Every line is printed as ``[worker] message`` and flushed right away so cron
and container logs interleave correctly.
"""
from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter
from typing import Iterator, Optional


def log_info(worker: str, message: str) -> None:
    print(f"[{worker}] {message}", flush=True)


def log_error(worker: str, item: str, error: Exception) -> None:
    log_info(worker, f"ERROR {item}: {str(error) or error.__class__.__name__}")


def log_summary(worker: str, *, ok: int, failed: int, skipped: Optional[int] = None, **counters: int) -> None:
    fields = {"ok": ok, "failed": failed}
    if skipped is not None:
        fields["skipped"] = skipped
    fields.update(counters)
    log_info(worker, "result: " + " ".join(f"{name}={value}" for name, value in fields.items()))


@contextmanager
def worker_session(worker: str, *, limit: Optional[int] = None) -> Iterator[None]:
    started = perf_counter()
    log_info(worker, "start" if limit is None else f"start (limit={limit})")
    try:
        yield
    finally:
        log_info(worker, f"finished in {perf_counter() - started:.2f}s")


__all__ = ["log_info", "log_error", "log_summary", "worker_session"]
