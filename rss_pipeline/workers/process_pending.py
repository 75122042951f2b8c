from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from rss_pipeline.config import get_settings
from rss_pipeline.domain import PipelineItem, RetellSettings
from rss_pipeline.workers import log_info, log_summary, worker_session
from rss_pipeline.workers.content_pipeline import generate_item_dialogue, retell_item

WORKER = "process_pending"
DEFAULT_LIMIT = 20
DEFAULT_BATCH_SIZE = 5
MAX_BATCH_SIZE = 5
BATCH_DELAY_SECONDS = 1.0


def _window_start(now: Optional[datetime] = None) -> datetime:
    current = now or datetime.now(timezone.utc)
    return current - timedelta(hours=get_settings().pending_window_hours)


def _process_one(adapter, item: PipelineItem, settings: RetellSettings) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "newsId": item.id,
        "title": (item.title or "")[:80],
        "countryCode": item.country_code,
        "retell": "skipped",
        "dialogue": "skipped",
    }
    started = time.perf_counter()
    if not retell_item(item, settings):
        entry["retell"] = "failed"
    else:
        entry["retell"] = "ok"
        if settings.auto_dialogue_enabled:
            entry["dialogue"] = "ok" if generate_item_dialogue(adapter, item.id, settings) else "failed"
    entry["durationMs"] = int((time.perf_counter() - started) * 1000)
    return entry


def process_pending(
    adapter,
    country_code: Optional[str] = None,
    limit: Optional[int] = DEFAULT_LIMIT,
    batch_size: Optional[int] = DEFAULT_BATCH_SIZE,
    *,
    batch_delay: float = BATCH_DELAY_SECONDS,
) -> Dict[str, Any]:
    """Retell (and dialogue) items still missing ``content_en`` in 100%-ratio countries.

    Re-running is safe: anything retold successfully drops out of the
    pending query on the next call.
    """
    limit_value = int(limit) if limit and int(limit) > 0 else DEFAULT_LIMIT
    workers = max(1, min(int(batch_size or DEFAULT_BATCH_SIZE), MAX_BATCH_SIZE))
    settings = adapter.get_retell_settings()
    with worker_session(WORKER, limit=limit_value):
        items = adapter.fetch_pending_items(
            since=_window_start(),
            global_ratio=settings.retell_ratio,
            limit=limit_value,
            country_code=country_code,
        )
        if not items:
            log_info(WORKER, "No pending items found.")
            log_summary(WORKER, ok=0, failed=0)
            return {"success": True, "message": "No pending items", "processed": 0, "logs": []}

        logs: List[Dict[str, Any]] = []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            for start in range(0, len(items), workers):
                if start and batch_delay:
                    time.sleep(batch_delay)
                batch = items[start:start + workers]
                logs.extend(executor.map(lambda item: _process_one(adapter, item, settings), batch))
                log_info(WORKER, f"batch {start // workers + 1}: {len(batch)} items")

        retold = sum(1 for entry in logs if entry["retell"] == "ok")
        dialogues = sum(1 for entry in logs if entry["dialogue"] == "ok")
        failed = sum(1 for entry in logs if "failed" in (entry["retell"], entry["dialogue"]))
        log_summary(WORKER, ok=retold, failed=failed, dialogues=dialogues)
    return {
        "success": True,
        "processed": len(logs),
        "retold": retold,
        "dialogues": dialogues,
        "failed": failed,
        "batchSize": workers,
        "logs": logs,
    }


def get_pending_stats(adapter) -> Dict[str, Any]:
    settings = adapter.get_retell_settings()
    rows = adapter.count_pending_by_country(since=_window_start(), global_ratio=settings.retell_ratio)
    return {
        "success": True,
        "windowHours": get_settings().pending_window_hours,
        "total": sum(int(row.get("pending") or 0) for row in rows),
        "countries": rows,
    }


__all__ = ["get_pending_stats", "process_pending"]
