from __future__ import annotations

from typing import Any, Dict

from rss_pipeline.domain import generate_slug
from rss_pipeline.workers import log_error, log_summary, worker_session

WORKER = "generate_slugs"
DEFAULT_LIMIT = 500


def generate_slugs(adapter, limit: int = DEFAULT_LIMIT) -> Dict[str, Any]:
    """Backfill slugs for stored items that were inserted without one."""
    with worker_session(WORKER, limit=limit):
        rows = adapter.fetch_items_missing_slug(limit)
        if not rows:
            log_summary(WORKER, ok=0, failed=0)
            return {"success": True, "message": "No items need slugs", "updated": 0}

        updated = 0
        for row in rows:
            try:
                if adapter.update_item_slug(row["id"], generate_slug(row.get("title") or "")):
                    updated += 1
            except Exception as exc:
                log_error(WORKER, str(row["id"]), exc)
        log_summary(WORKER, ok=updated, failed=len(rows) - updated)
    return {"success": True, "total": len(rows), "updated": updated}


__all__ = ["generate_slugs"]
