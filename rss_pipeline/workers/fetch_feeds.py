from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

from rss_pipeline.adapters.http_feed import fetch_feed_text
from rss_pipeline.adapters.http_page_cache import ping_search_engines
from rss_pipeline.config import get_settings
from rss_pipeline.domain import (
    Feed,
    IngestAccumulator,
    InsertedItem,
    apply_cap,
    bernoulli_pick,
    effective_ratio,
    parse_feed,
    stride_pick,
)
from rss_pipeline.workers import log_info, log_summary, worker_session
from rss_pipeline.workers.content_pipeline import (
    StageStats,
    generate_dialogues,
    process_item,
    retell_items,
)
from rss_pipeline.workers.ingest_feed import DEFAULT_MAX_NEW_ITEMS, ingest_feed

WORKER = "fetch"
DEFAULT_LIMITED_ITEMS = 10


class MissingFieldError(ValueError):
    """A required request field was not supplied."""


class FeedNotFoundError(LookupError):
    """The referenced feed does not exist."""



class CountryNotFoundError(LookupError):
    """The referenced country does not exist."""


def _require(value: Any, message: str) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingFieldError(message)
    return value


def _load_feed(adapter, feed_id: Optional[str]) -> Feed:
    _require(feed_id, "Feed ID is required")
    feed = adapter.get_feed(feed_id)
    if feed is None:
        raise FeedNotFoundError("Feed not found")
    return feed



def _load_country(adapter, country_id: Optional[str]) -> str:
    _require(country_id, "Country ID is required")
    if not adapter.country_exists(country_id):
        raise CountryNotFoundError("Country not found")
    return country_id


def _single_feed_response(result, **extra: Any) -> Dict[str, Any]:
    if not result.success:
        return {"success": False, "error": result.error}
    payload: Dict[str, Any] = {
        "success": True,
        "feedName": result.feed_name,
        "itemsFound": result.items_found,
        "itemsInserted": result.items_inserted,
    }
    payload.update(extra)
    return payload


def fetch_feed(adapter, feed_id: Optional[str]) -> Dict[str, Any]:
    """Fetch one feed and insert up to 200 new items. No AI stages run."""
    feed = _load_feed(adapter, feed_id)
    result = ingest_feed(adapter, feed, max_new=DEFAULT_MAX_NEW_ITEMS)
    return _single_feed_response(result)


def fetch_feed_limited(adapter, feed_id: Optional[str], limit: Optional[int]) -> Dict[str, Any]:
    feed = _load_feed(adapter, feed_id)
    cap = int(limit) if limit is not None and int(limit) > 0 else DEFAULT_LIMITED_ITEMS
    result = ingest_feed(adapter, feed, max_new=cap)
    return _single_feed_response(result, limit=cap)


def check_feed(adapter, feed_id: Optional[str]) -> Dict[str, Any]:
    """Compare what the feed currently lists with what is stored. Nothing is written."""
    feed = _load_feed(adapter, feed_id)
    known_urls = adapter.get_existing_external_ids(feed.id)
    payload: Dict[str, Any] = {
        "success": True,
        "feedName": feed.name,
        "rssItemCount": 0,
        "dbItemCount": len(known_urls),
        "newItemCount": 0,
        "canFetch": False,
    }
    try:
        items = parse_feed(fetch_feed_text(feed.url))
    except Exception as exc:
        payload["error"] = str(exc) or exc.__class__.__name__
        return payload
    payload["rssItemCount"] = len(items)
    payload["newItemCount"] = sum(1 for item in items if item.link not in known_urls)
    payload["canFetch"] = True
    return payload


def _ingest_feeds(
    adapter,
    feeds: List[Feed],
    accumulator: IngestAccumulator,
) -> List[Dict[str, Any]]:
    results: List[Dict[str, Any]] = []
    for feed in feeds:
        result = ingest_feed(adapter, feed, max_new=DEFAULT_MAX_NEW_ITEMS, accumulator=accumulator)
        results.append(result.to_dict())
    return results


def fetch_country(adapter, country_id: Optional[str]) -> Dict[str, Any]:
    """Run the single-feed routine for every active feed of one country."""
    _load_country(adapter, country_id)
    feeds = adapter.list_active_feeds(country_id)
    accumulator = IngestAccumulator()
    with worker_session(WORKER):
        results = _ingest_feeds(adapter, feeds, accumulator)
        log_summary(
            WORKER,
            ok=sum(1 for row in results if row["success"]),
            failed=sum(1 for row in results if not row["success"]),
            inserted=len(accumulator),
        )
    return {"success": True, "results": results}


def fetch_country_bulk(adapter, country_id: Optional[str]) -> Dict[str, Any]:
    """Insert across a country, then retell every fifth inserted item (retell only)."""
    _load_country(adapter, country_id)
    feeds = adapter.list_active_feeds(country_id)
    accumulator = IngestAccumulator()
    with worker_session(WORKER):
        results = _ingest_feeds(adapter, feeds, accumulator)
        queued = [
            item
            for position, item in enumerate(accumulator.inserted, start=1)
            if stride_pick(position)
        ]
        log_info(WORKER, f"country {country_id}: {len(accumulator)} inserted, {len(queued)} queued for retell")
        stats = retell_items(queued, adapter.get_retell_settings()) if queued else StageStats()
    return {
        "success": True,
        "results": results,
        "totalInserted": len(accumulator),
        "queuedForRetell": len(queued),
        "retold": stats.ok,
        "retellFailed": stats.failed,
    }


def fetch_country_full(adapter, country_id: Optional[str]) -> Dict[str, Any]:
    """Insert across a country, retell every new item, then generate dialogue for every new item."""
    _load_country(adapter, country_id)
    feeds = adapter.list_active_feeds(country_id)
    accumulator = IngestAccumulator()
    with worker_session(WORKER):
        results = _ingest_feeds(adapter, feeds, accumulator)
        settings = adapter.get_retell_settings()
        inserted = list(accumulator.inserted)
        retell_stats = retell_items(inserted, settings) if inserted else StageStats()
        dialogue_stats = generate_dialogues(adapter, inserted, settings) if inserted else StageStats()
    return {
        "success": True,
        "results": results,
        "totalInserted": len(inserted),
        "retell": {"ok": retell_stats.ok, "failed": retell_stats.failed},
        "dialogue": {"ok": dialogue_stats.ok, "failed": dialogue_stats.failed},
    }


def select_for_processing(
    inserted: List[InsertedItem],
    *,
    global_ratio: int,
    rng: Optional[random.Random] = None,
) -> List[InsertedItem]:
    """Draw, item by item, against the country's retell ratio."""
    return [
        item
        for item in inserted
        if bernoulli_pick(effective_ratio(item.country_retell_ratio, global_ratio), rng)
    ]


def fetch_all(
    adapter,
    *,
    rng: Optional[random.Random] = None,
    process_cap: Optional[int] = None,
) -> Dict[str, Any]:
    """Global sweep: ingest every active feed, then AI-process a capped random sample.

    Items past the cap keep ``content_en`` NULL and are left for the next
    sweep or ``process_pending``.
    """
    cap = process_cap if process_cap is not None else get_settings().fetch_all_process_cap
    feeds = adapter.list_active_feeds()
    accumulator = IngestAccumulator()
    with worker_session(WORKER, limit=cap):
        log_info(WORKER, f"fetching {len(feeds)} active feeds")
        results = _ingest_feeds(adapter, feeds, accumulator)
        settings = adapter.get_retell_settings()

        eligible: List[InsertedItem] = []
        if settings.auto_retell_enabled:
            eligible = select_for_processing(accumulator.inserted, global_ratio=settings.retell_ratio, rng=rng)
        to_process, skipped = apply_cap(eligible, cap)
        if skipped:
            log_info(WORKER, f"{skipped} eligible items deferred by the per-run cap of {cap}")

        retell_stats = StageStats()
        dialogue_stats = StageStats()
        for item in to_process:
            process_item(adapter, item, settings, retell_stats=retell_stats, dialogue_stats=dialogue_stats)

        pinged = ping_search_engines() if len(accumulator) else False
        log_summary(
            WORKER,
            ok=retell_stats.ok,
            failed=retell_stats.failed,
            skipped=skipped,
            inserted=len(accumulator),
            dialogues=dialogue_stats.ok,
        )
    return {
        "success": True,
        "feedsProcessed": len(results),
        "totalInserted": len(accumulator),
        "eligible": len(eligible),
        "totalProcessed": len(to_process),
        "skippedDueToLimit": skipped,
        "retold": retell_stats.ok,
        "dialogues": dialogue_stats.ok,
        "searchEnginesPinged": pinged,
        "results": results,
    }


__all__ = [
    "CountryNotFoundError",
    "FeedNotFoundError",
    "MissingFieldError",
    "check_feed",
    "fetch_all",
    "fetch_country",
    "fetch_country_bulk",
    "fetch_country_full",
    "fetch_feed",
    "fetch_feed_limited",
    "select_for_processing",
]
