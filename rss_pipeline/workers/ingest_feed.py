from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from rss_pipeline.adapters.http_feed import fetch_feed_text
from rss_pipeline.adapters.http_page_cache import refresh_article_cache
from rss_pipeline.adapters.http_scraper import SCRAPED_CONTENT_MAX_LENGTH, scrape_article
from rss_pipeline.config import get_settings
from rss_pipeline.domain import (
    Feed,
    FeedRunResult,
    IngestAccumulator,
    InsertedItem,
    RawFeedItem,
    generate_slug,
    parse_feed,
    parse_feed_date,
)
from rss_pipeline.workers import log_error, log_info

WORKER = "ingest"
DEFAULT_MAX_NEW_ITEMS = 200
TITLE_MAX_LENGTH = 500
DESCRIPTION_MAX_LENGTH = 1000
CONTENT_MAX_LENGTH = 5000
ORIGINAL_CONTENT_MAX_LENGTH = SCRAPED_CONTENT_MAX_LENGTH


def choose_original_content(
    scraped: Optional[str],
    content: Optional[str],
    description: Optional[str],
) -> Optional[str]:
    """Pick the source text later AI stages will read.

    Feed content wins over the description; scraped text replaces the feed text
    only when it is longer.
    """
    feed_text = (content or "").strip() or (description or "").strip()
    scraped_text = (scraped or "").strip()
    chosen = scraped_text if len(scraped_text) > len(feed_text) else feed_text
    if not chosen:
        return None
    return chosen[:ORIGINAL_CONTENT_MAX_LENGTH]


def build_item_row(
    feed: Feed,
    item: RawFeedItem,
    *,
    original_content: Optional[str],
    fetched_at: datetime,
) -> Dict[str, Any]:
    title = item.title[:TITLE_MAX_LENGTH]
    description = item.description[:DESCRIPTION_MAX_LENGTH] or None
    published = parse_feed_date(item.pub_date) if item.pub_date else None
    return {
        "feed_id": feed.id,
        "country_id": feed.country_id,
        "external_id": item.link,
        "title": title,
        "title_en": title,
        "description": description,
        "description_en": description,
        "content": item.content[:CONTENT_MAX_LENGTH] or None,
        # NULL content_en marks the item as still waiting for a retell.
        "content_en": None,
        "original_content": original_content,
        "url": item.link,
        "slug": generate_slug(item.title),
        "image_url": item.image_url or feed.default_image_url or None,
        "category": feed.category,
        "published_at": published,
        "fetched_at": fetched_at,
    }


def _mark_fetched(adapter, feed: Feed, *, error: Optional[str]) -> None:
    try:
        adapter.mark_feed_fetched(feed.id, error=error)
    except Exception as exc:
        log_error(WORKER, f"feed_status:{feed.id}", exc)


def ingest_feed(
    adapter,
    feed: Feed,
    *,
    max_new: Optional[int] = DEFAULT_MAX_NEW_ITEMS,
    scrape: Optional[bool] = None,
    accumulator: Optional[IngestAccumulator] = None,
    scraper: Optional[Callable[[str], Optional[str]]] = None,
) -> FeedRunResult:
    """Fetch one feed and insert the items whose URL is not stored yet.

    Whole-feed failures are recorded on the feed row and returned as an
    unsuccessful result; they are never raised.
    """
    if scrape is None:
        scrape = get_settings().scrape_full_text
    scraper = scraper or scrape_article
    result = FeedRunResult(feed_id=feed.id, feed_name=feed.name, success=False)
    try:
        xml = fetch_feed_text(feed.url)
        parsed = parse_feed(xml)
        known_urls = adapter.get_existing_external_ids(feed.id)
    except Exception as exc:
        message = str(exc) or exc.__class__.__name__
        log_error(WORKER, f"{feed.name} ({feed.url})", exc)
        _mark_fetched(adapter, feed, error=message)
        result.error = message
        return result

    result.items_found = len(parsed)
    log_info(WORKER, f"{feed.name}: parsed {len(parsed)} items, {len(known_urls)} already stored")

    for item in parsed:
        if max_new is not None and result.items_inserted >= max_new:
            break
        if item.link in known_urls:
            result.duplicates += 1
            continue
        scraped = scraper(item.link) if scrape else None
        row = build_item_row(
            feed,
            item,
            original_content=choose_original_content(scraped, item.content, item.description),
            fetched_at=datetime.now(timezone.utc),
        )
        try:
            news_id = adapter.insert_news_item(row)
        except Exception as exc:
            result.insert_failures += 1
            log_error(WORKER, f"insert:{item.link}", exc)
            continue
        known_urls.add(item.link)
        if news_id is None:
            result.duplicates += 1
            continue
        result.items_inserted += 1
        if accumulator is not None:
            accumulator.add(
                InsertedItem(
                    id=news_id,
                    feed_id=feed.id,
                    country_id=feed.country_id,
                    country_code=feed.country_code,
                    category=feed.category,
                    slug=row["slug"],
                    title=row["title"],
                    country_retell_ratio=feed.country_retell_ratio,
                )
            )
        refresh_article_cache(feed.country_code, row["slug"])

    _mark_fetched(adapter, feed, error=None)
    result.success = True
    log_info(
        WORKER,
        f"{feed.name}: inserted={result.items_inserted} duplicates={result.duplicates} "
        f"insert_failures={result.insert_failures}",
    )
    return result


__all__ = [
    "DEFAULT_MAX_NEW_ITEMS",
    "build_item_row",
    "choose_original_content",
    "ingest_feed",
]
