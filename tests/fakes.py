from __future__ import annotations

from typing import Any, Dict, List, Optional, Set

from rss_pipeline.domain import Feed, PipelineItem, RetellSettings


class FakeStore:
    """In-memory stand-in for ``PostgresAdapter`` keyed like the real tables."""

    def __init__(
        self,
        feeds: Optional[List[Feed]] = None,
        settings: Optional[RetellSettings] = None,
        countries: Optional[Set[str]] = None,
    ) -> None:
        self.feeds: Dict[str, Feed] = {feed.id: feed for feed in feeds or []}
        self.countries: Set[str] = set(countries or ()) | {feed.country_id for feed in self.feeds.values()}
        self.items: Dict[str, Dict[str, Any]] = {}
        self.feed_status: Dict[str, Optional[str]] = {}
        self.settings = settings or RetellSettings()
        self.existing_queries = 0
        self.fail_insert_urls: Set[str] = set()
        self.dialogue_updates: List[Dict[str, Any]] = []
        self.pending: List[PipelineItem] = []
        self.pending_calls: List[Dict[str, Any]] = []

    def get_feed(self, feed_id):
        return self.feeds.get(feed_id)

    def list_active_feeds(self, country_id=None):
        return [
            feed
            for feed in self.feeds.values()
            if feed.is_active and (country_id is None or feed.country_id == country_id)
        ]

    def country_exists(self, country_id):
        return country_id in self.countries

    def mark_feed_fetched(self, feed_id, *, error=None):
        self.feed_status[feed_id] = error

    def get_existing_external_ids(self, feed_id):
        self.existing_queries += 1
        return {row["external_id"] for row in self.items.values() if row["feed_id"] == feed_id}

    def insert_news_item(self, row):
        if row["url"] in self.fail_insert_urls:
            raise RuntimeError("insert rejected")
        for stored in self.items.values():
            if stored["feed_id"] == row["feed_id"] and stored["external_id"] == row["external_id"]:
                return None
        news_id = f"item-{len(self.items) + 1}"
        self.items[news_id] = dict(row, id=news_id)
        return news_id

    def rows_for_feed(self, feed_id):
        return [row for row in self.items.values() if row["feed_id"] == feed_id]

    def fetch_pipeline_items(self, news_ids):
        found = []
        for news_id in news_ids:
            row = self.items.get(news_id)
            if row is None:
                continue
            found.append(
                PipelineItem(
                    id=news_id,
                    title=row.get("title") or "",
                    country_code=row.get("country_code", "ua"),
                    slug=row.get("slug"),
                    title_en=row.get("title_en"),
                    description=row.get("description"),
                    description_en=row.get("description_en"),
                    content=row.get("content"),
                    content_en=row.get("content_en"),
                    original_content=row.get("original_content"),
                )
            )
        return found

    def update_item_dialogue(self, news_id, *, dialogue, tweets=None):
        self.dialogue_updates.append({"id": news_id, "dialogue": dialogue, "tweets": tweets})

    def fetch_pending_items(self, *, since, global_ratio, limit, country_code=None):
        self.pending_calls.append(
            {"since": since, "global_ratio": global_ratio, "limit": limit, "country_code": country_code}
        )
        return self.pending[:limit]

    def count_pending_by_country(self, *, since, global_ratio):
        return [
            {"countryCode": "ua", "countryName": "Ukraine", "pending": 3},
            {"countryCode": "pl", "countryName": "Poland", "pending": 1},
        ]

    def fetch_items_missing_slug(self, limit):
        return [{"id": news_id, "title": row["title"]} for news_id, row in self.items.items() if not row.get("slug")][:limit]

    def update_item_slug(self, news_id, slug):
        if news_id not in self.items:
            return False
        self.items[news_id]["slug"] = slug
        return True

    def get_retell_settings(self):
        return self.settings


def make_feed(feed_id: str = "feed-1", *, country_id: str = "country-ua", **overrides: Any) -> Feed:
    values: Dict[str, Any] = {
        "id": feed_id,
        "name": f"Feed {feed_id}",
        "url": f"https://example.com/{feed_id}.xml",
        "country_id": country_id,
        "country_code": "ua",
        "category": "general",
    }
    values.update(overrides)
    return Feed(**values)


def rss_document(*links: str, title_prefix: str = "Story") -> str:
    blocks = "".join(
        f"<item><title>{title_prefix} {index}</title><link>{link}</link>"
        f"<description>Description for {link}</description></item>"
        for index, link in enumerate(links, start=1)
    )
    return f'<?xml version="1.0"?><rss version="2.0"><channel><title>Feed</title>{blocks}</channel></rss>'

