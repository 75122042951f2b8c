from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _no_side_notifications(monkeypatch):
    """Keep page-cache refreshes and sitemap pings off the network."""
    from rss_pipeline.workers import content_pipeline, fetch_feeds, ingest_feed

    monkeypatch.setattr(ingest_feed, "refresh_article_cache", lambda code, slug: True)
    monkeypatch.setattr(content_pipeline, "refresh_article_cache", lambda code, slug: True)
    monkeypatch.setattr(fetch_feeds, "ping_search_engines", lambda: True)
