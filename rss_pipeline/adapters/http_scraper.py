"""Full-text extraction through the scrape-news service."""
from __future__ import annotations

import logging
from typing import Optional

from rss_pipeline.adapters.http_functions import post_function

LOGGER = logging.getLogger(__name__)
SCRAPE_FUNCTION = "scrape-news"
SCRAPED_CONTENT_MAX_LENGTH = 10000


def scrape_article(url: str) -> Optional[str]:
    """Return the article body for ``url`` or None on any failure."""
    if not url:
        return None
    try:
        response = post_function(SCRAPE_FUNCTION, {"url": url})
        if not response.ok:
            LOGGER.info("Scrape failed for %s: HTTP %s", url, response.status_code)
            return None
        data = response.json()
    except Exception as exc:
        LOGGER.info("Scrape failed for %s: %s", url, exc)
        return None
    if not isinstance(data, dict) or not data.get("success"):
        return None
    body = data.get("data")
    content = body.get("content") if isinstance(body, dict) else None
    if not isinstance(content, str):
        return None
    content = content.strip()
    if not content:
        return None
    return content[:SCRAPED_CONTENT_MAX_LENGTH]


__all__ = ["SCRAPED_CONTENT_MAX_LENGTH", "scrape_article"]
