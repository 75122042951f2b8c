"""Best-effort side notifications: SSR page-cache refresh and sitemap ping.

Nothing here raises. Failures are logged and reported as ``False``.
"""
from __future__ import annotations

import logging
from typing import Optional

from rss_pipeline.adapters.http_functions import get_function, post_function

LOGGER = logging.getLogger(__name__)
CACHE_FUNCTION = "cache-pages"
PING_FUNCTION = "ping-sitemap"


def article_path(country_code: Optional[str], slug: Optional[str]) -> Optional[str]:
    if not country_code or not slug:
        return None
    return f"/news/{country_code.lower()}/{slug}"


def refresh_page_cache(path: Optional[str]) -> bool:
    if not path:
        return False
    try:
        response = get_function(CACHE_FUNCTION, {"action": "refresh-single", "path": path})
    except Exception as exc:
        LOGGER.info("Cache refresh failed for %s: %s", path, exc)
        return False
    if not response.ok:
        LOGGER.info("Cache refresh failed for %s: HTTP %s", path, response.status_code)
        return False
    return True


def refresh_article_cache(country_code: Optional[str], slug: Optional[str]) -> bool:
    return refresh_page_cache(article_path(country_code, slug))


def ping_search_engines() -> bool:
    try:
        response = post_function(PING_FUNCTION, {})
    except Exception as exc:
        LOGGER.info("Sitemap ping failed: %s", exc)
        return False
    if not response.ok:
        LOGGER.info("Sitemap ping failed: HTTP %s", response.status_code)
        return False
    return True


__all__ = ["article_path", "ping_search_engines", "refresh_article_cache", "refresh_page_cache"]
