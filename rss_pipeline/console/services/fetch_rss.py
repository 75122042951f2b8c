from __future__ import annotations

import sys
from typing import Any, Callable, Dict, Tuple

from rss_pipeline.adapters.db import get_adapter
from rss_pipeline.adapters.http_feed import validate_feed
from rss_pipeline.console.schemas.fetch_rss import FetchRssRequest
from rss_pipeline.workers.fetch_feeds import (
    CountryNotFoundError,
    FeedNotFoundError,
    MissingFieldError,
    check_feed,
    fetch_all,
    fetch_country,
    fetch_country_bulk,
    fetch_country_full,
    fetch_feed,
    fetch_feed_limited,
)
from rss_pipeline.workers.generate_slugs import generate_slugs
from rss_pipeline.workers.process_pending import get_pending_stats, process_pending

Response = Tuple[int, Dict[str, Any]]


def _validate(request: FetchRssRequest) -> Dict[str, Any]:
    if not request.feed_url:
        raise MissingFieldError("Feed URL is required")
    result = validate_feed(request.feed_url)
    return {"success": result.valid, **result.to_dict()}


def _fetch_feed_limited(request: FetchRssRequest) -> Dict[str, Any]:
    return fetch_feed_limited(get_adapter(), request.feed_id, request.limit)


_HANDLERS: Dict[str, Callable[[FetchRssRequest], Dict[str, Any]]] = {
    "validate": _validate,
    "generate_slugs": lambda request: generate_slugs(get_adapter()),
    "check_feed": lambda request: check_feed(get_adapter(), request.feed_id),
    "fetch_feed_limited": _fetch_feed_limited,
    "fetch_feed": lambda request: fetch_feed(get_adapter(), request.feed_id),
    "fetch_country": lambda request: fetch_country(get_adapter(), request.country_id),
    "fetch_all": lambda request: fetch_all(get_adapter()),
    "get_pending_stats": lambda request: get_pending_stats(get_adapter()),
    "process_pending": lambda request: process_pending(
        get_adapter(),
        country_code=request.country_code,
        limit=request.limit,
        batch_size=request.batch_size,
    ),
    "fetch_country_bulk": lambda request: fetch_country_bulk(get_adapter(), request.country_id),
    "fetch_country_full": lambda request: fetch_country_full(get_adapter(), request.country_id),
}

# A failed single-feed fetch is reported as a server error, like any other
# unexpected failure of the request.
_FAILURE_IS_SERVER_ERROR = {"fetch_feed", "fetch_feed_limited"}

ACTIONS = tuple(_HANDLERS)


def dispatch(request: FetchRssRequest) -> Response:
    """Run one action and return ``(status_code, body)``."""
    handler = _HANDLERS.get(request.action or "")
    if handler is None:
        return 400, {"success": False, "error": "Unknown action"}
    try:
        body = handler(request)
    except MissingFieldError as exc:
        return 400, {"success": False, "error": str(exc)}
    except (FeedNotFoundError, CountryNotFoundError) as exc:
        return 404, {"success": False, "error": str(exc)}
    except Exception as exc:
        print(f"[console] {request.action} failed: {exc}", file=sys.stderr)
        return 500, {"success": False, "error": str(exc) or "Unknown error"}
    if request.action in _FAILURE_IS_SERVER_ERROR and not body.get("success"):
        return 500, body
    return 200, body


__all__ = ["ACTIONS", "dispatch"]
