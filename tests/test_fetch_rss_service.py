from __future__ import annotations

import pytest

from rss_pipeline.console.schemas.fetch_rss import FetchRssRequest
from rss_pipeline.console.services import fetch_rss
from rss_pipeline.domain import FeedValidation
from rss_pipeline.workers import ingest_feed

from fakes import FakeStore, make_feed, rss_document


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore([make_feed()])
    monkeypatch.setattr(fetch_rss, "get_adapter", lambda: fake)
    monkeypatch.setattr(ingest_feed, "scrape_article", lambda url: None)
    return fake


def _request(**body) -> FetchRssRequest:
    return FetchRssRequest.model_validate(body)


def test_request_accepts_camel_case_fields() -> None:
    request = _request(action="process_pending", countryCode="ua", batchSize=3, limit=9, feedId="f", countryId="c")

    assert request.country_code == "ua"
    assert request.batch_size == 3
    assert request.feed_id == "f"
    assert request.country_id == "c"


@pytest.mark.parametrize(
    "body, message",
    [
        ({"action": "validate"}, "Feed URL is required"),
        ({"action": "check_feed"}, "Feed ID is required"),
        ({"action": "fetch_feed"}, "Feed ID is required"),
        ({"action": "fetch_feed_limited", "limit": 3}, "Feed ID is required"),
        ({"action": "fetch_country"}, "Country ID is required"),
        ({"action": "fetch_country_bulk"}, "Country ID is required"),
        ({"action": "fetch_country_full"}, "Country ID is required"),
    ],
)
def test_missing_fields_return_400(store, body, message) -> None:
    status, payload = fetch_rss.dispatch(_request(**body))

    assert status == 400
    assert payload == {"success": False, "error": message}


def test_unknown_action_returns_400(store) -> None:
    assert fetch_rss.dispatch(_request(action="explode")) == (400, {"success": False, "error": "Unknown action"})
    assert fetch_rss.dispatch(_request()) == (400, {"success": False, "error": "Unknown action"})


def test_unknown_feed_returns_404(store) -> None:
    status, payload = fetch_rss.dispatch(_request(action="fetch_feed", feedId="missing"))

    assert status == 404
    assert payload == {"success": False, "error": "Feed not found"}


@pytest.mark.parametrize("action", ["fetch_country", "fetch_country_bulk", "fetch_country_full"])
def test_unknown_country_returns_404(store, action) -> None:
    status, payload = fetch_rss.dispatch(_request(action=action, countryId="country-xx"))

    assert status == 404
    assert payload == {"success": False, "error": "Country not found"}


def test_unexpected_exception_returns_500(store, monkeypatch) -> None:
    def broken():
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(store, "list_active_feeds", lambda country_id=None: broken())

    status, payload = fetch_rss.dispatch(_request(action="fetch_all"))

    assert status == 500
    assert payload == {"success": False, "error": "database unavailable"}


def test_failed_single_feed_fetch_returns_500(store, monkeypatch) -> None:
    def broken(url):
        raise RuntimeError("HTTP 403")

    monkeypatch.setattr(ingest_feed, "fetch_feed_text", broken)

    status, payload = fetch_rss.dispatch(_request(action="fetch_feed", feedId="feed-1"))

    assert status == 500
    assert payload == {"success": False, "error": "HTTP 403"}


def test_fetch_feed_success(store, monkeypatch) -> None:
    monkeypatch.setattr(ingest_feed, "fetch_feed_text", lambda url: rss_document("https://example.com/1"))

    status, payload = fetch_rss.dispatch(_request(action="fetch_feed", feedId="feed-1"))

    assert status == 200
    assert payload["itemsInserted"] == 1


def test_validate_merges_result(monkeypatch) -> None:
    monkeypatch.setattr(fetch_rss, "validate_feed", lambda url: FeedValidation(valid=True, item_count=5))

    status, payload = fetch_rss.dispatch(_request(action="validate", feedUrl="https://example.com/feed.xml"))

    assert status == 200
    assert payload == {"success": True, "valid": True, "itemCount": 5}


def test_generate_slugs_action(store) -> None:
    store.items["item-1"] = {"feed_id": "feed-1", "title": "Needs a slug", "slug": None}

    status, payload = fetch_rss.dispatch(_request(action="generate_slugs"))

    assert status == 200
    assert payload == {"success": True, "total": 1, "updated": 1}
    assert store.items["item-1"]["slug"].startswith("needs-a-slug-")


def test_every_documented_action_is_routed() -> None:
    assert set(fetch_rss.ACTIONS) == {
        "validate",
        "generate_slugs",
        "check_feed",
        "fetch_feed_limited",
        "fetch_feed",
        "fetch_country",
        "fetch_all",
        "get_pending_stats",
        "process_pending",
        "fetch_country_bulk",
        "fetch_country_full",
    }
