from __future__ import annotations

from rss_pipeline.domain import IngestAccumulator
from rss_pipeline.workers import ingest_feed as ingest

from fakes import FakeStore, make_feed, rss_document


def _serve(monkeypatch, xml: str) -> None:
    monkeypatch.setattr(ingest, "fetch_feed_text", lambda url: xml)


def test_second_run_inserts_nothing(monkeypatch) -> None:
    feed = make_feed()
    store = FakeStore([feed])
    _serve(monkeypatch, rss_document("https://example.com/1", "https://example.com/2"))

    first = ingest.ingest_feed(store, feed, scrape=False)
    second = ingest.ingest_feed(store, feed, scrape=False)

    assert first.items_inserted == 2
    assert second.items_inserted == 0
    assert second.duplicates == 2
    assert len(store.rows_for_feed(feed.id)) == 2


def test_existing_urls_are_loaded_once_per_run(monkeypatch) -> None:
    feed = make_feed()
    store = FakeStore([feed])
    _serve(monkeypatch, rss_document(*[f"https://example.com/{n}" for n in range(6)]))

    ingest.ingest_feed(store, feed, scrape=False)

    assert store.existing_queries == 1


def test_duplicate_links_within_one_fetch_insert_once(monkeypatch) -> None:
    feed = make_feed()
    store = FakeStore([feed])
    _serve(monkeypatch, rss_document("https://example.com/x", "https://example.com/x", "https://example.com/y"))

    result = ingest.ingest_feed(store, feed, scrape=False)

    assert result.items_inserted == 2
    assert result.duplicates == 1
    assert sorted(row["url"] for row in store.rows_for_feed(feed.id)) == [
        "https://example.com/x",
        "https://example.com/y",
    ]


def test_new_rows_are_pending_with_placeholder_english_fields(monkeypatch) -> None:
    feed = make_feed(default_image_url="https://cdn.example.com/default.png")
    store = FakeStore([feed])
    _serve(monkeypatch, rss_document("https://example.com/1", title_prefix="Breaking"))

    ingest.ingest_feed(store, feed, scrape=False)

    (row,) = store.rows_for_feed(feed.id)
    assert row["external_id"] == row["url"] == "https://example.com/1"
    assert row["title_en"] == row["title"] == "Breaking 1"
    assert row["description_en"] == row["description"]
    assert row["content_en"] is None
    assert row["slug"].startswith("breaking-1-")
    assert row["image_url"] == "https://cdn.example.com/default.png"
    assert row["original_content"] == "Description for https://example.com/1"


def test_max_new_caps_inserts(monkeypatch) -> None:
    feed = make_feed()
    store = FakeStore([feed])
    _serve(monkeypatch, rss_document(*[f"https://example.com/{n}" for n in range(5)]))

    result = ingest.ingest_feed(store, feed, max_new=3, scrape=False)

    assert result.items_found == 5
    assert result.items_inserted == 3
    assert [row["url"] for row in store.rows_for_feed(feed.id)] == [
        "https://example.com/0",
        "https://example.com/1",
        "https://example.com/2",
    ]


def test_scraped_text_used_only_when_longer() -> None:
    content = "c" * 50
    description = "d" * 80

    assert ingest.choose_original_content("s" * 200, content, description) == "s" * 200
    assert ingest.choose_original_content("s" * 30, content, description) == content
    assert ingest.choose_original_content(None, "", description) == description
    assert ingest.choose_original_content(None, "", "") is None
    assert len(ingest.choose_original_content("s" * 20000, content, None)) == 10000


def test_scraper_is_called_per_new_item(monkeypatch) -> None:
    feed = make_feed()
    store = FakeStore([feed])
    _serve(monkeypatch, rss_document("https://example.com/1", "https://example.com/2"))
    scraped = []

    def scraper(url):
        scraped.append(url)
        return "Full article text " * 20 if url.endswith("/1") else None

    ingest.ingest_feed(store, feed, scrape=True, scraper=scraper)

    assert scraped == ["https://example.com/1", "https://example.com/2"]
    rows = {row["url"]: row for row in store.rows_for_feed(feed.id)}
    assert rows["https://example.com/1"]["original_content"].startswith("Full article text")
    assert rows["https://example.com/2"]["original_content"] == "Description for https://example.com/2"


def test_insert_error_skips_item_but_not_feed(monkeypatch) -> None:
    feed = make_feed()
    store = FakeStore([feed])
    store.fail_insert_urls.add("https://example.com/2")
    _serve(monkeypatch, rss_document("https://example.com/1", "https://example.com/2", "https://example.com/3"))

    result = ingest.ingest_feed(store, feed, scrape=False)

    assert result.success is True
    assert result.items_inserted == 2
    assert result.insert_failures == 1
    assert store.feed_status[feed.id] is None


def test_fetch_failure_is_recorded_on_feed(monkeypatch) -> None:
    feed = make_feed()
    store = FakeStore([feed])

    def broken(url):
        raise RuntimeError("HTTP 503")

    monkeypatch.setattr(ingest, "fetch_feed_text", broken)

    result = ingest.ingest_feed(store, feed, scrape=False)

    assert result.success is False
    assert result.error == "HTTP 503"
    assert store.feed_status[feed.id] == "HTTP 503"
    assert result.to_dict() == {"feedId": feed.id, "feedName": feed.name, "success": False, "error": "HTTP 503"}


def test_cache_refresh_failure_does_not_undo_insert(monkeypatch) -> None:
    feed = make_feed()
    store = FakeStore([feed])
    refreshed = []
    _serve(monkeypatch, rss_document("https://example.com/1"))
    monkeypatch.setattr(ingest, "refresh_article_cache", lambda code, slug: refreshed.append((code, slug)) or False)

    result = ingest.ingest_feed(store, feed, scrape=False)

    assert result.items_inserted == 1
    assert refreshed and refreshed[0][0] == "ua"


def test_accumulator_collects_inserted_items(monkeypatch) -> None:
    feed = make_feed(country_retell_ratio=40)
    store = FakeStore([feed])
    _serve(monkeypatch, rss_document("https://example.com/1", "https://example.com/2"))
    accumulator = IngestAccumulator()

    ingest.ingest_feed(store, feed, scrape=False, accumulator=accumulator)

    assert len(accumulator) == 2
    assert {item.country_retell_ratio for item in accumulator.inserted} == {40}
