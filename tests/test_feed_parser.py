from __future__ import annotations

from datetime import datetime, timezone

from rss_pipeline.domain import parse_feed, parse_feed_date
from rss_pipeline.domain.feed_parser import looks_like_feed


RSS_WITH_BROKEN_ITEM = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
<channel>
  <title>Example</title>
  <item>
    <title><![CDATA[First &amp; foremost]]></title>
    <link>https://example.com/a</link>
    <description><![CDATA[<p>Intro <b>text</b></p>]]></description>
    <pubDate>Tue, 10 Jun 2025 08:30:00 GMT</pubDate>
  </item>
  <item>
    <title>No link here</title>
    <description>Dropped</description>
  </item>
  <item>
    <title>Second</title>
    <link>https://example.com/b</link>
    <description>Plain description</description>
    <enclosure url="https://cdn.example.com/b.jpg" length="10" type="image/jpeg"/>
  </item>
  <item>
    <title>Third</title>
    <link>https://example.com/c</link>
    <description>&lt;img src="https://cdn.example.com/c.png"&gt; Body</description>
  </item>
</channel>
</rss>
"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom example</title>
  <entry>
    <title>Atom entry</title>
    <link rel="self" href="https://example.com/self/1"/>
    <link rel="alternate" href="https://example.com/posts/1"/>
    <summary>Short summary</summary>
    <content type="html">&lt;p&gt;Full &amp;quot;body&amp;quot;&lt;/p&gt;</content>
    <updated>2025-06-10T08:30:00Z</updated>
  </entry>
</feed>
"""


def test_items_missing_link_are_dropped() -> None:
    items = parse_feed(RSS_WITH_BROKEN_ITEM)

    assert [item.link for item in items] == [
        "https://example.com/a",
        "https://example.com/b",
        "https://example.com/c",
    ]
    assert items[0].title == "First & foremost"
    assert items[0].description == "Intro text"
    assert items[1].description == "Plain description"
    assert items[0].pub_date == "Tue, 10 Jun 2025 08:30:00 GMT"


def test_image_from_enclosure_and_escaped_markup() -> None:
    items = parse_feed(RSS_WITH_BROKEN_ITEM)

    assert items[0].image_url == ""
    assert items[1].image_url == "https://cdn.example.com/b.jpg"
    assert items[2].image_url == "https://cdn.example.com/c.png"


def test_atom_entry_prefers_alternate_link() -> None:
    items = parse_feed(ATOM_FEED)

    assert len(items) == 1
    entry = items[0]
    assert entry.link == "https://example.com/posts/1"
    assert entry.description == "Short summary"
    assert entry.pub_date == "2025-06-10T08:30:00Z"


def test_unclosed_trailing_item_does_not_break_earlier_items() -> None:
    truncated = RSS_WITH_BROKEN_ITEM.split("<item>\n    <title>Third")[0] + "<item><title>Cut off"

    assert len(parse_feed(truncated)) == 2


def test_empty_or_non_feed_input_yields_nothing() -> None:
    assert parse_feed("") == []
    assert parse_feed(None) == []
    assert parse_feed("<html><body>Not a feed</body></html>") == []


def test_looks_like_feed() -> None:
    assert looks_like_feed(RSS_WITH_BROKEN_ITEM)
    assert looks_like_feed(ATOM_FEED)
    assert not looks_like_feed("<html><body>hello</body></html>")


def test_parse_feed_date_formats() -> None:
    expected = datetime(2025, 6, 10, 8, 30, tzinfo=timezone.utc)

    assert parse_feed_date("Tue, 10 Jun 2025 08:30:00 GMT") == expected
    assert parse_feed_date("2025-06-10T08:30:00Z") == expected
    assert parse_feed_date("2025-06-10T08:30:00") == expected
    assert parse_feed_date("yesterday") is None
    assert parse_feed_date("") is None


def test_escaped_angle_brackets_survive_in_titles_and_descriptions() -> None:
    feed = (
        "<rss><channel><item>"
        "<title>Revenue &lt; $1M as costs &gt; forecast</title>"
        "<link>https://example.com/q</link>"
        "<description>&lt;p&gt;Margins &lt; 5% this year&lt;/p&gt;</description>"
        "</item></channel></rss>"
    )

    item = parse_feed(feed)[0]

    assert item.title == "Revenue < $1M as costs > forecast"
    assert item.description == "Margins < 5% this year"


def test_null_character_reference_is_replaced() -> None:
    feed = "<rss><item><title>Hi &#0; there &#xD800;</title><link>https://example.com/n</link></item></rss>"

    assert parse_feed(feed)[0].title == "Hi \ufffd there \ufffd"
