"""Tolerant RSS/Atom item extraction.

The parser never validates the document. It looks for ``<item>`` and ``<entry>``
blocks with non-strict patterns and runs one small extractor per field over
each block, so a truncated or slightly broken feed still yields whatever items
can be read from it.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Dict, Iterable, List, Optional, Pattern

from bs4 import BeautifulSoup

from .models import RawFeedItem
from .text import clean_markup, clean_text, decode_html_entities, strip_cdata

DESCRIPTION_MAX_LENGTH = 500
CONTENT_MAX_LENGTH = 2000

_FLAGS = re.IGNORECASE | re.DOTALL

_ITEM_BLOCK = re.compile(r"<item(?:\s[^>]*)?>(.*?)</item>", _FLAGS)
_ENTRY_BLOCK = re.compile(r"<entry(?:\s[^>]*)?>(.*?)</entry>", _FLAGS)


def _element(tag: str) -> Pattern[str]:
    name = re.escape(tag)
    return re.compile(rf"<{name}(?:\s[^>]*)?>(.*?)</{name}>", _FLAGS)


_TITLE = _element("title")
_LINK = _element("link")
_LINK_TAG = re.compile(r"<link\b[^>]*>", _FLAGS)
_HREF_ATTR = re.compile(r"""href\s*=\s*["']([^"']+)["']""", _FLAGS)
_REL_ATTR = re.compile(r"""rel\s*=\s*["']([^"']+)["']""", _FLAGS)
_DESCRIPTION = _element("description")
_SUMMARY = _element("summary")
_CONTENT_ENCODED = _element("content:encoded")
_CONTENT = _element("content")
_DATE_PATTERNS = (_element("pubDate"), _element("published"), _element("updated"), _element("dc:date"))
_IMAGE_PATTERNS = (
    re.compile(r"""<media:content\b[^>]*?url\s*=\s*["']([^"']+)["']""", _FLAGS),
    re.compile(r"""<media:thumbnail\b[^>]*?url\s*=\s*["']([^"']+)["']""", _FLAGS),
    re.compile(r"""<enclosure\b[^>]*?url\s*=\s*["']([^"']+)["'][^>]*?type\s*=\s*["']image""", _FLAGS),
    re.compile(r"""<enclosure\b[^>]*?type\s*=\s*["']image[^>]*?url\s*=\s*["']([^"']+)["']""", _FLAGS),
)


def _first_match(block: str, patterns: Iterable[Pattern[str]]) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(block)
        if match:
            return match.group(1)
    return None


def extract_title(block: str) -> str:
    raw = _first_match(block, (_TITLE,))
    return clean_text(raw) if raw else ""


def extract_link(block: str) -> str:
    match = _LINK.search(block)
    if match:
        text = decode_html_entities(strip_cdata(match.group(1))).strip()
        if text:
            return text
    fallback = ""
    for tag in _LINK_TAG.findall(block):
        href = _HREF_ATTR.search(tag)
        if not href:
            continue
        rel = _REL_ATTR.search(tag)
        value = decode_html_entities(href.group(1)).strip()
        if rel is None or rel.group(1).lower() == "alternate":
            return value
        if not fallback:
            fallback = value
    return fallback


def _raw_description(block: str) -> str:
    return _first_match(block, (_DESCRIPTION, _SUMMARY)) or ""


def _raw_content(block: str) -> str:
    return _first_match(block, (_CONTENT_ENCODED, _CONTENT)) or ""


def extract_description(block: str) -> str:
    return clean_markup(_raw_description(block), max_length=DESCRIPTION_MAX_LENGTH)


def extract_content(block: str) -> str:
    return clean_markup(_raw_content(block), max_length=CONTENT_MAX_LENGTH)


def extract_pub_date(block: str) -> str:
    raw = _first_match(block, _DATE_PATTERNS)
    return strip_cdata(raw).strip() if raw else ""


def extract_image(block: str) -> str:
    url = _first_match(block, _IMAGE_PATTERNS)
    if url:
        return decode_html_entities(url).strip()
    for html in (strip_cdata(_raw_content(block)), strip_cdata(_raw_description(block))):
        if not html:
            continue
        # Escaped markup inside <description> is common; decode before sniffing.
        img = BeautifulSoup(decode_html_entities(html), "html.parser").find("img", src=True)
        if img is not None:
            return str(img["src"]).strip()
    return ""


_EXTRACTORS: Dict[str, Callable[[str], str]] = {
    "title": extract_title,
    "link": extract_link,
    "description": extract_description,
    "content": extract_content,
    "pub_date": extract_pub_date,
    "image_url": extract_image,
}


def parse_block(block: str) -> Optional[RawFeedItem]:
    fields = {name: extractor(block) for name, extractor in _EXTRACTORS.items()}
    if not fields["title"] or not fields["link"]:
        return None
    return RawFeedItem(**fields)


def parse_feed(raw_xml: Optional[str]) -> List[RawFeedItem]:
    """Return every item with both a title and a link.

    RSS ``<item>`` blocks are listed first, then Atom ``<entry>`` blocks.
    """
    if not raw_xml:
        return []
    items: List[RawFeedItem] = []
    for pattern in (_ITEM_BLOCK, _ENTRY_BLOCK):
        for match in pattern.finditer(raw_xml):
            item = parse_block(match.group(1))
            if item is not None:
                items.append(item)
    return items


def looks_like_feed(raw_xml: Optional[str]) -> bool:
    if not raw_xml:
        return False
    return "<rss" in raw_xml or "<feed" in raw_xml or "<channel>" in raw_xml


def parse_feed_date(value: Optional[str]) -> Optional[datetime]:
    """Parse RFC 822 or ISO 8601 dates; naive results are taken as UTC."""
    text = (value or "").strip()
    if not text:
        return None
    parsed: Optional[datetime] = None
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is None:
        iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
        try:
            parsed = datetime.fromisoformat(iso_text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = [
    "CONTENT_MAX_LENGTH",
    "DESCRIPTION_MAX_LENGTH",
    "extract_content",
    "extract_description",
    "extract_image",
    "extract_link",
    "extract_pub_date",
    "extract_title",
    "looks_like_feed",
    "parse_block",
    "parse_feed",
    "parse_feed_date",
]
