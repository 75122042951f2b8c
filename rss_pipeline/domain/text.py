"""Entity decoding, tag stripping and slug generation for feed text."""

from __future__ import annotations

import re
import threading
import time
from typing import Optional

_NAMED_ENTITIES = {
    "nbsp": " ",
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}
_ENTITY_PATTERN = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[a-zA-Z]+);")
_TAG_PATTERN = re.compile(r"<[^>]+>")
_DECODED_TAG_PATTERN = re.compile(r"</?[a-zA-Z][^>]*>")
_CDATA_PATTERN = re.compile(r"<!\[CDATA\[|\]\]>")
_WHITESPACE_PATTERN = re.compile(r"\s+")

_SLUG_STRIP_PATTERN = re.compile(r"[^\w\s-]")
_SLUG_HYPHENS_PATTERN = re.compile(r"-+")
SLUG_MAX_LENGTH = 100

_slug_lock = threading.Lock()
_last_slug_ms = 0


def _replace_entity(match: re.Match) -> str:
    token = match.group(1)
    if token.startswith("#"):
        try:
            if token[1:2] in ("x", "X"):
                codepoint = int(token[2:], 16)
            else:
                codepoint = int(token[1:])
            if codepoint == 0 or 0xD800 <= codepoint <= 0xDFFF:
                return "\ufffd"
            return chr(codepoint)
        except (ValueError, OverflowError):
            return match.group(0)
    replacement = _NAMED_ENTITIES.get(token.lower())
    return replacement if replacement is not None else match.group(0)


def decode_html_entities(text: Optional[str]) -> str:
    """Decode the common named entities and numeric character references.

    Decoding is a single pass, so ``&amp;lt;`` becomes ``&lt;`` rather than ``<``.
    Unknown named entities are left untouched.
    """
    if not text:
        return ""
    return _ENTITY_PATTERN.sub(_replace_entity, text)


def strip_cdata(text: Optional[str]) -> str:
    if not text:
        return ""
    return _CDATA_PATTERN.sub("", text)


def strip_tags(text: Optional[str]) -> str:
    if not text:
        return ""
    return _TAG_PATTERN.sub(" ", text)


def clean_text(text: Optional[str]) -> str:
    """Plain-text fields such as titles: CDATA markers removed, entities decoded."""
    value = decode_html_entities(strip_cdata(text))
    return _WHITESPACE_PATTERN.sub(" ", value).strip()


def clean_markup(text: Optional[str], *, max_length: Optional[int] = None) -> str:
    """Turn a CDATA/HTML fragment into plain text, truncating after decoding.

    Escaped markup such as ``&lt;p&gt;`` is removed once decoded, but only
    where it has the shape of a tag, so a bare ``<`` or ``>`` in the text stays.
    """
    value = decode_html_entities(strip_tags(strip_cdata(text)))
    value = _DECODED_TAG_PATTERN.sub(" ", value)
    value = _WHITESPACE_PATTERN.sub(" ", value).strip()
    if max_length is not None:
        value = value[:max_length]
    return value


def _to_base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number <= 0:
        return "0"
    out = []
    while number:
        number, remainder = divmod(number, 36)
        out.append(digits[remainder])
    return "".join(reversed(out))


def _next_slug_millis(now_ms: Optional[int]) -> int:
    global _last_slug_ms
    current = int(time.time() * 1000) if now_ms is None else int(now_ms)
    with _slug_lock:
        if current <= _last_slug_ms:
            current = _last_slug_ms + 1
        _last_slug_ms = current
    return current


def slugify(title: Optional[str]) -> str:
    value = decode_html_entities(title).lower()
    value = _SLUG_STRIP_PATTERN.sub("", value)
    value = _WHITESPACE_PATTERN.sub("-", value.strip())
    value = _SLUG_HYPHENS_PATTERN.sub("-", value)
    return value.strip("-")[:SLUG_MAX_LENGTH].strip("-")


def generate_slug(title: Optional[str], *, now_ms: Optional[int] = None) -> str:
    """Build a URL slug from ``title`` with a base-36 millisecond suffix.

    The suffix is monotonic within the process, so repeated titles still get
    distinct slugs.
    """
    suffix = _to_base36(_next_slug_millis(now_ms))
    base = slugify(title)
    return f"{base}-{suffix}" if base else suffix


__all__ = [
    "SLUG_MAX_LENGTH",
    "clean_markup",
    "clean_text",
    "decode_html_entities",
    "generate_slug",
    "slugify",
    "strip_cdata",
    "strip_tags",
]
