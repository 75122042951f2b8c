from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

import psycopg

from rss_pipeline.adapters.db_postgres_shared import as_int, as_str
from rss_pipeline.domain.models import Feed

_FEED_SELECT = """
    SELECT f.id, f.name, f.url, f.country_id, f.category, f.is_active,
           f.default_image_url, f.last_fetched_at, f.fetch_error,
           c.code AS country_code, c.retell_ratio AS country_retell_ratio
    FROM news_rss_feeds f
    LEFT JOIN news_countries c ON c.id = f.country_id
"""


def feed_from_row(row: Mapping[str, Any]) -> Feed:
    return Feed(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        url=str(row.get("url") or ""),
        country_id=str(row.get("country_id") or ""),
        country_code=as_str(row.get("country_code")),
        country_retell_ratio=as_int(row.get("country_retell_ratio")),
        category=as_str(row.get("category")),
        is_active=bool(row.get("is_active", True)),
        default_image_url=as_str(row.get("default_image_url")),
        last_fetched_at=row.get("last_fetched_at"),
        fetch_error=as_str(row.get("fetch_error")),
    )


def get_feed(cur: psycopg.Cursor, feed_id: str) -> Optional[Feed]:
    cur.execute(_FEED_SELECT + " WHERE f.id = %s", (feed_id,))
    row = cur.fetchone()
    return feed_from_row(row) if row else None


def list_active_feeds(cur: psycopg.Cursor, country_id: Optional[str] = None) -> List[Feed]:
    clauses = ["f.is_active = TRUE"]
    params: List[Any] = []
    if country_id:
        clauses.append("f.country_id = %s")
        params.append(country_id)
    cur.execute(_FEED_SELECT + " WHERE " + " AND ".join(clauses), tuple(params))
    return [feed_from_row(row) for row in cur.fetchall()]


def country_exists(cur: psycopg.Cursor, country_id: str) -> bool:
    cur.execute("SELECT 1 FROM news_countries WHERE id::text = %s", (country_id,))
    return cur.fetchone() is not None


def mark_feed_fetched(cur: psycopg.Cursor, feed_id: str, *, error: Optional[str] = None) -> None:
    cur.execute(
        """
        UPDATE news_rss_feeds
        SET last_fetched_at = %s,
            fetch_error = %s,
            updated_at = now()
        WHERE id = %s
        """,
        (datetime.now(timezone.utc), error, feed_id),
    )


__all__ = ["country_exists", "feed_from_row", "get_feed", "list_active_feeds", "mark_feed_fetched"]
