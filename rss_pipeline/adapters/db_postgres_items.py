from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

import psycopg
from psycopg.types.json import Json

from rss_pipeline.adapters.db_postgres_shared import as_str
from rss_pipeline.domain.models import PipelineItem

NEWS_ITEM_COLUMNS = (
    "feed_id",
    "country_id",
    "external_id",
    "title",
    "title_en",
    "description",
    "description_en",
    "content",
    "content_en",
    "original_content",
    "url",
    "slug",
    "image_url",
    "category",
    "published_at",
    "fetched_at",
)

_PIPELINE_SELECT = """
    SELECT i.id, i.title, i.title_en, i.description, i.description_en,
           i.content, i.content_en, i.original_content, i.slug, i.fetched_at,
           c.code AS country_code
    FROM news_rss_items i
    LEFT JOIN news_countries c ON c.id = i.country_id
"""


def pipeline_item_from_row(row: Mapping[str, Any]) -> PipelineItem:
    return PipelineItem(
        id=str(row["id"]),
        title=str(row.get("title") or ""),
        country_code=as_str(row.get("country_code")),
        slug=as_str(row.get("slug")),
        title_en=as_str(row.get("title_en")),
        description=as_str(row.get("description")),
        description_en=as_str(row.get("description_en")),
        content=as_str(row.get("content")),
        content_en=as_str(row.get("content_en")),
        original_content=as_str(row.get("original_content")),
        fetched_at=row.get("fetched_at"),
    )


def get_existing_external_ids(cur: psycopg.Cursor, feed_id: str) -> Set[str]:
    cur.execute("SELECT external_id, url FROM news_rss_items WHERE feed_id = %s", (feed_id,))
    existing: Set[str] = set()
    for row in cur.fetchall():
        for key in ("external_id", "url"):
            value = row.get(key)
            if value:
                existing.add(str(value))
    return existing


def insert_news_item(cur: psycopg.Cursor, row: Mapping[str, Any]) -> Optional[str]:
    """Insert one item; return its id, or None when (feed_id, external_id) exists."""
    values = [row.get(col) for col in NEWS_ITEM_COLUMNS]
    query = f"""
        INSERT INTO news_rss_items ({', '.join(NEWS_ITEM_COLUMNS)})
        VALUES ({', '.join(['%s'] * len(NEWS_ITEM_COLUMNS))})
        ON CONFLICT (feed_id, external_id) DO NOTHING
        RETURNING id
    """
    cur.execute(query, values)
    inserted = cur.fetchone()
    return str(inserted["id"]) if inserted else None


def fetch_pipeline_items(cur: psycopg.Cursor, news_ids: Sequence[str]) -> List[PipelineItem]:
    unique_ids = [str(item) for item in dict.fromkeys(news_ids) if item]
    if not unique_ids:
        return []
    cur.execute(_PIPELINE_SELECT + " WHERE i.id::text = ANY(%s)", (unique_ids,))
    by_id = {str(row["id"]): pipeline_item_from_row(row) for row in cur.fetchall()}
    return [by_id[news_id] for news_id in unique_ids if news_id in by_id]


def update_item_dialogue(
    cur: psycopg.Cursor,
    news_id: str,
    *,
    dialogue: Sequence[Any],
    tweets: Optional[Sequence[Any]] = None,
) -> None:
    assignments = ["chat_dialogue = %s"]
    params: List[Any] = [Json(list(dialogue))]
    if tweets:
        assignments.append("tweets = %s")
        params.append(Json(list(tweets)))
    params.append(news_id)
    cur.execute(f"UPDATE news_rss_items SET {', '.join(assignments)} WHERE id = %s", tuple(params))


def _pending_clauses(
    *,
    since: datetime,
    global_ratio: int,
    country_code: Optional[str],
) -> Tuple[str, List[Any]]:
    clauses = [
        "i.content_en IS NULL",
        "COALESCE(i.is_archived, FALSE) = FALSE",
        "i.fetched_at >= %s",
        "COALESCE(c.retell_ratio, %s) >= 100",
    ]
    params: List[Any] = [since, global_ratio]
    if country_code:
        clauses.append("lower(c.code) = lower(%s)")
        params.append(country_code)
    return " AND ".join(clauses), params


def fetch_pending_items(
    cur: psycopg.Cursor,
    *,
    since: datetime,
    global_ratio: int,
    limit: int,
    country_code: Optional[str] = None,
) -> List[PipelineItem]:
    where_sql, params = _pending_clauses(since=since, global_ratio=global_ratio, country_code=country_code)
    query = " ".join(
        [
            _PIPELINE_SELECT,
            f"WHERE {where_sql}",
            "ORDER BY i.fetched_at DESC, i.id ASC",
            "LIMIT %s",
        ]
    )
    params.append(limit)
    cur.execute(query, tuple(params))
    return [pipeline_item_from_row(row) for row in cur.fetchall()]


def count_pending_by_country(
    cur: psycopg.Cursor,
    *,
    since: datetime,
    global_ratio: int,
) -> List[Dict[str, Any]]:
    where_sql, params = _pending_clauses(since=since, global_ratio=global_ratio, country_code=None)
    query = f"""
        SELECT c.code AS country_code, c.name AS country_name, COUNT(*) AS pending
        FROM news_rss_items i
        JOIN news_countries c ON c.id = i.country_id
        WHERE {where_sql}
        GROUP BY c.code, c.name
        ORDER BY pending DESC, c.code ASC
    """
    cur.execute(query, tuple(params))
    return [
        {
            "countryCode": row.get("country_code"),
            "countryName": row.get("country_name"),
            "pending": int(row.get("pending") or 0),
        }
        for row in cur.fetchall()
    ]


def fetch_items_missing_slug(cur: psycopg.Cursor, limit: int) -> List[Dict[str, Any]]:
    cur.execute("SELECT id, title FROM news_rss_items WHERE slug IS NULL LIMIT %s", (limit,))
    return [{"id": str(row["id"]), "title": row.get("title") or ""} for row in cur.fetchall()]


def update_item_slug(cur: psycopg.Cursor, news_id: str, slug: str) -> bool:
    cur.execute("UPDATE news_rss_items SET slug = %s WHERE id = %s", (slug, news_id))
    return cur.rowcount > 0


__all__ = [
    "NEWS_ITEM_COLUMNS",
    "count_pending_by_country",
    "fetch_items_missing_slug",
    "fetch_pending_items",
    "fetch_pipeline_items",
    "get_existing_external_ids",
    "insert_news_item",
    "pipeline_item_from_row",
    "update_item_dialogue",
    "update_item_slug",
]
