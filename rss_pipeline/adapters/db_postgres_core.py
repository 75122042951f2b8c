from __future__ import annotations

import contextlib
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from rss_pipeline.adapters import (
    db_postgres_feeds as feeds,
    db_postgres_items as items,
    db_postgres_settings as retell_settings,
)
from rss_pipeline.config import Settings, get_settings
from rss_pipeline.domain import Feed, PipelineItem, RetellSettings

_shared_connection: Optional[psycopg.Connection] = None


def connect(settings: Settings) -> psycopg.Connection:
    """Open an autocommit connection with ``search_path`` set to the configured schema."""
    conn = psycopg.connect(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_name,
        user=settings.db_user,
        password=settings.db_password,
        autocommit=True,
    )
    conn.execute(sql.SQL("SET search_path TO {}").format(sql.Identifier(settings.db_schema or "public")))
    return conn


def _shared() -> psycopg.Connection:
    global _shared_connection
    if _shared_connection is None or _shared_connection.closed:
        _shared_connection = connect(get_settings())
    return _shared_connection


class PostgresAdapter:
    """Feed, news item and settings queries over one psycopg connection.

    Each call runs in its own cursor; the per-table SQL lives in the
    ``db_postgres_*`` modules.
    """

    def __init__(self, connection: Optional[psycopg.Connection] = None) -> None:
        self._owns_connection = connection is None
        self._conn = connection or _shared()

    @contextlib.contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor]:
        if self._conn.closed and self._owns_connection:
            self._conn = _shared()
        with self._conn.cursor(row_factory=dict_row) as cur:
            try:
                yield cur
            except Exception:
                if not self._conn.autocommit:
                    self._conn.rollback()
                raise
            if not self._conn.autocommit:
                self._conn.commit()

    # ------------------------------------------------------------------
    # Feeds
    # ------------------------------------------------------------------
    def get_feed(self, feed_id: str) -> Optional[Feed]:
        with self._cursor() as cur:
            return feeds.get_feed(cur, feed_id)

    def list_active_feeds(self, country_id: Optional[str] = None) -> List[Feed]:
        with self._cursor() as cur:
            return feeds.list_active_feeds(cur, country_id)

    def country_exists(self, country_id: str) -> bool:
        with self._cursor() as cur:
            return feeds.country_exists(cur, country_id)

    def mark_feed_fetched(self, feed_id: str, *, error: Optional[str] = None) -> None:
        with self._cursor() as cur:
            feeds.mark_feed_fetched(cur, feed_id, error=error)

    # ------------------------------------------------------------------
    # News items
    # ------------------------------------------------------------------
    def get_existing_external_ids(self, feed_id: str) -> Set[str]:
        with self._cursor() as cur:
            return items.get_existing_external_ids(cur, feed_id)

    def insert_news_item(self, row: Mapping[str, Any]) -> Optional[str]:
        with self._cursor() as cur:
            return items.insert_news_item(cur, row)

    def fetch_pipeline_items(self, news_ids: Sequence[str]) -> List[PipelineItem]:
        with self._cursor() as cur:
            return items.fetch_pipeline_items(cur, news_ids)

    def update_item_dialogue(
        self,
        news_id: str,
        *,
        dialogue: Sequence[Any],
        tweets: Optional[Sequence[Any]] = None,
    ) -> None:
        with self._cursor() as cur:
            items.update_item_dialogue(cur, news_id, dialogue=dialogue, tweets=tweets)

    def fetch_pending_items(
        self,
        *,
        since: datetime,
        global_ratio: int,
        limit: int,
        country_code: Optional[str] = None,
    ) -> List[PipelineItem]:
        with self._cursor() as cur:
            return items.fetch_pending_items(
                cur,
                since=since,
                global_ratio=global_ratio,
                limit=limit,
                country_code=country_code,
            )

    def count_pending_by_country(self, *, since: datetime, global_ratio: int) -> List[Dict[str, Any]]:
        with self._cursor() as cur:
            return items.count_pending_by_country(cur, since=since, global_ratio=global_ratio)

    def fetch_items_missing_slug(self, limit: int) -> List[Dict[str, Any]]:
        with self._cursor() as cur:
            return items.fetch_items_missing_slug(cur, limit)

    def update_item_slug(self, news_id: str, slug: str) -> bool:
        with self._cursor() as cur:
            return items.update_item_slug(cur, news_id, slug)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def get_retell_settings(self) -> RetellSettings:
        with self._cursor() as cur:
            return retell_settings.get_retell_settings(cur)


__all__ = ["PostgresAdapter", "connect"]
