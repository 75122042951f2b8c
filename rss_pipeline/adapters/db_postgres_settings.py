from __future__ import annotations

from typing import Optional

import psycopg

from rss_pipeline.adapters.db_postgres_shared import as_int, as_str
from rss_pipeline.domain.models import RetellSettings


def _flag(value: Optional[bool], default: bool) -> bool:
    return default if value is None else bool(value)


def get_retell_settings(cur: psycopg.Cursor) -> RetellSettings:
    cur.execute(
        """
        SELECT news_auto_retell_enabled, news_auto_dialogue_enabled, news_auto_tweets_enabled,
               news_retell_ratio, news_dialogue_count, news_tweet_count, llm_text_model
        FROM settings
        LIMIT 1
        """
    )
    row = cur.fetchone()
    defaults = RetellSettings()
    if not row:
        return defaults
    return RetellSettings(
        auto_retell_enabled=_flag(row.get("news_auto_retell_enabled"), defaults.auto_retell_enabled),
        auto_dialogue_enabled=_flag(row.get("news_auto_dialogue_enabled"), defaults.auto_dialogue_enabled),
        auto_tweets_enabled=_flag(row.get("news_auto_tweets_enabled"), defaults.auto_tweets_enabled),
        retell_model=as_str(row.get("llm_text_model")),
        dialogue_count=as_int(row.get("news_dialogue_count")) or defaults.dialogue_count,
        tweet_count=as_int(row.get("news_tweet_count")) or defaults.tweet_count,
        retell_ratio=(
            as_int(row.get("news_retell_ratio"))
            if row.get("news_retell_ratio") is not None
            else defaults.retell_ratio
        ),
    )


__all__ = ["get_retell_settings"]
