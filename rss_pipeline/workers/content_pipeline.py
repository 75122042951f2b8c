from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from rss_pipeline.adapters.http_page_cache import refresh_article_cache
from rss_pipeline.adapters.llm_dialogue import build_dialogue_payload, generate_dialogue
from rss_pipeline.adapters.llm_retell import request_retell
from rss_pipeline.domain import RetellSettings
from rss_pipeline.workers import log_error, log_info

WORKER = "content"
RETELL_DELAY_SECONDS = 0.5
DIALOGUE_DELAY_SECONDS = 0.3


@dataclass
class StageStats:
    ok: int = 0
    failed: int = 0

    def record(self, success: bool) -> None:
        if success:
            self.ok += 1
        else:
            self.failed += 1


def retell_item(item: Any, settings: RetellSettings) -> bool:
    """Retell one stored item and refresh its page; ``False`` on failure."""
    try:
        request_retell(item.id, model=settings.retell_model)
    except Exception as exc:
        log_error(WORKER, f"retell:{item.id}", exc)
        return False
    refresh_article_cache(item.country_code, item.slug)
    return True


def generate_item_dialogue(adapter, news_id: str, settings: RetellSettings) -> bool:
    """Generate dialogue (and tweets when enabled) for one item.

    The item is re-read first so that retold English text written by the
    retell service is what the dialogue is built from.
    """
    try:
        rows = adapter.fetch_pipeline_items([news_id])
        if not rows:
            raise LookupError("News item not found")
        item = rows[0]
        generated = generate_dialogue(build_dialogue_payload(item, settings))
        tweets = generated["tweets"] if settings.auto_tweets_enabled and generated["tweets"] else None
        adapter.update_item_dialogue(news_id, dialogue=generated["dialogue"], tweets=tweets)
    except Exception as exc:
        log_error(WORKER, f"dialogue:{news_id}", exc)
        return False
    return True


def process_item(
    adapter,
    item: Any,
    settings: RetellSettings,
    *,
    retell_stats: Optional[StageStats] = None,
    dialogue_stats: Optional[StageStats] = None,
) -> bool:
    """Retell, then generate dialogue when enabled. Dialogue runs only after a successful retell."""
    retold = retell_item(item, settings)
    if retell_stats is not None:
        retell_stats.record(retold)
    if not retold:
        return False
    if not settings.auto_dialogue_enabled:
        return True
    produced = generate_item_dialogue(adapter, item.id, settings)
    if dialogue_stats is not None:
        dialogue_stats.record(produced)
    return produced


def retell_items(
    items: Sequence[Any],
    settings: RetellSettings,
    *,
    delay: float = RETELL_DELAY_SECONDS,
) -> StageStats:
    stats = StageStats()
    for index, item in enumerate(items):
        if index and delay:
            time.sleep(delay)
        stats.record(retell_item(item, settings))
    log_info(WORKER, f"retell: ok={stats.ok} failed={stats.failed}")
    return stats


def generate_dialogues(
    adapter,
    items: Sequence[Any],
    settings: RetellSettings,
    *,
    delay: float = DIALOGUE_DELAY_SECONDS,
) -> StageStats:
    stats = StageStats()
    for index, item in enumerate(items):
        if index and delay:
            time.sleep(delay)
        stats.record(generate_item_dialogue(adapter, item.id, settings))
    log_info(WORKER, f"dialogue: ok={stats.ok} failed={stats.failed}")
    return stats


__all__ = [
    "StageStats",
    "generate_dialogues",
    "generate_item_dialogue",
    "process_item",
    "retell_item",
    "retell_items",
]
