"""Domain dataclasses shared across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class RawFeedItem:
    title: str
    link: str
    description: str = ""
    content: str = ""
    pub_date: str = ""
    image_url: str = ""


@dataclass(slots=True)
class Feed:
    id: str
    name: str
    url: str
    country_id: str
    country_code: Optional[str] = None
    country_retell_ratio: Optional[int] = None
    category: Optional[str] = None
    is_active: bool = True
    default_image_url: Optional[str] = None
    last_fetched_at: Optional[datetime] = None
    fetch_error: Optional[str] = None


@dataclass(slots=True)
class InsertedItem:
    id: str
    feed_id: str
    country_id: str
    country_code: Optional[str]
    category: Optional[str]
    slug: str
    title: str
    country_retell_ratio: Optional[int] = None


@dataclass(slots=True)
class FeedRunResult:
    feed_id: str
    feed_name: str
    success: bool
    items_found: int = 0
    items_inserted: int = 0
    duplicates: int = 0
    insert_failures: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "feedId": self.feed_id,
            "feedName": self.feed_name,
            "success": self.success,
        }
        if self.success:
            payload["itemsFound"] = self.items_found
            payload["itemsInserted"] = self.items_inserted
        else:
            payload["error"] = self.error
        return payload


@dataclass
class IngestAccumulator:
    """Items inserted during one orchestrator run, in insertion order."""

    inserted: List[InsertedItem] = field(default_factory=list)

    def add(self, item: InsertedItem) -> None:
        self.inserted.append(item)

    def __len__(self) -> int:
        return len(self.inserted)


@dataclass(slots=True)
class PipelineItem:
    """Text fields the AI stages read for one stored news item."""

    id: str
    title: str
    country_code: Optional[str] = None
    slug: Optional[str] = None
    title_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    content: Optional[str] = None
    content_en: Optional[str] = None
    original_content: Optional[str] = None
    fetched_at: Optional[datetime] = None

    @property
    def display_title(self) -> str:
        return self.title_en or self.title or ""

    @property
    def display_description(self) -> str:
        return self.description_en or self.description or ""

    @property
    def display_content(self) -> str:
        return self.content_en or self.content or ""


@dataclass(slots=True)
class RetellSettings:
    auto_retell_enabled: bool = True
    auto_dialogue_enabled: bool = True
    auto_tweets_enabled: bool = True
    retell_model: Optional[str] = None
    dialogue_count: int = 5
    tweet_count: int = 4
    retell_ratio: int = 100


@dataclass(slots=True)
class FeedValidation:
    valid: bool
    error: Optional[str] = None
    item_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"valid": self.valid}
        if self.error is not None:
            payload["error"] = self.error
        if self.item_count is not None:
            payload["itemCount"] = self.item_count
        return payload


__all__ = [
    "Feed",
    "FeedRunResult",
    "FeedValidation",
    "IngestAccumulator",
    "InsertedItem",
    "PipelineItem",
    "RawFeedItem",
    "RetellSettings",
]
