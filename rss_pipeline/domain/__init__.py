"""Domain-level objects shared across workers and adapters."""

from __future__ import annotations

from .feed_parser import looks_like_feed, parse_feed, parse_feed_date
from .language import language_for_country
from .models import (
    Feed,
    FeedRunResult,
    FeedValidation,
    IngestAccumulator,
    InsertedItem,
    PipelineItem,
    RawFeedItem,
    RetellSettings,
)
from .sampling import BULK_RETELL_STRIDE, FULL_RATIO, apply_cap, bernoulli_pick, effective_ratio, stride_pick
from .text import clean_markup, decode_html_entities, generate_slug

__all__ = [
    "BULK_RETELL_STRIDE",
    "FULL_RATIO",
    "Feed",
    "FeedRunResult",
    "FeedValidation",
    "IngestAccumulator",
    "InsertedItem",
    "PipelineItem",
    "RawFeedItem",
    "RetellSettings",
    "apply_cap",
    "bernoulli_pick",
    "clean_markup",
    "decode_html_entities",
    "effective_ratio",
    "generate_slug",
    "language_for_country",
    "looks_like_feed",
    "parse_feed",
    "parse_feed_date",
    "stride_pick",
]
