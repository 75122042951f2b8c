from __future__ import annotations

from typing import Any, Dict, List

from rss_pipeline.adapters.http_functions import post_function
from rss_pipeline.domain.language import language_for_country
from rss_pipeline.domain.models import PipelineItem, RetellSettings

DIALOGUE_FUNCTION = "generate-dialogue"
THREAD_PROBABILITY = 30


class DialogueError(RuntimeError):
    """Raised when dialogue generation fails or returns nothing usable."""


def build_dialogue_payload(item: PipelineItem, settings: RetellSettings) -> Dict[str, Any]:
    """Construct the request body for the dialogue/tweet generation service."""

    title = item.display_title
    description = item.display_description
    content = item.display_content or (item.original_content or "")
    if not title and not content:
        raise ValueError("News item has no text to build a dialogue from")
    return {
        "storyContext": f"News article: {title}",
        "newsContext": f"{description}\n\n{content}".strip(),
        "messageCount": settings.dialogue_count,
        "generateTweets": settings.auto_tweets_enabled,
        "tweetCount": settings.tweet_count,
        "contentLanguage": language_for_country(item.country_code),
        "enableThreading": True,
        "threadProbability": THREAD_PROBABILITY,
    }


def generate_dialogue(payload: Dict[str, Any]) -> Dict[str, List[Any]]:
    """Call the generation service; return ``{"dialogue": [...], "tweets": [...]}``."""

    response = post_function(DIALOGUE_FUNCTION, payload)
    if not response.ok:
        raise DialogueError(f"HTTP {response.status_code}: {response.text[:160]}")
    data = response.json()
    if not isinstance(data, dict) or not data.get("success"):
        error = data.get("error") if isinstance(data, dict) else None
        raise DialogueError(error or "Dialogue generation reported failure")
    dialogue = data.get("dialogue") or []
    if not isinstance(dialogue, list) or not dialogue:
        raise DialogueError("Dialogue generation returned no messages")
    tweets = data.get("tweets") or []
    if not isinstance(tweets, list):
        tweets = []
    return {"dialogue": dialogue, "tweets": tweets}


__all__ = ["DialogueError", "build_dialogue_payload", "generate_dialogue"]
