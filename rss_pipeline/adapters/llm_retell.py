from __future__ import annotations

from typing import Optional

from rss_pipeline.adapters.http_functions import post_function
from rss_pipeline.config import get_settings

RETELL_FUNCTION = "retell-news"


class RetellError(RuntimeError):
    """Raised when the retell service rejects or fails a request."""


def request_retell(news_id: str, *, model: Optional[str] = None) -> None:
    """Ask the retell service to rewrite one stored item.

    The service writes the retold fields itself; any non-2xx answer raises
    ``RetellError`` so callers can count the failure.
    """
    resolved_model = model or get_settings().retell_model
    response = post_function(RETELL_FUNCTION, {"newsId": news_id, "model": resolved_model})
    if not response.ok:
        raise RetellError(f"HTTP {response.status_code}: {response.text[:160]}")


__all__ = ["RetellError", "request_retell"]
