from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FetchRssRequest(BaseModel):
    """Body of ``POST /fetch-rss``; field names follow the camelCase wire format."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: Optional[str] = None
    feed_id: Optional[str] = Field(default=None, alias="feedId")
    feed_url: Optional[str] = Field(default=None, alias="feedUrl")
    country_id: Optional[str] = Field(default=None, alias="countryId")
    country_code: Optional[str] = Field(default=None, alias="countryCode")
    limit: Optional[int] = None
    batch_size: Optional[int] = Field(default=None, alias="batchSize")


__all__ = ["FetchRssRequest"]
