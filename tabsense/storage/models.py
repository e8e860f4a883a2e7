"""
Persisted models (Pydantic v2).

TabRecord is stored as JSON under the tab's stringified id and serialized with
camelCase keys so the extension popup reads it unchanged.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tabsense.classification.topics import Topic, validate_topic
from tabsense.utils.urls import extract_domain


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class TabRecord(BaseModel):
    """Cached classification for one tab. Rewritten whole, never patched."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    summary: str = Field(min_length=1)
    topic: Topic = Topic.OTHER
    fav_icon_url: str | None = Field(default=None, alias="favIconUrl")
    url: str = ""
    domain: str = "unknown"
    timestamp: int = Field(default_factory=now_ms)

    @field_validator("topic", mode="before")
    @classmethod
    def _closed_topic(cls, value: Any) -> Topic:
        return validate_topic(value)

    @classmethod
    def build(
        cls,
        *,
        title: str | None,
        summary: str,
        topic: Topic,
        fav_icon_url: str | None,
        url: str | None,
        timestamp: int | None = None,
    ) -> TabRecord:
        """Assemble a record from event metadata, deriving the domain."""
        return cls(
            title=title or "",
            summary=summary,
            topic=topic,
            fav_icon_url=fav_icon_url,
            url=url or "",
            domain=extract_domain(url),
            timestamp=timestamp if timestamp is not None else now_ms(),
        )

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
