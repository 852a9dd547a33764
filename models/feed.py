from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union
from urllib.parse import quote

from pydantic import BaseModel, Field


class PayloadFormat(str, Enum):
    """Shape of the body a feed strategy is expected to return."""
    DIRECT_XML = "direct-xml"
    WRAPPED_JSON_XML = "wrapped-json-xml"
    JSON_ITEMS = "json-items"

    @property
    def expects_xml(self) -> bool:
        return self is not PayloadFormat.JSON_ITEMS


class FeedStrategy(BaseModel):
    """One way of retrieving a feed: an optional relay plus the payload format it returns."""

    proxy_url_prefix: Optional[str] = Field(
        default=None, description="Relay prefix; the encoded feed URL is appended"
    )
    payload_format: PayloadFormat = Field(..., description="Expected payload format")

    class Config:
        frozen = True

    def build_url(self, feed_url: str) -> str:
        """URL to request for this strategy."""
        if not self.proxy_url_prefix:
            return feed_url
        return f"{self.proxy_url_prefix}{quote(feed_url, safe='')}"

    @property
    def label(self) -> str:
        return self.proxy_url_prefix or "direct"


class FeedSource(BaseModel):
    """A named feed endpoint and its ordered retrieval strategies."""

    name: str = Field(..., description="Source name")
    feed_url: str = Field(..., description="RSS endpoint")
    strategies: tuple[FeedStrategy, ...] = Field(..., min_length=1)

    class Config:
        frozen = True


# Sniffed payloads. Items are plain dicts with the keys
# title, description, link, pub_date, author, source.
RawItem = dict[str, Any]


@dataclass(frozen=True)
class XmlItems:
    items: list[RawItem] = field(default_factory=list)


@dataclass(frozen=True)
class JsonItems:
    items: list[RawItem] = field(default_factory=list)


@dataclass(frozen=True)
class Unrecognized:
    reason: str


ParsedPayload = Union[XmlItems, JsonItems, Unrecognized]
