from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

SUMMARY_MAX_CHARS = 200
DEFAULT_SOURCE_NAME = "Financial News"

# Query parameters that only track the click, never identify the article
_TRACKING_PARAMS = {
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content",
    "guccounter", "guce_referrer", "guce_referrer_sig", ".tsrc", "tsrc",
    "ncid", "soc_src", "soc_trk", "cmpid", "fbclid", "gclid", "mod", "ref",
}


def normalize_link(url: str) -> str:
    """
    Make article links comparable across feeds and relays.

    Forces https, lowercases the host, drops the fragment, the trailing slash
    and tracking query parameters. Returns "" for empty and placeholder links.
    """
    url = (url or "").strip()
    if not url or url == "#":
        return ""
    parsed = urlparse(url)
    if not parsed.netloc:
        return url.lower()
    query = urlencode(
        [
            (k, v)
            for k, v in parse_qsl(parsed.query, keep_blank_values=True)
            if k.lower() not in _TRACKING_PARAMS
        ],
        doseq=True,
    )
    return urlunparse((
        "https",
        parsed.netloc.lower(),
        parsed.path.rstrip("/"),
        "",
        query,
        "",
    ))


class Article(BaseModel):
    """Canonical news article, immutable once built."""

    title: str = Field(..., description="Article headline")
    summary: str = Field(default="", description="HTML-free snippet, at most 200 chars")
    link: str = Field(default="", description="Article URL")
    published_at: Optional[datetime] = Field(
        default=None, description="Publication timestamp (UTC)"
    )
    source_name: str = Field(default=DEFAULT_SOURCE_NAME, description="Publisher display name")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "title": "Apple Reports Record Earnings",
                "summary": "Apple Inc. reported record quarterly earnings...",
                "link": "https://finance.yahoo.com/news/apple-record-earnings",
                "published_at": "2025-11-02T10:00:00Z",
                "source_name": "Yahoo Finance",
            }
        }

    @field_validator("title", "source_name", mode="before")
    @classmethod
    def _strip(cls, value):
        return str(value or "").strip()

    @field_validator("summary", mode="before")
    @classmethod
    def _truncate_summary(cls, value):
        value = (value or "").strip()
        return value[:SUMMARY_MAX_CHARS]

    @field_validator("published_at")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def full_text(self) -> str:
        """Lowercased title, summary and link, the text relevancy scoring reads."""
        return f"{self.title} {self.summary} {self.link}".lower()

    @property
    def headline_text(self) -> str:
        """Lowercased title and summary, without the link."""
        return f"{self.title} {self.summary}".lower()

    @property
    def normalized_link(self) -> str:
        return normalize_link(self.link)


class ScoredArticle(BaseModel):
    """An article paired with its relevance score for one ticker."""

    article: Article
    score: int = Field(..., ge=0)
    sentiment_hits: int = Field(default=0, ge=0)

    class Config:
        frozen = True
