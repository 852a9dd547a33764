"""
Feed payload sniffing and normalization.

Relays return three shapes: raw RSS/Atom XML, a JSON envelope with the XML
under "contents", or a JSON object with an "items" list. `sniff_payload`
turns a raw body into a tagged `ParsedPayload`; `parse` turns that into
canonical Article records. Neither raises on bad input.
"""

import html
import json
import re
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlparse

import feedparser
from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from models.feed import JsonItems, ParsedPayload, PayloadFormat, RawItem, Unrecognized, XmlItems
from models.news import Article, DEFAULT_SOURCE_NAME
from utils.logger import get_logger

logger = get_logger("feed_parser")

XML_PREFIXES = ("<?xml", "<rss", "<feed")
_LEADING_NOISE = "\ufeff \t\r\n"

DOMAIN_SOURCE_NAMES = {
    "finance.yahoo.com": "Yahoo Finance",
    "yahoo.com": "Yahoo Finance",
    "cnbc.com": "CNBC",
    "reuters.com": "Reuters",
    "marketwatch.com": "MarketWatch",
    "dowjones.io": "MarketWatch",
    "bloomberg.com": "Bloomberg",
    "wsj.com": "Wall Street Journal",
    "dj.com": "Wall Street Journal",
    "seekingalpha.com": "Seeking Alpha",
    "fool.com": "Motley Fool",
    "benzinga.com": "Benzinga",
    "investing.com": "Investing.com",
    "nasdaq.com": "Nasdaq",
    "foxbusiness.com": "Fox Business",
    "ft.com": "Financial Times",
    "barrons.com": "Barron's",
    "zacks.com": "Zacks",
}
_IGNORED_LABELS = {"www", "feeds", "rss", "news"}


def clean_html(text: Optional[str]) -> str:
    """Decode entities, drop tags and collapse whitespace. Non-strings give ""."""
    if not text or not isinstance(text, str):
        return ""
    soup = BeautifulSoup(html.unescape(text), "html.parser")
    return re.sub(r"\s+", " ", soup.get_text(separator=" ")).strip()


def parse_published(value: Any) -> Optional[datetime]:
    """Parse RFC 822 / ISO timestamps to aware UTC datetimes; None if unparsable."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = date_parser.parse(str(value))
        except (ValueError, OverflowError):
            logger.debug("timestamp_parse_failed", value=str(value)[:40])
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def source_name_from_domain(link: str) -> Optional[str]:
    """Display name for a link's domain: known table first, else the title-cased first label."""
    host = (urlparse(link or "").hostname or "").lower()
    if not host:
        return None
    for domain, name in DOMAIN_SOURCE_NAMES.items():
        if host == domain or host.endswith("." + domain):
            return name
    labels = [label for label in host.split(".") if label]
    while len(labels) > 2 and labels[0] in _IGNORED_LABELS:
        labels = labels[1:]
    if labels and labels[0] == "www":
        return None
    return labels[0].title() if labels else None


def derive_source_name(author: Optional[str], source: Optional[str], link: str) -> str:
    """Byline, then the feed's <source> tag, then the link domain, then the fallback label."""
    for candidate in (author, source):
        if candidate and str(candidate).strip():
            return str(candidate).strip()
    return source_name_from_domain(link) or DEFAULT_SOURCE_NAME


def _looks_like_xml(text: str) -> bool:
    head = text.lstrip(_LEADING_NOISE)[:64].lower()
    return head.startswith(XML_PREFIXES)


def _sniff_xml(text: str) -> ParsedPayload:
    if not isinstance(text, str) or not _looks_like_xml(text):
        return Unrecognized("payload is not an XML feed")

    parsed = feedparser.parse(text.lstrip(_LEADING_NOISE))
    entries = parsed.get("entries") or []
    if not entries and parsed.get("bozo"):
        return Unrecognized(f"malformed xml: {parsed.get('bozo_exception')}")

    items = []
    for entry in entries:
        source = entry.get("source") or {}
        items.append({
            "title": entry.get("title"),
            "description": entry.get("summary") or entry.get("description"),
            "link": entry.get("link"),
            "pub_date": entry.get("published") or entry.get("updated"),
            "author": entry.get("author"),
            "source": source.get("title") if hasattr(source, "get") else None,
        })
    return XmlItems(items)


def _first_text(data: dict, *keys: str) -> Optional[str]:
    """First non-empty string value among keys; other types are ignored."""
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _json_item(item: dict) -> RawItem:
    source = item.get("source")
    source = _first_text(source, "name", "title") if isinstance(source, dict) else _first_text(item, "source")
    return {
        "title": _first_text(item, "title"),
        "description": _first_text(item, "description", "contentSnippet", "content"),
        "link": _first_text(item, "link", "url"),
        "pub_date": _first_text(item, "pubDate", "published", "isoDate"),
        "author": _first_text(item, "author", "creator"),
        "source": source,
    }


def _sniff_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def sniff_payload(raw: str, declared_format: PayloadFormat) -> ParsedPayload:
    """Classify a raw body as XML items, JSON items or unrecognized."""
    if not raw or not raw.strip():
        return Unrecognized("empty payload")

    if declared_format is PayloadFormat.DIRECT_XML:
        return _sniff_xml(raw)

    data = _sniff_json(raw)
    if data is None:
        return Unrecognized("payload is not valid JSON")

    if declared_format is PayloadFormat.WRAPPED_JSON_XML:
        contents = data.get("contents") if isinstance(data, dict) else None
        if not isinstance(contents, str):
            return Unrecognized("JSON envelope has no contents")
        return _sniff_xml(contents)

    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get("items"), list):
        items = data["items"]
    elif (
        isinstance(data, dict)
        and isinstance(data.get("feed"), dict)
        and isinstance(data["feed"].get("items"), list)
    ):
        items = data["feed"]["items"]
    else:
        return Unrecognized("JSON has no items list")
    return JsonItems([_json_item(item) for item in items if isinstance(item, dict)])


def normalize_item(item: RawItem, ingested_at: Optional[datetime] = None) -> Optional[Article]:
    """Build an Article from a raw item; None when the item has no title."""
    title = clean_html(item.get("title"))
    if not title:
        return None
    link = item.get("link")
    link = link.strip() if isinstance(link, str) else ""
    published = parse_published(item.get("pub_date")) or ingested_at or datetime.now(timezone.utc)
    return Article(
        title=title,
        summary=clean_html(item.get("description")),
        link=link,
        published_at=published,
        source_name=derive_source_name(item.get("author"), item.get("source"), link),
    )


def parse(raw: str, declared_format: PayloadFormat) -> list[Article]:
    """Parse a raw feed body into articles. Unrecognized payloads yield []."""
    payload = sniff_payload(raw, declared_format)
    ingested_at = datetime.now(timezone.utc)

    match payload:
        case XmlItems(items=items) | JsonItems(items=items):
            articles = [normalize_item(item, ingested_at) for item in items]
            return [article for article in articles if article is not None]
        case Unrecognized(reason=reason):
            logger.debug(
                "feed_payload_unrecognized",
                declared_format=declared_format.value,
                reason=reason
            )
            return []
