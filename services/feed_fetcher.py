import asyncio
from functools import partial
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple
from urllib.parse import urlencode

import aiohttp

from config.settings import settings
from models.feed import FeedSource, FeedStrategy, PayloadFormat
from models.news import Article
from services import feed_parser
from utils.logger import get_logger

logger = get_logger("feed_fetcher")

XML_ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5"
JSON_ACCEPT = "application/json, text/plain;q=0.8, */*;q=0.5"

BACKEND_SOURCE_NAME = "backend-proxy"


async def first_non_empty(attempts: Iterable[Callable[[], Awaitable[list]]]) -> list:
    """Run attempts in order and return the first non-empty result, else []."""
    for attempt in attempts:
        result = await attempt()
        if result:
            return result
    return []


class FeedFetcher:
    """Retrieves one feed source by walking its strategies until one yields articles."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None
    ):
        """
        Initialize the fetcher.

        Args:
            session: Shared aiohttp session
            timeout: Hard limit per strategy attempt in seconds
            user_agent: User-Agent header value
        """
        self.session = session
        self.timeout = timeout if timeout is not None else settings.feed_timeout_seconds
        self.user_agent = user_agent or settings.user_agent

    async def _get(self, url: str, payload_format: PayloadFormat) -> Tuple[int, str, str]:
        """GET a URL and return (status, content type, body)."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": XML_ACCEPT if payload_format.expects_xml else JSON_ACCEPT,
        }
        async with self.session.get(url, headers=headers, allow_redirects=True) as resp:
            body = await resp.text()
            return resp.status, resp.headers.get("Content-Type", ""), body

    async def try_strategy(self, source: FeedSource, strategy: FeedStrategy) -> List[Article]:
        """
        One retrieval attempt. Every failure mode returns [] so the caller
        moves on to the next strategy.
        """
        url = strategy.build_url(source.feed_url)
        fmt = strategy.payload_format

        try:
            status, content_type, body = await asyncio.wait_for(
                self._get(url, fmt), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            # Relays time out all the time; not an error.
            logger.debug(
                "feed_strategy_timeout",
                source=source.name,
                strategy=strategy.label,
                timeout=self.timeout
            )
            return []
        except (aiohttp.ClientError, UnicodeDecodeError) as e:
            logger.debug(
                "feed_strategy_request_failed",
                source=source.name,
                strategy=strategy.label,
                error=str(e) or e.__class__.__name__
            )
            return []

        if not 200 <= status < 300:
            logger.debug(
                "feed_strategy_http_error",
                source=source.name,
                strategy=strategy.label,
                status=status
            )
            return []

        if "text/html" in (content_type or "").lower():
            logger.debug(
                "feed_strategy_wrong_content_type",
                source=source.name,
                strategy=strategy.label,
                content_type=content_type
            )
            return []

        try:
            articles = feed_parser.parse(body, fmt)
        except Exception as e:
            # A payload the parser cannot handle counts as zero items.
            logger.warning(
                "feed_strategy_parse_failed",
                source=source.name,
                strategy=strategy.label,
                error=str(e) or e.__class__.__name__,
                exc_info=True
            )
            return []

        if not articles:
            logger.debug(
                "feed_strategy_no_items",
                source=source.name,
                strategy=strategy.label
            )
        return articles

    async def fetch_source(self, source: FeedSource) -> List[Article]:
        """Articles from the first strategy of `source` that yields any."""
        articles = await first_non_empty(
            partial(self.try_strategy, source, strategy)
            for strategy in source.strategies
        )
        if articles:
            logger.info("feed_source_fetched", source=source.name, count=len(articles))
        else:
            logger.debug("feed_source_exhausted", source=source.name)
        return articles

    async def fetch_backend(self, base_url: str) -> List[Article]:
        """Ask the optional backend proxy (`?type=news`) for items."""
        separator = "&" if "?" in base_url else "?"
        backend = FeedSource(
            name=BACKEND_SOURCE_NAME,
            feed_url=f"{base_url}{separator}{urlencode({'type': 'news'})}",
            strategies=(FeedStrategy(payload_format=PayloadFormat.JSON_ITEMS),),
        )
        return await self.fetch_source(backend)
