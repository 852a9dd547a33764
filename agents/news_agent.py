import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Protocol

import aiohttp

from agents.base import BaseAgent
from config.feed_config import FeedSourceRegistry, feed_registry
from config.settings import settings
from models.feed import FeedSource
from models.news import Article
from services.fallback_news import fallback_articles
from services.feed_fetcher import BACKEND_SOURCE_NAME, FeedFetcher
from utils.logger import log_context

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SourceFetcher(Protocol):
    async def fetch_source(self, source: FeedSource) -> List[Article]: ...

    async def fetch_backend(self, base_url: str) -> List[Article]: ...


@dataclass(frozen=True)
class AggregationResult:
    """Outcome of one aggregation cycle."""
    articles: tuple
    used_fallback: bool
    source_counts: Dict[str, int] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NewsAgent(BaseAgent):
    """Agent that fans out over every feed source and merges the results."""

    def __init__(
        self,
        registry: Optional[FeedSourceRegistry] = None,
        fetcher: Optional[SourceFetcher] = None,
        backend_proxy_url: Optional[str] = None,
        stagger_seconds: Optional[float] = None,
        aggregate_timeout: Optional[float] = None,
        recency_days: Optional[int] = None
    ):
        """
        Initialize News Agent.

        Args:
            registry: Feed sources to aggregate (defaults to feeds.yaml)
            fetcher: Source fetcher; an aiohttp-backed FeedFetcher is created per run if omitted
            backend_proxy_url: Optional backend proxy asked before the public feeds
            stagger_seconds: Start delay step between sources
            aggregate_timeout: Upper bound for the whole fan-out
            recency_days: Drop articles older than this
        """
        super().__init__("news_agent")
        self.registry = registry if registry is not None else feed_registry
        self.fetcher = fetcher
        self.backend_proxy_url = backend_proxy_url if backend_proxy_url is not None else settings.backend_proxy_url
        self.stagger_seconds = (
            stagger_seconds if stagger_seconds is not None else settings.feed_stagger_ms / 1000.0
        )
        self.aggregate_timeout = (
            aggregate_timeout if aggregate_timeout is not None else settings.aggregate_timeout_seconds
        )
        self.recency_days = recency_days if recency_days is not None else settings.recency_days

    async def execute(self) -> List[Article]:
        """
        Fetch, merge, dedupe, filter and sort articles from all sources.

        Never raises; falls back to the sample set when nothing usable arrives.
        """
        result = await self.aggregate()
        return list(result.articles)

    async def fetch_all(self) -> List[Article]:
        return await self.execute()

    async def aggregate(self) -> AggregationResult:
        """Run one aggregation cycle and report how it went."""
        refresh_id = uuid.uuid4().hex[:8]
        with log_context(refresh_id=refresh_id):
            self._log_event("news_fetch_started", sources=len(self.registry))

            try:
                source_results = await self._fetch_everything()
            except Exception as e:
                self.logger.error("news_aggregation_failed", error=str(e), exc_info=True)
                source_results = {}

            merged = [article for articles in source_results.values() for article in articles]
            unique = self._filter_duplicates(merged)
            recent = self._filter_recent(unique)
            ordered = self._sort_newest_first(recent)
            counts = {name: len(articles) for name, articles in source_results.items()}

            if not ordered:
                self.logger.warning(
                    "news_fallback_used",
                    sources=len(self.registry),
                    reason="no live articles"
                )
                return AggregationResult(
                    articles=tuple(fallback_articles()),
                    used_fallback=True,
                    source_counts=counts,
                )

            self._log_event(
                "news_fetch_completed",
                total_fetched=len(merged),
                unique=len(unique),
                recent=len(recent),
                sources_ok=sum(1 for c in counts.values() if c)
            )
            return AggregationResult(
                articles=tuple(ordered),
                used_fallback=False,
                source_counts=counts,
            )

    async def _fetch_everything(self) -> Dict[str, List[Article]]:
        if self.fetcher is not None:
            return await self._gather(self.fetcher)

        timeout = aiohttp.ClientTimeout(total=self.aggregate_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return await self._gather(FeedFetcher(session))

    async def _fetch_staggered(
        self,
        fetcher: SourceFetcher,
        index: int,
        source: FeedSource
    ) -> List[Article]:
        if index and self.stagger_seconds:
            await asyncio.sleep(index * self.stagger_seconds)
        return await fetcher.fetch_source(source)

    async def _fetch_backend(self, fetcher: SourceFetcher) -> List[Article]:
        """Ask the backend proxy before the public feeds; a failure yields []."""
        try:
            return list(await asyncio.wait_for(
                fetcher.fetch_backend(self.backend_proxy_url),
                timeout=self.aggregate_timeout
            ) or [])
        except asyncio.TimeoutError:
            self.logger.warning("backend_proxy_timed_out", timeout=self.aggregate_timeout)
        except Exception as e:
            self.logger.warning("news_source_failed", source=BACKEND_SOURCE_NAME, error=str(e))
        return []

    async def _gather(self, fetcher: SourceFetcher) -> Dict[str, List[Article]]:
        """
        Ask the backend proxy first, then run every feed source concurrently
        and collect what finished in time.

        One failing or hanging source never affects the others; sources still
        running at the aggregate timeout are cancelled and contribute nothing.
        """
        results: Dict[str, List[Article]] = {}
        if self.backend_proxy_url:
            results[BACKEND_SOURCE_NAME] = await self._fetch_backend(fetcher)

        jobs = [
            (source.name, self._fetch_staggered(fetcher, index, source))
            for index, source in enumerate(self.registry.get_sources())
        ]
        tasks = [asyncio.ensure_future(coro) for _, coro in jobs]
        if not tasks:
            return results

        done, pending = await asyncio.wait(tasks, timeout=self.aggregate_timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            self.logger.warning(
                "news_sources_timed_out",
                count=len(pending),
                timeout=self.aggregate_timeout
            )

        for (name, _), task in zip(jobs, tasks):
            if task not in done:
                results[name] = []
                continue
            error = task.exception()
            if error is not None:
                self.logger.warning("news_source_failed", source=name, error=str(error))
                results[name] = []
                continue
            results[name] = list(task.result() or [])
        return results

    def _filter_duplicates(self, articles: List[Article]) -> List[Article]:
        """Remove duplicate articles by normalized link; the first occurrence wins."""
        seen = set()
        unique = []

        for article in articles:
            key = article.normalized_link or f"title:{article.title.lower()}"
            if key not in seen:
                seen.add(key)
                unique.append(article)

        return unique

    def _filter_recent(self, articles: List[Article], now: Optional[datetime] = None) -> List[Article]:
        """Keep articles from the recency window; undated articles are kept."""
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=self.recency_days)
        return [
            article for article in articles
            if article.published_at is None or article.published_at >= cutoff
        ]

    def _sort_newest_first(self, articles: List[Article]) -> List[Article]:
        """Newest first; undated articles sort as the epoch, i.e. last."""
        return sorted(articles, key=lambda a: a.published_at or EPOCH, reverse=True)
