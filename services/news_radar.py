"""
The radar's outward face.

Presentation code talks to NewsRadar only: one async refresh, then plain
synchronous queries over the current snapshot.
"""

import asyncio
from types import MappingProxyType
from typing import AsyncIterator, List, Optional, Tuple

from agents.analysis_agent import AnalysisAgent
from agents.news_agent import NewsAgent
from config.settings import settings
from models.analysis import ForecastReport, SentimentSummary
from models.news import Article
from services.relevancy_scorer import RelevancyScorer
from storage.article_store import ArticleSnapshot, ArticleStore
from utils.logger import get_logger
from utils.symbols import validate_ticker

logger = get_logger("news_radar")


class NewsRadar:
    """Aggregated news plus per-ticker relevance, sentiment and forecasts."""

    def __init__(
        self,
        news_agent: Optional[NewsAgent] = None,
        scorer: Optional[RelevancyScorer] = None,
        analysis_agent: Optional[AnalysisAgent] = None,
        store: Optional[ArticleStore] = None
    ):
        self.news_agent = news_agent or NewsAgent()
        self.scorer = scorer or RelevancyScorer()
        self.analysis_agent = analysis_agent or AnalysisAgent(scorer=self.scorer)
        self.store = store or ArticleStore()

    async def refresh(self) -> ArticleSnapshot:
        """Run one aggregation cycle and swap in the resulting snapshot."""
        result = await self.news_agent.aggregate()
        doc_frequency = self.scorer.corpus_stats.doc_frequency(result.articles)
        snapshot = ArticleSnapshot(
            articles=result.articles,
            fetched_at=result.fetched_at,
            is_fallback=result.used_fallback,
            doc_frequency=MappingProxyType(dict(doc_frequency)),
        )
        self.store.replace(snapshot)
        return snapshot

    async def ensure_fresh(self) -> ArticleSnapshot:
        """Refresh only when the snapshot is missing or older than the TTL."""
        if self.store.is_stale():
            return await self.refresh()
        return self.store.snapshot

    async def watch(
        self,
        interval: Optional[float] = None,
        cycles: Optional[int] = None
    ) -> AsyncIterator[ArticleSnapshot]:
        """
        Refresh on a fixed cadence and yield each new snapshot.

        Args:
            interval: Seconds between refreshes (defaults to settings)
            cycles: Number of refreshes; None keeps going until cancelled
        """
        interval = settings.refresh_interval_seconds if interval is None else interval
        completed = 0
        while cycles is None or completed < cycles:
            if completed:
                await asyncio.sleep(interval)
            snapshot = await self.refresh()
            completed += 1
            logger.info("radar_cycle_completed", cycle=completed, articles=len(snapshot))
            yield snapshot

    def is_stale(self) -> bool:
        return self.store.is_stale()

    @property
    def is_sample_data(self) -> bool:
        return self.store.snapshot.is_fallback

    def get_articles(self) -> Tuple[Article, ...]:
        return self.store.snapshot.articles

    def score_relevance(self, ticker: str, article: Article) -> int:
        """Score one article against the current snapshot as corpus."""
        symbol = validate_ticker(ticker)
        snapshot = self.store.snapshot
        return self.scorer.breakdown(
            symbol,
            article,
            snapshot.articles,
            doc_frequency=dict(snapshot.doc_frequency) if snapshot.articles else None,
        ).total

    def top_relevant(self, ticker: str, limit: Optional[int] = None) -> List[Article]:
        symbol = validate_ticker(ticker)
        return self.scorer.top_relevant(
            symbol,
            self.store.snapshot.articles,
            limit=limit if limit is not None else settings.top_relevant_limit,
        )

    def summarize_sentiment(self, ticker: str) -> SentimentSummary:
        symbol = validate_ticker(ticker)
        return self.analysis_agent.summarize_sentiment(symbol, self.top_relevant(symbol))

    def forecast(self, ticker: str) -> ForecastReport:
        symbol = validate_ticker(ticker)
        snapshot = self.store.snapshot
        report = self.analysis_agent.build_forecast(
            symbol,
            self.top_relevant(symbol),
            based_on_sample_data=snapshot.is_fallback,
        )
        logger.info(
            "forecast_generated",
            symbol=symbol,
            outlook=report.sentiment_forecast.outlook,
            articles=report.sentiment.article_count,
            sample_data=snapshot.is_fallback
        )
        return report
