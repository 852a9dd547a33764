"""
Article relevancy scoring.

Combines positional term matches, TF-IDF over the current corpus, context
boosts and exclusion penalties into one integer score per (ticker, article).
The weights are fixed; downstream filtering relies on the absolute
threshold of 30.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from config.company_config import CompanyKnowledgeBase, company_knowledge_base
from config.settings import settings
from models.company import CompanyProfile
from models.news import Article, ScoredArticle
from services import term_matcher as tm
from services.corpus_stats import CorpusStatistics, tfidf_score
from services.sentiment import count_sentiment_hits
from utils.logger import get_logger

logger = get_logger("relevancy_scorer")

FINANCIAL_TERMS = (
    "earnings", "revenue", "profit", "dividend", "quarterly", "analyst",
    "forecast", "price target", "upgrade", "downgrade", "ipo", "merger",
    "acquisition", "guidance",
)
STRONG_FINANCIAL_TERMS = (
    "earnings report", "quarterly earnings", "revenue growth", "stock price",
    "market cap", "trading volume", "dividend yield",
)
SENTIMENT_TERMS = ("surge", "plunge", "rally", "sell-off", "upgrade", "downgrade")

FINANCIAL_CONTEXT_BOOST = 25
COMPETITOR_BOOST = 15
INDUSTRY_BOOST = 20
STRONG_FINANCIAL_BOOST = 20
SENTIMENT_TERM_BOOST = 15
EXCLUSION_PENALTY = 50


@dataclass(frozen=True)
class ScoreBreakdown:
    """Each additive component of one relevance score."""
    direct: float = 0.0
    tfidf: float = 0.0
    semantic: float = 0.0
    financial: float = 0.0
    excluded: bool = False
    total: int = 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class RelevancyScorer:
    """Scores how strongly an article concerns a ticker."""

    def __init__(
        self,
        knowledge_base: Optional[CompanyKnowledgeBase] = None,
        corpus_stats: Optional[CorpusStatistics] = None,
        threshold: Optional[int] = None
    ):
        """
        Initialize the scorer.

        Args:
            knowledge_base: Company profiles (defaults to the bundled YAML)
            corpus_stats: Document frequency cache, built from the knowledge base if omitted
            threshold: Minimum score for top_relevant (defaults to settings)
        """
        self.knowledge_base = knowledge_base if knowledge_base is not None else company_knowledge_base
        self.corpus_stats = corpus_stats or CorpusStatistics(self.knowledge_base.term_universe())
        self.threshold = settings.relevance_threshold if threshold is None else threshold

    def score(self, ticker: str, article: Article, corpus: Sequence[Article] = ()) -> int:
        """Relevance of `article` to `ticker`; 0 means do not surface it."""
        return self.breakdown(ticker, article, corpus).total

    def breakdown(
        self,
        ticker: str,
        article: Article,
        corpus: Sequence[Article] = (),
        doc_frequency: Optional[dict[str, int]] = None
    ) -> ScoreBreakdown:
        """Score with every component exposed."""
        symbol = ticker.strip().upper()
        title = article.title.lower()
        full_text = article.full_text

        profile = self.knowledge_base.get_profile(symbol)
        if profile is None:
            direct = tm.score_symbol(symbol, title, full_text)
            return ScoreBreakdown(direct=direct, total=direct)

        # Exclusion phrases are blanked before identity matching so that
        # "apple" inside "apple pie" is not a name hit.
        masked_title = tm.mask_phrases(title, profile.exclude_terms)
        masked_text = tm.mask_phrases(full_text, profile.exclude_terms)

        direct = self._score_direct(symbol, profile, masked_title, masked_text)
        if direct == 0:
            # Context signals only reinforce a company that is actually named.
            return ScoreBreakdown(excluded=self._has_exclusion(profile, full_text))

        tfidf = 0.0
        if corpus:
            frequency = doc_frequency if doc_frequency is not None else self.corpus_stats.doc_frequency(corpus)
            tfidf = tfidf_score(profile.scoring_terms, full_text, len(corpus), frequency)

        semantic = self._score_semantic(profile, full_text)
        financial = self._score_financial_context(full_text)

        running = direct + tfidf + semantic + financial
        excluded = self._has_exclusion(profile, full_text)
        if excluded:
            running = 0 if running < EXCLUSION_PENALTY else max(0.0, running - EXCLUSION_PENALTY)

        return ScoreBreakdown(
            direct=direct,
            tfidf=tfidf,
            semantic=semantic,
            financial=financial,
            excluded=excluded,
            total=max(0, _round_half_up(running)),
        )

    def _score_direct(self, symbol: str, profile: CompanyProfile, title: str, text: str) -> int:
        score = tm.score_symbol(symbol, title, text)
        score += tm.score_terms(profile.names, title, text, tm.NAME_WEIGHTS)
        score += tm.score_terms(profile.products, title, text, tm.PRODUCT_WEIGHTS)
        score += tm.score_keywords(profile.keywords, text)
        return score

    def _score_semantic(self, profile: CompanyProfile, text: str) -> int:
        score = 0
        if any(tm.contains_phrase(term, text) for term in FINANCIAL_TERMS):
            score += FINANCIAL_CONTEXT_BOOST
        score += COMPETITOR_BOOST * tm.count_phrases(profile.competitors, text)
        score += INDUSTRY_BOOST * tm.count_phrases(profile.industries, text)
        return score

    def _score_financial_context(self, text: str) -> int:
        return (
            STRONG_FINANCIAL_BOOST * tm.count_phrases(STRONG_FINANCIAL_TERMS, text)
            + SENTIMENT_TERM_BOOST * tm.count_phrases(SENTIMENT_TERMS, text)
        )

    def _has_exclusion(self, profile: CompanyProfile, text: str) -> bool:
        return any(tm.contains_phrase(term, text) for term in profile.exclude_terms)

    def analyze_batch(self, ticker: str, articles: Sequence[Article]) -> list[ScoredArticle]:
        """Score every article against the batch itself as the corpus."""
        corpus = tuple(articles)
        frequency = self.corpus_stats.doc_frequency(corpus) if corpus else {}
        scored = []
        for article in corpus:
            result = self.breakdown(ticker, article, corpus, doc_frequency=frequency)
            positive, negative = count_sentiment_hits(article.headline_text)
            scored.append(ScoredArticle(
                article=article,
                score=result.total,
                sentiment_hits=positive + negative,
            ))
        return scored

    def top_relevant(
        self,
        ticker: str,
        articles: Sequence[Article],
        limit: int = 100
    ) -> list[Article]:
        """
        Most relevant articles for a ticker.

        Keeps scores at or above the threshold, sorts by score descending
        with ties broken by sentiment keyword hits, and truncates to limit.
        """
        ranked = [
            item for item in self.analyze_batch(ticker, articles)
            if item.score >= self.threshold
        ]
        ranked.sort(key=lambda item: (item.score, item.sentiment_hits), reverse=True)

        logger.debug(
            "top_relevant_ranked",
            ticker=ticker,
            candidates=len(articles),
            relevant=len(ranked),
            limit=limit
        )
        return [item.article for item in ranked[:limit]]
