"""Keyword sentiment over article headlines and summaries."""

import math
from collections import defaultdict
from typing import Sequence
from models.analysis import SentimentSummary
from models.news import Article

POSITIVE_KEYWORDS = (
    "up", "gain", "rise", "surge", "bullish", "growth", "profit", "strong", "beat", "positive",
)
NEGATIVE_KEYWORDS = (
    "down", "fall", "drop", "decline", "bearish", "loss", "weak", "miss", "negative", "concern",
)
CONFIDENCE_PER_ARTICLE = 10


def count_sentiment_hits(text: str) -> tuple[int, int]:
    """(positive, negative) keyword counts; each keyword counts once per text."""
    positive = sum(1 for keyword in POSITIVE_KEYWORDS if keyword in text)
    negative = sum(1 for keyword in NEGATIVE_KEYWORDS if keyword in text)
    return positive, negative


def summarize_sentiment(articles: Sequence[Article]) -> SentimentSummary:
    """
    Aggregate keyword sentiment across already relevance-filtered articles.

    score = (pos - neg) / max(pos, neg, 1) * 100, confidence grows 10 points
    per article up to 100.
    """
    if not articles:
        return SentimentSummary()

    positive = negative = 0
    for article in articles:
        pos, neg = count_sentiment_hits(article.headline_text)
        positive += pos
        negative += neg

    net = positive - negative
    score = net / max(positive, negative, 1) * 100
    confidence = min(len(articles) * CONFIDENCE_PER_ARTICLE, 100)

    return SentimentSummary(
        score=int(math.floor(score + 0.5)),
        confidence=confidence,
        positive_hits=positive,
        negative_hits=negative,
        article_count=len(articles),
    )


def sentiment_volatility(articles: Sequence[Article]) -> float:
    """
    Spread of daily sentiment across the articles.

    Each day scores (pos - neg) / (pos + neg + 1), where pos and neg count
    articles with any positive or negative keyword. Returns the population
    standard deviation of those daily scores, or 0.0 with fewer than three
    articles or fewer than two dated days.
    """
    if len(articles) < 3:
        return 0.0

    by_day: dict = defaultdict(lambda: [0, 0])
    for article in articles:
        if article.published_at is None:
            continue
        day = by_day[article.published_at.date()]
        pos, neg = count_sentiment_hits(article.headline_text)
        if pos:
            day[0] += 1
        if neg:
            day[1] += 1

    scores = [(pos - neg) / (pos + neg + 1) for pos, neg in by_day.values()]
    if len(scores) < 2:
        return 0.0

    mean = sum(scores) / len(scores)
    variance = sum((s - mean) ** 2 for s in scores) / len(scores)
    return math.sqrt(variance)
