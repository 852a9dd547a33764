"""Document frequency statistics for TF-IDF over one article batch."""

import math
from typing import Iterable, Mapping, Optional, Sequence
from models.news import Article
from services.term_matcher import term_frequency
from utils.logger import get_logger

logger = get_logger("corpus_stats")

TFIDF_SCALE = 10.0


def compute_doc_frequency(
    corpus: Sequence[Article],
    term_universe: Iterable[str]
) -> dict[str, int]:
    """
    Count, for every term, how many articles mention it.

    Matching is a case-insensitive substring test over title and summary.
    Counts are floored at 1 so IDF never divides by zero. Always returns a
    new dict; nothing is shared between corpora.
    """
    texts = [article.headline_text for article in corpus]
    frequency = {}
    for term in term_universe:
        needle = term.lower()
        count = sum(1 for text in texts if needle in text)
        frequency[needle] = max(count, 1)
    return frequency


def inverse_document_frequency(
    term: str,
    corpus_size: int,
    doc_frequency: Mapping[str, int]
) -> float:
    """ln(corpus_size / df), with df floored at 1."""
    if corpus_size <= 0:
        return 0.0
    count = max(doc_frequency.get(term.lower(), 1), 1)
    return math.log(corpus_size / count)


def tfidf_term_score(
    term: str,
    text: str,
    corpus_size: int,
    doc_frequency: Mapping[str, int],
    scale: float = TFIDF_SCALE
) -> float:
    """Scaled TF-IDF contribution of a single term."""
    tf = term_frequency(term, text)
    if tf == 0.0:
        return 0.0
    return tf * inverse_document_frequency(term, corpus_size, doc_frequency) * scale


def tfidf_score(
    terms: Iterable[str],
    text: str,
    corpus_size: int,
    doc_frequency: Mapping[str, int],
    scale: float = TFIDF_SCALE
) -> float:
    return sum(
        tfidf_term_score(term, text, corpus_size, doc_frequency, scale)
        for term in terms
    )


class CorpusStatistics:
    """
    Memoizes the document frequency map of the most recent corpus.

    The cache key is the corpus content itself, so a new aggregation batch
    always triggers a recompute and a stale map is never returned.
    """

    def __init__(self, term_universe: Iterable[str]):
        self.term_universe = frozenset(t.lower() for t in term_universe)
        self._key: Optional[tuple[Article, ...]] = None
        self._frequency: dict[str, int] = {}

    def doc_frequency(self, corpus: Sequence[Article]) -> dict[str, int]:
        key = tuple(corpus)
        if key != self._key:
            frequency = compute_doc_frequency(key, self.term_universe)
            self._key, self._frequency = key, frequency
            logger.debug(
                "doc_frequency_computed",
                corpus_size=len(key),
                terms=len(frequency)
            )
        return self._frequency
