"""
Term matching primitives for relevancy scoring.

Every function here is pure: lowercase text in, matches or weights out.
"""

import re
from functools import lru_cache
from typing import Iterable

# Position weights: (title, body)
SYMBOL_WEIGHTS = (150, 80)
NAME_WEIGHTS = (100, 60)
PRODUCT_WEIGHTS = (70, 40)
KEYWORD_WEIGHT = 30


@lru_cache(maxsize=4096)
def term_pattern(term: str) -> re.Pattern:
    """Regex matching `term` as a whole word or phrase, metacharacters escaped."""
    return re.compile(rf"(?<!\w){re.escape(term.lower())}(?!\w)")


@lru_cache(maxsize=1024)
def symbol_pattern(symbol: str) -> re.Pattern:
    """Regex matching a bare ticker, with or without a leading $ (cashtag)."""
    return re.compile(rf"(?<![\w$])\$?{re.escape(symbol.lower())}(?!\w)")


def matches_term(term: str, text: str) -> bool:
    return bool(text) and term_pattern(term).search(text) is not None


def contains_phrase(phrase: str, text: str) -> bool:
    """Plain substring test, used for context vocabularies."""
    return phrase in text


def positional_weight(pattern: re.Pattern, title: str, full_text: str, weights: tuple[int, int]) -> int:
    """Title weight if the pattern hits the title, else body weight if it hits the full text."""
    title_weight, body_weight = weights
    if title and pattern.search(title):
        return title_weight
    if pattern.search(full_text):
        return body_weight
    return 0


def score_symbol(symbol: str, title: str, full_text: str) -> int:
    return positional_weight(symbol_pattern(symbol), title, full_text, SYMBOL_WEIGHTS)


def score_terms(terms: Iterable[str], title: str, full_text: str, weights: tuple[int, int]) -> int:
    """Sum positional weights over distinct terms; each matching term counts once."""
    return sum(
        positional_weight(term_pattern(term), title, full_text, weights)
        for term in terms
    )


def score_keywords(keywords: Iterable[str], full_text: str) -> int:
    return sum(KEYWORD_WEIGHT for keyword in keywords if matches_term(keyword, full_text))


def count_phrases(phrases: Iterable[str], text: str) -> int:
    """How many of the phrases occur in text (each counted once)."""
    return sum(1 for phrase in phrases if contains_phrase(phrase, text))


def mask_phrases(text: str, phrases: Iterable[str]) -> str:
    """Blank out every occurrence of the phrases so term patterns cannot hit inside them."""
    for phrase in phrases:
        if phrase and phrase in text:
            text = text.replace(phrase, " ")
    return text


def term_frequency(term: str, text: str) -> float:
    """Share of whitespace-separated words that contain the term."""
    words = text.split()
    if not words:
        return 0.0
    needle = term.lower()
    return sum(1 for word in words if needle in word) / len(words)
