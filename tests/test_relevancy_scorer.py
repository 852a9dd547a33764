import math
import pytest
from models.news import Article
from services.relevancy_scorer import EXCLUSION_PENALTY, RelevancyScorer

@pytest.fixture
def scorer():
    return RelevancyScorer()

@pytest.fixture
def apple_earnings():
    return Article(
        title="Apple iPhone sales surge, AAPL earnings beat",
        link="https://example.com/apple-iphone"
    )

@pytest.fixture
def microsoft_cloud():
    return Article(
        title="Microsoft Azure growth accelerates",
        link="https://example.com/microsoft-azure"
    )

def test_strong_match_scores_high(scorer, apple_earnings):
    """Ticker, name and product in the title score well above the threshold."""
    breakdown = scorer.breakdown("AAPL", apple_earnings)
    # symbol 150 + name 100 + product 70
    assert breakdown.direct == 320
    assert breakdown.total >= 170

def test_strong_match_in_top_relevant(scorer, apple_earnings, microsoft_cloud):
    """A strongly matching article is surfaced for its ticker."""
    articles = [microsoft_cloud, apple_earnings]
    top = scorer.top_relevant("AAPL", articles)
    assert top == [apple_earnings]

def test_other_company_scores_zero(scorer, microsoft_cloud):
    """An article about a competitor alone is not relevant."""
    assert scorer.score("AAPL", microsoft_cloud) == 0

def test_competitor_boost_needs_direct_match(scorer):
    """Competitor mentions only add to an article that names the company."""
    with_competitor = Article(title="Apple and Microsoft trade blows")
    without = Article(title="Apple trades sideways")
    assert scorer.score("AAPL", with_competitor) > scorer.score("AAPL", without)

def test_unrelated_article_scores_zero(scorer):
    assert scorer.score("AAPL", Article(title="Weather is sunny this weekend")) == 0

def test_excluded_phrase_only_scores_zero(scorer):
    """'apple pie' is not Apple."""
    assert scorer.score("AAPL", Article(title="Best apple pie recipe")) == 0

def test_excluded_phrase_tesla(scorer):
    article = Article(title="Nikola Tesla invented the tesla coil")
    assert scorer.score("TSLA", article) == 0

def test_exclusion_penalty_applied(scorer):
    """A real match next to an excluded phrase loses the penalty."""
    article = Article(title="Apple stock climbs in the Big Apple")
    breakdown = scorer.breakdown("AAPL", article)
    assert breakdown.excluded
    assert breakdown.direct == 100
    assert breakdown.total == 100 - EXCLUSION_PENALTY

def test_exclusion_below_penalty_zeroes(scorer):
    """Scores under the penalty drop to zero."""
    article = Article(title="Tim Cook visits the Big Apple")
    breakdown = scorer.breakdown("AAPL", article)
    assert breakdown.direct == 30
    assert breakdown.total == 0

def test_title_mention_scores_higher(scorer):
    """Moving a mention into the title never lowers the score."""
    body_only = Article(title="Markets today", summary="Investors watch Apple closely")
    in_title = Article(title="Markets today: Apple", summary="Investors watch Apple closely")
    assert scorer.score("AAPL", in_title) > scorer.score("AAPL", body_only)

def test_financial_context_boost(scorer):
    plain = Article(title="Apple opens a store")
    earnings = Article(title="Apple opens a store ahead of quarterly earnings report")
    assert scorer.score("AAPL", earnings) > scorer.score("AAPL", plain)

def test_ticker_is_case_insensitive(scorer, apple_earnings):
    assert scorer.score("aapl", apple_earnings) == scorer.score("AAPL", apple_earnings)

def test_unknown_ticker_symbol_only(scorer):
    """Tickers outside the knowledge base score on the bare symbol."""
    assert scorer.score("ZZZZ", Article(title="ZZZZ shares jump")) == 150
    assert scorer.score("ZZZZ", Article(title="Small caps move", summary="led by $ZZZZ")) == 80
    assert scorer.score("ZZZZ", Article(title="ZZZZ earnings surge")) == 150
    assert scorer.score("ZZZZ", Article(title="Nothing here")) == 0

def test_corpus_adds_tfidf(scorer, apple_earnings, microsoft_cloud):
    """Scoring against a corpus adds a positive TF-IDF component."""
    corpus = [apple_earnings, microsoft_cloud]
    breakdown = scorer.breakdown("AAPL", apple_earnings, corpus)
    assert breakdown.tfidf > 0
    assert breakdown.total >= scorer.score("AAPL", apple_earnings)

def test_scores_never_negative(scorer, apple_earnings, microsoft_cloud):
    articles = [apple_earnings, microsoft_cloud, Article(title="Best apple pie recipe")]
    for symbol in ["AAPL", "MSFT", "TSLA", "ZZZZ"]:
        for item in scorer.analyze_batch(symbol, articles):
            assert item.score >= 0

def test_top_relevant_threshold(apple_earnings):
    """Articles under the threshold are dropped."""
    strict = RelevancyScorer(threshold=200)
    body_only = Article(title="Markets today", summary="Investors watch Apple closely")
    assert strict.top_relevant("AAPL", [body_only, apple_earnings]) == [apple_earnings]

def test_top_relevant_all_above_threshold(scorer, apple_earnings, microsoft_cloud):
    articles = [apple_earnings, microsoft_cloud, Article(title="Tim Cook keynote")]
    for article in scorer.top_relevant("AAPL", articles):
        assert scorer.score("AAPL", article, articles) >= scorer.threshold

def test_top_relevant_ties_broken_by_sentiment(scorer):
    """Equal scores rank the article with more sentiment keywords first."""
    steady = Article(title="AAPL shares steady", link="https://example.com/1")
    gain = Article(title="AAPL shares gain", link="https://example.com/2")
    scored = scorer.analyze_batch("AAPL", [steady, gain])
    assert scored[0].score == scored[1].score
    assert scorer.top_relevant("AAPL", [steady, gain]) == [gain, steady]

def test_top_relevant_limit(scorer):
    articles = [
        Article(title=f"AAPL update {i}", link=f"https://example.com/{i}") for i in range(5)
    ]
    assert len(scorer.top_relevant("AAPL", articles, limit=2)) == 2

def test_top_relevant_empty(scorer):
    assert scorer.top_relevant("AAPL", []) == []

def test_scoring_is_deterministic(scorer, apple_earnings, microsoft_cloud):
    """Same inputs, same score."""
    corpus = [apple_earnings, microsoft_cloud]
    first = scorer.score("AAPL", apple_earnings, corpus)
    assert all(scorer.score("AAPL", apple_earnings, corpus) == first for _ in range(5))

def test_tesla_title_beats_body(scorer):
    in_title = Article(title="Tesla unveils new battery", summary="Details inside")
    in_body = Article(title="Automaker unveils new battery", summary="Tesla details inside")
    assert scorer.score("TSLA", in_title) > scorer.score("TSLA", in_body)

def test_outage_story_exact_score(scorer, apple_earnings):
    """Name and product in the title plus TF-IDF over a two-article batch."""
    outage = Article(title="Microsoft Azure outage hits enterprise customers")
    corpus = [outage, apple_earnings]
    breakdown = scorer.breakdown("MSFT", outage, corpus)
    # name 100 + product 70
    assert breakdown.direct == 170
    # "microsoft" and "azure" each fill 1 of 6 words and appear in 1 of 2 headlines
    assert breakdown.tfidf == pytest.approx(2 * (1 / 6) * math.log(2) * 10)
    assert breakdown.semantic == 0
    assert breakdown.financial == 0
    assert breakdown.total == 172
    assert scorer.top_relevant("MSFT", corpus) == [outage]

def test_context_boosts_exact_score(scorer):
    """Financial vocabulary, industry and strong financial phrases add up exactly."""
    article = Article(title="Apple quarterly earnings report lifts technology stocks")
    assert scorer.score("AAPL", article) == 185

    corpus = [article, Article(title="Microsoft Azure outage hits enterprise customers")]
    breakdown = scorer.breakdown("AAPL", article, corpus)
    assert breakdown.direct == 100
    # "earnings" 25 + technology industry 20
    assert breakdown.semantic == 45
    # "earnings report" 20 + "quarterly earnings" 20
    assert breakdown.financial == 40
    assert breakdown.tfidf == pytest.approx((1 / 7) * math.log(2) * 10)
    assert breakdown.total == 186

def test_tfidf_reads_unmasked_text(scorer, microsoft_cloud):
    """Excluded phrases still count toward term frequency."""
    article = Article(title="Apple stock climbs in the Big Apple")
    breakdown = scorer.breakdown("AAPL", article, [article, microsoft_cloud])
    # "apple" fills 2 of 7 words, including the one inside "big apple"
    assert breakdown.tfidf == pytest.approx((2 / 7) * math.log(2) * 10)
    assert breakdown.total == 52
