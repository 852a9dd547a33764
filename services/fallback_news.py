"""Static sample articles served when every live feed fails."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from models.news import Article

FALLBACK_ITEMS = (
    (
        "Market Opens Higher on Positive Economic Data",
        "Stocks rose in early trading following release of stronger-than-expected economic indicators...",
        "Financial News",
    ),
    (
        "Tech Sector Sees Increased Volatility",
        "Technology stocks experienced mixed trading as investors digest quarterly earnings reports...",
        "Market Watch",
    ),
    (
        "Energy Stocks Rally on Oil Price Surge",
        "Energy sector outperformed broader market as oil prices climbed amid supply concerns...",
        "Bloomberg",
    ),
    (
        "Fed Holds Interest Rates Steady",
        "Federal Reserve maintains current interest rate policy, citing balanced economic outlook...",
        "Reuters",
    ),
    (
        "Retail Sector Faces Headwinds",
        "Retail companies report mixed earnings as consumer spending patterns shift...",
        "CNBC",
    ),
)

FALLBACK_TITLES = tuple(title for title, _, _ in FALLBACK_ITEMS)


def fallback_articles(now: Optional[datetime] = None) -> List[Article]:
    """The five sample articles, newest at `now`, each earlier one an hour older."""
    now = now or datetime.now(timezone.utc)
    return [
        Article(
            title=title,
            summary=summary,
            link=f"#sample-{index + 1}",
            published_at=now - timedelta(hours=index),
            source_name=source_name,
        )
        for index, (title, summary, source_name) in enumerate(FALLBACK_ITEMS)
    ]
