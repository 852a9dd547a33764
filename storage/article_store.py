from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Mapping, Optional, Tuple
from config.settings import settings
from models.news import Article
from utils.logger import get_logger

logger = get_logger("article_store")


@dataclass(frozen=True)
class ArticleSnapshot:
    """One aggregation cycle's articles, frozen together with their corpus statistics."""

    articles: Tuple[Article, ...] = ()
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_fallback: bool = False
    doc_frequency: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    def __len__(self) -> int:
        return len(self.articles)

    def age(self, now: Optional[datetime] = None) -> timedelta:
        return (now or datetime.now(timezone.utc)) - self.fetched_at


EMPTY_SNAPSHOT = ArticleSnapshot(fetched_at=datetime(1970, 1, 1, tzinfo=timezone.utc))


class ArticleStore:
    """
    Holds the current snapshot.

    A refresh builds a new snapshot and replaces the reference in one
    assignment; readers always see either the old or the new set, never a mix.
    """

    def __init__(self, ttl_seconds: Optional[int] = None):
        self.ttl = timedelta(
            seconds=ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
        )
        self._snapshot: ArticleSnapshot = EMPTY_SNAPSHOT

    @property
    def snapshot(self) -> ArticleSnapshot:
        return self._snapshot

    def replace(self, snapshot: ArticleSnapshot) -> ArticleSnapshot:
        """Swap in a new snapshot and return the previous one."""
        previous, self._snapshot = self._snapshot, snapshot
        logger.info(
            "article_snapshot_replaced",
            articles=len(snapshot),
            is_fallback=snapshot.is_fallback,
            previous_articles=len(previous)
        )
        return previous

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        """True before the first refresh and once the snapshot outlives the TTL."""
        if self._snapshot is EMPTY_SNAPSHOT:
            return True
        return self._snapshot.age(now) >= self.ttl
