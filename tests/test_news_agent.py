import asyncio
import time
import pytest
from datetime import datetime, timedelta, timezone
from agents.news_agent import NewsAgent
from config.feed_config import FeedSourceRegistry, feed_registry
from models.news import Article
from services.fallback_news import FALLBACK_TITLES

FEEDS_YAML = """
sources:
  - name: Alpha
    feed_url: https://alpha.example.com/rss
    strategies:
      - payload_format: direct-xml
  - name: Beta
    feed_url: https://beta.example.com/rss
    strategies:
      - payload_format: direct-xml
  - name: Gamma
    feed_url: https://gamma.example.com/rss
    strategies:
      - payload_format: direct-xml
"""

class FakeFetcher:
    """Serves canned results per source; values may be lists, exceptions or 'hang'."""

    def __init__(self, results, backend=None):
        self.results = results
        self.backend = backend or []
        self.backend_urls = []
        self.calls = []

    async def fetch_source(self, source):
        self.calls.append(source.name)
        result = self.results.get(source.name, [])
        if result == "hang":
            await asyncio.sleep(10)
            return []
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_backend(self, base_url):
        self.calls.append("backend")
        self.backend_urls.append(base_url)
        return self.backend

@pytest.fixture
def registry(tmp_path):
    config_file = tmp_path / "feeds.yaml"
    config_file.write_text(FEEDS_YAML)
    return FeedSourceRegistry(config_file)

def make_agent(registry, fetcher, **kwargs):
    kwargs.setdefault("backend_proxy_url", "")
    kwargs.setdefault("aggregate_timeout", 1.0)
    return NewsAgent(registry=registry, fetcher=fetcher, stagger_seconds=0, **kwargs)

def article(title, link, hours_ago=1):
    return Article(
        title=title,
        link=link,
        published_at=datetime.now(timezone.utc) - timedelta(hours=hours_ago)
    )

def test_news_agent_initialization(registry):
    """News agent should initialize correctly."""
    agent = make_agent(registry, FakeFetcher({}))
    assert agent.name == "news_agent"
    assert len(agent.registry) == 3

def test_duplicate_filtering(registry):
    """Should filter duplicate articles by normalized link; first occurrence wins."""
    agent = make_agent(registry, FakeFetcher({}))
    articles = [
        article("First", "https://example.com/story"),
        article("Second", "http://EXAMPLE.com/story/?utm_source=rss"),
        article("Third", "https://example.com/other"),
    ]
    unique = agent._filter_duplicates(articles)
    assert [a.title for a in unique] == ["First", "Third"]

def test_duplicate_filtering_without_links(registry):
    """Articles without links are deduplicated by title."""
    agent = make_agent(registry, FakeFetcher({}))
    articles = [Article(title="Same"), Article(title="same"), Article(title="Different")]
    assert len(agent._filter_duplicates(articles)) == 2

def test_recency_filter(registry):
    """Articles older than the window are dropped; undated ones are kept."""
    agent = make_agent(registry, FakeFetcher({}), recency_days=365)
    now = datetime.now(timezone.utc)
    fresh = Article(title="Fresh", published_at=now - timedelta(days=10))
    stale = Article(title="Stale", published_at=now - timedelta(days=400))
    undated = Article(title="Undated")
    kept = agent._filter_recent([fresh, stale, undated], now=now)
    assert [a.title for a in kept] == ["Fresh", "Undated"]

def test_sort_newest_first(registry):
    agent = make_agent(registry, FakeFetcher({}))
    older = article("Older", "https://example.com/1", hours_ago=5)
    newer = article("Newer", "https://example.com/2", hours_ago=1)
    undated = Article(title="Undated", link="https://example.com/3")
    ordered = agent._sort_newest_first([undated, older, newer])
    assert [a.title for a in ordered] == ["Newer", "Older", "Undated"]

@pytest.mark.asyncio
async def test_aggregate_merges_sources(registry):
    """Articles from all sources are merged, deduplicated and sorted."""
    fetcher = FakeFetcher({
        "Alpha": [article("Alpha story", "https://example.com/a", hours_ago=3)],
        "Beta": [
            article("Beta story", "https://example.com/b", hours_ago=1),
            article("Alpha story again", "https://example.com/a/", hours_ago=2),
        ],
        "Gamma": [],
    })
    agent = make_agent(registry, fetcher)
    result = await agent.aggregate()

    assert not result.used_fallback
    assert [a.title for a in result.articles] == ["Beta story", "Alpha story"]
    assert result.source_counts == {"Alpha": 1, "Beta": 2, "Gamma": 0}

@pytest.mark.asyncio
async def test_aggregate_unique_links(registry):
    """No two aggregated articles share a normalized link."""
    shared = "https://example.com/shared"
    fetcher = FakeFetcher({
        "Alpha": [article("One", shared)],
        "Beta": [article("Two", shared + "?utm_medium=feed")],
        "Gamma": [article("Three", shared.replace("https", "http"))],
    })
    articles = await make_agent(registry, fetcher).fetch_all()
    links = [a.normalized_link for a in articles]
    assert len(links) == len(set(links)) == 1

@pytest.mark.asyncio
async def test_failing_source_does_not_affect_others(registry):
    fetcher = FakeFetcher({
        "Alpha": RuntimeError("boom"),
        "Beta": [article("Beta story", "https://example.com/b")],
    })
    result = await make_agent(registry, fetcher).aggregate()
    assert [a.title for a in result.articles] == ["Beta story"]
    assert result.source_counts["Alpha"] == 0

@pytest.mark.asyncio
async def test_all_sources_fail_uses_fallback(registry):
    """With every source failing or hanging, the sample set comes back in time."""
    fetcher = FakeFetcher({
        "Alpha": RuntimeError("boom"),
        "Beta": "hang",
        "Gamma": [],
    })
    agent = make_agent(registry, fetcher, aggregate_timeout=0.2)

    started = time.monotonic()
    result = await agent.aggregate()
    elapsed = time.monotonic() - started

    assert elapsed < 2.0
    assert result.used_fallback
    assert len(result.articles) == 5
    assert tuple(a.title for a in result.articles) == FALLBACK_TITLES
    newest = max(a.published_at for a in result.articles)
    assert abs((datetime.now(timezone.utc) - newest).total_seconds()) < 1.0

@pytest.mark.asyncio
async def test_only_stale_articles_uses_fallback(registry):
    fetcher = FakeFetcher({"Alpha": [article("Old", "https://example.com/old", hours_ago=24 * 400)]})
    result = await make_agent(registry, fetcher).aggregate()
    assert result.used_fallback

@pytest.mark.asyncio
async def test_backend_proxy_included(registry):
    """Backend proxy items are merged with the feeds."""
    fetcher = FakeFetcher(
        {"Alpha": [article("Feed story", "https://example.com/f", hours_ago=2)]},
        backend=[article("Backend story", "https://example.com/b", hours_ago=1)]
    )
    agent = make_agent(registry, fetcher, backend_proxy_url="http://localhost:3001/api/proxy")
    result = await agent.aggregate()
    assert fetcher.backend_urls == ["http://localhost:3001/api/proxy"]
    assert [a.title for a in result.articles] == ["Backend story", "Feed story"]
    assert result.source_counts["backend-proxy"] == 1

@pytest.mark.asyncio
async def test_agent_callable(registry):
    """Agent should be callable via __call__ and return a list."""
    fetcher = FakeFetcher({"Alpha": [article("Story", "https://example.com/s")]})
    articles = await make_agent(registry, fetcher)()
    assert isinstance(articles, list)
    assert articles[0].title == "Story"

@pytest.mark.asyncio
async def test_every_registered_source_times_out():
    """All fifteen bundled sources hanging still returns the sample set in time."""
    fetcher = FakeFetcher({source.name: "hang" for source in feed_registry.get_sources()})
    agent = NewsAgent(
        registry=feed_registry,
        fetcher=fetcher,
        backend_proxy_url="",
        stagger_seconds=0,
        aggregate_timeout=0.3
    )

    started = time.monotonic()
    result = await agent.aggregate()

    assert time.monotonic() - started < 2.0
    assert result.used_fallback
    assert tuple(a.title for a in result.articles) == FALLBACK_TITLES
    assert len(result.source_counts) == 15

@pytest.mark.asyncio
async def test_backend_proxy_asked_before_feeds(registry):
    """No feed source starts until the backend proxy has answered."""
    fetcher = FakeFetcher(
        {"Alpha": [article("Feed story", "https://example.com/f")]},
        backend=[article("Backend story", "https://example.com/b")]
    )
    agent = make_agent(registry, fetcher, backend_proxy_url="http://localhost:3001/api/proxy")
    await agent.aggregate()
    assert fetcher.calls == ["backend", "Alpha", "Beta", "Gamma"]

@pytest.mark.asyncio
async def test_backend_proxy_failure_falls_through_to_feeds(registry):
    class BrokenBackendFetcher(FakeFetcher):
        async def fetch_backend(self, base_url):
            self.calls.append("backend")
            raise RuntimeError("proxy down")

    fetcher = BrokenBackendFetcher({"Alpha": [article("Feed story", "https://example.com/f")]})
    agent = make_agent(registry, fetcher, backend_proxy_url="http://localhost:3001/api/proxy")
    result = await agent.aggregate()
    assert fetcher.calls[0] == "backend"
    assert [a.title for a in result.articles] == ["Feed story"]
    assert result.source_counts["backend-proxy"] == 0
