import pytest
from datetime import timedelta
from types import MappingProxyType
from models.news import Article
from storage.article_store import EMPTY_SNAPSHOT, ArticleSnapshot, ArticleStore

@pytest.fixture
def snapshot():
    return ArticleSnapshot(
        articles=(Article(title="Story", link="https://example.com/s"),),
        doc_frequency=MappingProxyType({"apple": 1})
    )

def test_store_starts_empty_and_stale():
    store = ArticleStore(ttl_seconds=600)
    assert store.snapshot is EMPTY_SNAPSHOT
    assert len(store.snapshot) == 0
    assert store.is_stale()

def test_replace_swaps_snapshot(snapshot):
    """Replace installs the new snapshot and hands back the old one."""
    store = ArticleStore(ttl_seconds=600)
    previous = store.replace(snapshot)
    assert previous is EMPTY_SNAPSHOT
    assert store.snapshot is snapshot
    assert not store.is_stale()

def test_old_snapshot_unchanged_after_replace(snapshot):
    """Readers holding the old snapshot keep a consistent view."""
    store = ArticleStore(ttl_seconds=600)
    store.replace(snapshot)
    held = store.snapshot
    store.replace(ArticleSnapshot(articles=()))
    assert len(held) == 1
    assert held.doc_frequency["apple"] == 1

def test_snapshot_expires_after_ttl(snapshot):
    store = ArticleStore(ttl_seconds=600)
    store.replace(snapshot)
    later = snapshot.fetched_at + timedelta(seconds=601)
    assert store.is_stale(now=later)

def test_doc_frequency_read_only(snapshot):
    with pytest.raises(TypeError):
        snapshot.doc_frequency["apple"] = 2

def test_snapshot_age(snapshot):
    assert snapshot.age(snapshot.fetched_at + timedelta(seconds=30)) == timedelta(seconds=30)
