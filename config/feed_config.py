import yaml
from pathlib import Path
from typing import List, Optional
from models.feed import FeedSource, FeedStrategy
from utils.logger import get_logger

logger = get_logger("feed_config")

class FeedSourceRegistry:
    """Static list of feed sources and their retrieval strategies."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or Path(__file__).parent / "feeds.yaml"
        self._sources = self._load_sources()

    def _load_sources(self) -> List[FeedSource]:
        """Load feed sources from the YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        sources = [
            FeedSource(
                name=entry["name"],
                feed_url=entry["feed_url"],
                strategies=tuple(
                    FeedStrategy(**strategy) for strategy in entry.get("strategies", [])
                ),
            )
            for entry in config.get("sources", [])
        ]
        logger.info(
            "feed_registry_loaded",
            path=str(self.config_path),
            sources=len(sources)
        )
        return sources

    def get_sources(self) -> List[FeedSource]:
        """All registered sources, in declaration order."""
        return list(self._sources)

    def get_source(self, name: str) -> Optional[FeedSource]:
        for source in self._sources:
            if source.name == name:
                return source
        return None

    def __len__(self) -> int:
        return len(self._sources)

# Global instance
feed_registry = FeedSourceRegistry()
