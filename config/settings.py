from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Feed aggregation
    feed_timeout_seconds: float = 8.0  # per strategy attempt
    aggregate_timeout_seconds: float = 30.0
    feed_stagger_ms: int = 100
    recency_days: int = 365
    user_agent: str = "Mozilla/5.0 (compatible; TickerNewsRadar/1.0)"
    backend_proxy_url: Optional[str] = None

    # Article cache
    cache_ttl_seconds: int = 600
    refresh_interval_seconds: int = 300  # pause between demo runner cycles
    watch_cycles: int = 1  # 0 keeps refreshing until interrupted

    # Relevancy
    relevance_threshold: int = 30
    top_relevant_limit: int = 100

    # Symbols the demo runner forecasts for
    watch_symbols: str = "AAPL,MSFT,TSLA"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def get_watch_symbols(self) -> list[str]:
        """Split the comma separated watch list."""
        return [s.strip().upper() for s in self.watch_symbols.split(",") if s.strip()]

# Global settings instance
settings = Settings()
