import yaml
from pathlib import Path
from typing import Dict, Optional
from models.company import CompanyProfile
from utils.logger import get_logger

logger = get_logger("company_config")

class CompanyKnowledgeBase:
    """Ticker to company profile lookup, loaded once from YAML."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or Path(__file__).parent / "companies.yaml"
        self._profiles = self._load_profiles()

    def _load_profiles(self) -> Dict[str, CompanyProfile]:
        """Load company profiles from the YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        profiles = {}
        for symbol, entry in (config.get("companies") or {}).items():
            entry = entry or {}
            profile = CompanyProfile(
                symbol=symbol,
                names=entry.get("names", []),
                products=entry.get("products", []),
                keywords=entry.get("keywords", []),
                competitors=entry.get("competitors", []),
                industries=entry.get("industries", []),
                exclude_terms=entry.get("exclude", []),
            )
            profiles[profile.symbol] = profile

        logger.info(
            "company_knowledge_base_loaded",
            path=str(self.config_path),
            companies=len(profiles)
        )
        return profiles

    def get_profile(self, symbol: str) -> Optional[CompanyProfile]:
        """Profile for a ticker (case-insensitive), or None if unknown."""
        return self._profiles.get((symbol or "").strip().upper())

    def symbols(self) -> list[str]:
        return sorted(self._profiles)

    def term_universe(self) -> frozenset[str]:
        """Every name, product and keyword term across all companies."""
        terms = set()
        for profile in self._profiles.values():
            terms |= profile.vocabulary
        return frozenset(terms)

    def __contains__(self, symbol: str) -> bool:
        return self.get_profile(symbol) is not None

    def __len__(self) -> int:
        return len(self._profiles)

# Global instance
company_knowledge_base = CompanyKnowledgeBase()
