import re
from pydantic import BaseModel, Field, field_validator

TICKER_PATTERN = re.compile(r"^[A-Z]{1,5}(\.[A-Z])?$")


def _clean_terms(values) -> tuple[str, ...]:
    """Lowercase, trim and dedupe terms, keeping their first-seen order."""
    seen = []
    for value in values or ():
        term = str(value).strip().lower()
        if term and term not in seen:
            seen.append(term)
    return tuple(seen)


class CompanyProfile(BaseModel):
    """Static knowledge about one listed company, keyed by ticker."""

    symbol: str = Field(..., description="Ticker symbol, e.g. AAPL or BRK.B")
    names: tuple[str, ...] = Field(default_factory=tuple, description="Company name aliases")
    products: tuple[str, ...] = Field(default_factory=tuple, description="Product and brand terms")
    keywords: tuple[str, ...] = Field(default_factory=tuple, description="People and other keywords")
    competitors: tuple[str, ...] = Field(default_factory=tuple, description="Competitor names")
    industries: tuple[str, ...] = Field(default_factory=tuple, description="Industry tags")
    exclude_terms: tuple[str, ...] = Field(
        default_factory=tuple, description="Phrases that mark a false positive"
    )

    class Config:
        frozen = True

    @field_validator("symbol", mode="before")
    @classmethod
    def _validate_symbol(cls, value: str) -> str:
        symbol = str(value).strip().upper()
        if not TICKER_PATTERN.match(symbol):
            raise ValueError(f"Invalid ticker symbol in knowledge base: {value!r}")
        return symbol

    @field_validator(
        "names", "products", "keywords", "competitors", "industries", "exclude_terms",
        mode="before",
    )
    @classmethod
    def _normalize_terms(cls, value):
        return _clean_terms(value)

    @property
    def scoring_terms(self) -> list[str]:
        """Ticker, names, products and keywords in scoring order.

        Terms listed under two categories appear twice and count twice.
        """
        return [self.symbol.lower(), *self.names, *self.products, *self.keywords]

    @property
    def vocabulary(self) -> set[str]:
        """Every name, product and keyword term of this profile."""
        return {*self.names, *self.products, *self.keywords}
