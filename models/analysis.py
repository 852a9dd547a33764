from pydantic import BaseModel, Field
from datetime import datetime, timezone
from enum import Enum

class Outlook(str, Enum):
    """Overall sentiment outlook."""
    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"

class TrendDirection(str, Enum):
    UPWARD = "Upward"
    DOWNWARD = "Downward"
    SIDEWAYS = "Sideways"

class Strength(str, Enum):
    STRONG = "Strong"
    MODERATE = "Moderate"
    WEAK = "Weak"

class VolatilityLevel(str, Enum):
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"

class PriceDirection(str, Enum):
    UP = "Up"
    DOWN = "Down"
    STABLE = "Stable"

class SentimentSummary(BaseModel):
    """Keyword sentiment over the articles relevant to one ticker."""

    score: int = Field(default=0, ge=-100, le=100, description="Net sentiment score")
    confidence: int = Field(default=0, ge=0, le=100, description="Confidence percentage")
    positive_hits: int = Field(default=0, ge=0)
    negative_hits: int = Field(default=0, ge=0)
    article_count: int = Field(default=0, ge=0)

    class Config:
        frozen = True

class SentimentForecast(BaseModel):
    outlook: Outlook
    score: int
    confidence: int

    class Config:
        use_enum_values = True

class TrendForecast(BaseModel):
    direction: TrendDirection
    strength: Strength
    reliability: int

    class Config:
        use_enum_values = True

class VolatilityForecast(BaseModel):
    level: VolatilityLevel
    volatility_score: int = Field(..., ge=0, le=100)
    sentiment_volatility: float = Field(default=0.0, ge=0.0)

    class Config:
        use_enum_values = True

class PriceForecast(BaseModel):
    direction: PriceDirection
    expected_change_pct: float
    confidence: int

    class Config:
        use_enum_values = True

class TrendPrediction(BaseModel):
    """Output of a trend predictor. Informational only, not a price signal."""

    score: float = Field(..., ge=-1.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=100.0)
    method: str

class ForecastReport(BaseModel):
    """Every forecast derived for one ticker from the current article set."""

    symbol: str
    sentiment: SentimentSummary
    sentiment_forecast: SentimentForecast
    trend: TrendForecast
    volatility: VolatilityForecast
    price: PriceForecast
    prediction: TrendPrediction
    based_on_sample_data: bool = False
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
