"""Thresholds that turn a sentiment score into forecast labels."""

from pydantic import BaseModel, Field


class ForecastRules(BaseModel):
    """Label thresholds for sentiment, trend, volatility and price forecasts."""

    # Sentiment outlook
    bullish_threshold: int = Field(
        default=20,
        description="Bullish if sentiment score > this value"
    )
    bearish_threshold: int = Field(
        default=-20,
        description="Bearish if sentiment score < this value"
    )

    # Trend direction
    upward_threshold: int = Field(
        default=10,
        description="Upward trend if sentiment score > this value"
    )
    downward_threshold: int = Field(
        default=-10,
        description="Downward trend if sentiment score < this value"
    )

    # Trend strength, on |score|
    strong_trend_min: int = Field(default=50, description="Strong if |score| > this value")
    moderate_trend_min: int = Field(default=20, description="Moderate if |score| > this value")

    # Volatility, on |score|
    high_volatility_min: int = Field(default=40, description="High if |score| > this value")
    moderate_volatility_min: int = Field(default=20, description="Moderate if |score| > this value")

    # Price projection
    change_pct_per_point: float = Field(
        default=0.1,
        description="Expected percent change per sentiment point"
    )


# Global rules instance
default_rules = ForecastRules()


def get_forecast_rules() -> ForecastRules:
    """Get the current forecast rules."""
    return default_rules
