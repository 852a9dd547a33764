from typing import Optional, Protocol, Sequence
from agents.base import BaseAgent
from agents.rules import ForecastRules, get_forecast_rules
from models.analysis import (
    ForecastReport,
    Outlook,
    PriceDirection,
    PriceForecast,
    SentimentForecast,
    SentimentSummary,
    Strength,
    TrendDirection,
    TrendForecast,
    TrendPrediction,
    VolatilityForecast,
    VolatilityLevel,
)
from models.news import Article
from services import sentiment
from services.relevancy_scorer import RelevancyScorer
from utils.symbols import validate_ticker


class TrendPredictor(Protocol):
    """
    Extension point for trend prediction.

    Implementations are informational only; nothing here is a trained or
    authoritative price model.
    """

    def predict(self, summary: SentimentSummary, articles: Sequence[Article]) -> TrendPrediction: ...


class RuleBasedTrendPredictor:
    """Maps the sentiment score straight onto a -1..1 trend score."""

    method = "rule-based"

    def predict(self, summary: SentimentSummary, articles: Sequence[Article]) -> TrendPrediction:
        score = max(-1.0, min(1.0, summary.score / 100))
        return TrendPrediction(score=score, confidence=summary.confidence, method=self.method)


class AnalysisAgent(BaseAgent):
    """Agent that derives sentiment and forecast labels for one ticker."""

    def __init__(
        self,
        scorer: Optional[RelevancyScorer] = None,
        rules: Optional[ForecastRules] = None,
        predictor: Optional[TrendPredictor] = None
    ):
        """
        Initialize Analysis Agent.

        Args:
            scorer: Relevancy scorer used to select the ticker's articles
            rules: Forecast thresholds (uses default if not provided)
            predictor: Trend predictor (rule-based if not provided)
        """
        super().__init__("analysis_agent")
        self.scorer = scorer or RelevancyScorer()
        self.rules = rules or get_forecast_rules()
        self.predictor = predictor or RuleBasedTrendPredictor()

    async def execute(
        self,
        symbol: str,
        articles: Sequence[Article],
        based_on_sample_data: bool = False
    ) -> ForecastReport:
        """
        Select the ticker's relevant articles and build its forecast.

        Args:
            symbol: Stock symbol
            articles: The current aggregated corpus
            based_on_sample_data: Whether the corpus is the fallback sample set

        Returns:
            ForecastReport
        """
        symbol = validate_ticker(symbol)
        relevant = self.scorer.top_relevant(symbol, articles)
        return self.build_forecast(symbol, relevant, based_on_sample_data)

    def summarize_sentiment(self, symbol: str, articles: Sequence[Article]) -> SentimentSummary:
        """Keyword sentiment over an already relevance-filtered article set."""
        summary = sentiment.summarize_sentiment(articles)
        self._log_event(
            "sentiment_summarized",
            symbol=symbol,
            score=summary.score,
            confidence=summary.confidence,
            article_count=summary.article_count
        )
        return summary

    def build_forecast(
        self,
        symbol: str,
        articles: Sequence[Article],
        based_on_sample_data: bool = False
    ) -> ForecastReport:
        """Every forecast for a ticker from its relevant articles."""
        summary = self.summarize_sentiment(symbol, articles)
        return ForecastReport(
            symbol=symbol,
            sentiment=summary,
            sentiment_forecast=self._sentiment_forecast(summary),
            trend=self._trend_forecast(summary),
            volatility=self._volatility_forecast(summary, articles),
            price=self._price_forecast(summary),
            prediction=self.predictor.predict(summary, articles),
            based_on_sample_data=based_on_sample_data,
        )

    def outlook(self, score: int) -> Outlook:
        if score > self.rules.bullish_threshold:
            return Outlook.BULLISH
        if score < self.rules.bearish_threshold:
            return Outlook.BEARISH
        return Outlook.NEUTRAL

    def _sentiment_forecast(self, summary: SentimentSummary) -> SentimentForecast:
        return SentimentForecast(
            outlook=self.outlook(summary.score),
            score=summary.score,
            confidence=summary.confidence,
        )

    def _trend_forecast(self, summary: SentimentSummary) -> TrendForecast:
        score = summary.score
        if score > self.rules.upward_threshold:
            direction = TrendDirection.UPWARD
        elif score < self.rules.downward_threshold:
            direction = TrendDirection.DOWNWARD
        else:
            direction = TrendDirection.SIDEWAYS

        magnitude = abs(score)
        if magnitude > self.rules.strong_trend_min:
            strength = Strength.STRONG
        elif magnitude > self.rules.moderate_trend_min:
            strength = Strength.MODERATE
        else:
            strength = Strength.WEAK

        return TrendForecast(direction=direction, strength=strength, reliability=summary.confidence)

    def _volatility_forecast(
        self,
        summary: SentimentSummary,
        articles: Sequence[Article]
    ) -> VolatilityForecast:
        magnitude = abs(summary.score)
        if magnitude > self.rules.high_volatility_min:
            level = VolatilityLevel.HIGH
        elif magnitude > self.rules.moderate_volatility_min:
            level = VolatilityLevel.MODERATE
        else:
            level = VolatilityLevel.LOW

        return VolatilityForecast(
            level=level,
            volatility_score=magnitude,
            sentiment_volatility=round(sentiment.sentiment_volatility(articles), 4),
        )

    def _price_forecast(self, summary: SentimentSummary) -> PriceForecast:
        if summary.score > 0:
            direction = PriceDirection.UP
        elif summary.score < 0:
            direction = PriceDirection.DOWN
        else:
            direction = PriceDirection.STABLE

        return PriceForecast(
            direction=direction,
            expected_change_pct=round(summary.score * self.rules.change_pct_per_point, 2),
            confidence=summary.confidence,
        )
