import asyncio
from dotenv import load_dotenv
from utils.logger import setup_logging, get_logger
from config.settings import settings
from services.news_radar import NewsRadar
from utils.symbols import InvalidTickerError, validate_ticker

# Load environment variables
load_dotenv()

# Setup logging
setup_logging()
logger = get_logger("main")

def print_report(report, radar: NewsRadar):
    """Print one ticker's forecast block."""
    print(f"\n{'='*60}")
    print(f"Forecasts for {report.symbol}")
    print(f"{'='*60}")
    print(f"Sentiment:        {report.sentiment_forecast.outlook} "
          f"(score {report.sentiment.score}, confidence {report.sentiment.confidence}%)")
    print(f"Trend:            {report.trend.direction} / {report.trend.strength}")
    print(f"Volatility:       {report.volatility.level} (score {report.volatility.volatility_score})")
    print(f"Price Direction:  {report.price.direction} "
          f"({report.price.expected_change_pct:+.2f}%)")
    print(f"Relevant News:    {report.sentiment.article_count}")
    for article in radar.top_relevant(report.symbol, limit=3):
        print(f"  - [{radar.score_relevance(report.symbol, article)}] {article.title} ({article.source_name})")
    if report.based_on_sample_data:
        print("Note:             sample news data, live feeds unavailable")
    print(f"{'='*60}\n")

def print_forecasts(radar: NewsRadar):
    """Print a forecast block for every valid watch symbol."""
    for raw_symbol in settings.get_watch_symbols():
        try:
            symbol = validate_ticker(raw_symbol)
        except InvalidTickerError as e:
            logger.warning("invalid_watch_symbol", symbol=raw_symbol, error=str(e))
            continue

        report = radar.forecast(symbol)
        print_report(report, radar)

async def run_radar(radar: NewsRadar = None, cycles: int = None):
    """
    Aggregate news and print forecasts for the watch list.

    Repeats every `refresh_interval_seconds` for `watch_cycles` cycles
    (0 runs until interrupted).
    """
    logger.info("radar_run_started")

    radar = radar or NewsRadar()
    cycles = settings.watch_cycles if cycles is None else cycles

    async for snapshot in radar.watch(cycles=cycles or None):
        logger.info(
            "articles_available",
            count=len(snapshot),
            sample_data=snapshot.is_fallback
        )
        print_forecasts(radar)

    logger.info("radar_run_completed")

def main():
    """Main entry point."""
    try:
        asyncio.run(run_radar())
    except Exception as e:
        logger.error("radar_run_failed", error=str(e), exc_info=True)
        raise

if __name__ == "__main__":
    main()
