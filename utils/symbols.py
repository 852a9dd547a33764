"""Ticker symbol validation at the radar's boundary."""

from models.company import TICKER_PATTERN


class InvalidTickerError(ValueError):
    """Raised when a ticker symbol is missing or malformed."""


def validate_ticker(symbol: str) -> str:
    """
    Normalize and validate a ticker symbol.

    Accepts 1-5 letters with an optional single-letter class suffix
    (AAPL, brk.b). Returns the uppercase symbol.

    Raises:
        InvalidTickerError: with a message fit to show the user
    """
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise InvalidTickerError("Please enter a stock symbol")
    if not TICKER_PATTERN.match(normalized):
        raise InvalidTickerError("Please enter a valid stock symbol (e.g., AAPL, MSFT)")
    return normalized


def is_valid_ticker(symbol: str) -> bool:
    try:
        validate_ticker(symbol)
    except InvalidTickerError:
        return False
    return True
