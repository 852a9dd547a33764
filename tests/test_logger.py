import structlog
from utils.logger import get_logger, log_context, setup_logging

def test_setup_logging_console():
    """Logging can be configured with explicit overrides."""
    setup_logging(level="DEBUG", log_format="console")
    logger = get_logger("test")
    logger.debug("test_event", key="value")

def test_log_context_binds_and_clears():
    """Bound values are visible inside the block only."""
    with log_context(refresh_id="abc123"):
        assert structlog.contextvars.get_contextvars()["refresh_id"] == "abc123"
    assert "refresh_id" not in structlog.contextvars.get_contextvars()
