import logging
from contextlib import contextmanager
from typing import Optional

import structlog
from config.settings import settings

def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None):
    """Configure structured logging for the radar.

    Args:
        level: Override for settings.log_level
        log_format: "json" or "console", overrides settings.log_format
    """
    level_name = (level or settings.log_level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    fmt = log_format or settings.log_format

    logging.basicConfig(format="%(message)s", level=numeric_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if fmt == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

def get_logger(name: str):
    """Get a logger instance for a module."""
    return structlog.get_logger(name)

@contextmanager
def log_context(**values):
    """Bind values to every log line emitted inside the block.

    Used to tag all feed attempts of one aggregation cycle with its refresh id.
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield
