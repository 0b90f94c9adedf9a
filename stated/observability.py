"""structlog setup for the shopping flow trace."""
import logging

import structlog

from stated.config import Settings, settings


def configure_logging(config: Settings | None = None) -> None:
    """Configure structlog's processor chain from settings.

    Loggers are not cached, so tests can swap the configuration (for example
    with structlog.testing.capture_logs) after handles have been created.
    """
    config = config or settings
    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
