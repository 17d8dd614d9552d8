"""structlog setup shared by the library and the CLI."""

import logging
import sys

import structlog


def setup_logging(verbose: bool = False, pretty: bool = False, stream=None):
    """Configure structlog on top of stdlib logging.

    Args:
        verbose: Log DEBUG events instead of INFO.
        pretty: Render human readable lines instead of JSON.
        stream: Output stream. Defaults to stderr so stdout stays free for
            the CLI's JSON result.

    Returns:
        A bound logger for the caller.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, stream=stream or sys.stderr, format="%(message)s", force=True)

    renderer = (
        structlog.dev.ConsoleRenderer(colors=False)
        if pretty
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger("itrunner")
