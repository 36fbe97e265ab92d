"""
Logging setup for the API process and the payment monitor command.

Every record carries the correlation id of the request (or monitor run) that
produced it, "-" outside of one.

Dependencies: logging (stdlib), finna.observability.correlation
System role: Centralized logging configuration
"""

import logging
import sys

from finna.observability.correlation import get_correlation_id

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(correlation_id)s] %(name)s: %(message)s"

# Client libraries that log every connection at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "aiosmtplib", "sqlalchemy.engine")


class CorrelationIdFilter(logging.Filter):
    """Stamps records with the current correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


def configure_logging(level: int | str = logging.INFO) -> None:
    """
    Route all logging to stdout through a single handler.

    Args:
        level: Root level as a number or a name such as "DEBUG"
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
