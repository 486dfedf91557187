"""Logging setup shared by the server entrypoint and scripts."""
import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Noisy third-party loggers kept at WARNING unless DEBUG is requested
QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """
    Configure root logging once for the process.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
        fmt: Optional format string, defaults to LOG_FORMAT
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format=fmt or LOG_FORMAT)

    if numeric_level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
