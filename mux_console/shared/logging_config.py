"""Logging configuration for the console.

One stdout handler on the root logger. HTTP client and access-log chatter is
held at WARNING so Mux calls and rate-limit waits stay readable.
"""

import logging
import sys
from collections.abc import Iterable

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def parse_level(level: str | int) -> int:
    """Resolve a level name such as ``"debug"`` to its numeric value; unknown names give INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int = "INFO", quiet: Iterable[str] = NOISY_LOGGERS) -> None:
    """Configure logging for the application.

    Args:
        level: Root level name or number (LOG_LEVEL setting)
        quiet: Loggers capped at WARNING unless ``level`` is stricter
    """
    numeric_level = parse_level(level)

    # force: uvicorn's reloader imports the app module more than once
    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for name in quiet:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
