"""Logging for the voice-studio CLI.

Log records go to stderr so stdout stays clean for command output such as
lyrics and header tables.
"""
from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional, TextIO

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# SDK and HTTP client loggers that log every request at INFO.
NOISY_LOGGERS = ("google_genai", "httpx", "httpcore")


def resolve_level(level: str) -> int:
    """Map a level name to its numeric value, falling back to INFO for unknown names."""
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    level: str = "INFO",
    *,
    stream: Optional[TextIO] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> int:
    """Install a single console handler on the root logger and return the level used.

    Loggers named in ``quiet`` are held at WARNING unless ``level`` is DEBUG.
    """
    numeric_level = resolve_level(level)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)

    quiet_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in quiet:
        logging.getLogger(name).setLevel(quiet_level)
    return numeric_level


__all__ = ["NOISY_LOGGERS", "configure_logging", "resolve_level"]
