"""Logging setup for the exporter process."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Loggers that report every scrape or subprocess spawn.
_ACCESS_LOGGER = "aiohttp.access"
_SUBPROCESS_LOGGER = "asyncio"


def _resolve_level(level: str) -> tuple[int, bool]:
    resolved = logging.getLevelName(level.strip().upper())
    if isinstance(resolved, int):
        return resolved, True
    return logging.INFO, False


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_access: bool = False
) -> None:
    """Replace the root handlers with console and optional file output.

    Unknown level names fall back to INFO. Scrape access lines from aiohttp
    are only kept when ``log_access`` is set; asyncio's per-subprocess debug
    chatter from smartctl invocations is always held at INFO.
    """

    numeric_level, known = _resolve_level(level)
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(numeric_level)

    logging.captureWarnings(True)
    logging.getLogger(_SUBPROCESS_LOGGER).setLevel(max(numeric_level, logging.INFO))
    if not log_access:
        logging.getLogger(_ACCESS_LOGGER).setLevel(logging.WARNING)

    if not known:
        logging.getLogger(__name__).warning("Unknown log level %r; using INFO", level)
