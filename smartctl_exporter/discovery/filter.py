"""Regex include/exclude policy for discovered device names."""

from __future__ import annotations

import logging
import re
from typing import Optional, Pattern

LOGGER = logging.getLogger(__name__)


class DeviceFilterError(ValueError):
    """Raised when a filter pattern is not a valid regular expression."""


def _compile(pattern: str, option: str) -> Optional[Pattern[str]]:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise DeviceFilterError(f"invalid {option} pattern {pattern!r}: {exc}") from exc


class DeviceFilter:
    """Decides whether a device is left out of the inventory.

    ``exclude`` and ``include`` are mutually exclusive. When both are given the
    exclude pattern is used and the include pattern is dropped. Patterns are
    searched anywhere in the name; anchor them to match whole names.
    """

    def __init__(self, exclude: str = "", include: str = "") -> None:
        exclude = exclude or ""
        include = include or ""
        if exclude and include:
            LOGGER.warning(
                "Both device exclude (%s) and include (%s) set; using exclude only",
                exclude,
                include,
            )
            include = ""

        self._exclude = _compile(exclude, "exclude")
        self._include = _compile(include, "include")

    @property
    def exclude(self) -> Optional[str]:
        return self._exclude.pattern if self._exclude is not None else None

    @property
    def include(self) -> Optional[str]:
        return self._include.pattern if self._include is not None else None

    def ignored(self, name: str) -> bool:
        if self._exclude is not None:
            return self._exclude.search(name) is not None
        if self._include is not None:
            return self._include.search(name) is None
        return False
