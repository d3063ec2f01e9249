"""cciss_vol_status wrapper used to expand HP Smart Array controllers."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from .smartctl import SmartctlError, run_command

LOGGER = logging.getLogger(__name__)

_VOLUME_LINE = re.compile(r"\bVolume\s+\d+\s+status\b", re.IGNORECASE)


class CcissVolStatusLister:
    """Counts logical volumes reported by ``cciss_vol_status``."""

    def __init__(
        self,
        path: str,
        *,
        command_timeout: Optional[float] = None,
        runner: Optional[Callable[..., Any]] = None,
    ) -> None:
        self._path = path
        self._command_timeout = command_timeout
        self._runner = runner or run_command

    async def count_volumes(self, device_path: str) -> int:
        result = await self._runner(
            [self._path, device_path], timeout=self._command_timeout
        )
        output = result.stdout.decode("utf-8", errors="replace")
        count = sum(1 for line in output.splitlines() if _VOLUME_LINE.search(line))
        if result.returncode != 0 and count == 0:
            raise SmartctlError(
                f"{self._path} exited with {result.returncode} for {device_path}"
            )
        LOGGER.debug("%s reports %d logical volumes", device_path, count)
        return count
