"""Background rescan loop that refreshes the device inventory.

The scheduler talks to collection only through the inventory registry: it
scans outside the lock and swaps the whole result in under it. It does not
notify the orchestrator; the next scrape simply sees the new inventory.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

from ..constants import MIN_RESCAN_INTERVAL_SECONDS
from ..core.inventory import Inventory, InventoryRegistry
from ..discovery.scanner import DeviceScanner

LOGGER = logging.getLogger(__name__)

RescanCallback = Callable[[Inventory], Awaitable[None]]


class RescanScheduler:
    """Re-runs discovery every ``interval_seconds`` until stopped.

    Intervals below one second disable rescanning entirely: ``start`` becomes
    a no-op and the inventory loaded at startup stays in place.
    """

    def __init__(
        self,
        scanner: DeviceScanner,
        registry: InventoryRegistry,
        *,
        interval_seconds: float,
        stop_event: asyncio.Event,
        on_rescan: Optional[RescanCallback] = None,
    ) -> None:
        self._scanner = scanner
        self._registry = registry
        self._interval = interval_seconds
        self._stop_event = stop_event
        self._on_rescan = on_rescan
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def enabled(self) -> bool:
        return self._interval >= MIN_RESCAN_INTERVAL_SECONDS

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background task."""
        if not self.enabled:
            LOGGER.info(
                "Rescanning disabled (interval %ss); inventory is fixed", self._interval
            )
            return
        if self.running:
            return

        LOGGER.info("Rescanning for devices every %ss", self._interval)
        self._task = asyncio.create_task(self._rescan_loop())

    async def stop(self) -> None:
        """Stop the background task."""
        if self._task is None:
            return

        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def rescan_once(self) -> Inventory:
        """Run discovery and replace the registry contents with the result."""
        LOGGER.info("Rescanning for devices")
        devices = await self._scanner.scan()
        previous = await self._registry.replace(devices)
        LOGGER.info(
            "Inventory updated: %d -> %d devices (%s)",
            len(previous),
            len(devices),
            ", ".join(device.canonical_name for device in devices) or "none",
        )
        if self._on_rescan is not None:
            try:
                await self._on_rescan(devices)
            except asyncio.CancelledError:
                raise
            except Exception:
                LOGGER.exception("Post-rescan callback failed; new inventory is in place")
        return devices

    async def _rescan_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
                break  # Stop event was set
            except asyncio.TimeoutError:
                pass

            try:
                await self.rescan_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                LOGGER.exception("Device rescan failed; keeping current inventory")
