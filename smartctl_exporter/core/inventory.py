"""Lock-guarded holder for the current device inventory.

Collection passes and rescans share one ``asyncio.Lock``: a pass sees either
the inventory from before a rescan or the one after it, never a mix. Rescans
and scrapes therefore never overlap; a slow device delays both.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Iterable, Tuple, TypeVar, Union

from .models import Device

LOGGER = logging.getLogger(__name__)

Inventory = Tuple[Device, ...]
T = TypeVar("T")


class InventoryRegistry:
    """Owns the inventory and serializes whole-list replacement against readers."""

    def __init__(self, devices: Iterable[Device] = ()) -> None:
        self._devices: Inventory = tuple(devices)
        self._lock = asyncio.Lock()

    async def replace(self, devices: Iterable[Device]) -> Inventory:
        """Swap in a new inventory and return the previous one."""
        snapshot = tuple(devices)
        async with self._lock:
            previous = self._devices
            self._devices = snapshot
        LOGGER.debug(
            "Inventory replaced: %d -> %d devices", len(previous), len(snapshot)
        )
        return previous

    async def with_devices(
        self, fn: Callable[[Inventory], Union[T, Awaitable[T]]]
    ) -> T:
        """Run ``fn`` with exclusive access to the current inventory.

        ``fn`` may be a plain function or return an awaitable; the lock is held
        until it completes.
        """
        async with self._lock:
            result = fn(self._devices)
            if inspect.isawaitable(result):
                result = await result
            return result

    def peek(self) -> Inventory:
        return self._devices

    @property
    def locked(self) -> bool:
        return self._lock.locked()
