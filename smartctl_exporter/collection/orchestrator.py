"""Scrape-time collection over the current device inventory."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping

from ..adapters.smartctl import SmartctlError
from ..core.inventory import Inventory, InventoryRegistry
from ..core.protocols import DiagnosticReader, EmitCallback, MetricTranslator
from ..metrics.samples import MetricSample

LOGGER = logging.getLogger(__name__)


class CollectionOrchestrator:
    """Polls every device in inventory order and emits the translated samples.

    The registry lock is held for the whole pass, so concurrent scrapes and
    rescans wait until every device has been read. A device whose read fails
    or returns nothing usable contributes no samples; the rest of the pass
    continues.
    """

    def __init__(
        self,
        registry: InventoryRegistry,
        reader: DiagnosticReader,
        translator: MetricTranslator,
    ) -> None:
        self._registry = registry
        self._reader = reader
        self._translator = translator

    async def collect(self, emit: EmitCallback) -> int:
        """Run one collection pass; return how many devices produced results."""

        async def _pass(devices: Inventory) -> int:
            collected = 0
            for device in devices:
                try:
                    result = await self._reader.read_device(device)
                except asyncio.CancelledError:
                    raise
                except (SmartctlError, OSError) as exc:
                    LOGGER.warning("Reading %s failed: %s", device.canonical_name, exc)
                    continue

                if not isinstance(result, Mapping) or not result:
                    LOGGER.debug("No usable result for %s", device.canonical_name)
                    continue

                try:
                    self._translator.translate(device, result, emit)
                except Exception:
                    LOGGER.exception(
                        "Translating result for %s failed", device.canonical_name
                    )
                    continue
                collected += 1

            emit(
                MetricSample(
                    "smartctl_devices",
                    float(len(devices)),
                    {},
                    "Number of devices configured or dynamically discovered",
                )
            )
            self._emit_version(emit)
            return collected

        return await self._registry.with_devices(_pass)

    def _emit_version(self, emit: EmitCallback) -> None:
        info = self._reader.version_info()
        if not info:
            return
        emit(MetricSample("smartctl_version", 1.0, dict(info), "smartctl version"))
