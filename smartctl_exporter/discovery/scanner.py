"""Device discovery from the direct and RAID smartctl scan passes."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from ..adapters.smartctl import SmartctlError
from ..core.inventory import Inventory
from ..core.models import Device
from ..core.protocols import DiagnosticReader, VolumeLister
from .filter import DeviceFilter
from .formatting import device_from_entry, disk_name, entry_field, expand_raid_entry

LOGGER = logging.getLogger(__name__)

RAID_SCAN_ARGS: tuple[str, ...] = ("-d", "sat")


class DeviceScanner:
    """Builds the device inventory from two overlapping scan passes.

    The base pass uses smartctl's default addressing, the RAID pass
    addresses devices through SAT/RAID controllers. A device visible in both
    passes is kept once, as its base-pass entry. Devices are returned in
    base-then-RAID discovery order, after the include/exclude filter.
    """

    def __init__(
        self,
        reader: DiagnosticReader,
        *,
        device_filter: Optional[DeviceFilter] = None,
        volume_lister: Optional[VolumeLister] = None,
    ) -> None:
        self._reader = reader
        self._filter = device_filter or DeviceFilter()
        self._volume_lister = volume_lister

    async def scan(self) -> Inventory:
        base_entries = await self._list_pass("base")
        raid_entries = await self._list_pass("raid", *RAID_SCAN_ARGS)

        candidates: List[Device] = []
        seen: Set[str] = set()

        for entry in base_entries:
            LOGGER.debug("base_device: %s", entry)
            device = device_from_entry(entry)
            if device is None:
                continue
            info_name = entry_field(entry, "info_name")
            if info_name:
                seen.add(info_name)
            seen.add(device.canonical_name)
            candidates.append(device)

        for entry in raid_entries:
            info_name = entry_field(entry, "info_name")
            canonical_name = disk_name(entry_field(entry, "name"), info_name)
            if (info_name and info_name in seen) or canonical_name in seen:
                LOGGER.debug("Skipping raid entry already seen in base pass: %s", entry)
                continue
            LOGGER.debug("raid_device: %s", entry)
            candidates.extend(await expand_raid_entry(entry, self._volume_lister))

        devices: List[Device] = []
        names: Set[str] = set()
        for device in candidates:
            if device.canonical_name in names:
                LOGGER.debug("Dropping duplicate device %s", device.canonical_name)
                continue
            names.add(device.canonical_name)

            if self._filter.ignored(device.canonical_name):
                LOGGER.info("Ignoring device %s", device.canonical_name)
            else:
                LOGGER.info("Found device %s", device.canonical_name)
                devices.append(device)

        return tuple(devices)

    async def _list_pass(self, label: str, *args: str) -> List[Dict[str, Any]]:
        try:
            entries = await self._reader.list_devices(*args)
        except (SmartctlError, OSError) as exc:
            LOGGER.warning("Scan pass %s failed: %s", label, exc)
            return []
        return [entry for entry in entries if isinstance(entry, dict)]


def restrict_devices(devices: Sequence[Device], names: Iterable[str]) -> Inventory:
    """Keep devices whose canonical name contains any of ``names``.

    An empty ``names`` leaves the inventory unchanged.
    """
    filters = [name for name in names if name]
    if not filters:
        return tuple(devices)

    restricted: List[Device] = []
    for device in devices:
        for name in filters:
            LOGGER.debug(
                "Checking device %s against filter %s", device.canonical_name, name
            )
            if name in device.canonical_name:
                restricted.append(device)
                break
    return tuple(restricted)
