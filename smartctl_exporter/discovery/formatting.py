"""Canonical naming and RAID expansion for smartctl scan entries.

smartctl reports each scanned device as ``{"name", "info_name", "type"}``.
``info_name`` may carry a bracketed annotation, e.g. ``/dev/sda [SAT]`` or
``/dev/bus/0 [megaraid_disk_00]``. RAID members share the controller path,
so their canonical name combines the path with the member annotation.
"""

from __future__ import annotations

import logging
import re
from typing import Any, List, Mapping, Optional

from ..adapters.smartctl import SmartctlError
from ..core.models import Device
from ..core.protocols import VolumeLister

LOGGER = logging.getLogger(__name__)

_ANNOTATED = re.compile(r"^(?P<base>.*?)\s*\[(?P<note>[^\]]*)\]\s*$")
_RAID_MEMBER = re.compile(r"^(megaraid|cciss)_disk_\d+$", re.IGNORECASE)
_RAID_FAMILIES = ("megaraid", "cciss")


def strip_dev(path: str) -> str:
    path = path.strip()
    if path.startswith("/dev/"):
        return path[len("/dev/"):]
    return path


def raid_member_name(path: str, family: str, index: int) -> str:
    return f"{strip_dev(path)}_{family.lower()}_disk_{index:02d}"


def disk_name(name: str, info_name: str) -> str:
    """Derive the canonical name for a scan entry."""
    name = name.strip()
    info_name = info_name.strip()
    if not info_name:
        return strip_dev(name)

    match = _ANNOTATED.match(info_name)
    if match is None:
        return strip_dev(info_name)

    base = match.group("base").strip() or name
    note = match.group("note").strip()
    if _RAID_MEMBER.match(note):
        return f"{strip_dev(base)}_{note.lower()}"
    return strip_dev(base)


def entry_field(entry: Mapping[str, Any], key: str) -> str:
    value = entry.get(key)
    return str(value).strip() if value is not None else ""


def device_from_entry(entry: Mapping[str, Any]) -> Optional[Device]:
    name = entry_field(entry, "name")
    if not name:
        LOGGER.debug("Skipping scan entry without a name: %s", entry)
        return None
    return Device(
        path=name,
        canonical_name=disk_name(name, entry_field(entry, "info_name")),
        device_type=entry_field(entry, "type"),
    )


async def expand_raid_entry(
    entry: Mapping[str, Any], volume_lister: Optional[VolumeLister] = None
) -> List[Device]:
    """Expand a RAID-pass scan entry into the devices it stands for.

    A ``megaraid,N`` or ``cciss,N`` entry already names one member. A bare
    ``cciss`` controller is expanded into one ``cciss,i`` device per logical
    volume when a volume lister is available; otherwise it is kept as is.
    """
    name = entry_field(entry, "name")
    if not name:
        LOGGER.debug("Skipping scan entry without a name: %s", entry)
        return []

    device_type = entry_field(entry, "type")
    family, _, index = device_type.partition(",")
    family = family.strip().lower()
    index = index.strip()

    if family in _RAID_FAMILIES and index.isdigit():
        return [Device(name, raid_member_name(name, family, int(index)), device_type)]

    if family == "cciss" and not index and volume_lister is not None:
        try:
            count = await volume_lister.count_volumes(name)
        except (SmartctlError, OSError) as exc:
            LOGGER.warning("Could not list logical volumes on %s: %s", name, exc)
            count = 0
        if count > 0:
            return [
                Device(name, raid_member_name(name, "cciss", member), f"cciss,{member}")
                for member in range(count)
            ]

    device = device_from_entry(entry)
    return [device] if device is not None else []
