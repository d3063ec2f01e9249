"""Device discovery: scan passes, naming, and inventory filters."""

from .filter import DeviceFilter, DeviceFilterError
from .formatting import disk_name, expand_raid_entry
from .scanner import RAID_SCAN_ARGS, DeviceScanner, restrict_devices

__all__ = [
    "DeviceFilter",
    "DeviceFilterError",
    "DeviceScanner",
    "RAID_SCAN_ARGS",
    "disk_name",
    "expand_raid_entry",
    "restrict_devices",
]
