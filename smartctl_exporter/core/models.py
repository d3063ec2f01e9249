"""Domain models for discovered storage devices."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List


class DeviceType(str, Enum):
    PHYSICAL = "physical"
    MEGARAID = "megaraid"
    CCISS = "cciss"


@dataclass(frozen=True, slots=True)
class Device:
    """A storage unit addressable by smartctl.

    ``device_type`` is the raw ``-d`` argument (``sat``, ``nvme``,
    ``megaraid,2``...); ``kind`` is the classification derived from it.
    """

    path: str
    canonical_name: str
    device_type: str = ""

    @property
    def kind(self) -> DeviceType:
        family = self.device_type.split(",", 1)[0].strip().lower()
        if family == "megaraid":
            return DeviceType.MEGARAID
        if family == "cciss":
            return DeviceType.CCISS
        return DeviceType.PHYSICAL

    def smartctl_args(self) -> List[str]:
        if self.device_type:
            return ["-d", self.device_type, self.path]
        return [self.path]
