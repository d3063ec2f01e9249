"""Protocol definitions for the collaborators around the device inventory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Protocol

from .models import Device

if TYPE_CHECKING:
    from ..metrics.samples import MetricSample


EmitCallback = Callable[["MetricSample"], None]


class DiagnosticReader(Protocol):
    """Contract for components that talk to the diagnostic tool."""

    async def list_devices(self, *args: str) -> List[Dict[str, Any]]:
        """Return the scan listing for the given addressing arguments.

        Each entry carries ``name``, ``info_name`` and ``type``. Failures yield
        an empty list.
        """
        ...

    async def read_device(self, device: Device) -> Optional[Mapping[str, Any]]:
        """Return the decoded diagnostic result for ``device`` or None."""
        ...

    def version_info(self) -> Optional[Mapping[str, str]]:
        """Version details of the diagnostic tool, once known."""
        ...


class VolumeLister(Protocol):
    """Counts the logical volumes behind a RAID controller."""

    async def count_volumes(self, device_path: str) -> int:
        ...


class MetricTranslator(Protocol):
    """Maps a diagnostic result onto metric samples."""

    def translate(
        self, device: Device, result: Mapping[str, Any], emit: EmitCallback
    ) -> None:
        ...
