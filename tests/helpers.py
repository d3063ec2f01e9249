"""Fakes and builders shared by the test modules."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from smartctl_exporter.core.models import Device
from smartctl_exporter.metrics.samples import MetricSample


class FakeReader:
    """In-memory diagnostic reader.

    ``listings`` maps scan arguments to scan entries (or an exception to
    raise); ``results`` maps canonical names to device results (or an
    exception to raise).
    """

    def __init__(
        self,
        listings: Optional[Dict[Tuple[str, ...], Any]] = None,
        results: Optional[Dict[str, Any]] = None,
        version: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.listings = listings or {}
        self.results = results or {}
        self.version = version
        self.list_calls: List[Tuple[str, ...]] = []
        self.read_calls: List[str] = []

    async def list_devices(self, *args: str) -> List[Dict[str, Any]]:
        self.list_calls.append(tuple(args))
        value = self.listings.get(tuple(args), [])
        if isinstance(value, Exception):
            raise value
        return list(value)

    async def read_device(self, device: Device) -> Optional[Mapping[str, Any]]:
        self.read_calls.append(device.canonical_name)
        value = self.results.get(device.canonical_name)
        if isinstance(value, Exception):
            raise value
        return value

    def version_info(self) -> Optional[Mapping[str, str]]:
        return self.version


class RecordingTranslator:
    def __init__(self) -> None:
        self.translated: List[str] = []

    def translate(self, device: Device, result: Mapping[str, Any], emit) -> None:
        self.translated.append(device.canonical_name)
        emit(
            MetricSample(
                "smartctl_device_temperature",
                float(result.get("temperature", {}).get("current", 0)),
                {"device": device.canonical_name},
            )
        )


def entry(name: str, info_name: Optional[str] = None, type: str = "sat") -> Dict[str, str]:
    return {
        "name": name,
        "info_name": info_name if info_name is not None else name,
        "type": type,
    }


def entries(*names: str, type: str = "sat") -> List[Dict[str, str]]:
    return [entry(f"/dev/{name}", type=type) for name in names]


def devices(*names: str) -> Sequence[Device]:
    return tuple(Device(f"/dev/{name}", name, "sat") for name in names)

