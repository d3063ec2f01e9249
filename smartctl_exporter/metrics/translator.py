"""Translate smartctl JSON output into metric samples.

Only a curated subset of the smartctl document is exported. Fields that are
absent for a given device (NVMe devices have no ATA attribute table, SCSI
devices report no power cycle count, ...) are skipped without error.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..core.models import Device
from ..core.protocols import EmitCallback
from .samples import COUNTER, MetricSample

_INFO_FIELDS = (
    "model_family",
    "model_name",
    "serial_number",
    "firmware_version",
)

_NVME_HEALTH_METRICS = (
    ("percentage_used", "smartctl_device_percentage_used", "Device write percentage used"),
    ("available_spare", "smartctl_device_available_spare", "Normalized percentage of remaining spare capacity"),
    ("media_errors", "smartctl_device_media_errors", "Number of unrecovered data integrity errors"),
)


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _dig(document: Mapping[str, Any], *path: str) -> Any:
    current: Any = document
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


class SmartctlMetricTranslator:
    """Emits ``smartctl_device_*`` samples for one device result."""

    def translate(
        self, device: Device, result: Mapping[str, Any], emit: EmitCallback
    ) -> None:
        labels = {"device": device.canonical_name}

        self._emit_info(device, result, emit)

        exit_status = _number(_dig(result, "smartctl", "exit_status"))
        if exit_status is not None:
            emit(
                MetricSample(
                    "smartctl_device_exit_status",
                    exit_status,
                    labels,
                    "Exit status of smartctl on device",
                )
            )

        passed = _dig(result, "smart_status", "passed")
        if isinstance(passed, bool):
            emit(
                MetricSample(
                    "smartctl_device_smart_status",
                    1.0 if passed else 0.0,
                    labels,
                    "General smart status",
                )
            )

        temperature = _number(_dig(result, "temperature", "current"))
        if temperature is not None:
            emit(
                MetricSample(
                    "smartctl_device_temperature",
                    temperature,
                    {**labels, "temperature_type": "current"},
                    "Device temperature celsius",
                )
            )

        hours = _number(_dig(result, "power_on_time", "hours"))
        if hours is not None:
            emit(
                MetricSample(
                    "smartctl_device_power_on_seconds",
                    hours * 3600.0,
                    labels,
                    "Device power on seconds",
                    COUNTER,
                )
            )

        cycles = _number(result.get("power_cycle_count"))
        if cycles is not None:
            emit(
                MetricSample(
                    "smartctl_device_power_cycle_count",
                    cycles,
                    labels,
                    "Device power cycle count",
                    COUNTER,
                )
            )

        capacity = _number(_dig(result, "user_capacity", "bytes"))
        if capacity is not None:
            emit(
                MetricSample(
                    "smartctl_device_capacity_bytes",
                    capacity,
                    labels,
                    "Device capacity in bytes",
                )
            )

        error_count = _number(_dig(result, "ata_smart_error_log", "summary", "count"))
        if error_count is not None:
            emit(
                MetricSample(
                    "smartctl_device_error_log_count",
                    error_count,
                    {**labels, "error_log_type": "summary"},
                    "Device SMART error log count",
                )
            )

        self._emit_attributes(labels, result, emit)
        self._emit_nvme_health(labels, result, emit)

    def _emit_info(
        self, device: Device, result: Mapping[str, Any], emit: EmitCallback
    ) -> None:
        info: Dict[str, str] = {
            "device": device.canonical_name,
            "path": device.path,
            "type": device.device_type,
            "kind": device.kind.value,
            "protocol": str(_dig(result, "device", "protocol") or ""),
            "interface": str(_dig(result, "device", "type") or ""),
        }
        for key in _INFO_FIELDS:
            value = result.get(key)
            info[key] = "" if value is None else str(value)
        emit(MetricSample("smartctl_device", 1.0, info, "Device info"))

    def _emit_attributes(
        self, labels: Mapping[str, str], result: Mapping[str, Any], emit: EmitCallback
    ) -> None:
        table = _dig(result, "ata_smart_attributes", "table")
        if not isinstance(table, list):
            return

        for attribute in table:
            if not isinstance(attribute, Mapping):
                continue
            name = attribute.get("name")
            attribute_id = attribute.get("id")
            if name is None or attribute_id is None:
                continue

            values = {
                "value": _number(attribute.get("value")),
                "worst": _number(attribute.get("worst")),
                "thresh": _number(attribute.get("thresh")),
                "raw": _number(_dig(attribute, "raw", "value")),
            }
            for value_type, value in values.items():
                if value is None:
                    continue
                emit(
                    MetricSample(
                        "smartctl_device_attribute",
                        value,
                        {
                            **labels,
                            "attribute_name": str(name),
                            "attribute_id": str(attribute_id),
                            "attribute_value_type": value_type,
                        },
                        "Device attributes",
                    )
                )

    def _emit_nvme_health(
        self, labels: Mapping[str, str], result: Mapping[str, Any], emit: EmitCallback
    ) -> None:
        health = result.get("nvme_smart_health_information_log")
        if not isinstance(health, Mapping):
            return

        for key, metric_name, documentation in _NVME_HEALTH_METRICS:
            value = _number(health.get(key))
            if value is not None:
                emit(MetricSample(metric_name, value, labels, documentation))
