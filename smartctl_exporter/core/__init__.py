"""Core primitives for smartctl-exporter."""

from .inventory import Inventory, InventoryRegistry
from .models import Device, DeviceType
from .protocols import DiagnosticReader, EmitCallback, MetricTranslator, VolumeLister

__all__ = [
    "DiagnosticReader",
    "Device",
    "DeviceType",
    "EmitCallback",
    "Inventory",
    "InventoryRegistry",
    "MetricTranslator",
    "VolumeLister",
]
