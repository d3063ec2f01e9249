"""Metric samples and the smartctl result translator."""

from .samples import COUNTER, GAUGE, MetricSample, SampleBuffer
from .translator import SmartctlMetricTranslator

__all__ = [
    "COUNTER",
    "GAUGE",
    "MetricSample",
    "SampleBuffer",
    "SmartctlMetricTranslator",
]
