"""Metric samples emitted during a collection pass and their Prometheus rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from prometheus_client import CollectorRegistry, PlatformCollector, ProcessCollector
from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.exposition import generate_latest

GAUGE = "gauge"
COUNTER = "counter"


@dataclass(frozen=True, slots=True)
class MetricSample:
    name: str
    value: float
    labels: Mapping[str, str] = field(default_factory=dict)
    documentation: str = ""
    type: str = GAUGE


@dataclass
class _Family:
    name: str
    documentation: str
    type: str
    label_names: Tuple[str, ...]
    values: Dict[Tuple[str, ...], float] = field(default_factory=dict)


class SampleBuffer:
    """Collects samples for one scrape and renders them as an exposition.

    Instances are callable so they can be handed straight to the orchestrator
    as the emit sink. Samples sharing a name and label set overwrite each
    other; the first sample of a name fixes its label names, documentation and
    type.
    """

    def __init__(self) -> None:
        self._families: Dict[str, _Family] = {}

    def __call__(self, sample: MetricSample) -> None:
        self.add(sample)

    def add(self, sample: MetricSample) -> None:
        family = self._families.get(sample.name)
        if family is None:
            family = _Family(
                name=sample.name,
                documentation=sample.documentation or sample.name,
                type=sample.type,
                label_names=tuple(sorted(sample.labels)),
            )
            self._families[sample.name] = family

        key = tuple(str(sample.labels.get(label, "")) for label in family.label_names)
        family.values[key] = float(sample.value)

    def __len__(self) -> int:
        return sum(len(family.values) for family in self._families.values())

    def value(self, name: str, **labels: str) -> Optional[float]:
        family = self._families.get(name)
        if family is None:
            return None
        key = tuple(labels.get(label, "") for label in family.label_names)
        return family.values.get(key)

    def names(self) -> List[str]:
        return list(self._families)

    def families(self) -> Iterator[Metric]:
        for family in self._families.values():
            if family.type == COUNTER:
                # Counter samples keep their exact name, without a _total suffix.
                metric: Metric = Metric(family.name, family.documentation, COUNTER)
                for key, value in family.values.items():
                    metric.add_sample(
                        family.name, dict(zip(family.label_names, key)), value
                    )
            else:
                metric = GaugeMetricFamily(
                    family.name, family.documentation, labels=family.label_names
                )
                for key, value in family.values.items():
                    metric.add_metric(list(key), value)
            yield metric

    # prometheus_client collector interface
    def collect(self) -> Iterator[Metric]:
        return self.families()

    def render(self, *, include_process: bool = True) -> bytes:
        registry = CollectorRegistry(auto_describe=False)
        if include_process:
            ProcessCollector(registry=registry)
            PlatformCollector(registry=registry)
        registry.register(self)
        return generate_latest(registry)
