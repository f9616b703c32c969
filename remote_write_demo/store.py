"""In-memory metric store backed by a prometheus_client registry."""
from typing import Dict, Optional
import logging

import numpy as np
from prometheus_client import (
    Counter, Gauge, Histogram,
    CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector,
    disable_created_metrics, enable_created_metrics, generate_latest,
)

from remote_write_demo.config import MetricSpec, StoreConfig

logger = logging.getLogger(__name__)


class MetricStore:
    """Holds the demo counters, gauges and histograms and their current values.

    The store owns its registry; pass the store to whatever needs to read or
    update it instead of relying on the global ``REGISTRY``.
    """

    def __init__(self, config: Optional[StoreConfig] = None, rng: Optional[np.random.Generator] = None):
        self.config = config or StoreConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.registry = CollectorRegistry()

        # Metric objects and their definitions, keyed by metric name
        self.metrics: Dict[str, object] = {}
        self.specs: Dict[str, MetricSpec] = {}

        if self.config.disable_created_series:
            # _created samples are epoch values rendered in exponent notation
            disable_created_metrics()
        else:
            enable_created_metrics()

        if self.config.collect_default_metrics:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        for spec in self.config.metrics:
            self.register_metric(spec)

    def register_metric(self, spec: MetricSpec):
        """Register a metric from its definition."""
        label_names = list(spec.labels.keys())

        if spec.type == "counter":
            metric = Counter(spec.name, spec.help or spec.name, label_names, registry=self.registry)
        elif spec.type == "gauge":
            metric = Gauge(spec.name, spec.help or spec.name, label_names, registry=self.registry)
        elif spec.type == "histogram":
            kwargs = {"buckets": spec.buckets} if spec.buckets else {}
            metric = Histogram(spec.name, spec.help or spec.name, label_names, registry=self.registry, **kwargs)
        else:
            raise ValueError(f"Unsupported metric type '{spec.type}' for {spec.name}")

        # Materialize the labeled child so the series is exposed before the first update
        if label_names:
            metric.labels(**spec.labels)

        self.metrics[spec.name] = metric
        self.specs[spec.name] = spec
        logger.debug(f"Registered metric: {spec.name} ({spec.type}) with labels {label_names}")

    def _child(self, name: str):
        metric = self.metrics[name]
        labels = self.specs[name].labels
        return metric.labels(**labels) if labels else metric

    def update(self) -> Dict[str, float]:
        """Run one update round over every metric.

        Returns the value applied to each metric: the increment for counters,
        the new value for gauges and the observation for histograms.
        """
        applied: Dict[str, float] = {}
        for name, spec in self.specs.items():
            child = self._child(name)
            if spec.type == "counter":
                child.inc(spec.increment)
                applied[name] = spec.increment
            elif spec.type == "gauge":
                value = float(self.rng.uniform(spec.min, spec.max))
                child.set(value)
                applied[name] = value
            elif spec.type == "histogram":
                value = float(self.rng.uniform(spec.min, spec.max))
                child.observe(value)
                applied[name] = value
        return applied

    def exposition(self) -> str:
        """Return the text exposition of all metrics in the registry."""
        return generate_latest(self.registry).decode('utf-8')
