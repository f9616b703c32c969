"""Scrape text exposition output back into remote-write time series.

The scrape is lossy: lines that do not match the grammar are skipped without
error. The grammar only reads non-negative decimal values, so negative
values, ``NaN``/``+Inf`` and exponent notation (``1.7e+09``, read as its
mantissa ``1.7``) are known limitations. Histogram ``_bucket``, ``_sum`` and
``_count`` lines come out as independent series.
"""
from typing import List
import logging
import re

from prometheus_client import CollectorRegistry

from remote_write_demo.series import Label, TimeSeries

logger = logging.getLogger(__name__)

LINE_PATTERN = re.compile(r'^(\w+)(\{[^}]*\})?\s+([0-9.]+)')
LABEL_PATTERN = re.compile(r'(\w+)="([^"]*)"')


def parse_labels(labels_str: str) -> List[Label]:
    """Parse a ``{name="value",...}`` block, keeping encounter order."""
    labels = []
    for name, value in LABEL_PATTERN.findall(labels_str):
        # Pairs with an empty value are dropped
        if name and value:
            labels.append(Label(name, value))
    return labels


def parse_line(line: str, timestamp_ms: int):
    """Parse one exposition line; returns None if it does not match."""
    match = LINE_PATTERN.match(line)
    if not match:
        return None

    name, labels_str, value_str = match.groups()
    try:
        value = float(value_str)
    except ValueError:
        return None

    labels = parse_labels(labels_str) if labels_str else None
    return TimeSeries.single(name, value, timestamp_ms, labels)


def parse_exposition(text: str, timestamp_ms: int) -> List[TimeSeries]:
    """Parse a text exposition block into one TimeSeries per matched line."""
    timeseries = []
    skipped = 0

    for line in text.split('\n'):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        series = parse_line(line, timestamp_ms)
        if series is None:
            skipped += 1
            continue
        timeseries.append(series)

    if skipped:
        logger.debug(f"Skipped {skipped} unparseable exposition lines")

    return timeseries


def collect_series(registry: CollectorRegistry, timestamp_ms: int) -> List[TimeSeries]:
    """Build time series straight from the registry without a text round-trip."""
    timeseries = []
    for family in registry.collect():
        for sample in family.samples:
            labels = [Label(k, v) for k, v in sorted(sample.labels.items()) if v]
            timeseries.append(TimeSeries.single(sample.name, sample.value, timestamp_ms, labels))
    return timeseries
