#!/usr/bin/env python3
"""Tests for the text exposition scraper."""
import numpy as np

from remote_write_demo.config import StoreConfig
from remote_write_demo.scraper import collect_series, parse_exposition, parse_line
from remote_write_demo.series import Label, Sample
from remote_write_demo.store import MetricStore

TS = 1700000000000


def label_key(series):
    return tuple(sorted((label.name, label.value) for label in series.labels))


def test_counter_line_with_labels():
    """A labeled line becomes one series with __name__ first."""
    series = parse_exposition('demo_counter_total{service="demo-service"} 42', TS)

    assert len(series) == 1
    assert series[0].labels == [
        Label("__name__", "demo_counter_total"),
        Label("service", "demo-service"),
    ]
    assert series[0].samples == [Sample(42.0, TS)]


def test_bare_line_without_labels():
    series = parse_exposition("up 1", TS)
    assert series[0].labels == [Label("__name__", "up")]
    assert series[0].samples[0].value == 1.0


def test_one_series_per_matching_line():
    text = "\n".join([
        "# HELP demo_gauge A demo gauge that fluctuates",
        "# TYPE demo_gauge gauge",
        'demo_gauge{environment="development",service="demo-service"} 12.5',
        "",
        'demo_duration_seconds_bucket{le="0.5",operation="op"} 3.0',
        "demo_duration_seconds_count 7",
    ])

    series = parse_exposition(text, TS)

    assert [s.name for s in series] == [
        "demo_gauge",
        "demo_duration_seconds_bucket",
        "demo_duration_seconds_count",
    ]
    assert all(s.samples[0].timestamp == TS for s in series)


def test_labels_keep_encounter_order():
    series = parse_line('m{zeta="1",alpha="2",mid="3"} 1', TS)
    assert [label.name for label in series.labels] == ["__name__", "zeta", "alpha", "mid"]


def test_empty_label_values_are_dropped():
    series = parse_line('m{a="",b="x"} 1', TS)
    assert series.labels == [Label("__name__", "m"), Label("b", "x")]


def test_unmatched_lines_are_skipped():
    text = "\n".join([
        "negative_gauge -3.5",
        'nan_gauge{a="b"} NaN',
        "garbage line here",
        "dotted 1.2.3",
        "good_metric 5",
    ])

    series = parse_exposition(text, TS)

    assert len(series) == 1
    assert series[0].name == "good_metric"


def test_exponent_notation_reads_mantissa():
    # Known limitation of the grammar
    series = parse_line("process_start_time_seconds 1.7e+09", TS)
    assert series.samples[0].value == 1.7


def test_store_exposition_round_trip():
    """Scraping the store's own dump yields its demo series."""
    store = MetricStore(StoreConfig(collect_default_metrics=False), rng=np.random.default_rng(1))
    store.update()

    series = parse_exposition(store.exposition(), TS)
    by_name = {}
    for s in series:
        by_name.setdefault(s.name, []).append(s)

    counter = by_name["demo_counter_total"][0]
    assert counter.samples[0].value == 1.0
    assert {(label.name, label.value) for label in counter.labels} == {
        ("__name__", "demo_counter_total"),
        ("service", "demo-service"),
        ("environment", "development"),
    }
    assert "demo_gauge" in by_name
    # Five configured buckets plus +Inf
    assert len(by_name["demo_duration_seconds_bucket"]) == 6
    assert by_name["demo_duration_seconds_count"][0].samples[0].value == 1.0


def test_collect_series_matches_text_scrape_for_demo_metrics():
    store = MetricStore(StoreConfig(collect_default_metrics=False), rng=np.random.default_rng(2))
    store.update()

    from_text = {label_key(s): s.samples[0].value for s in parse_exposition(store.exposition(), TS)}
    from_registry = {label_key(s): s.samples[0].value for s in collect_series(store.registry, TS)}

    assert from_text == from_registry
