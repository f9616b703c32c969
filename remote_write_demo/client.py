"""Full remote-write client: metric store -> scraper -> encoder -> HTTP POST."""
from datetime import datetime, timezone
import logging
import time

import requests

from remote_write_demo.config import Config
from remote_write_demo.remote_write import encode_write_request, remote_write_headers
from remote_write_demo.scraper import collect_series, parse_exposition
from remote_write_demo.store import MetricStore

logger = logging.getLogger(__name__)


def metrics_to_remote_write(store: MetricStore, scrape_mode: str = "text") -> bytes:
    """Capture the store's current values as a compressed WriteRequest body."""
    timestamp = int(time.time() * 1000)

    if scrape_mode == "registry":
        timeseries = collect_series(store.registry, timestamp)
    else:
        timeseries = parse_exposition(store.exposition(), timestamp)

    logger.debug(f"Captured {len(timeseries)} series at {timestamp}")
    return encode_write_request(timeseries)


def send_metrics_to_prometheus(store: MetricStore, config: Config) -> bool:
    """Send the store's metrics in a single remote-write request.

    Failures are logged and swallowed. Returns True if the server accepted the
    write.
    """
    prometheus = config.prometheus
    try:
        payload = metrics_to_remote_write(store, config.store.scrape_mode)

        headers = remote_write_headers(prometheus.remote_write_version)
        headers["User-Agent"] = prometheus.user_agent

        response = requests.post(
            prometheus.write_url,
            data=payload,
            headers=headers,
            timeout=prometheus.write_timeout_s,
        )
    except Exception as e:
        logger.error(f"Failed to send metrics to Prometheus: {e}")
        return False

    if not response.ok:
        logger.error(f"Failed to send metrics to Prometheus: HTTP {response.status_code}")
        logger.error(f"   Response status: {response.status_code}")
        logger.error(f"   Response data: {response.text}")
        return False

    logger.info(f"Metrics sent to Prometheus at {datetime.now(timezone.utc).isoformat()}")
    logger.info(f"   Response status: {response.status_code}")
    return True


def update_metrics(store: MetricStore):
    """Run one update round on the store and log the gauge and duration."""
    applied = store.update()

    gauge = next((v for n, v in applied.items() if store.specs[n].type == "gauge"), None)
    duration = next((v for n, v in applied.items() if store.specs[n].type == "histogram"), None)

    parts = [f"{len(applied)} metrics"]
    if gauge is not None:
        parts.append(f"Gauge: {gauge:.2f}")
    if duration is not None:
        parts.append(f"Duration: {duration:.2f}s")
    logger.info("Updated metrics - " + ", ".join(parts))
    return applied


def generate_and_send_metrics(store: MetricStore, config: Config) -> bool:
    """Update the store, then send it."""
    update_metrics(store)
    return send_metrics_to_prometheus(store, config)
