"""Simplified remote-write client: flat name -> value pairs via the push helper."""
from datetime import datetime, timezone
from typing import Dict, Optional
import logging

import numpy as np

from remote_write_demo.config import Config
from remote_write_demo.pusher import push_metrics

logger = logging.getLogger(__name__)


def generate_metrics(rng: np.random.Generator) -> Dict[str, float]:
    """Generate the demo values as a name -> value mapping."""
    return {
        "demo_counter_total": float(rng.integers(1, 101)),
        "demo_gauge": float(rng.uniform(0, 100)),
        "demo_duration_seconds": float(rng.uniform(0, 3)),
        "custom_metric": 42.0,
    }


def send_metrics_to_prometheus(config: Config, metrics: Optional[Dict[str, float]] = None) -> bool:
    """Push ``metrics`` once, generating fresh demo values when none are given.

    Failures are logged and swallowed.
    """
    if metrics is None:
        metrics = generate_metrics(np.random.default_rng(config.global_.seed))

    prometheus = config.prometheus
    try:
        logger.info(f"Sending {len(metrics)} metrics to Prometheus...")
        for name, value in metrics.items():
            logger.info(f"   - {name} = {value}")

        push_metrics(
            metrics,
            url=prometheus.write_url,
            headers={
                "X-Prometheus-Remote-Write-Version": prometheus.remote_write_version,
                "User-Agent": prometheus.user_agent,
            },
            labels=config.simple.labels,
            timeout=prometheus.write_timeout_s,
        )

        logger.info(f"Metrics sent to Prometheus at {datetime.now(timezone.utc).isoformat()}")
        return True
    except Exception as e:
        logger.error(f"Failed to send metrics to Prometheus: {e}")
        return False


def generate_and_send_metrics(config: Config, rng: Optional[np.random.Generator] = None) -> bool:
    """Generate the demo values and push them."""
    if rng is None:
        rng = np.random.default_rng(config.global_.seed)
    return send_metrics_to_prometheus(config, generate_metrics(rng))
