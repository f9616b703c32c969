"""End-to-end demo run: health check, write, settle, query."""
import logging
import time

import numpy as np

from remote_write_demo import client, simple_client
from remote_write_demo.config import Config
from remote_write_demo.query import QueryClient
from remote_write_demo.store import MetricStore

logger = logging.getLogger(__name__)


def generate_and_send(config: Config, mode: str = "simple", rng=None) -> bool:
    """One generate-and-send round through the chosen client."""
    if rng is None:
        rng = np.random.default_rng(config.global_.seed)

    if mode == "full":
        store = MetricStore(config.store, rng=rng)
        return client.generate_and_send_metrics(store, config)
    return simple_client.generate_and_send_metrics(config, rng)


def run_demo(config: Config, mode: str = "simple", sleep=time.sleep) -> int:
    """Run the demo and return the process exit code."""
    logger.info("Prometheus Remote Write Test")
    logger.info(f"Prometheus URL: {config.prometheus.url}")
    logger.info("=" * 50)

    query_client = QueryClient(config.prometheus)
    if not query_client.check_health():
        logger.error("Make sure Prometheus is running and accessible.")
        logger.error("   You can start it with: docker-compose up -d")
        return 1

    logger.info(f"Generating and sending metrics ({mode} client)...")
    generate_and_send(config, mode)

    logger.info("Waiting for metrics to be processed...")
    sleep(config.demo.settle_delay_s)

    logger.info("Running queries...")
    outcomes = query_client.run_queries(config.demo.queries)

    failed = sum(1 for o in outcomes if o.failed)
    logger.info(f"Test completed! {len(outcomes)} queries, {failed} failed")
    logger.info(f"   - Visit {config.prometheus.url} for the Prometheus UI")
    logger.info("   - Run this test again to see updated values")
    logger.info('   - Try queries like: demo_counter_total{service="demo-service"}')
    return 0
