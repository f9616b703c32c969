"""Push a flat name -> value mapping to a remote-write endpoint.

Each entry becomes a single-sample series labeled with ``__name__`` plus any
static labels. All samples share one timestamp taken at call time. Encoding,
compression and the content headers are handled here; callers supply the URL
and any extra headers such as the protocol version.
"""
from typing import Dict, Mapping, Optional
import logging
import time

import requests
import snappy

from remote_write_demo import prompb
from remote_write_demo.series import METRIC_NAME_LABEL

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def build_push_request(metrics: Mapping[str, float], timestamp_ms: int, labels: Optional[Mapping[str, str]] = None):
    """Build a ``prompb.WriteRequest`` with one series per metric."""
    write_request = prompb.WriteRequest()
    for name, value in metrics.items():
        series = write_request.timeseries.add()
        series.labels.add(name=METRIC_NAME_LABEL, value=name)
        for label_name, label_value in (labels or {}).items():
            series.labels.add(name=label_name, value=label_value)
        series.samples.add(value=float(value), timestamp=timestamp_ms)
    return write_request


def push_metrics(
    metrics: Mapping[str, float],
    url: str,
    headers: Optional[Dict[str, str]] = None,
    labels: Optional[Mapping[str, str]] = None,
    timeout: float = 5.0,
) -> requests.Response:
    """POST ``metrics`` to ``url`` in one remote-write request.

    Raises ``requests.RequestException`` on transport errors and
    ``requests.HTTPError`` on a non-2xx response.
    """
    write_request = build_push_request(metrics, now_ms(), labels)
    body = snappy.compress(write_request.SerializeToString())

    request_headers = {
        "Content-Type": "application/x-protobuf",
        "Content-Encoding": "snappy",
    }
    request_headers.update(headers or {})

    logger.debug(f"Pushing {len(metrics)} series ({len(body)} bytes) to {url}")
    response = requests.post(url, data=body, headers=request_headers, timeout=timeout)
    response.raise_for_status()
    return response
