"""PromQL query client and health check."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

import requests

from remote_write_demo.config import PrometheusConfig
from remote_write_demo.series import METRIC_NAME_LABEL

logger = logging.getLogger(__name__)

# Errors raised by a response body that does not have the documented shape
MALFORMED_RESULT_ERRORS = (KeyError, IndexError, TypeError, ValueError, AttributeError)


@dataclass
class QueryOutcome:
    """Result of one instant query.

    ``status`` is the server's status string, or ``"failed"`` when the
    request itself did not complete or its body could not be read.
    ``results`` are normalized to ``{"metric": {...}, "value": [ts, val]}``
    whatever the ``resultType``.
    """
    query: str
    name: str
    status: str
    results: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None
    result_type: str = "vector"

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @property
    def failed(self) -> bool:
        return self.status == "failed"


def normalize_results(result_type: str, result) -> List[Dict[str, Any]]:
    """Turn any ``data.result`` shape into a list of single-value elements.

    Matrix series are reduced to their latest value; scalar and string
    results become one element without labels.
    """
    if result_type == "vector":
        return [{"metric": r.get("metric") or {}, "value": list(r["value"])} for r in result or []]

    if result_type == "matrix":
        return [
            {"metric": series.get("metric") or {}, "value": list(series["values"][-1])}
            for series in result or []
            if series.get("values")
        ]

    if result_type in ("scalar", "string"):
        if not result:
            return []
        ts, value = result
        return [{"metric": {}, "value": [ts, value]}]

    raise ValueError(f"unsupported resultType {result_type!r}")


def format_timestamp(ts) -> str:
    """Render a Prometheus epoch-seconds timestamp as ISO-8601 UTC."""
    seconds = int(float(ts))
    return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def format_result(result: Dict[str, Any], default_name: str = "unknown") -> str:
    """Render one result as ``name{k="v", ...} = value @ timestamp``."""
    metric = result.get("metric", {})
    labels = ", ".join(
        f'{k}="{v}"' for k, v in metric.items() if k != METRIC_NAME_LABEL
    )
    metric_name = metric.get(METRIC_NAME_LABEL, default_name)
    ts, value = result["value"]
    label_block = f"{{{labels}}}" if labels else ""
    return f"{metric_name}{label_block} = {value} @ {format_timestamp(ts)}"


class QueryClient:
    """Issues health checks and instant queries against a Prometheus server."""

    def __init__(self, config: PrometheusConfig):
        self.config = config

    def check_health(self) -> bool:
        """Return True if ``/-/healthy`` answers 200."""
        logger.info("Checking Prometheus status...")
        try:
            response = requests.get(self.config.health_url, timeout=self.config.health_timeout_s)
        except requests.RequestException as e:
            logger.error(f"Prometheus is not accessible: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"Prometheus is not healthy: HTTP {response.status_code}")
            return False

        logger.info(f"Prometheus is healthy ({response.status_code})")
        return True

    def query(self, query: str, name: Optional[str] = None) -> QueryOutcome:
        """Run one instant query. Never raises; transport errors give a failed outcome."""
        name = name or query
        logger.info(f"Querying: {name}")
        logger.info(f"   Query: {query}")

        try:
            response = requests.get(
                self.config.query_url,
                params={"query": query},
                timeout=self.config.query_timeout_s,
            )
            response.raise_for_status()
            body = response.json()
        except requests.HTTPError as e:
            logger.error(f"   Error querying Prometheus: {e}")
            logger.error(f"      Status: {e.response.status_code}")
            logger.error(f"      Data: {e.response.text}")
            return QueryOutcome(query, name, "failed", error=str(e))
        except (requests.RequestException, ValueError) as e:
            logger.error(f"   Error querying Prometheus: {e}")
            return QueryOutcome(query, name, "failed", error=str(e))

        try:
            status = body.get("status", "unknown")
            data = body.get("data") or {}
            result_type = data.get("resultType", "vector")
            results = normalize_results(result_type, data.get("result")) if status == "success" else []
        except MALFORMED_RESULT_ERRORS as e:
            logger.error(f"   Unexpected query response: {e!r}")
            return QueryOutcome(query, name, "failed", error=f"malformed response: {e!r}")

        return QueryOutcome(
            query, name, status, results=results, error=body.get("error"), result_type=result_type,
        )

    def report(self, outcome: QueryOutcome) -> List[str]:
        """Log an outcome and return the rendered result lines."""
        if outcome.failed:
            return []

        if not outcome.ok:
            logger.warning(f"   Query failed: {outcome.error or 'Unknown error'}")
            return []

        logger.info(f"   Status: {outcome.status}")
        if not outcome.results:
            logger.warning("   No data found for this query")
            return []

        default_name = outcome.result_type if outcome.result_type in ("scalar", "string") else "unknown"
        lines = [format_result(result, default_name) for result in outcome.results]
        logger.info(f"   Found {len(lines)} {outcome.result_type} result(s):")
        for index, line in enumerate(lines, start=1):
            logger.info(f"      {index}. {line}")
        return lines

    def run_queries(self, queries) -> List[QueryOutcome]:
        """Run ``(query, name)`` specs sequentially, reporting each."""
        outcomes = []
        for spec in queries:
            outcome = self.query(spec.query, spec.name)
            try:
                self.report(outcome)
            except MALFORMED_RESULT_ERRORS as e:
                logger.error(f"   Could not render results for {outcome.name}: {e!r}")
                outcome.status = "failed"
                outcome.error = f"unrenderable result: {e!r}"
            outcomes.append(outcome)
        return outcomes
