"""Configuration models using Pydantic for validation."""
from typing import Dict, List, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator
import os

DEFAULT_PROMETHEUS_URL = "http://localhost:9090"


class MetricSpec(BaseModel):
    """Definition of a metric held by the metric store."""
    name: str
    type: Literal["counter", "gauge", "histogram"]
    help: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)

    # Histogram
    buckets: Optional[List[float]] = None

    # Gauge values and histogram observations are drawn uniformly from [min, max)
    min: float = 0.0
    max: float = 1.0

    # Counter
    increment: float = 1.0


def default_metric_specs() -> List[MetricSpec]:
    """Demo counter, gauge and histogram."""
    return [
        MetricSpec(
            name="demo_counter_total",
            type="counter",
            help="A demo counter that increments over time",
            labels={"service": "demo-service", "environment": "development"},
        ),
        MetricSpec(
            name="demo_gauge",
            type="gauge",
            help="A demo gauge that fluctuates",
            labels={"service": "demo-service", "environment": "development"},
            max=100.0,
        ),
        MetricSpec(
            name="demo_duration_seconds",
            type="histogram",
            help="A demo histogram of durations",
            labels={"service": "demo-service", "operation": "demo-operation"},
            buckets=[0.1, 0.5, 1, 2, 5],
            max=3.0,
        ),
    ]


class StoreConfig(BaseModel):
    """Metric store configuration."""
    collect_default_metrics: bool = True
    disable_created_series: bool = True
    scrape_mode: Literal["text", "registry"] = "text"
    metrics: List[MetricSpec] = Field(default_factory=default_metric_specs)

    @field_validator('metrics')
    @classmethod
    def validate_metrics(cls, v):
        """Validate metric definitions."""
        names = [m.name for m in v]
        if len(names) != len(set(names)):
            raise ValueError("Metric names must be unique")
        return v


class PrometheusConfig(BaseModel):
    """Remote Prometheus endpoint configuration."""
    url: str = DEFAULT_PROMETHEUS_URL
    write_timeout_s: float = 5.0
    query_timeout_s: float = 10.0
    health_timeout_s: float = 5.0
    remote_write_version: str = "0.1.0"
    user_agent: str = "remote-write-demo"

    @field_validator('url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @property
    def write_url(self) -> str:
        return f"{self.url}/api/v1/write"

    @property
    def query_url(self) -> str:
        return f"{self.url}/api/v1/query"

    @property
    def health_url(self) -> str:
        return f"{self.url}/-/healthy"


class SimpleClientConfig(BaseModel):
    """Simplified push path configuration."""
    labels: Dict[str, str] = Field(default_factory=dict)


class QuerySpec(BaseModel):
    """A named PromQL query run after the write."""
    query: str
    name: str


def default_queries() -> List[QuerySpec]:
    return [
        QuerySpec(query="demo_counter_total", name="Demo Counter"),
        QuerySpec(query="demo_gauge", name="Demo Gauge"),
        QuerySpec(query="http_requests_total", name="HTTP Requests"),
        QuerySpec(query="http_request_duration_seconds", name="HTTP Request Duration"),
        QuerySpec(query="custom_metric", name="Custom Metric"),
    ]


class DemoConfig(BaseModel):
    """Demo run configuration."""
    settle_delay_s: float = 2.0
    queries: List[QuerySpec] = Field(default_factory=default_queries)


class GlobalConfig(BaseModel):
    """Global configuration settings."""
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"
    seed: Optional[int] = None


class Config(BaseModel):
    """Root configuration model."""
    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    simple: SimpleClientConfig = Field(default_factory=SimpleClientConfig)
    demo: DemoConfig = Field(default_factory=DemoConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate configuration from an optional YAML file."""
    import yaml

    raw_config = {}
    if config_path is not None:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

    # Apply environment variable overrides
    if env_url := os.getenv('PROMETHEUS_URL'):
        raw_config.setdefault('prometheus', {})['url'] = env_url

    if env_log_level := os.getenv('LOG_LEVEL'):
        raw_config.setdefault('global', {})['log_level'] = env_log_level

    try:
        return Config(**raw_config)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
