"""Remote-write encoder: validate, serialize to protobuf, compress with Snappy."""
from typing import Iterable, List, Sequence
import re

import snappy

from remote_write_demo import prompb
from remote_write_demo.series import Label, Sample, TimeSeries, METRIC_NAME_LABEL

CONTENT_TYPE = "application/x-protobuf"
CONTENT_ENCODING = "snappy"
REMOTE_WRITE_VERSION = "0.1.0"

LABEL_NAME_PATTERN = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class RemoteWriteValidationError(ValueError):
    """Raised when a time series does not fit the WriteRequest schema."""


def remote_write_headers(version: str = REMOTE_WRITE_VERSION) -> dict:
    """Headers identifying a remote-write request body."""
    return {
        "Content-Type": CONTENT_TYPE,
        "Content-Encoding": CONTENT_ENCODING,
        "X-Prometheus-Remote-Write-Version": version,
    }


def _validate_one(series, index: int):
    where = f"timeseries[{index}]"

    if not isinstance(series, TimeSeries):
        raise RemoteWriteValidationError(f"{where}: expected TimeSeries, got {type(series).__name__}")

    if not series.labels:
        raise RemoteWriteValidationError(f"{where}: labels must not be empty")

    seen = set()
    for label in series.labels:
        if not isinstance(label, Label):
            raise RemoteWriteValidationError(f"{where}.labels: expected Label, got {type(label).__name__}")
        if not isinstance(label.name, str) or not isinstance(label.value, str):
            raise RemoteWriteValidationError(f"{where}.labels: name and value must be strings ({label!r})")
        if not LABEL_NAME_PATTERN.match(label.name):
            raise RemoteWriteValidationError(f"{where}.labels: invalid label name {label.name!r}")
        if label.name in seen:
            raise RemoteWriteValidationError(f"{where}.labels: duplicate label name {label.name!r}")
        seen.add(label.name)

    if METRIC_NAME_LABEL not in seen:
        raise RemoteWriteValidationError(f"{where}.labels: missing {METRIC_NAME_LABEL} label")

    if not series.samples:
        raise RemoteWriteValidationError(f"{where}: samples must not be empty")

    for sample in series.samples:
        if not isinstance(sample, Sample):
            raise RemoteWriteValidationError(f"{where}.samples: expected Sample, got {type(sample).__name__}")
        if isinstance(sample.value, bool) or not isinstance(sample.value, (int, float)):
            raise RemoteWriteValidationError(f"{where}.samples: value must be a number ({sample.value!r})")
        if isinstance(sample.timestamp, bool) or not isinstance(sample.timestamp, int):
            raise RemoteWriteValidationError(f"{where}.samples: timestamp must be an integer ({sample.timestamp!r})")
        if not INT64_MIN <= sample.timestamp <= INT64_MAX:
            raise RemoteWriteValidationError(f"{where}.samples: timestamp out of int64 range ({sample.timestamp})")


def validate_timeseries(timeseries: Iterable[TimeSeries]):
    """Reject any series whose shape violates the WriteRequest schema."""
    for index, series in enumerate(timeseries):
        _validate_one(series, index)


def build_write_request(timeseries: Sequence[TimeSeries]):
    """Convert series into a ``prompb.WriteRequest`` message, preserving order."""
    write_request = prompb.WriteRequest()
    for series in timeseries:
        message = write_request.timeseries.add()
        for label in series.labels:
            message.labels.add(name=label.name, value=label.value)
        for sample in series.samples:
            message.samples.add(value=float(sample.value), timestamp=sample.timestamp)
    return write_request


def serialize_write_request(timeseries: Sequence[TimeSeries]) -> bytes:
    """Validate and serialize to uncompressed protobuf bytes."""
    validate_timeseries(timeseries)
    return build_write_request(timeseries).SerializeToString()


def encode_write_request(timeseries: Sequence[TimeSeries]) -> bytes:
    """Validate, serialize and Snappy-compress a WriteRequest."""
    return snappy.compress(serialize_write_request(timeseries))


def decode_write_request(payload: bytes) -> List[TimeSeries]:
    """Decompress and parse a WriteRequest body back into time series."""
    write_request = prompb.WriteRequest.FromString(snappy.decompress(payload))
    return [
        TimeSeries(
            labels=[Label(label.name, label.value) for label in message.labels],
            samples=[Sample(sample.value, sample.timestamp) for sample in message.samples],
        )
        for message in write_request.timeseries
    ]
