"""Data structures for remote-write time series."""
from dataclasses import dataclass, field
from typing import List, Optional

METRIC_NAME_LABEL = "__name__"


@dataclass
class Label:
    """A single label name/value pair."""
    name: str
    value: str


@dataclass
class Sample:
    """A value at a timestamp (milliseconds since epoch)."""
    value: float
    timestamp: int


@dataclass
class TimeSeries:
    """A labeled series with its samples, in wire order."""
    labels: List[Label] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)

    @classmethod
    def single(cls, name: str, value: float, timestamp: int, labels: Optional[List[Label]] = None) -> "TimeSeries":
        """Build a one-sample series with ``__name__`` as the first label."""
        all_labels = [Label(METRIC_NAME_LABEL, name)]
        if labels:
            all_labels.extend(labels)
        return cls(labels=all_labels, samples=[Sample(float(value), timestamp)])

    @property
    def name(self) -> Optional[str]:
        for label in self.labels:
            if label.name == METRIC_NAME_LABEL:
                return label.value
        return None
