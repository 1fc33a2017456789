"""Plan metrics and utilization reporting."""

from .metrics_aggregator import MetricsAggregator
from .utilization import RakeUtilization, YardLoading

__all__ = [
    "MetricsAggregator",
    "RakeUtilization",
    "YardLoading",
]
