"""
Prometheus metrics for authzgate.
"""

from .collector import MetricConfig, MetricsCollector, MetricsEventHandler

__all__ = [
    "MetricConfig",
    "MetricsCollector",
    "MetricsEventHandler",
]
