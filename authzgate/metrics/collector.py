"""
Prometheus metrics for authorization decisions.

Counters and histograms live on a private CollectorRegistry per collector, so
several engines (and test cases) can coexist in one process.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from prometheus_client import (
    Counter, Histogram, CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST
)

from ..core.types import Outcome, Verdict
from ..events import Event, EventHandler, EventType


logger = logging.getLogger(__name__)


@dataclass
class MetricConfig:
    """Configuration for metrics collection."""

    enabled: bool = True
    namespace: str = "authzgate"


class MetricsCollector:
    """Metrics collector for authorization evaluations."""

    def __init__(self, config: MetricConfig = None, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            config: Metrics configuration
            registry: Prometheus registry to register on; a private one by default
        """
        self.config = config or MetricConfig()
        self.registry = registry or CollectorRegistry()

        ns = self.config.namespace
        self.decisions = Counter(
            f'{ns}_decisions_total',
            'Total number of authorization decisions by outcome',
            ['outcome'],
            registry=self.registry
        )

        self.provider_checks = Counter(
            f'{ns}_provider_checks_total',
            'Total number of provider checks by provider and verdict',
            ['provider', 'verdict'],
            registry=self.registry
        )

        self.evaluation_duration = Histogram(
            f'{ns}_evaluation_duration_seconds',
            'Time spent evaluating the provider chain of one request',
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
            registry=self.registry
        )

        logger.debug("Metrics collector initialized")

    def record_decision(self, outcome: Outcome, duration: Optional[float] = None) -> None:
        if not self.config.enabled:
            return
        self.decisions.labels(outcome=outcome.value).inc()
        if duration is not None:
            self.evaluation_duration.observe(duration)

    def record_provider_check(self, provider: str, verdict: Verdict) -> None:
        if not self.config.enabled:
            return
        self.provider_checks.labels(provider=provider, verdict=verdict.value).inc()

    def sample(self, name: str, **labels) -> float:
        """Current value of a sample, 0.0 when it was never recorded."""
        value = self.registry.get_sample_value(name, labels)
        return value if value is not None else 0.0

    def export(self) -> bytes:
        """Metrics in the Prometheus text exposition format."""
        return generate_latest(self.registry)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST


class MetricsEventHandler(EventHandler):
    """Feed authorization events into a MetricsCollector."""

    def __init__(self, collector: MetricsCollector):
        self.collector = collector

    async def handle(self, event: Event) -> None:
        if event.type == EventType.PROVIDER_CHECK and event.verdict is not None:
            self.collector.record_provider_check(event.provider, event.verdict)
        elif event.type == EventType.DECISION and event.outcome is not None:
            self.collector.record_decision(event.outcome, event.metadata.get("duration_seconds"))
