"""Prometheus metrics for outbound alerting API calls."""

from __future__ import annotations

import time
import weakref
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import CollectorRegistry, Counter, Histogram, REGISTRY

_METRICS_BY_REGISTRY: "weakref.WeakKeyDictionary[CollectorRegistry, ApiCallMetrics]" = (
    weakref.WeakKeyDictionary()
)


class ApiCallMetrics:
    """Counter and latency histogram for calls issued against a remote API."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        self.requests = Counter(
            "alerting_api_requests_total",
            "Total number of requests issued against the alerting API",
            labelnames=("resource", "method", "status"),
            registry=registry,
        )
        self.latency = Histogram(
            "alerting_api_request_latency_seconds",
            "Latency of alerting API requests in seconds",
            labelnames=("resource", "method"),
            registry=registry,
            buckets=(
                0.05,
                0.1,
                0.25,
                0.5,
                0.75,
                1.0,
                2.5,
                5.0,
                7.5,
                10.0,
            ),
        )

    def observe(self, resource: str, method: str, status: str, duration: float) -> None:
        self.requests.labels(resource, method, status).inc()
        self.latency.labels(resource, method).observe(duration)

    @contextmanager
    def track(self, resource: str, method: str) -> Iterator[dict[str, str]]:
        """Time a request; the caller fills ``outcome["status"]`` before exiting."""

        outcome = {"status": "error"}
        start = time.perf_counter()
        try:
            yield outcome
        finally:
            self.observe(resource, method.upper(), outcome["status"], time.perf_counter() - start)


def setup_metrics(registry: CollectorRegistry = REGISTRY) -> ApiCallMetrics:
    """Return the metrics bundle bound to ``registry``, creating it once."""

    metrics = _METRICS_BY_REGISTRY.get(registry)
    if metrics is None:
        metrics = ApiCallMetrics(registry)
        _METRICS_BY_REGISTRY[registry] = metrics
    return metrics
