"""Prometheus metrics for the tuner."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all tuner metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Recalculation metrics
        self.recalculations_total = Counter(
            "pg_tuner_recalculations_total",
            "Total number of full recalculation passes",
            registry=self._registry,
        )

        self.recalculation_latency_seconds = Histogram(
            "pg_tuner_recalculation_latency_seconds",
            "Recalculation latency in seconds",
            buckets=(0.00001, 0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05),
            registry=self._registry,
        )

        self.derived_settings = Gauge(
            "pg_tuner_derived_settings",
            "Number of parameters derived by the last recalculation",
            registry=self._registry,
        )

        # Input metrics
        self.validation_errors_total = Counter(
            "pg_tuner_validation_errors_total",
            "Total rejected profile inputs",
            ["field"],  # type, version, platform, memory, connections, storage, cpu
            registry=self._registry,
        )

        # Accessor metrics
        self.setting_lookups_total = Counter(
            "pg_tuner_setting_lookups_total",
            "Total single-parameter lookups",
            ["kind", "status"],  # kind: memory, string; status: found, not_found
            registry=self._registry,
        )

        self.info = Info(
            "pg_tuner",
            "Tuner information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """The collector registry the metrics are registered with."""
        return self._registry

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Current value of a sample, 0.0 if it was never recorded."""
        value = self._registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int | None = None, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the metrics registry and, when a port is given, the scrape server.

    Args:
        port: Port for the metrics HTTP server, or None to skip it
        registry: Optional custom registry

    Calling it again for the same registry reuses the existing metrics.

    Returns:
        The metrics registry
    """
    global _metrics
    target = registry or REGISTRY
    if _metrics is None or _metrics.registry is not target:
        _metrics = MetricsRegistry(target)

    from pg_tuner import __version__
    _metrics.info.info({
        "version": __version__,
    })

    if port is not None:
        start_http_server(port, registry=target)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
