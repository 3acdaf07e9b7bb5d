"""Infrastructure layer - cross-cutting concerns."""

from pg_tuner.infrastructure.config import Config, ObservabilityConfig, ProfileDefaults, get_config
from pg_tuner.infrastructure.logging import setup_logging, get_logger
from pg_tuner.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from pg_tuner.infrastructure.tracing import setup_tracing, get_tracer, recalculation_span, trace_span

__all__ = [
    "Config",
    "ObservabilityConfig",
    "ProfileDefaults",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
    "recalculation_span",
]
