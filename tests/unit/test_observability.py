"""Unit tests for logging, metrics and tracing setup."""

from __future__ import annotations

import json

import pytest
from prometheus_client import CollectorRegistry

from pg_tuner import __version__
from pg_tuner.domain.entities import HardwareProfile
from pg_tuner.infrastructure.logging import get_logger, setup_logging
from pg_tuner.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from pg_tuner.infrastructure.tracing import profile_attributes, recalculation_span, trace_span


@pytest.mark.unit
class TestLogging:
    """Tests for structlog setup."""

    def test_json_logs_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging("INFO", "json")
        get_logger("test", component="tuner").info("hello", answer=42)

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "hello"
        assert record["answer"] == 42
        assert record["component"] == "tuner"
        assert record["level"] == "info"

    def test_level_filtering(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging("WARNING", "json")
        logger = get_logger("test")
        logger.info("hidden")
        logger.warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err


@pytest.mark.unit
class TestMetrics:
    """Tests for the metrics registry."""

    def test_setup_without_port(self) -> None:
        registry = CollectorRegistry()
        metrics = setup_metrics(registry=registry)

        assert metrics.registry is registry
        assert registry.get_sample_value("pg_tuner_info", {"version": __version__}) == 1.0

    def test_setup_twice_reuses_metrics(self) -> None:
        registry = CollectorRegistry()

        first = setup_metrics(registry=registry)
        first.recalculations_total.inc()
        second = setup_metrics(registry=registry)

        assert second is first
        assert second.sample("pg_tuner_recalculations_total") == 1.0

    def test_get_metrics_returns_configured(self) -> None:
        registry = CollectorRegistry()
        first = setup_metrics(registry=registry)

        assert get_metrics() is first
        assert setup_metrics(registry=registry) is first

    def test_sample_defaults_to_zero(self, metrics_registry: MetricsRegistry) -> None:
        assert metrics_registry.sample("pg_tuner_recalculations_total") == 0.0
        metrics_registry.recalculations_total.inc()
        assert metrics_registry.sample("pg_tuner_recalculations_total") == 1.0


@pytest.mark.unit
class TestTracing:
    """Tests for span helpers."""

    def test_trace_span_sets_attributes(self) -> None:
        with trace_span("test-span", {"profile.type": "web"}) as span:
            assert span is not None

    def test_profile_attributes(self) -> None:
        profile = HardwareProfile.from_strings("dw", "12", "linux", "64GB", "", "hdd", "8")

        assert profile_attributes(profile) == {
            "profile.type": "dw",
            "profile.version": "12",
            "profile.platform": "linux",
            "profile.memory": "64GB",
            "profile.connections": 0,
            "profile.storage": "hdd",
            "profile.cpu": 8,
        }

    def test_recalculation_span(self) -> None:
        profile = HardwareProfile.from_strings("web", "14", "linux", "16GB", "", "ssd", "")
        with recalculation_span(profile) as span:
            span.set_attribute("settings.count", 1)
