"""Pytest configuration and fixtures for pg_tuner tests."""

from __future__ import annotations

from typing import Callable, Generator

import pytest
import structlog
from prometheus_client import CollectorRegistry

from pg_tuner.application import SettingsTuner
from pg_tuner.infrastructure.config import get_config
from pg_tuner.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def make_tuner(metrics_registry: MetricsRegistry) -> Callable[..., SettingsTuner]:
    """Build tuners from keyword overrides of a 16GB linux/web/14 profile."""

    def factory(**overrides: str) -> SettingsTuner:
        raw = {
            "db_type": "web",
            "db_version": "14",
            "platform": "linux",
            "total_memory": "16GB",
            "connections": "",
            "storage": "ssd",
            "cpu": "",
        }
        raw.update(overrides)
        return SettingsTuner(
            raw["db_type"],
            raw["db_version"],
            raw["platform"],
            raw["total_memory"],
            raw["connections"],
            raw["storage"],
            raw["cpu"],
            metrics=metrics_registry,
        )

    return factory


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Undo logging configuration and cached settings between tests."""
    yield
    structlog.reset_defaults()
    get_config.cache_clear()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
