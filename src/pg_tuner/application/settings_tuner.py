"""Settings tuner - unified entry point for the tuner.

This module provides the SettingsTuner aggregate that owns a validated
profile together with the parameter tables derived from it. Every
successful change to the profile triggers a full recalculation, so the
tables always describe the current profile.

Usage:
    from pg_tuner.application import SettingsTuner

    tuner = SettingsTuner("web", "13", "linux", "16GB", "", "ssd", "4")
    tuner.get_memory_setting("shared_buffers")   # "4GB"
    tuner.get_string_setting("max_connections")  # "200"

    tuner.set_db_type("dw")
    tuner.get_all_settings()

Thread Safety:
    Not thread-safe. A setter validates, overwrites and then rebuilds the
    tables with no isolation between the steps; share an instance across
    threads only under an external lock.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Callable, Generator, Mapping, TypeVar

from pg_tuner.domain.entities import HardwareProfile
from pg_tuner.domain.services import DerivedSettings, RecalculationEngine
from pg_tuner.domain.value_objects import Category, ValidationError
from pg_tuner.infrastructure.logging import get_logger
from pg_tuner.infrastructure.metrics import MetricsRegistry, get_metrics
from pg_tuner.infrastructure.tracing import recalculation_span
from pg_tuner.ports.inbound import SettingNotFoundError

V = TypeVar("V")


class SettingsTuner:
    """Profile plus derived PostgreSQL settings.

    Construction takes seven raw strings in a fixed order and validates
    all of them before anything is derived. Connections and cpu accept an
    empty string meaning "unspecified".

    Features:
        - Fail-fast validation; no partially built tuner is ever returned
        - Per-field setters that keep the previous value on failure
        - Lookups that fall back from workload type to storage class
    """

    def __init__(
        self,
        db_type: str,
        db_version: str,
        platform: str,
        total_memory: str,
        connections: str,
        storage: str,
        cpu: str,
        *,
        engine: RecalculationEngine | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Validate the profile and derive all settings.

        Args:
            db_type: Workload type (web, oltp, dw, mixed, desktop)
            db_version: PostgreSQL version (9.4 to 14)
            platform: Operating system (linux, darwin, windows)
            total_memory: Memory available, e.g. "16GB"
            connections: Expected connections, or "" for workload defaults
            storage: Storage class (ssd, hdd, san)
            cpu: CPU count, or "" to skip CPU-driven settings
            engine: Recalculation engine (a fresh one by default)
            metrics: Metrics registry (the process-wide one by default)

        Raises:
            ValidationError: If any input is invalid
        """
        self._engine = engine or RecalculationEngine()
        self._metrics = metrics or get_metrics()
        self._log = get_logger(__name__)

        with self._validating():
            self._profile = HardwareProfile.from_strings(
                db_type, db_version, platform, total_memory, connections, storage, cpu
            )

        self._derived = DerivedSettings()
        self._log.info("tuner_created", **self._profile.to_dict())
        self.recalculate()

    @property
    def profile(self) -> HardwareProfile:
        """The current validated profile.

        The profile is frozen; change it through the setters below so the
        derived tables are rebuilt.
        """
        return self._profile

    @property
    def derived(self) -> DerivedSettings:
        """Tables produced by the last recalculation."""
        return self._derived

    # =========================================================================
    # Profile Mutation
    # =========================================================================

    def set_db_type(self, db_type: str) -> None:
        """Change the workload type and recalculate."""
        self._update("type", self._profile.with_db_type, db_type)

    def set_db_version(self, db_version: str) -> None:
        """Change the PostgreSQL version and recalculate."""
        self._update("version", self._profile.with_db_version, db_version)

    def set_platform(self, platform: str) -> None:
        """Change the platform and recalculate."""
        self._update("platform", self._profile.with_platform, platform)

    def set_total_memory(self, total_memory: str) -> None:
        """Change the total memory and recalculate."""
        self._update("memory", self._profile.with_total_memory, total_memory)

    def set_connections(self, connections: str) -> None:
        """Change the connection count and recalculate."""
        self._update("connections", self._profile.with_connections, connections)

    def set_storage(self, storage: str) -> None:
        """Change the storage class and recalculate."""
        self._update("storage", self._profile.with_storage, storage)

    def set_cpu(self, cpu: str) -> None:
        """Change the CPU count and recalculate."""
        self._update("cpu", self._profile.with_cpu, cpu)

    def recalculate(self) -> None:
        """Rebuild every derived table from the current profile.

        Idempotent: running it twice without a profile change yields
        identical tables.
        """
        profile = self._profile.to_dict()

        start = time.perf_counter()
        with recalculation_span(self._profile) as span:
            self._derived = self._engine.recalculate(self._profile)
            span.set_attribute("settings.count", len(self._derived))
        elapsed = time.perf_counter() - start

        self._metrics.recalculations_total.inc()
        self._metrics.recalculation_latency_seconds.observe(elapsed)
        self._metrics.derived_settings.set(len(self._derived))
        self._log.debug("recalculated", settings=len(self._derived), **profile)

    # =========================================================================
    # Settings Access
    # =========================================================================

    def get_memory_setting(self, name: str) -> str:
        """Resolve a memory-valued parameter to its formatted value.

        Args:
            name: Parameter name, e.g. "shared_buffers"

        Returns:
            The quantity in its largest exact unit, e.g. "4GB"

        Raises:
            SettingNotFoundError: If the parameter is not currently derived
        """
        value = self._resolve(self._derived.memory.get(name))
        self._record_lookup("memory", name, value is not None)
        if value is None:
            raise SettingNotFoundError(name)
        return value.format()

    def get_string_setting(self, name: str) -> str:
        """Resolve a scalar-valued parameter.

        Raises:
            SettingNotFoundError: If the parameter is not currently derived
        """
        value = self._resolve(self._derived.strings.get(name))
        self._record_lookup("string", name, value is not None)
        if value is None:
            raise SettingNotFoundError(name)
        return value

    def get_all_settings(self) -> dict[str, str]:
        """Resolve every derived parameter.

        A parameter that has no value for the current workload type or
        storage class maps to an empty string instead of raising.
        """
        settings: dict[str, str] = {}
        for name, memory_table in self._derived.memory.items():
            quantity = self._resolve(memory_table)
            settings[name] = quantity.format() if quantity is not None else ""
        for name, string_table in self._derived.strings.items():
            settings[name] = self._resolve(string_table) or ""
        return settings

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _resolve(self, table: Mapping[Category, V] | None) -> V | None:
        if table is None:
            return None
        if self._profile.db_type in table:
            return table[self._profile.db_type]
        return table.get(self._profile.storage)

    def _update(
        self, field: str, update: Callable[[str], HardwareProfile], raw: str
    ) -> None:
        with self._validating():
            self._profile = update(raw)
        self._log.info("profile_updated", field=field, value=raw)
        self.recalculate()

    def _record_lookup(self, kind: str, name: str, found: bool) -> None:
        status = "found" if found else "not_found"
        self._metrics.setting_lookups_total.labels(kind=kind, status=status).inc()
        if not found:
            self._log.info("setting_not_found", kind=kind, name=name)

    @contextmanager
    def _validating(self) -> Generator[None, None, None]:
        try:
            yield
        except ValidationError as exc:
            self._metrics.validation_errors_total.labels(field=exc.field).inc()
            self._log.warning("validation_failed", field=exc.field, value=exc.value, error=str(exc))
            raise

    def __repr__(self) -> str:
        profile = ", ".join(f"{key}={value}" for key, value in self._profile.to_dict().items())
        return f"SettingsTuner({profile})"
