"""Recalculation engine: derives PostgreSQL settings from a profile.

Every run rebuilds both derived tables from scratch. Parameters are
derived in dependency order because later rows read earlier ones:

    shared_buffers ──> wal_buffers
          │
          └─────────┐
    max_connections ├──> work_mem
                    │
    max_parallel_workers_per_gather

Gating:
    - checkpoint_segments only before 9.5, min/max_wal_size from 9.5 on
    - effective_io_concurrency only on linux
    - worker settings only above 9.5 with more than 2 CPUs, then further
      gated by the version that introduced each one
    - work_mem only above 9.5

References:
    - PostgreSQL documentation, Chapter 20 (Server Configuration)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping

from pg_tuner.domain.entities import HardwareProfile
from pg_tuner.domain.value_objects import (
    KB,
    MB,
    GB,
    Category,
    EngineVersion,
    MemoryQuantity,
    Platform,
    StorageClass,
    WorkloadType,
)

MemoryTable = Dict[Category, MemoryQuantity]
StringTable = Dict[Category, str]


WINDOWS_SHARED_BUFFERS_LIMIT = MemoryQuantity(512 * MB)
MAINTENANCE_WORK_MEM_LIMIT = MemoryQuantity(2 * GB)
WINDOWS_MAINTENANCE_WORK_MEM_LIMIT = MemoryQuantity(2 * GB - MB)
WAL_BUFFERS_MAX = MemoryQuantity(16 * MB)
WAL_BUFFERS_NEAR_MAX = MemoryQuantity(14 * MB)
WAL_BUFFERS_MIN = MemoryQuantity(32)
PARALLEL_WORKERS_CAP = 4

_DEFAULT_CONNECTIONS = {
    WorkloadType.WEB: 200,
    WorkloadType.OLTP: 300,
    WorkloadType.DW: 40,
    WorkloadType.MIXED: 100,
    WorkloadType.DESKTOP: 20,
}

_CHECKPOINT_SEGMENTS = {
    WorkloadType.WEB: 32,
    WorkloadType.OLTP: 64,
    WorkloadType.DW: 128,
    WorkloadType.MIXED: 32,
    WorkloadType.DESKTOP: 3,
}

_MIN_WAL_SIZE_MB = {
    WorkloadType.WEB: 1024,
    WorkloadType.OLTP: 2048,
    WorkloadType.DW: 4096,
    WorkloadType.MIXED: 1024,
    WorkloadType.DESKTOP: 100,
}

_MAX_WAL_SIZE_MB = {
    WorkloadType.WEB: 4096,
    WorkloadType.OLTP: 8192,
    WorkloadType.DW: 16384,
    WorkloadType.MIXED: 4096,
    WorkloadType.DESKTOP: 2048,
}

_STATISTICS_TARGET = {
    WorkloadType.WEB: 100,
    WorkloadType.OLTP: 100,
    WorkloadType.DW: 500,
    WorkloadType.MIXED: 100,
    WorkloadType.DESKTOP: 100,
}

_WORK_MEM_DIVISOR = {
    WorkloadType.WEB: 1,
    WorkloadType.OLTP: 1,
    WorkloadType.DW: 2,
    WorkloadType.MIXED: 2,
    WorkloadType.DESKTOP: 6,
}

_RANDOM_PAGE_COST = {
    StorageClass.HDD: "4",
    StorageClass.SSD: "1.1",
    StorageClass.SAN: "1.1",
}

_EFFECTIVE_IO_CONCURRENCY = {
    StorageClass.HDD: "2",
    StorageClass.SSD: "200",
    StorageClass.SAN: "300",
}


@dataclass
class DerivedSettings:
    """Result of one recalculation pass.

    Attributes:
        memory: Parameter name -> per-category memory quantities
        strings: Parameter name -> per-category scalar values
    """

    memory: Dict[str, MemoryTable] = field(default_factory=dict)
    strings: Dict[str, StringTable] = field(default_factory=dict)

    @property
    def names(self) -> list[str]:
        """All derived parameter names, memory-valued first."""
        return [*self.memory, *self.strings]

    def __len__(self) -> int:
        return len(self.memory) + len(self.strings)

    def __contains__(self, name: object) -> bool:
        return name in self.memory or name in self.strings


def _for_each_type(value: str) -> StringTable:
    return {db_type: value for db_type in WorkloadType}


def _as_strings(values: Mapping[Category, int]) -> StringTable:
    return {category: str(value) for category, value in values.items()}


class RecalculationEngine:
    """Stateless derivation of every tuned parameter for a profile.

    The engine holds no state between calls; ``recalculate`` is a pure
    function of the profile it is given and is safe to call repeatedly.
    """

    def recalculate(self, profile: HardwareProfile) -> DerivedSettings:
        """Derive all parameter tables for ``profile``.

        Args:
            profile: A validated profile

        Returns:
            Freshly built memory and scalar tables
        """
        derived = DerivedSettings()
        memory = derived.memory
        strings = derived.strings

        shared_buffers = self._shared_buffers(profile)
        max_connections = self._max_connections(profile)

        memory["shared_buffers"] = shared_buffers
        memory["effective_cache_size"] = self._effective_cache_size(profile)
        memory["maintenance_work_mem"] = self._maintenance_work_mem(profile)
        memory["wal_buffers"] = self._wal_buffers(shared_buffers)

        strings["max_connections"] = _as_strings(max_connections)
        strings["checkpoint_completion_target"] = _for_each_type("0.9")
        strings["default_statistics_target"] = _as_strings(_STATISTICS_TARGET)
        strings["random_page_cost"] = dict(_RANDOM_PAGE_COST)

        version = profile.db_version.number
        if version < EngineVersion.V9_5.number:
            strings["checkpoint_segments"] = _as_strings(_CHECKPOINT_SEGMENTS)
        else:
            memory["min_wal_size"] = {
                db_type: MemoryQuantity(size * MB) for db_type, size in _MIN_WAL_SIZE_MB.items()
            }
            memory["max_wal_size"] = {
                db_type: MemoryQuantity(size * MB) for db_type, size in _MAX_WAL_SIZE_MB.items()
            }

        if profile.platform is Platform.LINUX:
            strings["effective_io_concurrency"] = dict(_EFFECTIVE_IO_CONCURRENCY)

        workers_per_gather: dict[Category, int] = {}
        if version > EngineVersion.V9_5.number and profile.cpu > 2:
            cpu = str(profile.cpu)
            half_cpu = math.ceil(profile.cpu / 2)

            strings["max_worker_processes"] = _for_each_type(cpu)

            if version >= EngineVersion.V9_6.number:
                # Only a dw profile may use more than the capped per-gather count.
                per_gather = (
                    half_cpu
                    if profile.db_type is WorkloadType.DW
                    else min(half_cpu, PARALLEL_WORKERS_CAP)
                )
                workers_per_gather = {db_type: per_gather for db_type in WorkloadType}
                strings["max_parallel_workers_per_gather"] = _as_strings(workers_per_gather)

            if version >= EngineVersion.V10.number:
                strings["max_parallel_workers"] = _for_each_type(cpu)

            if version >= EngineVersion.V11.number:
                strings["max_parallel_maintenance_workers"] = _for_each_type(
                    str(min(half_cpu, PARALLEL_WORKERS_CAP))
                )

        if version > EngineVersion.V9_5.number:
            memory["work_mem"] = self._work_mem(
                profile, shared_buffers, max_connections, workers_per_gather
            )

        return derived

    def _shared_buffers(self, profile: HardwareProfile) -> MemoryTable:
        total = profile.total_memory
        table: MemoryTable = {
            db_type: total.fraction(1, 16 if db_type is WorkloadType.DESKTOP else 4)
            for db_type in WorkloadType
        }
        if profile.db_version.number < EngineVersion.V10.number and profile.platform is Platform.WINDOWS:
            table = {
                db_type: min(value, WINDOWS_SHARED_BUFFERS_LIMIT)
                for db_type, value in table.items()
            }
        return table

    def _max_connections(self, profile: HardwareProfile) -> dict[Category, int]:
        if profile.connections > 0:
            return {db_type: profile.connections for db_type in WorkloadType}
        return dict(_DEFAULT_CONNECTIONS)

    def _effective_cache_size(self, profile: HardwareProfile) -> MemoryTable:
        total = profile.total_memory
        return {
            db_type: total.fraction(1, 4) if db_type is WorkloadType.DESKTOP else total.fraction(3, 4)
            for db_type in WorkloadType
        }

    def _maintenance_work_mem(self, profile: HardwareProfile) -> MemoryTable:
        total = profile.total_memory
        limit = (
            WINDOWS_MAINTENANCE_WORK_MEM_LIMIT
            if profile.platform is Platform.WINDOWS
            else MAINTENANCE_WORK_MEM_LIMIT
        )
        return {
            db_type: min(total.fraction(1, 8 if db_type is WorkloadType.DW else 16), limit)
            for db_type in WorkloadType
        }

    def _wal_buffers(self, shared_buffers: MemoryTable) -> MemoryTable:
        table: MemoryTable = {}
        for db_type, buffers in shared_buffers.items():
            value = buffers.fraction(3, 100)
            # Values just under the maximum are rounded up to it.
            if value > WAL_BUFFERS_NEAR_MAX:
                value = WAL_BUFFERS_MAX
            if value < WAL_BUFFERS_MIN:
                value = WAL_BUFFERS_MIN
            table[db_type] = value
        return table

    def _work_mem(
        self,
        profile: HardwareProfile,
        shared_buffers: MemoryTable,
        max_connections: Mapping[Category, int],
        workers_per_gather: Mapping[Category, int],
    ) -> MemoryTable:
        default_parallel = int(
            profile.db_version.defaults.get("max_parallel_workers_per_gather", "0")
        ) or 1

        table: MemoryTable = {}
        for db_type in WorkloadType:
            parallel = workers_per_gather.get(db_type) or default_parallel
            available = profile.total_memory - shared_buffers[db_type]
            per_connection = available.bytes // (max_connections[db_type] * 3) // parallel
            table[db_type] = MemoryQuantity(
                per_connection // _WORK_MEM_DIVISOR[db_type]
            ).floor_to(KB)
        return table
