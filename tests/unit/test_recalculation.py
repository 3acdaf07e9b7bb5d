"""Unit tests for the recalculation engine."""

from __future__ import annotations

import pytest

from pg_tuner.domain.entities import HardwareProfile
from pg_tuner.domain.services import DerivedSettings, RecalculationEngine
from pg_tuner.domain.value_objects import (
    GB,
    KB,
    MB,
    MemoryQuantity,
    StorageClass,
    WorkloadType,
)


def derive(**overrides: str) -> DerivedSettings:
    raw = {
        "db_type": "web",
        "db_version": "13",
        "platform": "linux",
        "total_memory": "16GB",
        "connections": "",
        "storage": "ssd",
        "cpu": "4",
    }
    raw.update(overrides)
    return RecalculationEngine().recalculate(HardwareProfile.from_strings(**raw))


@pytest.mark.unit
class TestMemoryTiers:
    """Tests for shared_buffers, effective_cache_size and maintenance_work_mem."""

    def test_shared_buffers(self) -> None:
        table = derive().memory["shared_buffers"]

        for db_type in (WorkloadType.WEB, WorkloadType.OLTP, WorkloadType.DW, WorkloadType.MIXED):
            assert table[db_type] == MemoryQuantity(4 * GB)
        assert table[WorkloadType.DESKTOP] == MemoryQuantity(GB)

    @pytest.mark.parametrize("version", ["9.4", "9.5", "9.6"])
    def test_windows_caps_shared_buffers_before_10(self, version: str) -> None:
        table = derive(db_version=version, platform="windows", total_memory="64GB").memory[
            "shared_buffers"
        ]
        assert all(value <= MemoryQuantity(512 * MB) for value in table.values())
        assert table[WorkloadType.WEB] == MemoryQuantity(512 * MB)

    def test_windows_cap_lifted_from_10(self) -> None:
        table = derive(db_version="10", platform="windows", total_memory="64GB").memory[
            "shared_buffers"
        ]
        assert table[WorkloadType.WEB] == MemoryQuantity(16 * GB)

    def test_windows_cap_leaves_small_values(self) -> None:
        table = derive(db_version="9.6", platform="windows", total_memory="512MB").memory[
            "shared_buffers"
        ]
        assert table[WorkloadType.DESKTOP] == MemoryQuantity(32 * MB)
        assert table[WorkloadType.WEB] == MemoryQuantity(128 * MB)

    def test_effective_cache_size(self) -> None:
        table = derive().memory["effective_cache_size"]
        assert table[WorkloadType.WEB] == MemoryQuantity(12 * GB)
        assert table[WorkloadType.DESKTOP] == MemoryQuantity(4 * GB)

    def test_maintenance_work_mem(self) -> None:
        table = derive().memory["maintenance_work_mem"]
        assert table[WorkloadType.WEB] == MemoryQuantity(GB)
        assert table[WorkloadType.DW] == MemoryQuantity(2 * GB)

    @pytest.mark.parametrize("total_memory", ["8GB", "32GB", "33GB", "256GB"])
    def test_maintenance_work_mem_cap(self, total_memory: str) -> None:
        linux = derive(total_memory=total_memory).memory["maintenance_work_mem"]
        windows = derive(total_memory=total_memory, platform="windows").memory[
            "maintenance_work_mem"
        ]

        assert all(value <= MemoryQuantity(2 * GB) for value in linux.values())
        assert all(value <= MemoryQuantity(2 * GB - MB) for value in windows.values())

    def test_maintenance_work_mem_windows_limit(self) -> None:
        table = derive(total_memory="64GB", platform="windows").memory["maintenance_work_mem"]
        assert table[WorkloadType.WEB] == MemoryQuantity(2047 * MB)


@pytest.mark.unit
class TestWalBuffers:
    """Tests for wal_buffers clamping."""

    def test_three_percent_of_shared_buffers(self) -> None:
        table = derive(total_memory="1GB").memory["wal_buffers"]
        # 3% of 256MB
        assert table[WorkloadType.WEB] == MemoryQuantity(256 * MB * 3 // 100)

    def test_ceiling(self) -> None:
        table = derive(total_memory="16GB").memory["wal_buffers"]
        assert table[WorkloadType.WEB] == MemoryQuantity(16 * MB)

    def test_near_ceiling_snaps_up(self) -> None:
        # shared_buffers 500MB -> 15MB of WAL buffers
        table = derive(total_memory="2000MB").memory["wal_buffers"]
        assert table[WorkloadType.WEB] == MemoryQuantity(16 * MB)

    def test_floor(self) -> None:
        table = derive(total_memory="1024").memory["wal_buffers"]
        assert all(value == MemoryQuantity(32) for value in table.values())

    @pytest.mark.parametrize("total_memory", ["1024", "64MB", "1GB", "1900MB", "2000MB", "4GB", "512GB"])
    def test_bounds(self, total_memory: str) -> None:
        table = derive(total_memory=total_memory).memory["wal_buffers"]
        for value in table.values():
            assert MemoryQuantity(32) <= value <= MemoryQuantity(16 * MB)
            assert not MemoryQuantity(14 * MB) < value < MemoryQuantity(16 * MB)


@pytest.mark.unit
class TestScalarSettings:
    """Tests for scalar-valued parameters."""

    def test_default_connections(self) -> None:
        table = derive().strings["max_connections"]
        assert table == {
            WorkloadType.WEB: "200",
            WorkloadType.OLTP: "300",
            WorkloadType.DW: "40",
            WorkloadType.MIXED: "100",
            WorkloadType.DESKTOP: "20",
        }

    def test_connections_override(self) -> None:
        table = derive(connections="500").strings["max_connections"]
        assert set(table.values()) == {"500"}
        assert set(table) == set(WorkloadType)

    def test_zero_connections_uses_defaults(self) -> None:
        table = derive(connections="0").strings["max_connections"]
        assert table[WorkloadType.OLTP] == "300"

    def test_constants(self) -> None:
        strings = derive().strings
        assert set(strings["checkpoint_completion_target"].values()) == {"0.9"}
        assert strings["default_statistics_target"][WorkloadType.DW] == "500"
        assert strings["default_statistics_target"][WorkloadType.WEB] == "100"

    def test_storage_keyed_tables(self) -> None:
        strings = derive().strings

        assert strings["random_page_cost"] == {
            StorageClass.HDD: "4",
            StorageClass.SSD: "1.1",
            StorageClass.SAN: "1.1",
        }
        assert strings["effective_io_concurrency"] == {
            StorageClass.HDD: "2",
            StorageClass.SSD: "200",
            StorageClass.SAN: "300",
        }

    @pytest.mark.parametrize("platform", ["darwin", "windows"])
    def test_io_concurrency_linux_only(self, platform: str) -> None:
        assert "effective_io_concurrency" not in derive(platform=platform)


@pytest.mark.unit
class TestVersionGating:
    """Tests for version-dependent parameters."""

    def test_checkpoint_segments_before_95(self) -> None:
        derived = derive(db_version="9.4")

        assert derived.strings["checkpoint_segments"] == {
            WorkloadType.WEB: "32",
            WorkloadType.OLTP: "64",
            WorkloadType.DW: "128",
            WorkloadType.MIXED: "32",
            WorkloadType.DESKTOP: "3",
        }
        assert "min_wal_size" not in derived
        assert "max_wal_size" not in derived

    @pytest.mark.parametrize("version", ["9.5", "10", "14"])
    def test_wal_size_from_95(self, version: str) -> None:
        derived = derive(db_version=version)

        assert "checkpoint_segments" not in derived
        assert derived.memory["min_wal_size"][WorkloadType.OLTP] == MemoryQuantity(2 * GB)
        assert derived.memory["min_wal_size"][WorkloadType.DESKTOP] == MemoryQuantity(100 * MB)
        assert derived.memory["max_wal_size"][WorkloadType.DW] == MemoryQuantity(16 * GB)
        assert derived.memory["max_wal_size"][WorkloadType.DESKTOP] == MemoryQuantity(2 * GB)

    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("9.4", set()),
            ("9.5", set()),
            ("9.6", {"max_worker_processes", "max_parallel_workers_per_gather"}),
            ("10", {"max_worker_processes", "max_parallel_workers_per_gather", "max_parallel_workers"}),
            (
                "11",
                {
                    "max_worker_processes",
                    "max_parallel_workers_per_gather",
                    "max_parallel_workers",
                    "max_parallel_maintenance_workers",
                },
            ),
        ],
    )
    def test_worker_settings(self, version: str, expected: set[str]) -> None:
        derived = derive(db_version=version, cpu="8")
        workers = {name for name in derived.strings if "worker" in name}
        assert workers == expected

    @pytest.mark.parametrize("cpu", ["", "0", "1", "2"])
    def test_worker_settings_need_more_than_two_cpus(self, cpu: str) -> None:
        derived = derive(cpu=cpu)
        assert not any("worker" in name for name in derived.strings)

    def test_work_mem_only_after_95(self) -> None:
        assert "work_mem" not in derive(db_version="9.4")
        assert "work_mem" not in derive(db_version="9.5")
        assert "work_mem" in derive(db_version="9.6")


@pytest.mark.unit
class TestParallelWorkers:
    """Tests for CPU-driven worker counts."""

    def test_small_cpu_count(self) -> None:
        strings = derive(cpu="4").strings

        assert strings["max_worker_processes"][WorkloadType.WEB] == "4"
        assert strings["max_parallel_workers_per_gather"][WorkloadType.WEB] == "2"
        assert strings["max_parallel_workers"][WorkloadType.WEB] == "4"
        assert strings["max_parallel_maintenance_workers"][WorkloadType.WEB] == "2"

    def test_odd_cpu_count_rounds_up(self) -> None:
        strings = derive(cpu="5").strings
        assert strings["max_parallel_workers_per_gather"][WorkloadType.WEB] == "3"

    @pytest.mark.parametrize(
        "db_type, expected",
        [("web", "4"), ("oltp", "4"), ("mixed", "4"), ("desktop", "4"), ("dw", "8")],
    )
    def test_per_gather_cap_follows_profile_type(self, db_type: str, expected: str) -> None:
        table = derive(db_type=db_type, cpu="16").strings["max_parallel_workers_per_gather"]
        assert set(table.values()) == {expected}

    def test_maintenance_workers_cap(self) -> None:
        table = derive(cpu="16").strings["max_parallel_maintenance_workers"]
        assert set(table.values()) == {"4"}


@pytest.mark.unit
class TestWorkMem:
    """Tests for work_mem derivation."""

    def test_uses_workers_per_gather(self) -> None:
        table = derive().memory["work_mem"]

        # (16GB - 4GB) / (200 * 3) / 2
        assert table[WorkloadType.WEB] == MemoryQuantity(10485 * KB)
        # (16GB - 4GB) / (40 * 3) / 2 / 2
        assert table[WorkloadType.DW] == MemoryQuantity(26214 * KB)
        # (16GB - 1GB) / (20 * 3) / 2 / 6
        assert table[WorkloadType.DESKTOP] == MemoryQuantity(21845 * KB)

    def test_version_default_parallelism(self) -> None:
        """Without CPU info the version default divides the result."""
        table = derive(db_version="14", cpu="").memory["work_mem"]
        assert table[WorkloadType.WEB] == MemoryQuantity(10485 * KB)

    def test_zero_default_counts_as_one(self) -> None:
        """9.6 defaults max_parallel_workers_per_gather to 0."""
        table = derive(db_version="9.6", cpu="").memory["work_mem"]
        # (16GB - 4GB) / (200 * 3)
        assert table[WorkloadType.WEB] == MemoryQuantity(20971 * KB)

    def test_connections_feed_work_mem(self) -> None:
        table = derive(connections="100", cpu="").memory["work_mem"]
        # (16GB - 4GB) / (100 * 3) / 2
        assert table[WorkloadType.WEB] == MemoryQuantity(20971 * KB)

    def test_whole_kilobytes(self) -> None:
        for total_memory in ("1000MB", "3GB", "12345678"):
            table = derive(total_memory=total_memory).memory["work_mem"]
            assert all(value.bytes % KB == 0 for value in table.values())


@pytest.mark.unit
class TestDerivedSettings:
    """Tests for the DerivedSettings container and idempotence."""

    def test_names_and_len(self) -> None:
        derived = derive(db_version="9.4", platform="darwin", cpu="")

        assert derived.names == [
            "shared_buffers",
            "effective_cache_size",
            "maintenance_work_mem",
            "wal_buffers",
            "max_connections",
            "checkpoint_completion_target",
            "default_statistics_target",
            "random_page_cost",
            "checkpoint_segments",
        ]
        assert len(derived) == 9

    def test_idempotent(self) -> None:
        profile = HardwareProfile.from_strings("oltp", "12", "linux", "32GB", "", "hdd", "8")
        engine = RecalculationEngine()

        assert engine.recalculate(profile) == engine.recalculate(profile)

    def test_tables_keyed_by_single_axis(self) -> None:
        derived = derive()
        for tables in (derived.memory, derived.strings):
            for table in tables.values():
                assert all(isinstance(key, WorkloadType) for key in table) or all(
                    isinstance(key, StorageClass) for key in table
                )
