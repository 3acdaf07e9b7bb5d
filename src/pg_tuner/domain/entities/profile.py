"""Hardware and workload profile.

The profile is the validated request the recalculation engine works from.
It is built from seven raw strings in a fixed order, and the first invalid
field aborts construction so a partially valid profile never exists.

Field order:
    type, version, platform, total memory, connections, storage, cpu

Connections and CPU accept an empty string, which leaves them at 0
("unspecified"). A profile with 0 connections uses the per-workload default
connection counts; one with 0 CPUs skips the CPU-driven settings.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from pg_tuner.domain.value_objects import (
    EngineVersion,
    MemoryQuantity,
    Platform,
    StorageClass,
    ValidationError,
    WorkloadType,
)


def parse_count(field_name: str, raw: str) -> int:
    """Parse an optional non-negative integer.

    Args:
        field_name: Profile field being parsed (used in errors)
        raw: Raw input; empty means unspecified

    Returns:
        The parsed count, or 0 for an empty string

    Raises:
        ValidationError: If raw is not an integer or is negative
    """
    if raw == "":
        return 0
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(field_name, raw) from None
    if value < 0:
        raise ValidationError(field_name, raw, f"{field_name} must be non-negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class HardwareProfile:
    """Validated workload and hardware description.

    Immutable; the with_* methods return an updated copy.

    Attributes:
        db_type: Workload type
        db_version: PostgreSQL version
        platform: Operating system
        total_memory: Memory available to the database
        storage: Disk medium
        connections: Expected client connections (0 = use defaults)
        cpu: CPU count (0 = skip CPU-driven settings)
    """

    db_type: WorkloadType
    db_version: EngineVersion
    platform: Platform
    total_memory: MemoryQuantity
    storage: StorageClass
    connections: int = 0
    cpu: int = 0

    @classmethod
    def from_strings(
        cls,
        db_type: str,
        db_version: str,
        platform: str,
        total_memory: str,
        connections: str,
        storage: str,
        cpu: str,
    ) -> HardwareProfile:
        """Validate raw inputs in order and build a profile.

        Raises:
            ValidationError: On the first field that fails validation
        """
        parsed_type = WorkloadType.parse(db_type)
        parsed_version = EngineVersion.parse(db_version)
        parsed_platform = Platform.parse(platform)
        parsed_memory = MemoryQuantity.parse(total_memory)
        parsed_connections = parse_count("connections", connections)
        parsed_storage = StorageClass.parse(storage)
        parsed_cpu = parse_count("cpu", cpu)

        return cls(
            db_type=parsed_type,
            db_version=parsed_version,
            platform=parsed_platform,
            total_memory=parsed_memory,
            storage=parsed_storage,
            connections=parsed_connections,
            cpu=parsed_cpu,
        )

    # Field updates: each validates only its own field and returns a new
    # profile; on failure the receiver is unchanged.

    def with_db_type(self, raw: str) -> HardwareProfile:
        return replace(self, db_type=WorkloadType.parse(raw))

    def with_db_version(self, raw: str) -> HardwareProfile:
        return replace(self, db_version=EngineVersion.parse(raw))

    def with_platform(self, raw: str) -> HardwareProfile:
        return replace(self, platform=Platform.parse(raw))

    def with_total_memory(self, raw: str) -> HardwareProfile:
        return replace(self, total_memory=MemoryQuantity.parse(raw))

    def with_connections(self, raw: str) -> HardwareProfile:
        return replace(self, connections=parse_count("connections", raw))

    def with_storage(self, raw: str) -> HardwareProfile:
        return replace(self, storage=StorageClass.parse(raw))

    def with_cpu(self, raw: str) -> HardwareProfile:
        return replace(self, cpu=parse_count("cpu", raw))

    def to_dict(self) -> dict[str, Any]:
        """Plain representation, used for log context and report headers."""
        return {
            "type": self.db_type.value,
            "version": self.db_version.value,
            "platform": self.platform.value,
            "memory": self.total_memory.format(),
            "connections": self.connections,
            "storage": self.storage.value,
            "cpu": self.cpu,
        }
