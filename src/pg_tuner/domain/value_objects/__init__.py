"""Value objects for the tuner domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Memory:
        - MemoryQuantity: Exact byte count with unit-suffixed parse/format
        - MemoryParseError: Raised for strings outside the memory grammar
        - KB, MB, GB: Binary unit multipliers

    Profile Types:
        - WorkloadType: web, oltp, dw, mixed, desktop
        - EngineVersion: Supported PostgreSQL versions
        - Platform: linux, darwin, windows
        - StorageClass: ssd, hdd, san
        - Category: Key of a derived parameter table
        - ValidationError: Raised for unacceptable raw inputs
"""

from pg_tuner.domain.value_objects.memory import (
    GB,
    KB,
    MB,
    MemoryParseError,
    MemoryQuantity,
)
from pg_tuner.domain.value_objects.profile_types import (
    Category,
    EngineVersion,
    Platform,
    StorageClass,
    ValidationError,
    WorkloadType,
)

__all__ = [
    # Memory
    "MemoryQuantity",
    "MemoryParseError",
    "KB",
    "MB",
    "GB",
    # Profile types
    "WorkloadType",
    "EngineVersion",
    "Platform",
    "StorageClass",
    "Category",
    "ValidationError",
]
