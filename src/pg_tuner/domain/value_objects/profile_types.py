"""Enumerated profile axes and the validation error they raise.

Each axis is a closed enum so per-category tables can be keyed by members
instead of open strings. ``parse()`` turns raw user input into a member or
raises ValidationError.
"""

from __future__ import annotations

from enum import Enum
from typing import Union


class ValidationError(ValueError):
    """A raw profile input is not acceptable.

    Attributes:
        field: Name of the profile field that failed validation
        value: The raw value that was rejected
    """

    def __init__(self, field: str, value: str, message: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message or f"invalid {field}: {value!r}")


class WorkloadType(str, Enum):
    """Intended usage pattern of the database.

    Drives most of the memory-tier formulas.
    """

    WEB = "web"
    """Web application backend: many short queries."""

    OLTP = "oltp"
    """Online transaction processing: heavy concurrent writes."""

    DW = "dw"
    """Data warehouse: few large analytical queries."""

    MIXED = "mixed"
    """Both transactional and analytical traffic."""

    DESKTOP = "desktop"
    """Developer workstation sharing memory with other programs."""

    @classmethod
    def parse(cls, raw: str) -> WorkloadType:
        """Parse a case-insensitive workload type name."""
        try:
            return cls(raw.lower())
        except ValueError:
            raise ValidationError("type", raw) from None


class Platform(str, Enum):
    """Operating system the database runs on."""

    LINUX = "linux"
    DARWIN = "darwin"
    WINDOWS = "windows"

    @classmethod
    def parse(cls, raw: str) -> Platform:
        """Parse a case-insensitive platform name."""
        try:
            return cls(raw.lower())
        except ValueError:
            raise ValidationError("platform", raw) from None


class StorageClass(str, Enum):
    """Underlying disk medium.

    Drives the I/O cost related settings.
    """

    SSD = "ssd"
    HDD = "hdd"
    SAN = "san"

    @classmethod
    def parse(cls, raw: str) -> StorageClass:
        """Parse a case-insensitive storage class name."""
        try:
            return cls(raw.lower())
        except ValueError:
            raise ValidationError("storage", raw) from None


class EngineVersion(str, Enum):
    """Supported PostgreSQL major versions.

    Members compare by their numeric value through ``number``; the enum
    value is the exact identifier accepted on input.
    """

    V9_4 = "9.4"
    V9_5 = "9.5"
    V9_6 = "9.6"
    V10 = "10"
    V11 = "11"
    V12 = "12"
    V13 = "13"
    V14 = "14"

    @property
    def number(self) -> float:
        """Numeric form used for version gating."""
        return float(self.value)

    @property
    def defaults(self) -> dict[str, str]:
        """Built-in server defaults for this version (empty when unknown)."""
        return dict(_VERSION_DEFAULTS.get(self, {}))

    @classmethod
    def parse(cls, raw: str) -> EngineVersion:
        """Parse a version string. Must match a supported identifier exactly."""
        try:
            return cls(raw)
        except ValueError:
            raise ValidationError("version", raw) from None


# Keyed by the exact version identifier so 9.5 and 9.6 stay distinct.
_PARALLEL_DEFAULTS = {
    "max_worker_processes": "8",
    "max_parallel_workers_per_gather": "2",
    "max_parallel_workers": "8",
}

_VERSION_DEFAULTS: dict[EngineVersion, dict[str, str]] = {
    EngineVersion.V9_5: {"max_worker_processes": "8"},
    EngineVersion.V9_6: {
        "max_worker_processes": "8",
        "max_parallel_workers_per_gather": "0",
    },
    EngineVersion.V10: _PARALLEL_DEFAULTS,
    EngineVersion.V11: _PARALLEL_DEFAULTS,
    EngineVersion.V12: _PARALLEL_DEFAULTS,
    EngineVersion.V13: _PARALLEL_DEFAULTS,
    EngineVersion.V14: _PARALLEL_DEFAULTS,
}


Category = Union[WorkloadType, StorageClass]
"""Key of a derived parameter table: a workload type or a storage class."""
