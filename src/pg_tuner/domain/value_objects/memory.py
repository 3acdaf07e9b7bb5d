"""Memory quantities with unit-suffixed parsing and formatting.

A MemoryQuantity is an exact, non-negative byte count. It is parsed from
strings such as ``"16GB"``, ``"512m"`` or ``"8192"`` and rendered back in
the largest unit that represents it without loss, which is the form
PostgreSQL accepts in postgresql.conf.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pg_tuner.domain.value_objects.profile_types import ValidationError


KB = 1 << 10
MB = 1 << 20
GB = 1 << 30

_MEMORY_PATTERN = re.compile(r"^([0-9]+)([kmg]?b?)$")

_UNIT_MULTIPLIERS = {
    "k": KB,
    "m": MB,
    "g": GB,
}


class MemoryParseError(ValidationError):
    """A memory string does not match ``<integer>[k|m|g][b]``."""

    def __init__(self, value: str) -> None:
        super().__init__("memory", value, f"can't parse memory unit: {value!r}")


@dataclass(frozen=True, order=True, slots=True)
class MemoryQuantity:
    """Immutable byte count.

    Example:
        >>> MemoryQuantity.parse("16GB").megabytes
        16384
        >>> MemoryQuantity.parse("1536m").format()
        '1536MB'
    """

    in_bytes: int

    def __post_init__(self) -> None:
        if self.in_bytes < 0:
            raise ValueError(f"memory quantity must be non-negative, got {self.in_bytes}")

    @classmethod
    def parse(cls, text: str) -> MemoryQuantity:
        """Parse a memory string, case-insensitively.

        Args:
            text: Value such as ``"4GB"``, ``"512mb"``, ``"64k"`` or ``"1024"``

        Returns:
            The parsed quantity

        Raises:
            MemoryParseError: If text does not match the memory grammar
        """
        match = _MEMORY_PATTERN.fullmatch(text.lower())
        if match is None:
            raise MemoryParseError(text)

        number, unit = match.groups()
        multiplier = _UNIT_MULTIPLIERS.get(unit[:1], 1)
        return cls(int(number) * multiplier)

    @property
    def bytes(self) -> int:
        return self.in_bytes

    @property
    def kilobytes(self) -> int:
        return self.in_bytes // KB

    @property
    def megabytes(self) -> int:
        return self.in_bytes // MB

    @property
    def gigabytes(self) -> int:
        return self.in_bytes // GB

    def fraction(self, numerator: int, denominator: int) -> MemoryQuantity:
        """Scale by numerator/denominator, truncating to whole bytes."""
        return MemoryQuantity(self.in_bytes * numerator // denominator)

    def floor_to(self, unit: int) -> MemoryQuantity:
        """Truncate down to a whole multiple of ``unit`` bytes."""
        return MemoryQuantity(self.in_bytes // unit * unit)

    def format(self) -> str:
        """Render in the largest unit that divides the byte count evenly."""
        for unit, suffix in ((GB, "GB"), (MB, "MB"), (KB, "KB")):
            if self.in_bytes % unit == 0:
                return f"{self.in_bytes // unit}{suffix}"
        return str(self.in_bytes)

    def __add__(self, other: MemoryQuantity) -> MemoryQuantity:
        if not isinstance(other, MemoryQuantity):
            return NotImplemented
        return MemoryQuantity(self.in_bytes + other.in_bytes)

    def __sub__(self, other: MemoryQuantity) -> MemoryQuantity:
        if not isinstance(other, MemoryQuantity):
            return NotImplemented
        return MemoryQuantity(self.in_bytes - other.in_bytes)

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"MemoryQuantity({self.format()})"
