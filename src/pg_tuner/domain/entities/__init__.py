"""Domain entities for the tuner.

Exports:
    - HardwareProfile: Validated workload and hardware description
    - parse_count: Parser for the optional connections/cpu counts
"""

from pg_tuner.domain.entities.profile import HardwareProfile, parse_count

__all__ = [
    "HardwareProfile",
    "parse_count",
]
