"""
PG Tuner - PostgreSQL configuration recommendations

Derives postgresql.conf parameters (memory tiers, WAL sizing, planner
costs, parallel workers) from a workload and hardware profile.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"

from pg_tuner.application import SettingsTuner
from pg_tuner.domain.value_objects import MemoryParseError, MemoryQuantity, ValidationError
from pg_tuner.ports.inbound import SettingNotFoundError

__all__ = [
    "SettingsTuner",
    "MemoryQuantity",
    "MemoryParseError",
    "ValidationError",
    "SettingNotFoundError",
    "__version__",
]
