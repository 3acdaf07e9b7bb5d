"""Domain services.

Exports:
    - RecalculationEngine: Derives every tuned parameter from a profile
    - DerivedSettings: Memory-valued and scalar-valued parameter tables
"""

from pg_tuner.domain.services.recalculation import DerivedSettings, RecalculationEngine

__all__ = [
    "RecalculationEngine",
    "DerivedSettings",
]
