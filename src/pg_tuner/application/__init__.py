"""Application layer for the tuner.

The application layer orchestrates domain logic to fulfill use cases:
building a validated profile, keeping the derived tables current and
answering parameter queries.

Exports:
    - SettingsTuner: Main entry point; profile plus derived settings
"""

from pg_tuner.application.settings_tuner import SettingsTuner

__all__ = [
    "SettingsTuner",
]
