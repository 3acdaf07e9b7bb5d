"""Inbound ports - API contracts for the tuner.

Inbound ports define the interfaces that outer surfaces use to read
tuned parameters.
"""

from pg_tuner.ports.inbound.settings_provider import (
    SettingNotFoundError,
    SettingsProvider,
)

__all__ = [
    "SettingsProvider",
    "SettingNotFoundError",
]
