"""Ports layer - interfaces between the tuner core and its callers."""

from pg_tuner.ports.inbound import SettingNotFoundError, SettingsProvider

__all__ = [
    "SettingsProvider",
    "SettingNotFoundError",
]
