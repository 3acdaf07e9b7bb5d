"""Settings provider port.

This inbound port defines the read contract outer surfaces (CLI, reports)
use to query tuned parameters. Memory-valued parameters are returned as
unit-suffixed strings such as "4GB" or "640KB",
scalars as plain strings.

Lookup rule:
    A parameter table is keyed either by workload type or by storage
    class. A lookup tries the profile's workload type first, then its
    storage class.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol


class SettingsProvider(Protocol):
    """Protocol for resolving tuned parameters.

    Example:
        try:
            value = provider.get_memory_setting("shared_buffers")
        except SettingNotFoundError:
            value = provider.get_string_setting("shared_buffers")
    """

    @abstractmethod
    def get_memory_setting(self, name: str) -> str:
        """Resolve a memory-valued parameter.

        Raises:
            SettingNotFoundError: If the parameter is not currently derived
        """
        ...

    @abstractmethod
    def get_string_setting(self, name: str) -> str:
        """Resolve a scalar-valued parameter.

        Raises:
            SettingNotFoundError: If the parameter is not currently derived
        """
        ...

    @abstractmethod
    def get_all_settings(self) -> dict[str, str]:
        """Resolve every derived parameter.

        Never raises for individual parameters: one that cannot be
        resolved maps to an empty string.
        """
        ...


class SettingNotFoundError(KeyError):
    """Raised when a parameter name is not one currently derived."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"invalid setting name: {self.name}"
