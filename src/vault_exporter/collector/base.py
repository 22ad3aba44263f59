"""
Base health source interface.

A health source is anything that can produce a HealthSnapshot.
This keeps the collector decoupled from where the data actually
comes from (a live Vault node, a fake in tests, etc).
"""

from abc import ABC, abstractmethod

from vault_exporter.metrics import HealthSnapshot


class HealthSource(ABC):
    """Interface for all Vault health sources."""

    @abstractmethod
    def health(self) -> HealthSnapshot:
        """Fetch one health snapshot. Raises UpstreamUnreachable on failure."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...
