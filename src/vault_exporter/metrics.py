"""
Health data model for the Vault exporter.

A HealthSnapshot is one reading of Vault's /v1/sys/health endpoint.
It lives for exactly one scrape and is thrown away after being mapped
to Prometheus samples.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class HealthSnapshot:
    """A single point-in-time health reading from a Vault node."""

    initialized: bool
    sealed: bool
    standby: bool
    version: str

    # Vault leaves these out while the node is uninitialized or sealed
    cluster_name: str = ""
    cluster_id: str = ""

    @classmethod
    def from_json(cls, payload: Any) -> "HealthSnapshot":
        """Build a snapshot from the decoded sys/health body.

        Raises ValueError when the body isn't an object, a required key
        is missing, or one of the flags isn't a JSON boolean.
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")

        flags = {}
        for key in ("initialized", "sealed", "standby"):
            if key not in payload:
                raise ValueError(f"missing field {key!r}")
            value = payload[key]
            if not isinstance(value, bool):
                raise ValueError(f"field {key!r} is not a boolean: {value!r}")
            flags[key] = value

        version = payload.get("version")
        if not isinstance(version, str):
            raise ValueError(f"field 'version' is not a string: {version!r}")

        return cls(
            version=version,
            cluster_name=str(payload.get("cluster_name") or ""),
            cluster_id=str(payload.get("cluster_id") or ""),
            **flags,
        )

    def summary(self) -> dict:
        """Return a plain dict for display."""
        return {
            "initialized": self.initialized,
            "sealed": self.sealed,
            "standby": self.standby,
            "version": self.version,
            "cluster_name": self.cluster_name,
            "cluster_id": self.cluster_id,
        }
