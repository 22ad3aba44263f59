"""
Every metric the exporter can emit, declared once.

The set is fixed at import time and doesn't depend on whether a scrape
has ever succeeded. Identifier-like values (version, cluster name/id)
use the info pattern: a constant 1 with the data carried in a label.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

NAMESPACE = "vault"


@dataclass(frozen=True)
class MetricIdentity:
    name: str               # short name, without the namespace
    documentation: str
    label: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{NAMESPACE}_{self.name}"

    @property
    def labels(self) -> Tuple[str, ...]:
        return (self.label,) if self.label else ()


UP = MetricIdentity("up", "Was the last query of Vault successful.")
INITIALIZED = MetricIdentity("initialized", "Is the Vault initialised (according to this node).")
SEALED = MetricIdentity("sealed", "Is the Vault node sealed.")
STANDBY = MetricIdentity("standby", "Is this Vault node in standby.")
VERSION = MetricIdentity("version", "Version of this Vault node.", label="version")
CLUSTER_NAME = MetricIdentity(
    "cluster_name", "Cluster name according to this Vault node.", label="cluster_name"
)
CLUSTER_ID = MetricIdentity(
    "cluster_id", "Cluster ID according to this Vault node.", label="cluster_id"
)

# Order here is the order samples come out of collect()
CATALOG: Tuple[MetricIdentity, ...] = (
    UP,
    INITIALIZED,
    SEALED,
    STANDBY,
    VERSION,
    CLUSTER_NAME,
    CLUSTER_ID,
)
