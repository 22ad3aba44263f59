"""
Prometheus collector for Vault health.

Implements prometheus_client's custom collector protocol: describe()
hands back the static catalog with no I/O, collect() queries Vault
once per scrape and maps the snapshot to gauges. A failed query
degrades the scrape to a lone vault_up 0 instead of an error.
"""

from __future__ import annotations

import logging
from typing import List

from prometheus_client import GCCollector, PlatformCollector, ProcessCollector
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import CollectorRegistry

from vault_exporter.collector import catalog
from vault_exporter.collector.base import HealthSource
from vault_exporter.collector.catalog import MetricIdentity
from vault_exporter.collector.vault_client import UpstreamUnreachable
from vault_exporter.metrics import HealthSnapshot

log = logging.getLogger(__name__)


def _bool_to_float(value: bool) -> float:
    return 1.0 if value else 0.0


def _gauge(identity: MetricIdentity, value: float, label_value: str = "") -> GaugeMetricFamily:
    if identity.label:
        family = GaugeMetricFamily(
            identity.full_name, identity.documentation, labels=identity.labels
        )
        family.add_metric([label_value], value)
        return family
    return GaugeMetricFamily(identity.full_name, identity.documentation, value=value)


class VaultCollector:
    """Maps one Vault health query per scrape onto the metric catalog."""

    def __init__(self, source: HealthSource):
        self._source = source

    def describe(self) -> List[GaugeMetricFamily]:
        """Every metric this collector can ever emit, with no samples."""
        return [
            GaugeMetricFamily(identity.full_name, identity.documentation, labels=identity.labels)
            for identity in catalog.CATALOG
        ]

    def collect(self) -> List[GaugeMetricFamily]:
        try:
            snapshot = self._source.health()
        except UpstreamUnreachable as exc:
            log.error("Failed to collect health from Vault server: %s", exc)
            return [_gauge(catalog.UP, 0.0)]
        except Exception:
            log.exception("Unexpected error querying %s", self._source.name())
            return [_gauge(catalog.UP, 0.0)]

        return self._families(snapshot)

    @staticmethod
    def _families(snapshot: HealthSnapshot) -> List[GaugeMetricFamily]:
        return [
            _gauge(catalog.UP, 1.0),
            _gauge(catalog.INITIALIZED, _bool_to_float(snapshot.initialized)),
            _gauge(catalog.SEALED, _bool_to_float(snapshot.sealed)),
            _gauge(catalog.STANDBY, _bool_to_float(snapshot.standby)),
            _gauge(catalog.VERSION, 1.0, snapshot.version),
            _gauge(catalog.CLUSTER_NAME, 1.0, snapshot.cluster_name),
            _gauge(catalog.CLUSTER_ID, 1.0, snapshot.cluster_id),
        ]


def build_registry(collector: VaultCollector) -> CollectorRegistry:
    """A fresh registry with the Vault collector and the exporter's own
    process, platform and GC metrics.

    Kept separate from prometheus_client's global REGISTRY so tests and
    embedders can build as many as they like.
    """
    registry = CollectorRegistry(auto_describe=False)
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    registry.register(collector)
    return registry
