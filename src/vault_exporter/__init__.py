"""Prometheus exporter for HashiCorp Vault health."""

__version__ = "0.1.0"
