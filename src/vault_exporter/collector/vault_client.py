"""
Client for Vault's sys/health endpoint.

Configured from the same VAULT_* environment variables the vault CLI
reads, so an exporter running next to a Vault agent picks up the
address and credentials without extra flags. Every failure on the
request path is folded into UpstreamUnreachable; the collector turns
that into vault_up 0.
"""

from __future__ import annotations

import logging
import os
import re
import ssl
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from vault_exporter.collector.base import HealthSource
from vault_exporter.metrics import HealthSnapshot

log = logging.getLogger(__name__)

DEFAULT_ADDRESS = "https://127.0.0.1:8200"
DEFAULT_TIMEOUT_SECONDS = 60.0

HEALTH_PATH = "/v1/sys/health"

# Ask Vault to answer 2xx for every node state so sealed/standby nodes
# report through the body instead of looking like an outage.
HEALTH_PARAMS = {
    "uninitcode": "299",
    "sealedcode": "299",
    "standbycode": "299",
    "drsecondarycode": "299",
    "performancestandbycode": "299",
}

_TRUTHY = ("1", "t", "true", "y", "yes")

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "\u00b5s": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|\u00b5s|ms|s|m|h)")
_SECONDS_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


class VaultConfigError(ValueError):
    """The client can't be built from the given configuration."""


def parse_duration(value: str) -> float:
    """Seconds from a Go-style duration ("1m30s", "500ms") or a bare number of seconds."""
    value = value.strip()
    if _SECONDS_RE.fullmatch(value):
        return float(value)

    seconds = 0.0
    pos = 0
    for match in _DURATION_PART_RE.finditer(value):
        if match.start() != pos:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if not value or pos != len(value):
        raise ValueError(f"invalid duration: {value!r}")
    return seconds


class UpstreamUnreachable(Exception):
    """Vault could not be queried, or answered with something unusable."""


@dataclass
class VaultClientConfig:
    address: str = DEFAULT_ADDRESS
    token: Optional[str] = None
    namespace: Optional[str] = None
    ca_cert: Optional[str] = None
    ca_path: Optional[str] = None
    client_cert: Optional[str] = None
    client_key: Optional[str] = None
    skip_verify: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "VaultClientConfig":
        env = os.environ if environ is None else environ

        raw_timeout = env.get("VAULT_CLIENT_TIMEOUT", "").strip()
        timeout = DEFAULT_TIMEOUT_SECONDS
        if raw_timeout:
            try:
                timeout = parse_duration(raw_timeout)
            except ValueError:
                raise VaultConfigError(f"invalid VAULT_CLIENT_TIMEOUT: {raw_timeout!r}") from None

        return cls(
            address=env.get("VAULT_ADDR") or DEFAULT_ADDRESS,
            token=env.get("VAULT_TOKEN") or None,
            namespace=env.get("VAULT_NAMESPACE") or None,
            ca_cert=env.get("VAULT_CACERT") or None,
            ca_path=env.get("VAULT_CAPATH") or None,
            client_cert=env.get("VAULT_CLIENT_CERT") or None,
            client_key=env.get("VAULT_CLIENT_KEY") or None,
            skip_verify=env.get("VAULT_SKIP_VERIFY", "").strip().lower() in _TRUTHY,
            timeout_seconds=timeout,
        )


def _validate(config: VaultClientConfig) -> None:
    try:
        url = httpx.URL(config.address)
    except httpx.InvalidURL as exc:
        raise VaultConfigError(f"invalid Vault address {config.address!r}: {exc}") from exc

    if url.scheme not in ("http", "https") or not url.host:
        raise VaultConfigError(
            f"Vault address must be an http(s) URL with a host, got {config.address!r}"
        )
    if config.timeout_seconds <= 0:
        raise VaultConfigError(f"timeout must be positive, got {config.timeout_seconds}")
    if bool(config.client_cert) != bool(config.client_key):
        raise VaultConfigError("VAULT_CLIENT_CERT and VAULT_CLIENT_KEY must be set together")

    for label, path in (
        ("CA certificate", config.ca_cert),
        ("client certificate", config.client_cert),
        ("client key", config.client_key),
    ):
        if path and not os.path.isfile(path):
            raise VaultConfigError(f"{label} not found: {path}")
    if config.ca_path and not os.path.isdir(config.ca_path):
        raise VaultConfigError(f"CA directory not found: {config.ca_path}")


def _ssl_context(config: VaultClientConfig) -> ssl.SSLContext:
    try:
        ctx = ssl.create_default_context(cafile=config.ca_cert, capath=config.ca_path)
        if config.client_cert:
            ctx.load_cert_chain(config.client_cert, config.client_key)
    except (ssl.SSLError, OSError) as exc:
        raise VaultConfigError(f"could not load TLS material: {exc}") from exc

    if config.skip_verify:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


class VaultHealthClient(HealthSource):

    def __init__(self, config: VaultClientConfig, transport: Optional[httpx.BaseTransport] = None):
        _validate(config)

        self._config = config
        self._base_url = config.address.rstrip("/")

        headers = {}
        if config.token:
            headers["X-Vault-Token"] = config.token
        if config.namespace:
            headers["X-Vault-Namespace"] = config.namespace

        self._client = httpx.Client(
            base_url=self._base_url,
            headers=headers,
            timeout=config.timeout_seconds,
            verify=_ssl_context(config),
            transport=transport,
        )

    def health(self) -> HealthSnapshot:
        """One GET against sys/health, parsed into a HealthSnapshot."""
        try:
            response = self._client.get(HEALTH_PATH, params=HEALTH_PARAMS)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnreachable(
                f"{HEALTH_PATH} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnreachable(f"request to {self._base_url} failed: {exc!r}") from exc
        except ValueError as exc:
            raise UpstreamUnreachable(f"{HEALTH_PATH} returned invalid JSON: {exc}") from exc

        try:
            snapshot = HealthSnapshot.from_json(payload)
        except ValueError as exc:
            raise UpstreamUnreachable(f"malformed {HEALTH_PATH} response: {exc}") from exc

        log.debug("Vault health: %s", snapshot.summary())
        return snapshot

    def name(self) -> str:
        return f"Vault ({self._base_url})"

    def close(self):
        self._client.close()
