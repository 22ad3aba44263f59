"""
End-to-end tests: fake Vault -> client -> collector -> HTTP server,
scraped with httpx the way Prometheus would.
"""

import threading

import click
import httpx
import pytest

from vault_exporter.collector.vault_client import VaultClientConfig, VaultHealthClient
from vault_exporter.collector.vault_collector import VaultCollector, build_registry
from vault_exporter.mock.fake_vault_server import FakeVaultBehavior
from vault_exporter.server import make_server, parse_listen_address

E2E_BODY = {
    "initialized": True,
    "sealed": False,
    "standby": False,
    "version": "1.4.0",
    "cluster_name": "c1",
    "cluster_id": "id1",
}


def _start_exporter(vault_url: str, metrics_path: str = "/metrics"):
    client = VaultHealthClient(VaultClientConfig(address=vault_url, timeout_seconds=2.0))
    registry = build_registry(VaultCollector(client))
    server = make_server(("127.0.0.1", 0), registry, metrics_path)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server, client


def _exporter_url(server) -> str:
    host, port = server.server_address[:2]
    return f"http://{host}:{port}"


def _scrape(server, path: str = "/metrics", **kwargs) -> httpx.Response:
    return httpx.get(_exporter_url(server) + path, timeout=5.0, **kwargs)


def test_healthy_vault_scrape(fake_vault):
    fake_vault.behavior = FakeVaultBehavior(body=dict(E2E_BODY))
    server, client = _start_exporter(fake_vault.url)
    try:
        response = _scrape(server)
    finally:
        server.shutdown()
        server.server_close()
        client.close()

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    text = response.text
    for expected in (
        "vault_up 1",
        "vault_initialized 1",
        "vault_sealed 0",
        "vault_standby 0",
        'vault_version{version="1.4.0"} 1',
        'vault_cluster_name{cluster_name="c1"} 1',
        'vault_cluster_id{cluster_id="id1"} 1',
    ):
        assert expected in text


def test_unreachable_vault_scrape(closed_port):
    server, client = _start_exporter(f"http://127.0.0.1:{closed_port}")
    try:
        response = _scrape(server)
    finally:
        server.shutdown()
        server.server_close()
        client.close()

    assert response.status_code == 200
    samples = [
        line for line in response.text.splitlines()
        if line.startswith("vault_")
    ]
    assert samples == ["vault_up 0.0"]


def test_each_scrape_queries_vault(fake_vault):
    server, client = _start_exporter(fake_vault.url)
    try:
        _scrape(server)
        _scrape(server)
    finally:
        server.shutdown()
        server.server_close()
        client.close()

    assert len(fake_vault.requests) == 2


def test_openmetrics_negotiation(fake_vault):
    server, client = _start_exporter(fake_vault.url)
    try:
        response = _scrape(server, headers={"Accept": "application/openmetrics-text; version=1.0.0"})
    finally:
        server.shutdown()
        server.server_close()
        client.close()

    assert response.headers["content-type"].startswith("application/openmetrics-text")
    assert response.text.rstrip().endswith("# EOF")


def test_custom_metrics_path_and_landing_page(fake_vault):
    server, client = _start_exporter(fake_vault.url, metrics_path="/vault-metrics")
    try:
        landing = _scrape(server, "/")
        metrics = _scrape(server, "/vault-metrics")
        default_path = _scrape(server, "/metrics")
    finally:
        server.shutdown()
        server.server_close()
        client.close()

    assert landing.status_code == 200
    assert "text/html" in landing.headers["content-type"]
    assert "<a href='/vault-metrics'>Metrics</a>" in landing.text
    assert "vault_up 1.0" in metrics.text
    assert default_path.status_code == 404


@pytest.mark.parametrize("address,expected", [
    (":9107", ("0.0.0.0", 9107)),
    ("127.0.0.1:9200", ("127.0.0.1", 9200)),
    ("[::1]:9107", ("::1", 9107)),
])
def test_parse_listen_address(address, expected):
    assert parse_listen_address(address) == expected


@pytest.mark.parametrize("address", ["9107", "localhost:", "host:port"])
def test_parse_listen_address_rejects_garbage(address):
    with pytest.raises(click.BadParameter):
        parse_listen_address(address)


def test_scrape_is_gzipped_when_accepted(fake_vault):
    server, client = _start_exporter(fake_vault.url)
    try:
        response = _scrape(server, headers={"Accept-Encoding": "gzip"})
    finally:
        server.shutdown()
        server.server_close()
        client.close()

    assert response.status_code == 200
    assert response.headers["content-encoding"] == "gzip"
    assert "vault_up 1.0" in response.text


def test_scrape_includes_exporter_runtime_metrics(closed_port):
    server, client = _start_exporter(f"http://127.0.0.1:{closed_port}")
    try:
        response = _scrape(server)
    finally:
        server.shutdown()
        server.server_close()
        client.close()

    assert "python_info{" in response.text
    vault_lines = [line for line in response.text.splitlines() if line.startswith("vault_")]
    assert vault_lines == ["vault_up 0.0"]
