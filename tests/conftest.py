"""Shared fixtures: a threaded fake Vault and a port nobody listens on."""

import socket
import threading

import pytest

from vault_exporter.mock.fake_vault_server import FakeVaultServer


@pytest.fixture
def fake_vault():
    server = FakeVaultServer(port=0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def closed_port() -> int:
    # Bind then release, so connecting to it gets refused
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
