"""
Fake Vault sys/health server for testing without a real Vault.

    python -m vault_exporter.mock.fake_vault_server
    VAULT_ADDR=http://127.0.0.1:8200 python -m vault_exporter.main

The response can be swapped at runtime through server.behavior, which
is how the tests simulate sealed nodes, 5xx answers, garbage bodies
and slow upstreams.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Dict, List, Optional


HEALTHY_BODY = {
    "initialized": True,
    "sealed": False,
    "standby": False,
    "performance_standby": False,
    "replication_performance_mode": "disabled",
    "replication_dr_mode": "disabled",
    "server_time_utc": 1700000000,
    "version": "1.4.0",
    "cluster_name": "vault-cluster-c1",
    "cluster_id": "0f2b3c9e-5d1a-4e1c-9a8b-7c6d5e4f3a2b",
}


@dataclass
class FakeVaultBehavior:
    status: int = 200
    body: Optional[dict] = field(default_factory=lambda: dict(HEALTHY_BODY))
    raw_body: Optional[bytes] = None    # sent as-is when set, for broken JSON
    delay_seconds: float = 0.0

    def payload(self) -> bytes:
        if self.raw_body is not None:
            return self.raw_body
        return json.dumps(self.body).encode()


@dataclass
class RecordedRequest:
    path: str
    headers: Dict[str, str]


class _HealthHandler(BaseHTTPRequestHandler):
    server: "FakeVaultServer"

    def do_GET(self):
        self.server.requests.append(RecordedRequest(path=self.path, headers=dict(self.headers)))
        behavior = self.server.behavior

        if not self.path.startswith("/v1/sys/health"):
            self.send_response(404)
            self.end_headers()
            return

        if behavior.delay_seconds:
            time.sleep(behavior.delay_seconds)

        body = behavior.payload()
        try:
            self.send_response(behavior.status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
        except (BrokenPipeError, ConnectionResetError):
            pass  # client gave up (timeout tests)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


class FakeVaultServer(HTTPServer):

    def __init__(self, host: str = "127.0.0.1", port: int = 8200,
                 behavior: Optional[FakeVaultBehavior] = None):
        self.behavior = behavior or FakeVaultBehavior()
        self.requests: List[RecordedRequest] = []
        super().__init__((host, port), _HealthHandler)

    @property
    def url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"


def run_fake_server(host: str = "127.0.0.1", port: int = 8200):
    server = FakeVaultServer(host, port)
    print(f"Fake Vault health endpoint running at {server.url}/v1/sys/health")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
