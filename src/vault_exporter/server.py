"""
HTTP front end: the metrics route plus a small landing page.

The metrics route is prometheus_client's own WSGI app, so content
negotiation (text vs OpenMetrics) and gzip come for free. Each scrape
runs on its own thread and renders the registry fresh, so overlapping
scrapes each make their own Vault query and share nothing.
"""

from __future__ import annotations

import html
import logging
import socket
from typing import Tuple
from wsgiref.simple_server import WSGIRequestHandler

import click
from prometheus_client import make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.registry import CollectorRegistry

from vault_exporter import __version__

log = logging.getLogger(__name__)

DEFAULT_LISTEN_ADDRESS = ":9107"
DEFAULT_METRICS_PATH = "/metrics"

_LANDING_PAGE = """<html>
<head><title>Vault Exporter</title></head>
<body>
<h1>Vault Exporter</h1>
<p><a href='{path}'>Metrics</a></p>
<h2>Build</h2>
<pre>vault_exporter {version}</pre>
</body>
</html>
"""


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split "host:port" (host optional, as in ":9107") into a bind tuple."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise click.BadParameter(f"expected [host]:port, got {address!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)


class ExporterApp:
    """WSGI dispatcher: metrics path, landing page, 404 for the rest."""

    def __init__(self, registry: CollectorRegistry, metrics_path: str = DEFAULT_METRICS_PATH):
        self.metrics_path = metrics_path
        self._metrics_app = make_wsgi_app(registry)
        self._landing = _LANDING_PAGE.format(
            path=html.escape(metrics_path, quote=True),
            version=__version__,
        ).encode()

    def __call__(self, environ, start_response):
        path = environ.get("PATH_INFO") or "/"
        if path == self.metrics_path:
            return self._metrics_app(environ, start_response)
        if path == "/":
            start_response("200 OK", [
                ("Content-Type", "text/html; charset=utf-8"),
                ("Content-Length", str(len(self._landing))),
            ])
            return [self._landing]
        body = b"Not Found\n"
        start_response("404 Not Found", [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("Content-Length", str(len(body))),
        ])
        return [body]


class _QuietHandler(WSGIRequestHandler):

    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


class ExporterServer(ThreadingWSGIServer):

    def __init__(self, address: Tuple[str, int], registry: CollectorRegistry,
                 metrics_path: str = DEFAULT_METRICS_PATH):
        self.metrics_path = metrics_path
        super().__init__(address, _QuietHandler)
        self.set_app(ExporterApp(registry, metrics_path))


class _ExporterServerV6(ExporterServer):
    address_family = socket.AF_INET6


def make_server(address: Tuple[str, int], registry: CollectorRegistry,
                metrics_path: str = DEFAULT_METRICS_PATH) -> ExporterServer:
    if not metrics_path.startswith("/"):
        metrics_path = "/" + metrics_path
    if ":" in address[0]:
        return _ExporterServerV6(address, registry, metrics_path)
    return ExporterServer(address, registry, metrics_path)
