"""
Vault exporter entry point.

Usage:
    vault-exporter                                   Serve /metrics on :9107
    vault-exporter --web.listen-address :9200        Serve on another port
    vault-exporter check                             One-shot health check

The Vault address and credentials come from the usual VAULT_ADDR,
VAULT_TOKEN, VAULT_CACERT, ... environment variables.
"""

from __future__ import annotations

import logging

import click

from vault_exporter import __version__
from vault_exporter.collector.vault_client import (
    UpstreamUnreachable,
    VaultClientConfig,
    VaultConfigError,
    VaultHealthClient,
)
from vault_exporter.collector.vault_collector import VaultCollector, build_registry
from vault_exporter.server import (
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_METRICS_PATH,
    make_server,
    parse_listen_address,
)


log = logging.getLogger("vault_exporter")

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _build_client() -> VaultHealthClient:
    try:
        return VaultHealthClient(VaultClientConfig.from_env())
    except VaultConfigError as exc:
        raise click.ClickException(f"invalid Vault client configuration: {exc}") from exc


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="vault_exporter")
@click.option("--web.listen-address", "listen_address", default=DEFAULT_LISTEN_ADDRESS,
              envvar="VAULT_EXPORTER_LISTEN_ADDRESS", show_default=True,
              help="Address to listen on for web interface and telemetry.")
@click.option("--web.telemetry-path", "metrics_path", default=DEFAULT_METRICS_PATH,
              envvar="VAULT_EXPORTER_TELEMETRY_PATH", show_default=True,
              help="Path under which to expose metrics.")
@click.option("--log.level", "log_level", type=click.Choice(list(LOG_LEVELS)),
              default="info", show_default=True, help="Only log messages with the given severity or above.")
@click.pass_context
def cli(ctx, listen_address: str, metrics_path: str, log_level: str):
    """Vault exporter - Prometheus metrics for HashiCorp Vault health."""
    logging.basicConfig(
        level=LOG_LEVELS[log_level],
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if ctx.invoked_subcommand is not None:
        return

    address = parse_listen_address(listen_address)
    client = _build_client()
    registry = build_registry(VaultCollector(client))

    log.info("Starting vault_exporter %s", __version__)
    log.info("Querying %s", client.name())

    try:
        server = make_server(address, registry, metrics_path)
    except OSError as exc:
        client.close()
        raise click.ClickException(f"could not listen on {listen_address}: {exc}") from exc

    log.info("Listening on %s (metrics at %s)", listen_address, server.metrics_path)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        client.close()
        log.info("Stopped")


@cli.command()
def check():
    """Query Vault health once and print the result."""
    from rich.console import Console
    from rich.table import Table

    client = _build_client()
    try:
        snapshot = client.health()
    except UpstreamUnreachable as exc:
        Console(stderr=True).print(f"[bold red]DOWN[/bold red]  {client.name()}: {exc}")
        raise SystemExit(1)
    finally:
        client.close()

    console = Console()
    table = Table(title=client.name(), show_header=True, header_style="bold")
    table.add_column("Field")
    table.add_column("Value")

    for key, value in snapshot.summary().items():
        if isinstance(value, bool):
            # sealed is the one flag where true is bad news
            bad = value if key == "sealed" else (key == "initialized" and not value)
            color = "red" if bad else "green"
            table.add_row(key, f"[{color}]{str(value).lower()}[/{color}]")
        else:
            table.add_row(key, f"[cyan]{value or '-'}[/cyan]")

    console.print(table)


if __name__ == "__main__":
    cli()
