"""
fluentd-exporter entry point.

Usage:
    fluentd-exporter                                         Scrape http://localhost:24220, serve :9224/metrics
    fluentd-exporter --fluentd.endpoint http://fluentd:24220
    fluentd-exporter --web.listen-address 127.0.0.1:9224 --log.level debug
"""

from __future__ import annotations

import logging

import click
from prometheus_client import (
    CollectorRegistry,
    PlatformCollector,
    ProcessCollector,
    disable_created_metrics,
)

from fluentd_exporter import __version__
from fluentd_exporter.collector.fluentd_collector import FluentdCollector
from fluentd_exporter.config import LOG_FORMATS, LOG_LEVELS, ExporterConfig, parse_listen_address
from fluentd_exporter.errors import ConfigError
from fluentd_exporter.server import run_server


log = logging.getLogger("fluentd_exporter")


def configure_logging(level: str = "info", fmt: str = "plain"):
    numeric_level = getattr(logging, level.upper())

    if fmt == "rich":
        from rich.logging import RichHandler

        logging.basicConfig(
            level=numeric_level,
            format="%(message)s",
            datefmt="%H:%M:%S",
            handlers=[RichHandler(show_path=False)],
        )
    else:
        logging.basicConfig(
            level=numeric_level,
            format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )


def build_registry(collector: FluentdCollector) -> CollectorRegistry:
    """Fresh registry with the Fluentd collector plus process/platform stats."""
    registry = CollectorRegistry()
    registry.register(collector)
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    return registry


@click.command()
@click.version_option(
    version=__version__,
    prog_name="Fluentd monitor agent exporter",
    message="%(prog)s v%(version)s",
)
@click.option("--namespace", default="fluentd", show_default=True, help="Namespace for metrics.")
@click.option("--web.listen-address", "listen_address", default=":9224", show_default=True,
              help="Address to listen on for web interface and telemetry.")
@click.option("--web.telemetry-path", "metrics_path", default="/metrics", show_default=True,
              help="Path under which to expose metrics.")
@click.option("--fluentd.endpoint", "endpoint", default="http://localhost:24220", show_default=True,
              help="Fluentd monitor agent endpoint.")
@click.option("--fluentd.timeout", "timeout", default=5.0, show_default=True,
              help="Timeout in seconds for trying to get stats from Fluentd.")
@click.option("--log.level", "log_level", type=click.Choice(LOG_LEVELS), default="info", show_default=True,
              help="Only log messages with the given severity or above.")
@click.option("--log.format", "log_format", type=click.Choice(LOG_FORMATS), default="plain", show_default=True,
              help="Log output style: plain text or Rich console.")
def cli(namespace: str, listen_address: str, metrics_path: str, endpoint: str,
        timeout: float, log_level: str, log_format: str):
    """Fluentd monitor agent exporter for Prometheus."""
    try:
        host, port = parse_listen_address(listen_address)
        config = ExporterConfig(
            endpoint=endpoint,
            timeout_seconds=timeout,
            namespace=namespace,
            listen_host=host,
            listen_port=port,
            metrics_path=metrics_path,
            log_level=log_level,
            log_format=log_format,
        ).validate()
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc

    configure_logging(config.log_level, config.log_format)

    # Counters would otherwise also export *_created samples
    disable_created_metrics()

    collector = FluentdCollector(
        endpoint=config.endpoint,
        namespace=config.namespace,
        timeout_seconds=config.timeout_seconds,
    )
    log.info("Exporting %s", collector.name())

    try:
        registry = build_registry(collector)
        run_server(config.listen_host, config.listen_port, registry, config.metrics_path)
    except OSError as exc:
        log.error("Cannot listen on %s: %s", listen_address, exc)
        raise SystemExit(1)
    finally:
        collector.close()


if __name__ == "__main__":
    cli()
