"""Startup configuration, built once from the command line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
from urllib.parse import urlparse

from fluentd_exporter.errors import ConfigError

LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMATS = ("plain", "rich")


@dataclass
class ExporterConfig:
    endpoint: str = "http://localhost:24220"
    timeout_seconds: float = 5.0
    namespace: str = "fluentd"

    # Exposition
    listen_host: str = ""
    listen_port: int = 9224
    metrics_path: str = "/metrics"

    log_level: str = "info"
    log_format: str = "plain"

    def validate(self) -> "ExporterConfig":
        parsed = urlparse(self.endpoint)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"endpoint must be an http(s) URL, got {self.endpoint!r}")
        if self.timeout_seconds <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout_seconds}")
        if not self.metrics_path.startswith("/"):
            raise ConfigError(f"metrics path must start with '/', got {self.metrics_path!r}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"unknown log level {self.log_level!r}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"unknown log format {self.log_format!r}")
        return self


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split "host:port" into its parts. An empty host means all interfaces.

    Accepts ":9224", "0.0.0.0:9224" and bracketed IPv6 like "[::1]:9224".
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise ConfigError(f"listen address must be host:port, got {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigError(f"IPv6 listen hosts must be bracketed, got {address!r}")

    try:
        port = int(port_str)
    except ValueError:
        raise ConfigError(f"invalid port in listen address {address!r}") from None

    if not 0 <= port <= 65535:
        raise ConfigError(f"port out of range in listen address {address!r}")

    return host, port
