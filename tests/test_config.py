"""Tests for configuration parsing and validation."""

import pytest

from fluentd_exporter.config import ExporterConfig, parse_listen_address
from fluentd_exporter.errors import ConfigError


def test_defaults_are_valid():
    config = ExporterConfig().validate()
    assert config.endpoint == "http://localhost:24220"
    assert config.namespace == "fluentd"
    assert config.listen_port == 9224
    assert config.metrics_path == "/metrics"


@pytest.mark.parametrize("address, expected", [
    (":9224", ("", 9224)),
    ("0.0.0.0:9224", ("0.0.0.0", 9224)),
    ("localhost:80", ("localhost", 80)),
    ("[::1]:9224", ("::1", 9224)),
])
def test_parse_listen_address(address, expected):
    assert parse_listen_address(address) == expected


@pytest.mark.parametrize("address", ["9224", "host:", "host:abc", ":70000", "::1:9224"])
def test_parse_listen_address_rejects_garbage(address):
    with pytest.raises(ConfigError):
        parse_listen_address(address)


@pytest.mark.parametrize("overrides", [
    {"endpoint": "localhost:24220"},
    {"endpoint": "ftp://fluentd"},
    {"timeout_seconds": 0},
    {"metrics_path": "metrics"},
    {"log_level": "loud"},
    {"log_format": "xml"},
])
def test_validate_rejects_bad_values(overrides):
    with pytest.raises(ConfigError):
        ExporterConfig(**overrides).validate()
