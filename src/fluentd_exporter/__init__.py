"""Prometheus exporter for the Fluentd monitor agent."""

__version__ = "0.0.1"
