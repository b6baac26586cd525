"""Exceptions raised by the exporter."""


class ExporterError(Exception):
    """Base class for everything the exporter raises on purpose."""


class ConfigError(ExporterError):
    """Invalid startup configuration."""


class ScrapeError(ExporterError):
    """One scrape of the monitor agent failed. Reported as data, never fatal."""


class FetchError(ScrapeError):
    """Connection failure, timeout, or a non-2xx response."""


class DecodeError(ScrapeError):
    """The response body was not the plugins document we expect."""
