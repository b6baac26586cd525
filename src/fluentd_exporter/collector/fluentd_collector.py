"""
Prometheus collector for a Fluentd monitor agent.

Every registry scrape runs one full cycle against the agent's
/api/plugins.json: fetch, decode, keep output plugins, and copy their
buffer and retry stats onto per-plugin gauges. Failures are reported
through last_scrape_error / scrape_errors_total instead of raising, and
leave the previous per-plugin values in place.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import List, Optional

import httpx
from prometheus_client import Counter, Gauge
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from fluentd_exporter.collector.scrape import (
    decode_plugins,
    fetch_plugins_json,
    output_plugins,
    plugins_url,
)
from fluentd_exporter.errors import ScrapeError

log = logging.getLogger(__name__)

PLUGIN_LABELS = ("pluginType", "pluginId")


class FluentdCollector(Collector):

    def __init__(
        self,
        endpoint: str,
        namespace: str = "fluentd",
        timeout_seconds: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        self._endpoint = endpoint.rstrip("/")
        self._url = plugins_url(self._endpoint)
        self._namespace = namespace
        self._timeout = timeout_seconds
        self._client = client or httpx.Client(timeout=self._timeout)

        # Held for the whole cycle so overlapping scrapes queue up
        # instead of interleaving writes to the series below.
        self._lock = threading.Lock()

        # registry=None: these are exposed through this collector only
        self.duration = Gauge(
            "last_scrape_duration_seconds",
            "Duration of the last scrape of metrics from Fluentd.",
            namespace=namespace,
            registry=None,
        )
        self.total_scrapes = Counter(
            "scrapes_total",
            "Total number of times Fluentd was scraped for metrics.",
            namespace=namespace,
            registry=None,
        )
        self.error = Gauge(
            "last_scrape_error",
            "Whether the last scrape of metrics from Fluentd resulted in an error (1 for error, 0 for success).",
            namespace=namespace,
            registry=None,
        )
        self.total_errors = Counter(
            "scrape_errors_total",
            "Total count of error scraping Fluentd.",
            namespace=namespace,
            registry=None,
        )

        self.buffer_queue_length = Gauge(
            "buffer_queue_length",
            "buffer_queue_length",
            PLUGIN_LABELS,
            namespace=namespace,
            registry=None,
        )
        self.buffer_total_queued_size = Gauge(
            "buffer_total_queued_size",
            "buffer_total_queued_size",
            PLUGIN_LABELS,
            namespace=namespace,
            registry=None,
        )
        self.retry_count = Gauge(
            "retry_count",
            "retry_count",
            PLUGIN_LABELS,
            namespace=namespace,
            registry=None,
        )

    def _all_metrics(self):
        return (
            self.duration,
            self.total_scrapes,
            self.error,
            self.total_errors,
            self.buffer_queue_length,
            self.buffer_total_queued_size,
            self.retry_count,
        )

    def describe(self) -> List[Metric]:
        """Static metric families, without touching the agent."""
        families: List[Metric] = []
        for metric in self._all_metrics():
            families.extend(metric.describe())
        return families

    def collect(self) -> List[Metric]:
        """Run one scrape cycle and return a snapshot of every family.

        The snapshot is taken before the lock is released, so one response
        never mixes values from two different payloads.
        """
        with self._lock:
            self.scrape()

            families: List[Metric] = []
            for metric in self._all_metrics():
                families.extend(metric.collect())
            return families

    def scrape(self) -> bool:
        """One fetch/decode/filter/assign pass. Returns True on success.

        Callers must hold the lock; collect() does.
        """
        start = time.perf_counter()
        self.total_scrapes.inc()

        try:
            body = fetch_plugins_json(self._client, self._url, self._timeout)
            records = decode_plugins(body)
        except ScrapeError as exc:
            log.error("Failed to scrape %s: %s", self._url, exc)
            self.error.set(1)
            self.total_errors.inc()
            ok = False
        else:
            assigned = self._assign(records)
            log.debug("Scraped %d output plugins from %s", assigned, self._url)
            self.error.set(0)
            ok = True

        self.duration.set(time.perf_counter() - start)
        return ok

    def _assign(self, records) -> int:
        count = 0
        for record in output_plugins(records):
            labels = record.labels
            self.buffer_queue_length.labels(**labels).set(record.buffer_queue_length)
            self.buffer_total_queued_size.labels(**labels).set(record.buffer_total_queued_size)
            self.retry_count.labels(**labels).set(record.retry_count)
            count += 1
        return count

    def name(self) -> str:
        return f"Fluentd monitor agent ({self._endpoint})"

    def close(self):
        self._client.close()
