"""
Fetch, decode and filter the monitor agent's plugin list.

Each step raises a ScrapeError subclass on failure so the collector can
turn any of them into the same error signal.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Iterable, Iterator, List, Optional

import httpx

from fluentd_exporter.errors import DecodeError, FetchError
from fluentd_exporter.plugins import PluginRecord

log = logging.getLogger(__name__)

PLUGINS_PATH = "/api/plugins.json"


def plugins_url(endpoint: str) -> str:
    return endpoint.rstrip("/") + PLUGINS_PATH


def fetch_plugins_json(client: httpx.Client, url: str, timeout_seconds: Optional[float] = None) -> bytes:
    """GET the plugins document and return the raw body.

    Non-2xx responses are folded into FetchError along with transport
    failures; the status code only shows up in the message.

    httpx applies its timeout per connect and per read, so a body that
    trickles in never trips it. With `timeout_seconds` set, the whole
    request must also finish within that many seconds.
    """
    deadline = None if timeout_seconds is None else time.monotonic() + timeout_seconds
    chunks = []

    try:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                if deadline is not None and time.monotonic() > deadline:
                    raise FetchError(f"GET {url} exceeded {timeout_seconds}s deadline")
    except httpx.HTTPError as exc:
        raise FetchError(f"GET {url} failed: {exc}") from exc

    return b"".join(chunks)


def decode_plugins(body: bytes) -> List[PluginRecord]:
    """Parse the whole document. Any bad entry discards the snapshot."""
    try:
        document = json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"invalid JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise DecodeError("expected a JSON object at the top level")

    entries = document.get("plugins")
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise DecodeError("plugins must be a list")

    return [PluginRecord.from_dict(entry) for entry in entries]


def output_plugins(records: Iterable[PluginRecord]) -> Iterator[PluginRecord]:
    for record in records:
        if record.output_plugin:
            yield record
        else:
            log.debug("Skipping non-output plugin %s (%s)", record.plugin_id, record.plugin_type)
