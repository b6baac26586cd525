"""
Plugin records as reported by the Fluentd monitor agent.

The agent's /api/plugins.json lists every configured plugin. Only output
plugins carry buffer and retry state, so those are the ones we export.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict

from fluentd_exporter.errors import DecodeError


@dataclass
class PluginRecord:
    """One entry of the agent's plugins list."""

    plugin_id: str = ""
    plugin_type: str = ""
    output_plugin: bool = False

    # Buffer state
    buffer_queue_length: float = 0.0
    buffer_total_queued_size: float = 0.0

    retry_count: float = 0.0

    @property
    def labels(self) -> Dict[str, str]:
        return {"pluginType": self.plugin_type, "pluginId": self.plugin_id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PluginRecord":
        """Build a record from one decoded JSON object.

        Absent (or null) fields keep their zero value; fields of the wrong
        type raise DecodeError.
        """
        if not isinstance(data, dict):
            raise DecodeError(f"plugin entry is not an object: {data!r}")

        return cls(
            plugin_id=_string(data, "plugin_id"),
            plugin_type=_string(data, "type"),
            output_plugin=_boolean(data, "output_plugin"),
            buffer_queue_length=_number(data, "buffer_queue_length"),
            buffer_total_queued_size=_number(data, "buffer_total_queued_size"),
            retry_count=_number(data, "retry_count"),
        )


def _string(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"{key} must be a string, got {value!r}")
    return value


def _boolean(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(f"{key} must be a boolean, got {value!r}")
    return value


def _number(data: Dict[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    # bool is an int subclass, but true/false is not a number in JSON
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{key} must be a number, got {value!r}")
    try:
        number = float(value)
    except OverflowError:
        raise DecodeError(f"{key} is out of float range") from None
    # json accepts NaN/Infinity literals and 1e999, none of which is valid JSON
    if not math.isfinite(number):
        raise DecodeError(f"{key} must be finite, got {value!r}")
    return number
