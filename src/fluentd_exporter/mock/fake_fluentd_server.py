"""
Fake Fluentd monitor agent for local development and tests.

    python -m fluentd_exporter.mock.fake_fluentd_server
    python -m fluentd_exporter.main --fluentd.endpoint http://localhost:24220
"""

from __future__ import annotations

import json
import math
import random
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Optional


_tick = 0
_rng = random.Random(42)


def generate_plugins() -> dict:
    """A plugins.json document shaped like in_monitor_agent's output.

    Queue depth follows a slow sine wave with occasional retry bursts,
    enough to make a dashboard move.
    """
    global _tick
    _tick += 1
    t = _tick

    queue = max(0, int(4 + 3 * math.sin(t * 0.2) + _rng.gauss(0, 1)))
    retries = _rng.randint(1, 5) if _rng.random() > 0.9 else 0

    return {
        "plugins": [
            {
                "plugin_id": "in_forward",
                "plugin_category": "input",
                "type": "forward",
                "output_plugin": False,
                "retry_count": None,
            },
            {
                "plugin_id": "out_es",
                "plugin_category": "output",
                "type": "elasticsearch",
                "output_plugin": True,
                "buffer_queue_length": queue,
                "buffer_total_queued_size": queue * 8192 + _rng.randint(0, 4096),
                "retry_count": retries,
            },
            {
                "plugin_id": "out_file",
                "plugin_category": "output",
                "type": "file",
                "output_plugin": True,
                "buffer_queue_length": 0,
                "buffer_total_queued_size": 0,
                "retry_count": 0,
            },
        ]
    }


class _PluginsHandler(BaseHTTPRequestHandler):
    server: "FakeFluentdServer"

    def do_GET(self):
        if self.path != "/api/plugins.json":
            self.send_response(404)
            self.end_headers()
            return

        if self.server.body is not None:
            body = self.server.body
        else:
            body = json.dumps(generate_plugins()).encode()

        self.send_response(self.server.status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


class FakeFluentdServer(HTTPServer):
    """Serves generated data unless `body` is set to a fixed response."""

    def __init__(self, host: str = "127.0.0.1", port: int = 24220,
                 body: Optional[bytes] = None, status: int = 200):
        self.body = body
        self.status = status
        super().__init__((host, port), _PluginsHandler)


def run_fake_server(host: str = "127.0.0.1", port: int = 24220):
    server = FakeFluentdServer(host, port)
    print(f"Fake Fluentd monitor agent running at http://{host}:{port}/api/plugins.json")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
