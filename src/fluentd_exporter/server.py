"""
HTTP exposition for the exporter.

Serves the registry in Prometheus text format at the telemetry path and a
small landing page at "/". Each request runs on its own thread; the
collector's lock is what serializes the actual scrapes.
"""

from __future__ import annotations

import logging
import socket
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

log = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head><title>Fluentd monitor agent exporter</title></head>
<body>
<h1>Fluentd monitor agent exporter</h1>
<p><a href='{path}'>Metrics</a></p>
</body>
</html>"""


class _ExporterHandler(BaseHTTPRequestHandler):
    server: "ExporterHTTPServer"

    def do_GET(self):
        path = self.path.split("?", 1)[0]

        if path == self.server.metrics_path:
            body = generate_latest(self.server.registry)
            self._respond(200, CONTENT_TYPE_LATEST, body)
        elif path == "/":
            body = LANDING_PAGE.format(path=self.server.metrics_path).encode()
            self._respond(200, "text/html; charset=utf-8", body)
        else:
            self._respond(404, "text/plain; charset=utf-8", b"404 page not found\n")

    def _respond(self, status: int, content_type: str, body: bytes):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


class ExporterHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, host: str, port: int, registry: CollectorRegistry, metrics_path: str = "/metrics"):
        if ":" in host:
            self.address_family = socket.AF_INET6
        self.registry = registry
        self.metrics_path = metrics_path
        super().__init__((host, port), _ExporterHandler)


def run_server(host: str, port: int, registry: CollectorRegistry, metrics_path: str = "/metrics"):
    """Bind and serve until interrupted. Binding errors propagate as OSError."""
    server = ExporterHTTPServer(host, port, registry, metrics_path)
    log.info("Providing metrics at %s:%d%s", host or "0.0.0.0", server.server_address[1], metrics_path)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    log.info("Server stopped")
