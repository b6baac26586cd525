"""Tests for the exposition HTTP server."""

import json
import socket
import threading

import httpx
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry

from fluentd_exporter.collector.fluentd_collector import FluentdCollector
from fluentd_exporter.server import ExporterHTTPServer


PAYLOAD = json.dumps({"plugins": [{
    "plugin_id": "out1",
    "type": "file",
    "output_plugin": True,
    "buffer_queue_length": 3,
    "buffer_total_queued_size": 1024,
    "retry_count": 0,
}]}).encode()


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _start_exporter(metrics_path: str = "/metrics") -> ExporterHTTPServer:
    client = httpx.Client(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, content=PAYLOAD)
    ))
    registry = CollectorRegistry()
    registry.register(FluentdCollector(endpoint="http://fluentd:24220", client=client))

    server = ExporterHTTPServer("127.0.0.1", _free_port(), registry, metrics_path)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server


def _url(server, path: str) -> str:
    host, port = server.server_address[:2]
    return f"http://{host}:{port}{path}"


def test_metrics_endpoint_serves_prometheus_text():
    server = _start_exporter()
    try:
        response = httpx.get(_url(server, "/metrics"))

        assert response.status_code == 200
        assert response.headers["content-type"] == CONTENT_TYPE_LATEST
        assert 'fluentd_buffer_queue_length{pluginId="out1",pluginType="file"} 3.0' in response.text
        assert "fluentd_last_scrape_error 0.0" in response.text
        assert "fluentd_scrapes_total 1.0" in response.text
    finally:
        server.shutdown()
        server.server_close()


def test_each_request_is_one_scrape():
    server = _start_exporter()
    try:
        httpx.get(_url(server, "/metrics"))
        response = httpx.get(_url(server, "/metrics"))

        assert "fluentd_scrapes_total 2.0" in response.text
    finally:
        server.shutdown()
        server.server_close()


def test_custom_metrics_path():
    server = _start_exporter(metrics_path="/fluentd")
    try:
        assert httpx.get(_url(server, "/fluentd")).status_code == 200
        assert httpx.get(_url(server, "/metrics")).status_code == 404
    finally:
        server.shutdown()
        server.server_close()


def test_landing_page_links_to_metrics():
    server = _start_exporter(metrics_path="/fluentd")
    try:
        response = httpx.get(_url(server, "/"))

        assert response.status_code == 200
        assert "Fluentd monitor agent exporter" in response.text
        assert "href='/fluentd'" in response.text
    finally:
        server.shutdown()
        server.server_close()


def test_unknown_path_is_404():
    server = _start_exporter()
    try:
        assert httpx.get(_url(server, "/nope")).status_code == 404
    finally:
        server.shutdown()
        server.server_close()
