"""
Request logging middleware
"""

import logging
import re

from middleware import request_logger

LOG_LINE = re.compile(r"^\[\d{2}:\d{2}:\d{2}\] (\w+) (\S+) (\d{3}) \((\d+)ms\)$")


def logged_requests(caplog):
    lines = [r.getMessage() for r in caplog.records if r.name == "middleware.request_logger"]
    return [LOG_LINE.match(line).groups()[:3] for line in lines if LOG_LINE.match(line)]


def test_logs_final_status(client, caplog):
    caplog.set_level(logging.INFO, logger="middleware.request_logger")

    client.get("/users/abc")
    client.get("/users")
    client.get("/missing")

    assert logged_requests(caplog) == [
        ("GET", "/users/abc", "400"),
        ("GET", "/users", "200"),
        ("GET", "/missing", "404"),
    ]


def test_trace_id_header(client):
    response = client.get("/users")
    assert len(response.headers["X-Trace-ID"]) == 8


def test_logging_failure_does_not_fail_request(client, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("log sink unavailable")

    monkeypatch.setattr(request_logger.logger, "info", broken)

    response = client.get("/users")
    assert response.status_code == 200
    assert response.json()["success"] is True
