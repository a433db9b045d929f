"""
Tests for structured logging.
"""
import json
import logging

import pytest

from app.core.logging import (
    HumanFormatter,
    JSONFormatter,
    _ROUTE_PATH,
    current_context,
    request_id_var,
    route_id_var,
)


def make_record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("app.test", logging.INFO, __file__, 10, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record("Optimized route")))

        assert data["level"] == "INFO"
        assert data["logger"] == "app.test"
        assert data["message"] == "Optimized route"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields_are_included(self):
        data = json.loads(JSONFormatter().format(make_record("done", status_code=200, duration_ms=1.5)))

        assert data["status_code"] == 200
        assert data["duration_ms"] == 1.5

    def test_context_variables(self):
        request_token = request_id_var.set("req-42")
        route_token = route_id_var.set("3f1c7a52-8d3b-4b5e-9a57-0c2f1f6f4a11")
        try:
            data = json.loads(JSONFormatter().format(make_record("hello")))
        finally:
            request_id_var.reset(request_token)
            route_id_var.reset(route_token)

        assert data["request_id"] == "req-42"
        assert data["route_id"] == "3f1c7a52-8d3b-4b5e-9a57-0c2f1f6f4a11"


class TestHumanFormatter:
    def test_context_tags(self):
        request_token = request_id_var.set("abcdef123456")
        route_token = route_id_var.set("3f1c7a52-8d3b-4b5e-9a57-0c2f1f6f4a11")
        try:
            line = HumanFormatter().format(make_record("Reordered stops"))
        finally:
            request_id_var.reset(request_token)
            route_id_var.reset(route_token)

        assert "[abcdef12][route:3f1c7a52]" in line
        assert line.endswith("Reordered stops")

    def test_empty_values_are_omitted(self):
        request_token = request_id_var.set("req-7")
        route_token = route_id_var.set("")
        try:
            assert current_context() == {"request_id": "req-7"}
        finally:
            request_id_var.reset(request_token)
            route_id_var.reset(route_token)


class TestRoutePath:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/api/v1/routes/3f1c7a52-8d3b-4b5e-9a57-0c2f1f6f4a11", "3f1c7a52-8d3b-4b5e-9a57-0c2f1f6f4a11"),
            (
                "/api/v1/reports/routes/3f1c7a52-8d3b-4b5e-9a57-0c2f1f6f4a11",
                "3f1c7a52-8d3b-4b5e-9a57-0c2f1f6f4a11",
            ),
            (
                "/api/v1/routes/3f1c7a52-8d3b-4b5e-9a57-0c2f1f6f4a11/stops/reorder",
                "3f1c7a52-8d3b-4b5e-9a57-0c2f1f6f4a11",
            ),
            ("/api/v1/routes/by-date/driver-1/2024-05-01", None),
            ("/api/v1/health", None),
        ],
    )
    def test_route_id_extraction(self, path, expected):
        match = _ROUTE_PATH.search(path)

        assert (match.group(1) if match else None) == expected
