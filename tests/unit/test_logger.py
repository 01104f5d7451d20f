import json
import logging

import pytest

from browsable_sql.common.logger import (
    TEXT_FORMAT,
    JsonFormatter,
    RequestContextFilter,
    configure_logging,
    request_context,
)


def make_record(msg="statement rejected", **extra):
    record = logging.LogRecord("browsable_sql.gateway", logging.WARNING, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_filter_outside_a_request():
    record = make_record()

    RequestContextFilter().filter(record)

    assert (record.request_id, record.method, record.route) == ("-", "-", "-")


def test_filter_uses_innermost_request():
    record = make_record()

    with request_context("outer", "POST", "/query/raw"):
        with request_context("inner", "GET", "/studio"):
            RequestContextFilter().filter(record)

    assert (record.request_id, record.method, record.route) == ("inner", "GET", "/studio")


def test_json_groups_request_fields_and_keeps_extras():
    record = make_record(error_code="INVALID_QUERY")
    with request_context("req-2", "POST", "/query/raw"):
        RequestContextFilter().filter(record)

    entry = json.loads(JsonFormatter().format(record))

    assert entry["level"] == "WARNING"
    assert entry["logger"] == "browsable_sql.gateway"
    assert entry["message"] == "statement rejected"
    assert entry["request"] == {"request_id": "req-2", "method": "POST", "route": "/query/raw"}
    assert entry["error_code"] == "INVALID_QUERY"
    assert "request_id" not in entry


def test_json_without_request():
    record = make_record()
    RequestContextFilter().filter(record)

    assert "request" not in json.loads(JsonFormatter().format(record))


def test_configure_logging_installs_one_handler(restore_root_logger):
    configure_logging("DEBUG")
    handler = configure_logging("WARNING", json_format=True)

    assert restore_root_logger.handlers == [handler]
    assert restore_root_logger.level == logging.WARNING
    assert isinstance(handler.formatter, JsonFormatter)
    assert logging.getLogger("httpx").level == logging.WARNING

    text_handler = configure_logging()
    assert text_handler.formatter._fmt == TEXT_FORMAT


def test_gateway_failures_are_logged_with_request_and_code(make_client, auth_headers, caplog):
    caplog.handler.addFilter(RequestContextFilter())
    client = make_client(validator=lambda sql: {"is_valid": False, "error": "no"})

    with caplog.at_level(logging.INFO, logger="browsable_sql.gateway"):
        client.post(
            "/query/raw", json={"sql": "SELECT 1"}, headers={**auth_headers, "X-Request-ID": "req-9"}
        )

    failures = [r for r in caplog.records if getattr(r, "error_code", None)]
    assert len(failures) == 1
    assert failures[0].error_code == "INVALID_QUERY"
    assert (failures[0].request_id, failures[0].method, failures[0].route) == ("req-9", "POST", "/query/raw")
