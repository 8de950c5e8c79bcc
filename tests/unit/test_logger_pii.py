"""Tests for PII redaction in JSON logging."""

import json
import logging

import pytest

from backend.core.observability.logging import JSONFormatter, set_trace_id


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="agents.facturi.generator",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def formatter():
    return JSONFormatter()


def test_mandatory_fields(formatter):
    set_trace_id("trace-1")

    log_data = json.loads(formatter.format(_record("XML generation finished")))

    assert log_data["trace_id"] == "trace-1"
    assert log_data["level"] == "info"
    assert log_data["logger"] == "agents.facturi.generator"
    assert log_data["msg"] == "XML generation finished"
    assert log_data["ts_utc"].endswith("Z")


def test_entry_has_only_mandatory_fields_without_extras(formatter):
    set_trace_id("trace-2")

    log_data = json.loads(formatter.format(_record("Export started")))

    assert set(log_data) == {"trace_id", "logger", "level", "msg", "ts_utc"}


def test_cnp_redaction(formatter):
    log_data = json.loads(formatter.format(_record("Client CNP 1850101123456 exported")))

    assert "1850101123456" not in log_data["msg"]
    assert "CNP-*********" in log_data["msg"]


def test_iban_redaction(formatter):
    log_data = json.loads(formatter.format(_record("Supplier IBAN RO51RNCB0119172367880001")))

    assert "RO51RNCB0119172367880001" not in log_data["msg"]
    assert "RO**" in log_data["msg"]


def test_email_redaction(formatter):
    log_data = json.loads(formatter.format(_record("Contact stefan@sel.ro")))

    assert "stefan@sel.ro" not in log_data["msg"]
    assert "s*****@sel.ro" in log_data["msg"]


def test_extra_fields_are_included_and_redacted(formatter):
    log_data = json.loads(
        formatter.format(_record("Export finished", invoice_count=3, client_email="ana@example.com"))
    )

    assert log_data["invoice_count"] == 3
    assert log_data["client_email"] == "a**@example.com"


def test_non_pii_preserved(formatter):
    log_data = json.loads(formatter.format(_record("Generated 2 documents for organization 7")))

    assert log_data["msg"] == "Generated 2 documents for organization 7"
