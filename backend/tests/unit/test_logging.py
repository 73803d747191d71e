"""
Unit tests for JSON log formatting and correlation id propagation.
"""
import io
import json
import logging
from uuid import UUID

import pytest

from tailorbook.lib.logging import (
    CorrelationIdFilter,
    JSONFormatter,
    get_correlation_id,
    log_with_context,
    set_correlation_id,
)


@pytest.fixture
def captured():
    """Logger writing JSON lines into a buffer."""
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(JSONFormatter())

    logger = logging.getLogger("tailorbook.tests.logging")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    try:
        yield logger, stream
    finally:
        logger.removeHandler(handler)
        set_correlation_id(None)


def _lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


@pytest.mark.unit
def test_log_with_context_merges_fields(captured):
    logger, stream = captured

    log_with_context(logger, "info", "Booking moved to confirmed", booking_id="b-1", from_status="pending")

    [entry] = _lines(stream)
    assert entry["level"] == "INFO"
    assert entry["logger"] == "tailorbook.tests.logging"
    assert entry["message"] == "Booking moved to confirmed"
    assert entry["booking_id"] == "b-1"
    assert entry["from_status"] == "pending"
    assert "correlation_id" not in entry


@pytest.mark.unit
def test_correlation_id_stamped_on_records(captured):
    logger, stream = captured

    set_correlation_id("req-42")
    assert get_correlation_id() == "req-42"
    logger.warning("Rule rejected")

    [entry] = _lines(stream)
    assert entry["correlation_id"] == "req-42"


@pytest.mark.unit
def test_fields_cannot_overwrite_core_keys(captured):
    logger, stream = captured

    log_with_context(logger, logging.ERROR, "Consistency failure", timestamp="spoofed", operation="initiate_return")

    [entry] = _lines(stream)
    assert entry["level"] == "ERROR"
    assert entry["message"] == "Consistency failure"
    assert entry["timestamp"] != "spoofed"
    assert entry["operation"] == "initiate_return"


@pytest.mark.unit
def test_exception_and_non_json_values(captured):
    logger, stream = captured

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.error("Unhandled", exc_info=True, extra={"extra_fields": {"booking_id": UUID(int=1)}})

    [entry] = _lines(stream)
    assert entry["booking_id"] == "00000000-0000-0000-0000-000000000001"
    assert "RuntimeError: boom" in entry["exception"]
