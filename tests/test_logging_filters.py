"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from app.core.config import LogSettings
from app.core.logging import (
    PERSONAL_DATA_KEYS,
    SECRET_KEYS,
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    redact,
    sensitive_keys_for,
    set_request_id,
)


def _capture(logger_name: str, sensitive_keys=None) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter(sensitive_keys))
    handler.setFormatter(JsonFormatter(sensitive_keys=sensitive_keys))
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_credentials():
    logger, stream = _capture("test_credentials")

    logger.info(
        "mail.send",
        extra={
            "private_key": "priv-secret-123",
            "x-api-key": "admin-secret",
            "csrf_token": "3f2a-token",
            "template_id": "template_visible",
        },
    )

    output = stream.getvalue()
    assert "priv-secret-123" not in output
    assert "admin-secret" not in output
    assert "3f2a-token" not in output
    assert "[REDACTED]" in output
    assert "template_visible" in output


def test_sensitive_filter_redacts_submitter_data():
    logger, stream = _capture("test_submitter")

    logger.info(
        "contact.received",
        extra={
            "template_params": {"from_email": "jeanne@example.com"},
            "phone": "0601020304",
            "client_ip": "203.0.113.7",
            "request_type": "Demande de devis",
        },
    )

    output = stream.getvalue()
    assert "jeanne@example.com" not in output
    assert "0601020304" not in output
    assert "203.0.113.7" not in output
    assert "Demande de devis" in output


def test_nested_values_are_redacted():
    redacted = redact(
        {
            "context": {"from_email": "a@example.com", "sector": "BTP"},
            "attempts": [{"Authorization": "Bearer x"}],
        }
    )

    assert redacted == {
        "context": {"from_email": "[REDACTED]", "sector": "BTP"},
        "attempts": [{"Authorization": "[REDACTED]"}],
    }


def test_personal_data_kept_when_redaction_disabled():
    keys = sensitive_keys_for(LogSettings(redact_personal_data=False))

    assert keys == SECRET_KEYS
    assert not keys & PERSONAL_DATA_KEYS

    logger, stream = _capture("test_no_pii_redaction", keys)
    logger.info("contact.debug", extra={"phone": "0601020304", "private_key": "priv"})

    output = stream.getvalue()
    assert "0601020304" in output
    assert "\"private_key\": \"priv\"" not in output


def test_request_id_attached_from_context():
    logger, stream = _capture("test_request_id")

    set_request_id("req-42")
    try:
        logger.info("event")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-42"


def test_output_is_single_json_object():
    logger, stream = _capture("test_json")

    logger.warning("rate_limit.exceeded", extra={"retry_after": 12})

    record = json.loads(stream.getvalue())
    assert record["level"] == "warning"
    assert record["message"] == "rate_limit.exceeded"
    assert record["retry_after"] == 12
    assert "timestamp" in record
