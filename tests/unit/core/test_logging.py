import json
import logging
import sys

from metricstream.core.logger import RedactingFilter
from metricstream.core.logging_json import (
    CustomJsonFormatter,
    SensitiveDataFilter,
    configure_logging,
)


def _record(msg="snapshot_ready", exc_info=None, **extra):
    record = logging.LogRecord(
        name="metricstream.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_sensitive_filter_redacts_nested_keys():
    f = SensitiveDataFilter(["password", "token"])
    out = f.filter({"user": "a", "password": "x", "nested": {"api_token": "y"}})
    assert out == {
        "user": "a",
        "password": "[REDACTED]",
        "nested": {"api_token": "[REDACTED]"},
    }


def test_formatter_emits_json_with_service_fields():
    formatter = CustomJsonFormatter("metricstream", "testing", ["secret"])
    line = formatter.format(_record(subscription_id="abc", secret="hide"))
    data = json.loads(line)

    assert data["message"] == "snapshot_ready"
    assert data["service"] == "metricstream"
    assert data["environment"] == "testing"
    assert data["subscription_id"] == "abc"
    assert data["secret"] == "[REDACTED]"
    assert "timestamp" in data and "hostname" in data and "pid" in data


def test_formatter_includes_exception_block():
    try:
        raise ValueError("bad aggregation")
    except ValueError:
        record = _record(exc_info=sys.exc_info())
    data = json.loads(CustomJsonFormatter("s", "e", []).format(record))
    assert data["exception"]["type"] == "ValueError"
    assert data["exception"]["message"] == "bad aggregation"


def test_configure_logging_installs_single_handler():
    root = configure_logging("metricstream", "testing", "DEBUG", [])
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, CustomJsonFormatter)
    assert root.level == logging.DEBUG


def test_redacting_filter_masks_message():
    record = _record(msg="authorization header was %s")
    record.args = ("Bearer abc",)
    assert RedactingFilter(["authorization"]).filter(record) is True
    assert record.getMessage() == "[REDACTED SENSITIVE LOG CONTENT]"
