"""Unit tests for log formatting."""

import json
import logging
import uuid

from taskboard.logging_config import (
    ContextFilter,
    DevFormatter,
    JsonFormatter,
    extra_fields,
    request_id_var,
)


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("taskboard.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestExtraFields:

    def test_only_extra_fields_are_returned(self):
        record = _record("Board deleted", board_id="b-1")
        ContextFilter("taskboard").filter(record)

        assert extra_fields(record) == {"board_id": "b-1"}

    def test_non_json_values_are_stringified(self):
        board_id = uuid.uuid4()
        record = _record("Board deleted", board_id=board_id, attempts=2, skipped=None)

        assert extra_fields(record) == {"board_id": str(board_id), "attempts": 2}


class TestFormatters:

    def test_json_includes_service_request_id_and_fields(self):
        record = _record("Task created", task_id="t-1")
        token = request_id_var.set("req-42")
        try:
            ContextFilter("taskboard").filter(record)
        finally:
            request_id_var.reset(token)

        entry = json.loads(JsonFormatter().format(record))

        assert entry["message"] == "Task created"
        assert entry["service"] == "taskboard"
        assert entry["request_id"] == "req-42"
        assert entry["task_id"] == "t-1"

    def test_json_omits_request_id_outside_requests(self):
        record = _record("Outbox drained")
        ContextFilter("taskboard-relay").filter(record)

        entry = json.loads(JsonFormatter().format(record))

        assert "request_id" not in entry
        assert entry["service"] == "taskboard-relay"

    def test_dev_line_appends_fields(self):
        record = _record("Invitation resolved", status="Accepted")
        ContextFilter("taskboard").filter(record)

        line = DevFormatter().format(record)

        assert "req=- Invitation resolved status=Accepted" in line

    def test_dev_formatter_tolerates_unfiltered_records(self):
        line = DevFormatter().format(_record("Starting"))

        assert line.endswith("req=- Starting")
