"""
Structured logging helpers.
"""

import json
import logging

from recipe_service.utils.logger import JsonEventFormatter, log_event


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


def capture(name: str) -> tuple[logging.Logger, ListHandler]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    logger.handlers = [handler]
    return logger, handler


def test_log_event_appends_fields_to_text():
    logger, handler = capture("test.log_event.text")

    log_event(logger, logging.INFO, "User deleted", user_id=7)

    [record] = handler.records
    assert record.getMessage() == "User deleted (user_id=7)"
    assert record.fields == {"event": "User deleted", "user_id": 7}


def test_log_event_records_error():
    logger, handler = capture("test.log_event.error")

    log_event(logger, logging.ERROR, "Error deleting user", exc=ValueError("boom"))

    [record] = handler.records
    assert record.levelno == logging.ERROR
    assert record.fields["error"] == "boom"


def test_json_formatter_merges_fields():
    logger, handler = capture("test.log_event.json")
    log_event(logger, logging.WARNING, "Rate limit exceeded", path="/api/users")

    payload = json.loads(JsonEventFormatter().format(handler.records[0]))

    assert payload["level"] == "warning"
    assert payload["event"] == "Rate limit exceeded"
    assert payload["path"] == "/api/users"
    assert payload["logger"] == "test.log_event.json"
