"""Tests for logging setup."""

import json
import logging

import pytest

from poi_search.config import ObservabilityConfig
from poi_search.logging_config import JsonFormatter, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    httpx_level = logging.getLogger("httpx").level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


def make_record(**extra):
    record = logging.LogRecord(
        "poi_search.services", logging.INFO, __file__, 10, "Search results published", (), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JsonFormatter().format(make_record(provider="here", results=3))
    payload = json.loads(line)

    assert payload["message"] == "Search results published"
    assert payload["logger"] == "poi_search.services"
    assert payload["level"] == "INFO"
    assert payload["provider"] == "here"
    assert payload["results"] == 3
    assert "args" not in payload


def test_json_formatter_serializes_unknown_types():
    payload = json.loads(JsonFormatter().format(make_record(selection={1, 2})))
    assert isinstance(payload["selection"], str)


def test_structured_logging_installs_json_handler(restore_root_logger):
    configure_logging(ObservabilityConfig(level="debug", structured=True))

    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)


def test_repeated_configuration_does_not_duplicate_handlers(restore_root_logger):
    configure_logging(ObservabilityConfig())
    configure_logging(ObservabilityConfig())
    assert len(restore_root_logger.handlers) == 1


def test_httpx_request_logs_suppressed(restore_root_logger):
    configure_logging(ObservabilityConfig(level="DEBUG"))
    assert logging.getLogger("httpx").level == logging.WARNING
