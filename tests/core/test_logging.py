import json
import logging
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from loguru import logger

from app.core import logging as logging_module


def test_serialize_record_basic():
    record = {
        "time": datetime.now(),
        "level": SimpleNamespace(name="INFO"),
        "message": "Test message",
        "name": "test_module",
        "function": "test_function",
        "line": 123,
        "extra": {
            "request_id": "abc-123",
            "category_id": "c1",
            "_private": "hidden",
        },
    }

    serialized = json.loads(logging_module.serialize_record(record))
    assert serialized["message"] == "Test message"
    assert serialized["request_id"] == "abc-123"
    assert serialized["category_id"] == "c1"
    assert serialized["module"] == "test_module"
    assert "_private" not in serialized


def test_serialize_record_fallback():
    # Trigger serialization error using a non-serializable object
    record = {
        "time": datetime.now(),
        "level": SimpleNamespace(name="ERROR"),
        "message": "Fails",
        "extra": {"custom": object()},  # non-serializable
    }

    serialized = logging_module.serialize_record(record)
    assert "Error serializing log" in serialized
    assert "Fails" in serialized


def test_add_request_id_uses_context():
    token = logging_module.request_id_var.set("req-1")
    try:
        record = {"extra": {}}
        logging_module.add_request_id(record)
    finally:
        logging_module.request_id_var.reset(token)

    assert record["extra"]["request_id"] == "req-1"


def test_add_request_id_without_request():
    record = {"extra": {}}
    logging_module.add_request_id(record)

    assert "request_id" not in record["extra"]


def test_intercept_handler_forwards_to_loguru():
    messages = []
    sink_id = logger.add(messages.append, level="DEBUG", format="{level}|{message}")
    try:
        handler = logging_module.InterceptHandler()
        for level in (logging.INFO, logging.ERROR):
            record = logging.LogRecord("sqlalchemy.engine.Engine", level, __file__, 1, "intercepted", None, None)
            handler.emit(record)
    finally:
        logger.remove(sink_id)

    assert [message.strip() for message in messages] == ["INFO|intercepted", "ERROR|intercepted"]


@patch("app.core.logging.logger")
@patch("app.core.logging.settings.JSON_LOGS", True)
def test_configure_logging_json(mock_logger):
    mock_logger.add = MagicMock()
    mock_logger.remove = MagicMock()

    logging_module.configure_logging()
    mock_logger.add.assert_called()
    mock_logger.remove.assert_called()
    mock_logger.configure.assert_called_once()
    assert mock_logger.info.called


@patch("app.core.logging.logger")
@patch("app.core.logging.settings.JSON_LOGS", False)
def test_configure_logging_human(mock_logger):
    mock_logger.add = MagicMock()
    mock_logger.remove = MagicMock()

    logging_module.configure_logging()
    mock_logger.add.assert_called()
    mock_logger.remove.assert_called()
    assert mock_logger.info.called
