import json
import logging
import sys

import logging_config
from logging_config import APP_LOGGERS, JSONFormatter, build_logging_config, setup_logging


class TestJSONFormatter:
    def test_format_without_exception_and_extra(self):
        """
        verify format outputs json with timestamp, level, logger, and message without exception or extra
        """
        # Arrange
        formatter = JSONFormatter()
        formatter.formatTime = lambda record, datefmt: "2025-06-23T12:00:00"
        record = logging.LogRecord(
            name="test_logger", level=logging.WARNING, pathname=__file__, lineno=10,
            msg="hello %s", args=("world",), exc_info=None,
        )
        # Act
        payload = json.loads(formatter.format(record))
        # Assert
        assert payload == {
            "timestamp": "2025-06-23T12:00:00",
            "level": "WARNING",
            "logger": "test_logger",
            "message": "hello world",
        }

    def test_format_with_exception(self):
        """verify format includes exception info when exc_info is provided"""
        formatter = JSONFormatter()
        formatter.formatTime = lambda record, datefmt: "2025-06-23T12:00:00"
        try:
            raise ValueError("oops")
        except ValueError:
            exc_info = sys.exc_info()
        record = logging.LogRecord(
            name="error_logger", level=logging.ERROR, pathname=__file__, lineno=20,
            msg="error happened", args=(), exc_info=exc_info,
        )
        payload = json.loads(formatter.format(record))
        assert payload["level"] == "ERROR"
        assert "ValueError: oops" in payload["exception"]

    def test_format_with_extra_fields(self):
        """verify format includes extra fields present in record.extra"""
        formatter = JSONFormatter()
        record = logging.LogRecord(
            name="extra_logger", level=logging.INFO, pathname=__file__, lineno=30,
            msg="info with extra", args=(), exc_info=None,
        )
        record.extra = {"provider": "openrouter:test", "messages": 3}
        payload = json.loads(formatter.format(record))
        assert payload["provider"] == "openrouter:test"
        assert payload["messages"] == 3


class TestSetupLogging:
    def test_configures_app_loggers(self):
        """verify every application logger gets one JSON stdout handler"""
        # Act
        returned = setup_logging("DEBUG", name="app")
        # Assert
        assert returned is logging.getLogger("app")
        for name in APP_LOGGERS:
            logger = logging.getLogger(name)
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1
            handler = logger.handlers[0]
            assert isinstance(handler, logging.StreamHandler)
            assert handler.stream is sys.stdout
            assert isinstance(handler.formatter, JSONFormatter)

    def test_is_idempotent(self):
        """verify calling setup_logging twice does not add duplicate handlers"""
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_custom_name_is_configured(self):
        logger = setup_logging(name="__main__")
        assert logger.name == "__main__"
        assert len(logger.handlers) == 1

    def test_integration_logging_output(self, capsys, monkeypatch):
        """verify a session logger writes json output to stdout"""
        monkeypatch.setattr(JSONFormatter, "formatTime", lambda self, record, datefmt: "2025-06-23T12:00:00")
        setup_logging()
        # Act
        logging.getLogger("session").info("integration test", extra={"extra": {"owner": "tester"}})
        captured = capsys.readouterr().out.strip().splitlines()[-1]
        # Assert
        payload = json.loads(captured)
        assert payload["logger"] == "session"
        assert payload["message"] == "integration test"
        assert payload["owner"] == "tester"


class TestBuildLoggingConfig:
    def test_uses_python_json_logger(self):
        cfg = build_logging_config("warning")
        assert cfg["formatters"]["json"]["()"] == "pythonjsonlogger.jsonlogger.JsonFormatter"
        assert set(cfg["loggers"]) == set(APP_LOGGERS)
        assert all(entry["level"] == "WARNING" for entry in cfg["loggers"].values())

    def test_configure_logging_applies_dict_config(self, monkeypatch):
        applied = []
        monkeypatch.setattr(logging_config.logging.config, "dictConfig", applied.append)
        logging_config.configure_logging("INFO")
        assert applied and applied[0]["version"] == 1
