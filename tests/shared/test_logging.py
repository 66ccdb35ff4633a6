"""
Structured logging tests.

This module tests the helpers in src/localvault/shared/logging.py.
"""

import json
import logging

from rich.logging import RichHandler

from localvault.shared.errors import ErrorCode, ErrorContext, LocalVaultError
from localvault.shared.logging import (
    StructuredFormatter,
    log_operation_error,
    log_operation_success,
    setup_structured_logger,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test_logger",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg="Test %s",
        args=("message",),
        exc_info=None,
    )
    for name, value in extra.items():
        setattr(record, name, value)
    return record


class TestStructuredFormatter:
    """StructuredFormatter tests."""

    def test_format_basic_log_record(self):
        log_data = json.loads(StructuredFormatter().format(_record()))

        assert log_data["level"] == "INFO"
        assert log_data["logger"] == "test_logger"
        assert log_data["message"] == "Test message"
        assert "timestamp" in log_data

    def test_structured_fields_are_copied(self):
        record = _record(error_code="DECODE_ERROR", context={"key": "k"})

        log_data = json.loads(StructuredFormatter().format(record))

        assert log_data["error_code"] == "DECODE_ERROR"
        assert log_data["context"] == {"key": "k"}


class TestSetupStructuredLogger:
    def test_rich_console_handler(self):
        logger = setup_structured_logger("vault_test.rich", level="DEBUG")

        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.propagate is False

    def test_plain_handler_and_log_file(self, tmp_path):
        log_file = tmp_path / "vault.log"
        logger = setup_structured_logger(
            "vault_test.file",
            level="INFO",
            log_file=str(log_file),
            use_rich_console=False,
        )

        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert json.loads(log_file.read_text(encoding="utf-8"))["message"] == "hello"

    def test_setup_is_idempotent(self):
        setup_structured_logger("vault_test.twice")
        logger = setup_structured_logger("vault_test.twice")

        assert len(logger.handlers) == 1


class TestOperationHelpers:
    def test_log_operation_error(self, caplog):
        logger = logging.getLogger("vault_test.ops")
        error = LocalVaultError(
            ErrorCode.DECODE_ERROR,
            "bad value",
            ErrorContext(key="k", operation="decode", additional_data={"value": "x"}),
        )

        with caplog.at_level(logging.WARNING, logger="vault_test.ops"):
            log_operation_error(logger, error, level=logging.WARNING)

        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.error_code == "DECODE_ERROR"
        assert record.operation == "decode"
        assert record.context == {"key": "k", "operation": "decode", "additional_data": {}}

    def test_log_operation_success(self, caplog):
        logger = logging.getLogger("vault_test.ops")

        with caplog.at_level(logging.DEBUG, logger="vault_test.ops"):
            log_operation_success(logger, "migrate", duration_ms=1.5, result_info={"n": 2})

        record = caplog.records[0]
        assert record.duration_ms == 1.5
        assert record.result_info == {"n": 2}
