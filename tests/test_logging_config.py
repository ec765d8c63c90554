"""
Test suite for structured logging
"""

import json
import sys
import logging

from ledger_sim.logging_config import (
    JSONFormatter, setup_logging, get_logger, log_action
)


class TestJSONFormatter:
    """Test JSON log formatting"""

    def test_formats_structured_fields(self):
        record = logging.LogRecord(
            "ledger_sim.test", logging.INFO, __file__, 1, "Deposit executed", None, None
        )
        record.user_id = "USR-1"
        record.action = "deposit"
        record.resource = "account:ACC-1"
        record.extra = {"amount": "10.00"}

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "ledger_sim.test"
        assert data["message"] == "Deposit executed"
        assert data["user_id"] == "USR-1"
        assert data["action"] == "deposit"
        assert data["resource"] == "account:ACC-1"
        assert data["extra"] == {"amount": "10.00"}
        assert "timestamp" in data

    def test_omits_missing_fields(self):
        record = logging.LogRecord(
            "ledger_sim.test", logging.WARNING, __file__, 1, "plain", None, None
        )

        data = json.loads(JSONFormatter().format(record))

        assert "user_id" not in data
        assert "action" not in data
        assert "exception" not in data

    def test_includes_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "ledger_sim.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        data = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]


class TestSetupLogging:
    """Test logger configuration"""

    def test_setup_is_idempotent(self):
        logger = setup_logging("DEBUG", logger_name="ledger_sim_setup_test")
        setup_logging("DEBUG", logger_name="ledger_sim_setup_test")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.propagate is False

    def test_text_format(self):
        logger = setup_logging("warning", logger_name="ledger_sim_text_test", fmt="text")

        assert logger.level == logging.WARNING
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)


class TestLogAction:
    """Test log_action helper"""

    def test_attaches_fields(self, caplog):
        logger = get_logger("ledger_sim.test")

        with caplog.at_level(logging.INFO, logger="ledger_sim.test"):
            log_action(logger, "info", "User created", user_id="USR-1",
                       action="create_user", resource="user:USR-1", extra={"k": "v"})

        record = caplog.records[-1]
        assert record.getMessage() == "User created"
        assert record.user_id == "USR-1"
        assert record.action == "create_user"
        assert record.resource == "user:USR-1"
        assert record.extra == {"k": "v"}

    def test_skips_empty_fields(self, caplog):
        logger = get_logger("ledger_sim.test")

        with caplog.at_level(logging.WARNING, logger="ledger_sim.test"):
            log_action(logger, "warning", "Something odd")

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert not hasattr(record, "user_id")
