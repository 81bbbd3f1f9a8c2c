"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from simplebank.config.logging import configure_logging


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("simplebank").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False)
        assert logging.getLogger("simplebank").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        structlog.get_logger("simplebank.test").warning("json test", tx="payroll")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["tx"] == "payroll"
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "simplebank.test"
        assert parsed["timestamp"].endswith("Z")

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("simplebank.infrastructure.store").debug("Transaction rolled back")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Transaction rolled back"
        assert parsed["level"] == "debug"

    def test_sqlalchemy_info_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("sqlalchemy.engine").info("SELECT 1")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(verbose=True)
        configure_logging(verbose=True)
        assert len(logging.getLogger().handlers) == 1
