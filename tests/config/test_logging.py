"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from relpack.config.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    rel = logging.getLogger("relpack")
    rel_level = rel.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    rel.setLevel(rel_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("relpack").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("relpack").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("relpack.test")
        log.warning("json test", answer=42)
        captured = capfd.readouterr()
        parsed = json.loads(captured.err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "relpack.test"
        assert "timestamp" in parsed

    def test_plugin_warnings_get_structured_fields(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)

        logging.getLogger("relpack.plugins.builtins.edump").warning(
            "edump: Failed to build edump escript!"
        )

        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "edump: Failed to build edump escript!"
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "relpack.plugins.builtins.edump"

    def test_debug_hidden_unless_verbose(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        logging.getLogger("relpack.plugins.builtins.edump").debug("edump: Building edump escript..")
        assert capfd.readouterr().err == ""

    def test_verbose_leaves_other_loggers_at_warning(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("pluggy").debug("hook call")
        logging.getLogger("relpack.services").debug("assembling")
        lines = capfd.readouterr().err.strip().splitlines()
        assert [json.loads(line)["logger"] for line in lines] == ["relpack.services"]

    def test_idempotent_calls(self) -> None:
        """Multiple configure_logging calls don't stack handlers."""
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1
