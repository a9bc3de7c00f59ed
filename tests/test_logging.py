"""Tests for the structlog configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from session_tags.utils.logging import configure_logging, redact_parameter_values


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo global logging changes made by configure_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    quieted = {name: logging.getLogger(name).level for name in ("redis", "uvicorn.access", "noisy")}
    yield
    structlog.reset_defaults()
    root.handlers, root.level = handlers, level
    for name, previous in quieted.items():
        logging.getLogger(name).setLevel(previous)


class TestRedactParameterValues:
    """Tests for masking captured values in log events."""

    def test_values_masked(self) -> None:
        event = redact_parameter_values(
            None, "info", {"event": "capture.stored", "name": "quelle", "value": "ads"}
        )
        assert event == {"event": "capture.stored", "name": "quelle", "value": "[redacted]"}

    def test_names_untouched(self) -> None:
        event = {"event": "session.captured", "names": ["quelle", "id"]}
        assert redact_parameter_values(None, "info", dict(event)) == event


@pytest.mark.usefixtures("restore_logging")
class TestConfigureLogging:
    """Tests for level and quiet-logger handling."""

    def test_production_quiets_configured_loggers(self) -> None:
        configure_logging("production", "DEBUG", ["noisy"])
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("noisy").level == logging.WARNING

    def test_development_leaves_library_loggers(self) -> None:
        logging.getLogger("noisy").setLevel(logging.NOTSET)
        configure_logging("development", "INFO", ["noisy"])
        assert logging.getLogger("noisy").level == logging.NOTSET

    def test_unknown_level_falls_back_to_info(self) -> None:
        configure_logging("development", "chatty")
        assert logging.getLogger().level == logging.INFO
