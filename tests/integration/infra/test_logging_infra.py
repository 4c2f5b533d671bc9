from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, log file rotation and clean shutdown.
"""

import logging
import time
from pathlib import Path

import pytest

from assetversioner.infra.logging import (
    LoggingConfig,
    configure_logging,
    level_for_verbosity,
    shutdown_logging,
)
from assetversioner.infra.logging.core import _CONFIGURED_FLAG_ATTR, _QUEUE_LISTENER_ATTR
from assetversioner.infra.logging.handlers import _HANDLER_TAG_ATTR


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach package handlers before and after each test."""
    shutdown_logging()
    yield
    shutdown_logging()


def _our_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_TAG_ATTR, False)]


def test_logging_idempotency() -> None:
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    count = len(_our_handlers())
    configure_logging(cfg)

    assert count == 1
    assert len(_our_handlers()) == count


def test_force_replaces_listener() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    first = getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR)

    configure_logging(LoggingConfig(level="DEBUG"), force=True)
    second = getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR)

    assert first is not second
    assert len(_our_handlers()) == 1
    assert logging.getLogger().level == logging.DEBUG


def test_log_file_receives_records(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "versioning.log"
    configure_logging(LoggingConfig(level="INFO", console=False, log_file=str(log_file)))

    logging.getLogger("assetversioner.test").info("pass completed")
    shutdown_logging()

    content = log_file.read_text(encoding="utf-8")
    assert "pass completed" in content
    assert "assetversioner.test" in content


def test_log_rotation(tmp_path: Path) -> None:
    log_file = tmp_path / "rotate.log"
    configure_logging(LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1,
    ))

    logger = logging.getLogger("assetversioner.rotate")
    for _ in range(10):
        logger.debug("A long message written to trigger rollover." * 5)

    time.sleep(0.5)
    shutdown_logging()

    assert log_file.exists()
    assert (tmp_path / "rotate.log.1").exists()


def test_shutdown_keeps_foreign_handlers() -> None:
    foreign = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig())
        shutdown_logging()

        assert foreign in root.handlers
        assert _our_handlers() == []
        assert getattr(root, _CONFIGURED_FLAG_ATTR) is False
    finally:
        root.removeHandler(foreign)


def test_no_handlers_still_marks_configured() -> None:
    configure_logging(LoggingConfig(console=False))

    assert getattr(logging.getLogger(), _CONFIGURED_FLAG_ATTR) is True
    assert _our_handlers() == []


def test_level_for_verbosity() -> None:
    assert level_for_verbosity(True) == "DEBUG"
    assert level_for_verbosity(False, quiet=True) == "ERROR"
    assert level_for_verbosity(False) == "INFO"
