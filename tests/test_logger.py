import logging

import pytest

from yflow.logger import get_log_mode, get_logger, set_log_mode


@pytest.fixture(autouse=True)
def restore_log_mode():
    yield
    set_log_mode("info")


def test_debug_mode_with_log_file(tmp_path):
    log_file = tmp_path / "logs" / "yflow.log"
    logger = get_logger("yflow.tests.file")

    set_log_mode("debug", log_file=log_file)
    logger.debug("batch pushed")

    assert get_log_mode() == "debug"
    assert logger.level == logging.DEBUG
    assert "batch pushed" in log_file.read_text(encoding="utf-8")


def test_file_handler_removed_when_mode_changes(tmp_path):
    logger = get_logger("yflow.tests.switch")
    set_log_mode("info", log_file=tmp_path / "a.log")

    set_log_mode("info")

    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)


def test_off_mode_silences_loggers():
    logger = get_logger("yflow.tests.off")

    set_log_mode("off")

    assert not logger.isEnabledFor(logging.CRITICAL)


def test_get_logger_does_not_duplicate_handlers():
    first = get_logger("yflow.tests.dup")
    count = len(first.handlers)

    assert get_logger("yflow.tests.dup") is first
    assert len(first.handlers) == count


def test_unknown_mode():
    with pytest.raises(ValueError):
        set_log_mode("verbose")
