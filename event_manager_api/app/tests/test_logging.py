"""
Test the root logger setup.
"""
import logging

import pytest

from event_manager_api.app.core.logging_config import LOG_FORMAT, setup_logging


@pytest.fixture
def bare_root(monkeypatch):
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(root, "handlers", [])
    yield root
    for handler in root.handlers:
        handler.close()
    root.setLevel(level)


def test_console_and_file_handlers(bare_root, tmp_path):
    logfile = tmp_path / "logs" / "api.log"
    setup_logging("debug", str(logfile))

    assert bare_root.level == logging.DEBUG
    kinds = [type(handler) for handler in bare_root.handlers]
    assert kinds == [logging.StreamHandler, logging.FileHandler]
    assert bare_root.handlers[0].formatter._fmt == LOG_FORMAT

    logging.getLogger("event_manager_api.test").info("written to file")
    bare_root.handlers[1].flush()
    assert "[INFO] event_manager_api.test: written to file" in logfile.read_text(encoding="utf-8")


def test_unknown_level_falls_back_to_info(bare_root):
    setup_logging("chatty")
    assert bare_root.level == logging.INFO
    assert len(bare_root.handlers) == 1


def test_second_call_is_ignored(bare_root, tmp_path):
    setup_logging("INFO")
    setup_logging("DEBUG", str(tmp_path / "ignored.log"))
    assert bare_root.level == logging.INFO
    assert len(bare_root.handlers) == 1
    assert not (tmp_path / "ignored.log").exists()
