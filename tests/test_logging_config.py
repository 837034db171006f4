import logging

import pytest

from outline_toolkit.config import ConfigManager
from outline_toolkit.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_logging(tmp_path, monkeypatch):
    """Run setup_logging against a temp log dir and undo its side effects."""
    monkeypatch.setenv("OUTLINE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("OUTLINE_DEBUG_EDITS", raising=False)
    monkeypatch.delenv("OUTLINE_DEBUG_MODULES", raising=False)
    names = ["", "outline_toolkit", "outline_toolkit.core.session", "outline_toolkit.custom"]
    saved = {}
    for name in names:
        logger = logging.getLogger(name)
        saved[name] = (logger.level, list(logger.handlers), logger.propagate)
    yield
    for name, (level, handlers, propagate) in saved.items():
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.setLevel(level)
        logger.handlers[:] = handlers
        logger.propagate = propagate


def test_setup_logging_uses_packaged_config(tmp_path):
    setup_logging()

    package_logger = logging.getLogger("outline_toolkit")
    assert package_logger.level == logging.INFO
    assert package_logger.propagate is False
    file_handlers = [h for h in package_logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename == str(tmp_path / "logs" / "app.log")


def test_debug_edits_override(monkeypatch):
    monkeypatch.setenv("OUTLINE_DEBUG_EDITS", "true")
    setup_logging()
    assert logging.getLogger("outline_toolkit.core.session").level == logging.DEBUG


def test_debug_modules_override(monkeypatch):
    monkeypatch.setenv("OUTLINE_DEBUG_MODULES", "outline_toolkit.custom, ")
    setup_logging()
    logger = logging.getLogger("outline_toolkit.custom")
    assert logger.level == logging.DEBUG
    assert logger.handlers


def test_missing_logging_section_falls_back_to_console(isolated_config):
    (isolated_config / "logging.yml").write_text("version: 0\n", encoding="utf-8")
    ConfigManager.reset()
    setup_logging()
    root = logging.getLogger()
    assert root.level == logging.INFO
    assert any(type(h) is logging.StreamHandler for h in root.handlers)
