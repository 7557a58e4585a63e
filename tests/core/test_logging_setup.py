import logging

import pytest

from relay_service.core.logging import configure_logging, logger


@pytest.fixture(autouse=True)
def restore_logger():
    level = logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)


def test_file_handler_and_level(tmp_path):
    path = tmp_path / "relay.log"
    configure_logging({"logging": {"level": "debug", "path": str(path)}})
    assert logger.level == logging.DEBUG
    logger.debug("written to file")
    for handler in logger.handlers:
        handler.flush()
    assert "written to file" in path.read_text(encoding="utf-8")


def test_reconfigure_replaces_handlers():
    configure_logging({"logging": {"level": "INFO"}})
    configure_logging({"logging": {"level": "WARNING"}})
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_level_defaults_to_info():
    configure_logging({})
    assert logger.level == logging.INFO
