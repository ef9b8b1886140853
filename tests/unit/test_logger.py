import logging

import pytest

from blobdav.utils.logger import LOGGER_NAME, setup_logging


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_console_only() -> None:
    logger = setup_logging("debug")

    assert logger.name == "blobdav"
    assert logger.level == logging.DEBUG
    assert not logger.propagate
    assert len(logger.handlers) == 1


def test_repeated_setup_replaces_handlers() -> None:
    setup_logging("INFO")
    logger = setup_logging("WARNING")

    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_unknown_level_falls_back_to_info() -> None:
    assert setup_logging("chatty").level == logging.INFO


def test_file_logging(tmp_path) -> None:
    log_file = tmp_path / "blobdav.log"
    logger = setup_logging("INFO", str(log_file))
    logging.getLogger("blobdav.webdav.server").info("PUT /zotero/a.zip -> 201")

    for handler in logger.handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "File logging enabled" in content
    assert "blobdav.webdav.server - INFO - PUT /zotero/a.zip -> 201" in content
