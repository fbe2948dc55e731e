"""Root logger setup."""

import io
import logging

import pytest

from snippet_card.utils import get_logger, setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    for name in ("urllib3", "PIL"):
        logging.getLogger(name).setLevel(logging.NOTSET)


def test_records_use_pipe_format(root_logger):
    stream = io.StringIO()
    setup_logging("INFO", stream=stream)

    get_logger("snippet_card.test").info("fetched page")

    line = stream.getvalue().strip()
    assert line.endswith("| INFO     | snippet_card.test | fetched page")


def test_repeat_calls_keep_one_handler(root_logger):
    setup_logging("INFO", stream=io.StringIO())
    handler = setup_logging("DEBUG", stream=io.StringIO())

    assert root_logger.handlers == [handler]
    assert root_logger.level == logging.DEBUG


def test_unknown_level_falls_back_to_info(root_logger):
    setup_logging("chatty", stream=io.StringIO())
    assert root_logger.level == logging.INFO


def test_noisy_libraries_quieted_unless_debugging(root_logger):
    setup_logging("INFO", stream=io.StringIO())
    assert logging.getLogger("urllib3").level == logging.WARNING

    setup_logging("DEBUG", stream=io.StringIO())
    assert logging.getLogger("PIL").level == logging.DEBUG


def test_defaults_to_stderr(root_logger, capsys):
    setup_logging("INFO")
    get_logger("snippet_card.test").warning("to stderr")

    captured = capsys.readouterr()
    assert "to stderr" in captured.err
    assert captured.out == ""
