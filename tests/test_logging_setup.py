import logging
import logging.handlers
import queue

import pytest

from fractalmarch.util.logging_setup import (
    configure_root_logging,
    configure_worker_logging,
    get_logger,
    logging_initialiser,
    parse_level,
    start_queue_listener,
)


@pytest.fixture
def package_logger():
    logger = get_logger()
    yield logger
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()


def test_parse_level():
    assert parse_level("debug") == logging.DEBUG
    assert parse_level("WARNING") == logging.WARNING
    assert parse_level("nonsense") == logging.INFO
    assert parse_level(None, default=logging.ERROR) == logging.ERROR


def test_root_logging_replaces_handlers(package_logger, tmp_path):
    configure_root_logging(level=logging.DEBUG, console=True, log_file=None)
    logger = configure_root_logging(level=logging.WARNING, console=True, log_file=str(tmp_path / "r.log"))
    kinds = sorted(type(h).__name__ for h in logger.handlers)
    assert kinds == ["RotatingFileHandler", "StreamHandler"]
    assert all(h.level == logging.WARNING for h in logger.handlers)
    assert logger.level == logging.WARNING
    assert logger.propagate is False


def test_initialiser_without_queue_keeps_handlers(package_logger):
    logger = configure_root_logging(level=logging.INFO, console=True)
    before = list(logger.handlers)
    logging_initialiser(None, logging.DEBUG)
    assert logger.handlers == before
    assert logger.level == logging.INFO


def test_worker_records_reach_listener_handlers(package_logger):
    sink = logging.getLogger("fractalmarch-listener-sink")
    buffered = logging.handlers.BufferingHandler(capacity=100)
    sink.addHandler(buffered)
    q = queue.Queue()
    listener = start_queue_listener(q, sink)
    try:
        logger = configure_worker_logging(q, level=logging.INFO)
        assert [type(h) for h in logger.handlers] == [logging.handlers.QueueHandler]
        logger.info("[Frame %s] band done", "007")
        logger.debug("hidden")
    finally:
        listener.stop()
        sink.removeHandler(buffered)
    messages = [r.getMessage() for r in buffered.buffer]
    assert messages == ["[Frame 007] band done"]
