import logging
import logging.handlers
import multiprocessing as mp
from typing import List, Optional

_LOGGER_NAME = "fractalmarch"
_FORMAT = "%(asctime)s.%(msecs)03dZ %(processName)s %(levelname)s %(name)s - %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)


def parse_level(name: Optional[str], default: int = logging.INFO) -> int:
    """``"debug"`` -> ``logging.DEBUG``; unknown or empty names give ``default``."""
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else default


def _install(level: int, handlers: List[logging.Handler]) -> logging.Logger:
    """Replace the package logger's handlers with ``handlers``, all at ``level``.

    The package logger never propagates, so records are emitted once whether
    they come from the main process or arrive through the queue listener.
    """
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    for h in handlers:
        h.setLevel(level)
        logger.addHandler(h)
    return logger


def configure_root_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = None,
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> logging.Logger:
    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
        ))
    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)
    for h in handlers:
        h.setFormatter(fmt)
    return _install(level, handlers)


def create_log_queue() -> mp.Queue:
    return mp.Queue(-1)


def start_queue_listener(queue: mp.Queue, listener_logger: logging.Logger) -> logging.handlers.QueueListener:
    listener = logging.handlers.QueueListener(queue, *listener_logger.handlers, respect_handler_level=True)
    listener.start()
    return listener


def configure_worker_logging(queue: mp.Queue, *, level: int = logging.INFO) -> logging.Logger:
    # formatting happens in the listener's handlers
    return _install(level, [logging.handlers.QueueHandler(queue)])


def logging_initialiser(queue: Optional[mp.Queue], level: int) -> None:
    """Process-pool initialiser for band and frame workers.

    In-process rendering passes no queue and keeps the logging already set up.
    """
    if queue is not None:
        configure_worker_logging(queue, level=level)
