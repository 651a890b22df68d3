"""
navbench.log - thin facade over the ``navbench`` stdlib logger.

Every level function takes either a message or an exception. Exceptions
are written with their type, an optional context and the full traceback:

    from navbench import log

    log.info("[Harness] Extracted 1234 triangles")
    try:
        build()
    except Exception as e:
        log.error(e, "Build failed")
"""

import logging
import traceback

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

_logger = logging.getLogger("navbench")


def _emit(level: int, msg_or_exc, context: str) -> None:
    if not _logger.isEnabledFor(level):
        return
    if isinstance(msg_or_exc, BaseException):
        text = f"{type(msg_or_exc).__name__}: {msg_or_exc}"
        if context:
            text = f"{context}: {text}"
        tb = traceback.format_exception(type(msg_or_exc), msg_or_exc, msg_or_exc.__traceback__)
        _logger.log(level, "%s\n%s", text, "".join(tb))
    else:
        _logger.log(level, "%s", msg_or_exc)


def debug(msg_or_exc, context: str = ""):
    _emit(logging.DEBUG, msg_or_exc, context)


def info(msg_or_exc, context: str = ""):
    _emit(logging.INFO, msg_or_exc, context)


def warn(msg_or_exc, context: str = ""):
    _emit(logging.WARNING, msg_or_exc, context)


warning = warn


def error(msg_or_exc, context: str = ""):
    _emit(logging.ERROR, msg_or_exc, context)


def set_level(level: int) -> None:
    _logger.setLevel(level)


def setup_logging(verbose: bool = False) -> None:
    """Attach a console handler once and set the level (DEBUG when verbose)."""
    if not _logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _logger.addHandler(handler)
    set_level(logging.DEBUG if verbose else logging.INFO)
