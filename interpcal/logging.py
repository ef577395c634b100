"""Package loggers for interpcal.

Every module logs through a child of the ``interpcal`` logger, so callers
can tune interpolation diagnostics and calibration progress from one place.
Nothing is emitted until :func:`configure_logging` (or the application's own
logging setup) attaches a handler.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

ROOT_LOGGER_NAME = "interpcal"
_NULL_HANDLER = logging.NullHandler()


def _qualified(name: str) -> str:
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Return the package logger for ``name``.

    Args:
        name: Either a full dotted name below ``interpcal`` (usually the
            module's ``__name__``) or a short component such as
            ``"volatility.xabr"``, which is placed under ``interpcal``.

    Returns:
        The :class:`logging.Logger`, carrying a single ``NullHandler``.
    """

    logger = logging.getLogger(_qualified(name))
    if not any(isinstance(handler, logging.NullHandler) for handler in logger.handlers):
        logger.addHandler(_NULL_HANDLER)
    return logger


def configure_logging(
    level: int = logging.INFO,
    *,
    handlers: Optional[Iterable[logging.Handler]] = None,
    format_string: str | None = None,
) -> logging.Logger:
    """Route interpcal diagnostics to ``handlers`` at ``level``.

    Calibration start and finish are logged at INFO, each restart of a smile
    fit and each linear solve at DEBUG.

    Args:
        level: Level applied to the ``interpcal`` logger.
        handlers: Handlers to attach, e.g. a ``StreamHandler``. A handler
            already attached is not added twice.
        format_string: Optional format applied to each supplied handler.

    Returns:
        The ``interpcal`` logger.
    """

    logger = get_logger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    for handler in handlers or ():
        if format_string:
            handler.setFormatter(logging.Formatter(format_string))
        if handler not in logger.handlers:
            logger.addHandler(handler)
    return logger


__all__ = ["ROOT_LOGGER_NAME", "configure_logging", "get_logger"]
