"""
Logging configuration for EPMAQuant.

All library loggers live below the ``epmaquant`` package logger.
:func:`setup_logging` attaches a single stream handler to that logger and
leaves the root logger alone, so applications embedding the library keep
their own configuration.
"""

import logging
import sys
from typing import IO, Optional, Union

PACKAGE_LOGGER = "epmaquant"

DEFAULT_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"

# Marks the handler installed by setup_logging
_HANDLER_FLAG = "_epmaquant_handler"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level: {level}")
    return value


def setup_logging(
    level: Union[str, int] = "INFO",
    format_string: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Configure logging for EPMAQuant.

    Calling this again replaces the handler installed by the previous call.

    Parameters
    ----------
    level : str or int
        Logging level: 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL' or a
        numeric level
    format_string : str, optional
        Custom format string. If None, uses default format.
    stream : file-like object, optional
        Stream to write logs to. If None, uses sys.stderr.

    Returns
    -------
    logging.Logger
        The package logger

    Raises
    ------
    ValueError
        If the level name is unknown
    """
    numeric = _resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    setattr(handler, _HANDLER_FLAG, True)
    logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Parameters
    ----------
    name : str
        Dotted module path below the package, e.g. ``"inversion.iteration"``.
        A full ``__name__`` such as ``"epmaquant.inversion.iteration"`` is
        accepted as well.

    Returns
    -------
    logging.Logger
        Logger named ``epmaquant.<name>``
    """
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
