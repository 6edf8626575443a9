#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/logging_utils.py
"""Logging setup for the latextree command line.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
parser reports recovered malformations (unclosed groups, stray braces,
unterminated raw environments) at DEBUG level. Entry points call
``configure_logging`` once to decide where those records go.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from latextree.constants import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV_VAR
from latextree.exceptions import ValidationError

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_log_level() -> str:
    """Return the log level named by ``LATEXTREE_LOG_LEVEL`` or the default."""
    return os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()


def resolve_log_level(log_level: int | str) -> int:
    """Turn a level name such as ``"info"`` into its numeric value.

    Raises
    ------
    ValidationError
        If ``log_level`` is not one of the standard level names

    """
    if isinstance(log_level, int):
        return log_level
    name = str(log_level).strip().upper()
    if name not in _LEVEL_NAMES:
        raise ValidationError(
            f"Unknown log level {log_level!r}; expected one of {', '.join(_LEVEL_NAMES)}",
            parameter_name="log_level",
            parameter_value=log_level,
        )
    return getattr(logging, name)


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Route log records to standard error and, optionally, a file.

    Any handlers already on the root logger are replaced, so calling this
    twice does not duplicate output.

    Parameters
    ----------
    log_level : int | str
        Numeric level or level name
    log_file : str, optional
        File that receives a copy of every record; a file that cannot be
        opened is reported as a warning and skipped
    trace_mode : bool, default False
        Prefix records with timestamps and logger names

    Returns
    -------
    logging.Logger
        The root logger

    """
    level = resolve_log_level(log_level)
    formatter = (
        logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT) if trace_mode else logging.Formatter(CONSOLE_FORMAT)
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    _attach(root_logger, logging.StreamHandler(sys.stderr), level, formatter)

    if not log_file:
        return root_logger
    try:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    except OSError as exc:
        root_logger.warning("Could not open log file %s: %s", log_file, exc)
        return root_logger
    _attach(root_logger, file_handler, level, formatter)
    root_logger.debug("Copying log output to %s", log_file)
    return root_logger
