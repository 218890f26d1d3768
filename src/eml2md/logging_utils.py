#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/logging_utils.py
"""Logging setup for the eml2md command line and watch mode.

Library modules only create module loggers; handlers are installed here,
once, by the entry point.
"""

from __future__ import annotations

import logging
import sys

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(log_level: int | str) -> int:
    if isinstance(log_level, int):
        return log_level
    return getattr(logging, log_level.upper(), logging.INFO)


def configure_logging(
    log_level: int | str,
    log_file: str | None = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Install stderr (and optionally file) handlers on the root logger.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    Parameters
    ----------
    log_level : int | str
        Numeric level or level name such as ``"INFO"``
    log_file : str, optional
        File that receives a copy of every record, opened in append mode
    trace_mode : bool, default False
        Prefix records with a timestamp and the logger name

    Returns
    -------
    logging.Logger
        The root logger

    """
    level = _resolve_level(log_level)
    if trace_mode:
        formatter = logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT)
    else:
        formatter = logging.Formatter(CONSOLE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        except OSError as exc:
            # Reported once the console handler is installed
            log_file_error: OSError | None = exc
        else:
            log_file_error = None
    else:
        log_file_error = None

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    if log_file_error is not None:
        root_logger.warning(f"Could not open log file {log_file}: {log_file_error}")
    elif log_file:
        root_logger.debug(f"Logging to file: {log_file}")

    return root_logger
