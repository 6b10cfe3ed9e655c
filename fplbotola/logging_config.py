"""Logging setup for the fantasy backend."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "fplbotola"


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Path | None = None,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Configure the package logger.

    Console output is short (level + message); the optional file handler
    gets timestamps and source locations. Calling again replaces handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = []

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    simple_formatter = logging.Formatter("%(levelname)s: %(name)s: %(message)s")

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Logger under the package hierarchy; works before setup_logging() too."""
    return logging.getLogger(name)
