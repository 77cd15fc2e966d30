"""Logger setup shared by the package."""

from __future__ import annotations

import logging

LOGGER_NAME = "sudoku_workers"
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return the package logger, or a child of it when `name` is given.

    The first call attaches a StreamHandler at INFO level to the package
    logger if nothing has configured it yet.
    """
    root = logging.getLogger(LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)

    if not name:
        return root
    if name.startswith(LOGGER_NAME + "."):
        name = name[len(LOGGER_NAME) + 1:]
    return root.getChild(name)


def set_level(level: int | str) -> None:
    """Change the package log level (accepts 'DEBUG', 'info', 10, ...)."""
    if isinstance(level, str):
        level = level.upper()
    get_logger().setLevel(level)
