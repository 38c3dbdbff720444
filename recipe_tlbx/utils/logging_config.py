"""Logging setup for scripts and notebooks.

The library modules only create loggers with ``logging.getLogger(__name__)``;
handlers are configured here, by the application.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str | int = "INFO",
    fmt: str | None = None,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """Configure the root logger with a console handler (and optionally a file handler).

    Calling it again replaces the previously installed handlers.

    Args:
        level: Logging level name or number.
        fmt: Log format string (defaults to :data:`DEFAULT_FORMAT`).
        log_file: Optional path of a log file; parent directories are created.

    Returns:
        The ``recipe_tlbx`` package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level: {level}")

    formatter = logging.Formatter(fmt or DEFAULT_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, mode="a", encoding="utf-8"))

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # third-party noise
    logging.getLogger("matplotlib").setLevel(logging.WARNING)

    return logging.getLogger("recipe_tlbx")


__all__ = ["DEFAULT_FORMAT", "setup_logging"]
