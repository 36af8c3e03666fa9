"""Logging helpers shared by the registry modules and the CLI."""

import logging
from logging import Handler
from pathlib import Path
from typing import Union


def configure_logging(level: Union[int, str] = logging.INFO, log_to_file: bool = False, log_dir: str = "logs") -> None:
    """
    Attach stream (and optionally file) handlers to the root logger so the
    DEBUG lifecycle records of the registry modules become visible.

    *level* may be a name such as ``"debug"``; unknown names fall back to
    WARNING. ``log_to_file`` also writes to ``<log_dir>/app.log``.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    handlers: list[Handler] = [logging.StreamHandler()]
    if log_to_file:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(Path(log_dir) / "app.log"), encoding="utf-8")
        handlers.append(file_handler)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
    )


def get_logger(name: str = "") -> logging.Logger:
    """Return the named logger, e.g. ``get_logger("singleton_registry.registry")``."""
    return logging.getLogger(name)
