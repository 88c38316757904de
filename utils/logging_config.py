"""
Central logging setup for the API and the helper scripts.
Named loggers live under ``service_desk.*`` and propagate to a single stdout handler.
"""
from __future__ import annotations

import logging
import sys
from typing import Iterable

LOGGER_NAMES = (
    "service_desk.api",
    "service_desk.attachments",
    "service_desk.storage",
    "service_desk.lifecycle",
    "service_desk.reviews",
    "service_desk.price_import",
)


def setup_logging(level: int | str = logging.INFO, extra_loggers: Iterable[str] | None = None) -> None:
    """
    Configure the root logger with one stdout handler.

    Format: [2025-01-01 10:00:00] [INFO] [service_desk.api:handler:42] message
    Safe to call more than once: existing root handlers are replaced.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(
        fmt="[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)

    for name in [*LOGGER_NAMES, *(extra_loggers or ())]:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.propagate = True


__all__ = ["setup_logging"]
