"""Logging helpers for the explain diagnostics service."""

from __future__ import annotations

import logging

_ROOT = "slowq_explain"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under ``slowq_explain``."""

    logger = logging.getLogger(f"{_ROOT}.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger
