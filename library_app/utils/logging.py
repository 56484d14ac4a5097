"""Logger factory for the library package.

Every module asks for ``get_logger("<component>")``. The level comes from
``LIBRARY_LOG_LEVEL``; each named logger gets exactly one stream handler and
does not propagate, so records print once however often a module is imported.
"""
from __future__ import annotations

import logging
import threading

from library_app import config as app_config

_FORMAT = "[library] %(asctime)s %(levelname)s %(name)s %(message)s"
_CONFIGURED: set = set()
_LOCK = threading.Lock()


def get_logger(name: str = "library") -> logging.Logger:
    logger = logging.getLogger(name)
    if name in _CONFIGURED:
        return logger
    with _LOCK:
        if name not in _CONFIGURED:
            logger.setLevel(getattr(logging, app_config.log_level_name(), logging.INFO))
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(handler)
            logger.propagate = False
            _CONFIGURED.add(name)
    return logger


__all__ = ["get_logger"]
