"""Stdout logging for the catalog API, level taken from LOG_LEVEL."""

import logging
import sys

from config import LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


def get_logger(name: str) -> logging.Logger:
    global _configured
    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root = logging.getLogger()
        root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
        root.addHandler(handler)
        _configured = True
    return logging.getLogger(name)
