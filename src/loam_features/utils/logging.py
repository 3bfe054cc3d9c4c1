"""Logging helpers.

All modules obtain their logger through :func:`get_logger` so that the
extractor, the scan line segmenter and the diagnostic writers share one
message format.  The default level can be overridden with the
``LOAM_FEATURES_LOG_LEVEL`` environment variable.
"""

import logging
import os

LOG_LEVEL_ENV = "LOAM_FEATURES_LOG_LEVEL"
LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _default_level() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Return a logger with the package's stream handler attached once."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_default_level())
    return logger
