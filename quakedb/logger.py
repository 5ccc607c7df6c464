import logging
import os

LOGGER_NAME = "quakedb"

logger = logging.getLogger(LOGGER_NAME)

if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("[%(name)s] %(levelname)s: %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

logger.setLevel(logging.DEBUG if os.environ.get("QUAKEDB_DEBUG") else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, e.g. ``quakedb.storage``."""
    return logger.getChild(name)


def set_debug(enabled: bool) -> None:
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)
