"""Logger setup for the ``batchgen`` logger tree.

Every module logs through ``get_logger(__name__)``; the tree is configured
once by ``setup_logging`` from ``batchgen.main``.  Worker threads of the copy
orchestrator log through the same handlers, so each line carries the
thread name as well.
"""

import logging
import sys

from batchgen.core.logging_config import DATE_FORMAT, LOG_FORMAT

ROOT_LOGGER = "batchgen"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure and return the ``batchgen`` logger.

    Calling it again only changes the level; the stdout handler is
    attached once.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    # Lines stop here; the root handler never sees them
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger under ``batchgen``.

    Module names inside the package (``batchgen.services...``) are used
    as-is; anything else is nested below ``batchgen.``.
    """
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
