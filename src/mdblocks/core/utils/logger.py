"""Namespaced logging helpers.

Every module logs through ``get_logger(__name__)`` so that all output sits
under the ``mdblocks`` logger and can be tuned from one place:

    >>> from mdblocks.core.utils.logger import get_logger
    >>> get_logger("scanner").name
    'mdblocks.scanner'
"""

import logging


ROOT_LOGGER = "mdblocks"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a stdlib logger with the ``mdblocks.`` prefix enforced."""
    if not (name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}.")):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(level: str = "WARNING") -> None:
    """Attach a stderr handler to the package logger (idempotent)."""
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
