"""Namespaced stdlib loggers for mdreview modules"""

import logging


ROOT_LOGGER = "mdreview"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the 'mdreview.' namespace (e.g. 'lifecycle.reducer' -> 'mdreview.lifecycle.reducer')."""
    if not (name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}.")):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(level: str = "WARNING") -> None:
    """Attach a stderr handler to the root logger at the given level; repeat calls only adjust the level."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(ROOT_LOGGER).setLevel(level)
