"""
Logging setup for applications embedding the engine.
"""

import logging
from typing import Optional, Union

from .constants import LOG_DATE_FORMAT, LOG_FORMAT


def configure_logging(
    level: Union[int, str] = logging.INFO,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """
    Attach a formatted handler to the ``gaforge`` logger.

    Calling it again replaces the handler installed by the previous call
    instead of stacking another one.

    Args:
        level: Logging level for the package logger
        handler: Handler to install (defaults to a stderr StreamHandler)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("gaforge")
    logger.setLevel(level)

    for existing in list(logger.handlers):
        if getattr(existing, "_gaforge_handler", False):
            logger.removeHandler(existing)

    handler = handler or logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    handler._gaforge_handler = True
    logger.addHandler(handler)
    return logger
