"""Logging setup for the CLI and for host applications.

Library modules only create ``logging.getLogger(__name__)`` loggers under the
``azure_moderator`` namespace; handlers are attached here, on that namespace,
so the root logger of a host application is left alone.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

LOGGER_NAME = "azure_moderator"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_HANDLER_NAME = "azure_moderator.console"


def configure_logging(level: int = logging.INFO, rich_output: bool = True) -> logging.Logger:
    """Attach a console handler to the package logger and set its level.

    Parameters
    ----------
    level : int
        Level for the ``azure_moderator`` logger.
    rich_output : bool
        Render records with :class:`rich.logging.RichHandler` (stderr).  When
        *False* a plain stream handler with :data:`LOG_FORMAT` is used.

    Calling this again replaces the handler it installed earlier instead of
    stacking a second one.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    if rich_output:
        handler: logging.Handler = RichHandler(show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.set_name(_HANDLER_NAME)
    logger.addHandler(handler)
    return logger
