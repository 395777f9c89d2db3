"""Per-instance loggers for cached_request.

Each :class:`~cached_request.client.CacheClient` logs through a stdlib
:class:`logging.Logger` named after the instance identifier supplied by
the application (``cached_request.client.<instance_id>``), so the output
of several clients in one process can be told apart without any shared
counter.

Library code never installs handlers.  The command-line front end calls
:func:`configure_logging` once to route records through a
:class:`rich.logging.RichHandler` on stderr.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

CLIENT_LOGGER_NAME = "cached_request.client"

# Above CRITICAL so nothing is ever emitted.
_LEVEL_OFF = logging.CRITICAL + 10

_LEVELS = {
    "OFF": _LEVEL_OFF,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def level_from_name(name: str) -> int:
    """Map a configured level name (``OFF``, ``INFO``, ``WARN``, ...) to a logging level."""
    return _LEVELS.get(name.upper(), _LEVEL_OFF)


def get_client_logger(instance_id: Optional[str], level: str = "OFF") -> logging.Logger:
    """Return the logger for a client instance with its level applied.

    Args:
        instance_id: Application-supplied identifier.  ``None`` selects the
            shared ``cached_request.client`` logger.
        level: Configured level name.  ``OFF`` silences the logger.

    Returns:
        The configured :class:`logging.Logger`.

    The shared logger serves every client built without an identifier, so
    its level is only ever lowered: a later ``OFF`` client must not silence
    an earlier ``INFO`` one.  Each client still filters its own records
    against its configured level before emitting.
    """
    numeric = level_from_name(level)
    if not instance_id:
        logger = logging.getLogger(CLIENT_LOGGER_NAME)
        if logger.level == logging.NOTSET or numeric < logger.level:
            logger.setLevel(numeric)
        return logger
    logger = logging.getLogger(f"{CLIENT_LOGGER_NAME}.{instance_id}")
    logger.setLevel(numeric)
    return logger


def configure_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Install a Rich stderr handler on the package logger.

    Called once by the CLI.  Safe to call repeatedly; an existing Rich
    handler is replaced rather than duplicated.

    Args:
        verbose: Show DEBUG records from the package logger.
        no_color: Disable colour in the handler's console.
    """
    root = logging.getLogger("cached_request")
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
