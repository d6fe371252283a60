"""Root logger setup for the command line entry point."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%H:%M:%S"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for CI logs.

    Library modules only call ``getLogger(__name__)``; handlers are installed
    here and nowhere else. ``force=True`` replaces handlers that an earlier
    call (or a test harness) already installed.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT, force=force)
