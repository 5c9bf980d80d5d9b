"""
Logging setup.

All modules obtain loggers through ``setup_logger(__name__)`` so that format
and level are configured in one place.
"""

import logging
import sys

from hsd_chat.core.config import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once. Existing handlers are left alone."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return
    logging.basicConfig(
        level=(level or get_settings().LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        stream=sys.stdout,
    )


def setup_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring logging on first use."""
    configure_logging()
    return logging.getLogger(name)
