"""Logging configuration for the estateledger CLI and embedding services.

Level comes from the caller, else ESTATELEDGER_LOG_LEVEL, else LOG_LEVEL.
Default: WARNING, so CLI output stays clean unless asked for more.
"""

import logging
import os
import sys
from typing import Optional

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_level(level: Optional[str] = None) -> int:
    """Resolve a logging level name.

    Args:
        level: Explicit level name; environment variables are used when None

    Returns:
        Logging level constant (default: WARNING)
    """
    if level is None:
        level = os.getenv("ESTATELEDGER_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "WARNING"
    return LOG_LEVEL_MAP.get(level.upper(), logging.WARNING)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger to write to stderr.

    Calling it again only adjusts the level and rebinds the existing
    handler to the current stderr; handlers are not duplicated.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(get_log_level(level))

    for handler in root_logger.handlers:
        if getattr(handler, "_estateledger", False):
            handler.setStream(sys.stderr)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._estateledger = True
    root_logger.addHandler(handler)

    # SQLAlchemy engine logging is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
