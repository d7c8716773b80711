"""Logging setup."""

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure logging for the client and its command line.

    Args:
        level: Logging level name; falls back to BOT_DETECTOR_LOG_LEVEL, then INFO
        log_file: Optional file path to also write logs to
    """
    level_name = (level or os.environ.get("BOT_DETECTOR_LOG_LEVEL", "INFO")).upper()
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=_DEFAULT_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True,
    )
