from __future__ import annotations
import sys

from loguru import logger
from .paths import logs_dir

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level:<8}</level> | {message}"


def configure_logging(console_level: str = "INFO") -> None:
    """App-level sinks: rotating toolbox.log in the user logs folder plus stderr."""
    logger.remove()
    log_path = logs_dir() / "toolbox.log"
    logger.add(str(log_path), level="DEBUG", rotation="5 MB", retention=10, enqueue=True, backtrace=False, diagnose=False)
    logger.add(sys.stderr, level=console_level, format=CONSOLE_FORMAT)
