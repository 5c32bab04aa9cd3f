"""
Logging setup shared by the deployment entry points
"""

import os
import sys
from loguru import logger


CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def setup_logging(level: str = None, log_file: str = "data/logs/deploy.log"):
    """
    Configure loguru sinks

    Args:
        level: Console level (default: $LOG_LEVEL or INFO)
        log_file: Debug log file (None = console only)
    """
    level = (level or os.getenv('LOG_LEVEL') or 'INFO').upper()

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="10 MB",
            retention="30 days",
            format=FILE_FORMAT,
            level="DEBUG",
            encoding="utf-8"
        )
