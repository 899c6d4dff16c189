"""
Loguru sink configuration shared by the CLI, the MCP server and the HTTP API.

Sample input:
    configure_logging("DEBUG", log_file="logs/repogist_api.log")

Expected output:
    Colourised records on stderr plus a rotating file under logs/
"""

import os
import sys
from typing import Optional

from loguru import logger

LOG_DIR = "logs"


def ensure_log_directory(log_dir: str = LOG_DIR) -> None:
    os.makedirs(log_dir, exist_ok=True)


def configure_logging(level: str = "INFO", log_file: Optional[str] = "logs/repogist.log") -> None:
    """
    Configure logging with proper format and level.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Rotating log file path, or None to log to stderr only
    """
    logger.remove()

    if log_file:
        ensure_log_directory(os.path.dirname(log_file) or ".")
        logger.add(
            log_file,
            rotation="10 MB",
            retention="1 week",
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        )

    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | {message}",
        level=level,
        colorize=True,
    )
