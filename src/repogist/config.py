"""
Module Description:
Defines the central configuration dictionary (CONFIG) for repogist.
Loads settings from environment variables using python-dotenv for the HTTP
server, the temporary workspace location, archive download limits and logging.

Links:
- python-dotenv: https://github.com/theskumar/python-dotenv
- os module: https://docs.python.org/3/library/os.html

Sample Input/Output:

- Accessing config values:
  from repogist.config import CONFIG
  timeout = CONFIG["server"]["request_timeout_seconds"]
  prefix = CONFIG["workspace"]["prefix"]

- Running validation:
  python -m repogist.config
  (Prints validation status and exits with 0 or 1)
"""
import os
import sys
import tempfile
from typing import Any, Dict, List

from dotenv import load_dotenv
from loguru import logger

from repogist.core.constants import (
    ARCHIVE_PREFIX,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    MAX_DOWNLOAD_BYTES,
    MIN_FREE_BYTES,
    STALE_WORKSPACE_HOURS,
    USER_AGENT,
    WORKSPACE_PREFIX,
)

# Load environment variables
load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


CONFIG: Dict[str, Dict[str, Any]] = {
    "server": {
        "host": os.getenv("REPOGIST_HOST", "0.0.0.0"),
        "port": int(os.getenv("PORT", "3000")),
        "cors_origins": _split_csv(os.getenv("REPOGIST_CORS_ORIGINS", "*")),
        "request_timeout_seconds": float(
            os.getenv("REPOGIST_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT_SECONDS))
        ),
        "environment": os.getenv("NODE_ENV", os.getenv("REPOGIST_ENV", "development")),
    },
    "workspace": {
        "root": os.getenv("REPOGIST_TEMP_ROOT", tempfile.gettempdir()),
        "prefix": os.getenv("REPOGIST_WORKSPACE_PREFIX", WORKSPACE_PREFIX),
        "archive_prefix": os.getenv("REPOGIST_ARCHIVE_PREFIX", ARCHIVE_PREFIX),
        "min_free_bytes": int(os.getenv("REPOGIST_MIN_FREE_BYTES", str(MIN_FREE_BYTES))),
        "max_age_hours": float(os.getenv("REPOGIST_MAX_AGE_HOURS", str(STALE_WORKSPACE_HOURS))),
    },
    "fetch": {
        "max_download_bytes": int(os.getenv("REPOGIST_MAX_DOWNLOAD_BYTES", str(MAX_DOWNLOAD_BYTES))),
        "chunk_size": int(os.getenv("REPOGIST_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
        "timeout_seconds": float(os.getenv("REPOGIST_FETCH_TIMEOUT", "60")),
        "user_agent": os.getenv("REPOGIST_USER_AGENT", USER_AGENT),
        "metadata_retries": int(os.getenv("REPOGIST_METADATA_RETRIES", "3")),
    },
    "logging": {
        "level": os.getenv("LOG_LEVEL", "INFO").upper(),
    },
}


def validate_config() -> List[str]:
    """Return a list of human-readable problems with the loaded CONFIG."""
    problems = []
    if CONFIG["server"]["request_timeout_seconds"] <= 0:
        problems.append("REPOGIST_REQUEST_TIMEOUT must be positive")
    if not (0 < CONFIG["server"]["port"] < 65536):
        problems.append(f"PORT out of range: {CONFIG['server']['port']}")
    if not CONFIG["workspace"]["prefix"]:
        problems.append("REPOGIST_WORKSPACE_PREFIX must not be empty")
    if not CONFIG["workspace"]["archive_prefix"]:
        problems.append("REPOGIST_ARCHIVE_PREFIX must not be empty")
    if CONFIG["fetch"]["chunk_size"] <= 0:
        problems.append("REPOGIST_CHUNK_SIZE must be positive")
    if CONFIG["fetch"]["metadata_retries"] < 1:
        problems.append("REPOGIST_METADATA_RETRIES must be at least 1")
    return problems


if __name__ == "__main__":
    issues = validate_config()
    if issues:
        for issue in issues:
            logger.error(issue)
        sys.exit(1)
    logger.info("Configuration is valid")
    sys.exit(0)
