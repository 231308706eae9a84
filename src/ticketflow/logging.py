"""Centralized logging configuration for ticketflow.

Provides rotating file logs with consistent formatting across the engine,
the store, the HTTP surface and the CLI.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Default configuration
DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "ticketflow.log"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_BACKUP_COUNT = 3
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Set up the ``ticketflow`` logger with a rotating file handler.

    Args:
        log_dir: Directory for log files. Defaults to 'logs', or the
                 TICKETFLOW_LOG_DIR environment variable when set.
        log_file: Log file name. Defaults to 'ticketflow.log'.
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of rotated files to keep.
        level: Log level name. Defaults to INFO, or TICKETFLOW_LOG_LEVEL.
        console: Whether to also log to stderr.

    Returns:
        The root ticketflow logger.
    """
    if log_dir is None:
        log_dir = os.environ.get("TICKETFLOW_LOG_DIR", DEFAULT_LOG_DIR)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    if level is None:
        level = os.environ.get("TICKETFLOW_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("ticketflow")
    logger.setLevel(log_level)

    # Re-running setup must not stack handlers
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path = log_dir / log_file
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.info("ticketflow logging initialized (level=%s, file=%s)", level, log_path)

    return logger


def truncate_output(output: str, max_length: int = 500) -> str:
    """Truncate long text (ticket bodies, HTTP payloads) for logging."""
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"\n... [truncated, {len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Remove credentials from text before it is logged.

    Args:
        text: Text that may contain tokens (e.g. an HTTP error body).

    Returns:
        Sanitized text safe for logging.
    """
    patterns = [
        (r"ghp_[a-zA-Z0-9]{36}", "[GITHUB_TOKEN]"),  # GitHub PAT
        (r"gho_[a-zA-Z0-9]{36}", "[GITHUB_TOKEN]"),  # GitHub OAuth
        (r"github_pat_[a-zA-Z0-9_]{82}", "[GITHUB_TOKEN]"),  # Fine-grained PAT
        (r"Bearer [a-zA-Z0-9._-]+", "Bearer [REDACTED]"),
        (r"token=[a-zA-Z0-9._-]+", "token=[REDACTED]"),
        (r"(postgres(?:ql)?(?:\+\w+)?://[^:/@\s]+:)[^@\s]+@", r"\1[REDACTED]@"),
    ]

    result = text
    for pat, replacement in patterns:
        result = re.sub(pat, replacement, result)

    return result
