"""
Centralized logging configuration for priv8

Secret plaintext, passphrases and tokens must never reach a log record.
Secret ids are fine to log.
"""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional


# Log format configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Default log directory
LOG_DIR = Path(os.getenv("PRIV8_LOG_DIR") or Path(__file__).parent.parent.parent / "logs")


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance; handlers are attached to the root logger by
        configure_app_logging()
    """
    return logging.getLogger(name)


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    resolved = logging.getLevelName(os.getenv("PRIV8_LOG_LEVEL", "INFO").upper())
    # getLevelName returns "Level X" for unknown names
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_app_logging(
    level: Optional[int] = None,
    log_to_file: Optional[bool] = None,
    log_file: str = "priv8.log",
) -> None:
    """
    Configure application-wide logging settings.

    This should be called once at application startup.

    Args:
        level: Root logging level (default: PRIV8_LOG_LEVEL or INFO)
        log_to_file: Whether to enable file logging (default: PRIV8_LOG_TO_FILE or True)
        log_file: Log file name (default: "priv8.log")
    """
    level = _resolve_level(level)
    if log_to_file is None:
        log_to_file = os.getenv("PRIV8_LOG_TO_FILE", "true").lower() == "true"

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (optional)
    if log_to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_path = LOG_DIR / log_file
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
