# ========================
# src/order_cleaning/utils/logging_setup.py
# ========================

"""
Logging Configuration

Centralized logging setup for the cleaning pipeline.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(log_level: str = "INFO",
                  log_file: Optional[str] = None,
                  log_dir: str = "logs") -> None:
    """
    Set up logging configuration for the pipeline.

    Args:
        log_level (str): Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file (str): Optional log file name; relative names go under ``log_dir``
        log_dir (str): Directory for log files
    """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, date_format)
    level = getattr(logging, log_level.upper())

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level if not log_file else min(level, logging.DEBUG))

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler; stdout is kept free for the run summary
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        file_path = Path(log_file)
        if not file_path.is_absolute() and file_path.parent == Path('.'):
            file_path = Path(log_dir) / file_path
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(file_path)
        file_handler.setLevel(logging.DEBUG)  # File gets all messages
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        logging.info(f"Logging to file: {file_path}")

    logging.info(f"Logging initialized - Level: {log_level}")
