"""
Logging configuration for the HTML Cleaner package.
"""

import logging
import sys
from typing import Optional, Union


def resolve_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """
    Turn a level name ("debug", "WARNING") or number into a logging level.

    Unknown names fall back to ``default`` so a typo in an environment
    variable never stops the cleaner from running.
    """
    if level is None or level == "":
        return default
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else default


def setup_logger(
    name: str = "html_cleaner",
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return a logger instance.

    Args:
        name: Logger name
        level: Logging level (default: INFO); names such as "debug" are accepted
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    level = resolve_level(level)

    # Handlers are installed once; later calls only adjust the level
    # (Cleaner(log_level=...) relies on this to change verbosity at runtime)
    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.setLevel(level)

    # Format: timestamp - module - level - message
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# Default logger instance, created once at import time
logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Child loggers (e.g. "html_cleaner.mutators") inherit the package logger's
    handlers and level, so the stage that produced a message shows up in
    the output without extra config.

    Args:
        module_name: Name of the module (e.g., 'parser', 'mutators')

    Returns:
        Child logger instance
    """
    return logging.getLogger(f"html_cleaner.{module_name}")
