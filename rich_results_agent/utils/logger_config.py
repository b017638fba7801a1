import logging
import os
from pathlib import Path
from typing import Optional

from pythonjsonlogger.json import JsonFormatter


class CustomFormatter(logging.Formatter):
    """Custom formatter for colored console logs."""

    grey = "\x1b[38;20m"
    blue = "\x1b[34;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"
    format_str = "[%(asctime)s] %(levelname)s {%(filename)s:%(lineno)d} - %(message)s"

    FORMATS = {
        logging.DEBUG: grey + format_str + reset,
        logging.INFO: blue + format_str + reset,
        logging.WARNING: yellow + format_str + reset,
        logging.ERROR: red + format_str + reset,
        logging.CRITICAL: bold_red + format_str + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


def configure_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    fmt: Optional[str] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: The log level; defaults to the LOG_LEVEL env variable, then INFO
        log_file: Optional file path to write logs to
        fmt: "text" or "json"; defaults to the LOG_MESSAGES_FORMAT env variable
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_format = (fmt or os.getenv("LOG_MESSAGES_FORMAT", "text")).lower()

    logger = logging.getLogger()

    # Remove all handlers to avoid duplicate logging
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    logger.setLevel(level)

    console_handler = logging.StreamHandler()

    if log_format == "json":
        formatter = JsonFormatter(
            fmt='%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        formatter = CustomFormatter()

    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s {%(filename)s:%(lineno)d} - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Configure third-party loggers
    for lib_logger_name in ["asyncio", "playwright", "urllib3"]:
        logging.getLogger(lib_logger_name).setLevel(logging.WARNING)


def set_log_level(level: str) -> None:
    """
    Set the log level for the logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    configure_logger(level)
