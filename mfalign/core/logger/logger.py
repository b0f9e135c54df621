# logger/logger.py
import logging
import sys
from pathlib import Path

from rich.logging import RichHandler

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(
    name: str = "mfalign",
    level: str = "INFO",
    log_file: str | None = None,
    log_format: str = DEFAULT_FORMAT,
    rich: bool = False,
) -> logging.Logger:
    """
    Create and configure a logger instance

    Child loggers created with ``logging.getLogger(__name__)`` inside the
    package propagate to the ``mfalign`` logger, so configuring it once is
    enough for the whole library.

    Args:
        name: Logger name (usually "mfalign" or __name__)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs
        log_format: Log message format for plain and file handlers
        rich: Use a rich console handler instead of a plain stdout stream

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    # Clear existing handlers to prevent duplicates
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    if rich:
        console_handler: logging.Handler = RichHandler(
            rich_tracebacks=True, show_path=False
        )
        console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
