"""Logging configuration and utilities for py_fdc library.

The module exposes a pre-configured logger shared by every fire direction component
and two helpers that attach or detach a DEBUG-level file handler. By default only
console logging is enabled, at INFO level.

Global Variables:
    - logger: Pre-configured logger instance for the library.
    - file_handler: Global file handler reference (None when file logging disabled).
    - FILE_LOG_FORMAT: Default record format for the log file.

Functions:
    enable_file_logging: Enable logging to a file, DEBUG level by default.
    disable_file_logging: Disable file logging and clean up resources.

Examples:
    ```python
    import logging
    from py_fdc.logger import logger, enable_file_logging, disable_file_logging

    enable_file_logging("fire_mission.log", level=logging.INFO)
    logger.info("Fire mission started")
    disable_file_logging()
    ```
"""
import logging
from typing import Optional

__all__ = ('logger',
           'FILE_LOG_FORMAT',
           'enable_file_logging',
           'disable_file_logging',
)

formatter = logging.Formatter("%(levelname)s:%(name)s:%(message)s")
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
console_handler.setLevel(logging.DEBUG)  # Lowest level for console

logger: logging.Logger = logging.getLogger('py_fdc')
logger.addHandler(console_handler)
logger.setLevel(logging.INFO)

# File handler (optional, added dynamically)
file_handler: Optional[logging.FileHandler] = None

FILE_LOG_FORMAT = "%(asctime)s:%(levelname)s:%(name)s:%(message)s"


def enable_file_logging(filename: str = "pyfdc.log", level: int = logging.DEBUG,
                        fmt: str = FILE_LOG_FORMAT) -> None:
    """Write library records to a file, e.g. to keep a record of fire missions.

    Any previously enabled file handler is removed first. The file is opened
    in append mode. Records below the logger's own level never reach the file; set
    the logger to DEBUG as well for DEBUG output.

    Args:
        filename: Log file path. Defaults to "pyfdc.log".
        level: Lowest level written to the file. Defaults to DEBUG.
        fmt: `logging.Formatter` format string for file records.
    """
    global file_handler
    if file_handler is not None:
        disable_file_logging()

    file_handler = logging.FileHandler(filename, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(file_handler)


def disable_file_logging() -> None:
    """Detach and close the file handler. Does nothing when file logging is off."""
    global file_handler
    if file_handler is not None:
        logger.removeHandler(file_handler)
        file_handler.close()
        file_handler = None
