"""
Logging Configuration for Simple Serial Logger.

Provides console and file logging with configurable levels and formats,
plus the record echo used for the live console trace.
"""

import logging
import sys
from typing import Optional

from .sink import Record


# Log format strings
VERBOSE_FORMAT = '%(asctime)s.%(msecs)03d [%(levelname)-8s] %(name)s: %(message)s'
STANDARD_FORMAT = '%(asctime)s [%(levelname)-8s] %(message)s'
SIMPLE_FORMAT = '%(message)s'

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'error': logging.ERROR,
}


def setup_logging(
    level: int = logging.INFO,
    verbose: bool = False,
    log_file: Optional[str] = None,
    quiet: bool = False,
) -> None:
    """
    Configure logging for the serial logger.

    Console output uses a bare message format so the record echo reads like
    the data file; the log file always carries timestamps.

    Args:
        level: Base logging level
        verbose: Enable verbose output with timestamps and module names
        log_file: Optional file path for log output
        quiet: Suppress console output (only log to file if specified)
    """
    if verbose:
        console_format = VERBOSE_FORMAT
    else:
        console_format = SIMPLE_FORMAT

    root_logger = logging.getLogger('serial_logger')
    root_logger.setLevel(level)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler
    if not quiet:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(console_format, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
            file_handler.setLevel(level)
            file_handler.setFormatter(
                logging.Formatter(VERBOSE_FORMAT if verbose else STANDARD_FORMAT,
                                  datefmt=DATE_FORMAT)
            )
            root_logger.addHandler(file_handler)
        except IOError as e:
            print(f"Warning: Could not open log file {log_file}: {e}", file=sys.stderr)


def get_log_level(name: str) -> int:
    """
    Convert a --log-level choice to a logging level.

    Args:
        name: One of 'debug', 'info', 'warn', 'error'

    Returns:
        Logging level constant
    """
    return LOG_LEVELS.get(name.lower(), logging.INFO)


class RecordEcho:
    """
    Console trace of session traffic.

    Echoes every stored record, file rotation and poll command on the
    'serial_logger.records' logger.
    """

    def __init__(self, enabled: bool = True):
        """
        Initialize record echo.

        Args:
            enabled: Enable echo output
        """
        self.enabled = enabled
        self.logger = logging.getLogger('serial_logger.records')

    def log_record(self, record: Record) -> None:
        """Echo a record that was written to the data file."""
        if not self.enabled:
            return
        self.logger.info(f"Received: {record.format()}")

    def log_new_file(self, file_name: str) -> None:
        """Announce that a new data file has started."""
        if not self.enabled:
            return
        self.logger.info(f"Starting new file: {file_name}")

    def log_command(self, command: str) -> None:
        """Trace a poll command written to the port."""
        if not self.enabled:
            return
        self.logger.debug(f"Sent: {command}")
