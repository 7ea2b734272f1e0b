"""
Configuration dataclasses and enums for Simple Serial Logger.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


DEFAULT_PREFIX = "serialData"


class ConfigError(ValueError):
    """Raised when the session configuration is invalid."""


class RotationMode(Enum):
    """How often a new data file is started."""
    ONE = "One"             # Single file for the whole session
    HOURLY = "Hourly"       # New file when the wall-clock hour changes
    DAILY = "Daily"         # New file when the calendar day changes

    @classmethod
    def parse(cls, value: str) -> "RotationMode":
        """Case-insensitive lookup by value ("one", "HOURLY", ...)."""
        for mode in cls:
            if mode.value.lower() == value.strip().lower():
                return mode
        raise ConfigError(f"Invalid rotation mode: {value!r} (expected One, Hourly or Daily)")


class ReadMode(Enum):
    """How a record is extracted from the port stream."""
    LINE = "Line"           # Wait for a newline terminator
    BUFFER = "Buffer"       # Drain whatever bytes are available

    @classmethod
    def parse(cls, value: str) -> "ReadMode":
        """Case-insensitive lookup by value ("line", "Buffer", ...)."""
        for mode in cls:
            if mode.value.lower() == value.strip().lower():
                return mode
        raise ConfigError(f"Invalid read mode: {value!r} (expected Line or Buffer)")


@dataclass(frozen=True)
class LoggerConfig:
    """
    Configuration for a serial logging session.

    Attributes:
        port: Serial port identifier (e.g., 'COM3', '/dev/ttyUSB0')
        baud_rate: Baud rate in bps
        prefix: Data file name prefix
        rotation_mode: When to start a new data file
        command: Poll command written to the port (None = passive listen)
        read_mode: Line or Buffer record extraction
        output_dir: Directory the data files are written to
        timeout_ms: Serial read and write timeout in milliseconds
        poll_interval: Seconds between poll commands
        buffer_settle_ms: Delay before draining a polled response in Buffer mode
        queue_size: Maximum records waiting between reader and writer
        log_level: Logging level
        log_file: Diagnostic log output file (None = stdout only)
        tui: Show the live terminal view instead of the line echo
        stats_interval: Statistics log interval in seconds (0 = disabled)
    """
    # Required
    port: str
    baud_rate: int

    # Data files
    prefix: str = DEFAULT_PREFIX
    rotation_mode: RotationMode = RotationMode.ONE
    output_dir: str = "."

    # Session behaviour
    command: Optional[str] = None
    read_mode: ReadMode = ReadMode.LINE

    # Timing
    timeout_ms: int = 500
    poll_interval: float = 1.0
    buffer_settle_ms: int = 100
    queue_size: int = 1000

    # Logging
    log_level: str = "info"
    log_file: Optional[str] = None

    # Display
    tui: bool = False
    stats_interval: int = 0

    @property
    def polling(self) -> bool:
        """True when a poll command is configured."""
        return self.command is not None

    @property
    def timeout_seconds(self) -> float:
        """Read/write timeout as pyserial expects it."""
        return self.timeout_ms / 1000.0


def validate_config(config: LoggerConfig) -> None:
    """
    Check value ranges of a configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigError: If any value is out of range
    """
    if not config.port or not config.port.strip():
        raise ConfigError("Invalid port name")

    if config.baud_rate <= 0:
        raise ConfigError(f"Invalid baud rate: {config.baud_rate}")

    validate_options(config)


def validate_options(config: LoggerConfig) -> None:
    """Check every value except the port and baud rate."""
    if config.timeout_ms <= 0:
        raise ConfigError("timeout must be positive")

    if config.poll_interval <= 0:
        raise ConfigError("poll-interval must be positive")

    if config.buffer_settle_ms < 0:
        raise ConfigError("buffer settle delay must be non-negative")

    if config.queue_size <= 0:
        raise ConfigError("queue size must be positive")

    if config.stats_interval < 0:
        raise ConfigError("stats-interval must be non-negative")

    # An empty command would only write bare newlines
    if config.command is not None and config.command == "":
        raise ConfigError("command must not be empty")


def _config_from_args(args, port: str, baud_rate: int) -> LoggerConfig:
    return LoggerConfig(
        port=port,
        baud_rate=baud_rate,
        prefix=args.prefix if args.prefix else DEFAULT_PREFIX,
        rotation_mode=RotationMode.parse(args.mode),
        output_dir=getattr(args, 'output_dir', '.'),
        command=args.command,
        read_mode=ReadMode.parse(args.read_mode),
        timeout_ms=getattr(args, 'timeout', 500),
        poll_interval=getattr(args, 'poll_interval', 1.0),
        log_level=getattr(args, 'log_level', 'info'),
        log_file=getattr(args, 'log_file', None),
        tui=getattr(args, 'tui', False),
        stats_interval=getattr(args, 'stats_interval', 0),
    )


def check_options_from_args(args) -> None:
    """
    Validate the option flags before the port and baud rate are known.

    Lets bad flag values fail before the operator is prompted.

    Raises:
        ConfigError: If an option value is invalid
    """
    validate_options(_config_from_args(args, port="", baud_rate=0))


def load_config_from_args(args, port: str, baud_rate: int) -> LoggerConfig:
    """
    Create LoggerConfig from parsed command line arguments.

    Port and baud rate are passed separately because they may have been
    prompted for interactively.

    Args:
        args: Parsed argparse namespace
        port: Resolved serial port identifier
        baud_rate: Resolved baud rate

    Returns:
        Validated LoggerConfig instance

    Raises:
        ConfigError: If an option value is invalid
    """
    config = _config_from_args(args, port, baud_rate)
    validate_config(config)
    return config
