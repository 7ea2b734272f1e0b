"""
Simple Serial Logger Package.

Logs timestamped serial port data to rotating text files, optionally
polling the device with a fixed command.
"""

__version__ = "1.0.0"
__author__ = "Sierra Telecom"

from .config import LoggerConfig, RotationMode, ReadMode, ConfigError
from .rotation import compute_file_name, RotationState
from .sink import Record, append_record
from .session import PortSession, SessionPhase

__all__ = [
    "LoggerConfig",
    "RotationMode",
    "ReadMode",
    "ConfigError",
    "compute_file_name",
    "RotationState",
    "Record",
    "append_record",
    "PortSession",
    "SessionPhase",
]
