"""
Record sink: appends timestamped records to data files.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Union

# yy-MM-dd HH:mm:ss
RECORD_TIME_FORMAT = "%y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class Record:
    """Single payload read from the port, stamped at arrival."""
    timestamp: datetime
    payload: str

    def format(self) -> str:
        """Serialized form without line terminator."""
        return format_record(self.timestamp, self.payload)


def format_record(timestamp: datetime, payload: str) -> str:
    """Return '{yy-MM-dd HH:mm:ss},{payload}'."""
    return f"{timestamp.strftime(RECORD_TIME_FORMAT)},{payload}"


def append_record(path: Union[str, Path], timestamp: datetime, payload: str) -> None:
    """
    Append one record to the file at `path`, creating it if needed.

    The file is opened and closed on every call. Errors propagate.

    Args:
        path: Data file path
        timestamp: Record timestamp
        payload: Raw text payload
    """
    with open(path, 'a', encoding='utf-8') as f:
        f.write(format_record(timestamp, payload) + "\n")
