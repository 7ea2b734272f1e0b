"""
Data file naming and rotation for Simple Serial Logger.

A file name only changes at a rotation boundary. Inside the session's first
bucket the name carries the session start time; every later bucket is named
after the boundary itself, so all records of one bucket share one file.
"""

import logging
from datetime import datetime
from typing import Tuple

from .clock import truncate_to_day, truncate_to_hour
from .config import RotationMode

logger = logging.getLogger(__name__)

# yyMMddHHmmss
FILENAME_TIME_FORMAT = "%y%m%d%H%M%S"


def compute_file_name(mode: RotationMode, start_time: datetime,
                      now: datetime, prefix: str) -> str:
    """
    Compute the data file name active at `now`.

    Args:
        mode: Rotation mode
        start_time: Session start time
        now: Current time
        prefix: File name prefix

    Returns:
        File name of the form '{prefix}_{yyMMddHHmmss}.txt'
    """
    if mode == RotationMode.HOURLY:
        bucket = truncate_to_hour(now)
        file_time = start_time if bucket == truncate_to_hour(start_time) else bucket
    elif mode == RotationMode.DAILY:
        bucket = truncate_to_day(now)
        file_time = start_time if bucket == truncate_to_day(start_time) else bucket
    else:
        file_time = start_time

    return f"{prefix}_{file_time.strftime(FILENAME_TIME_FORMAT)}.txt"


class RotationState:
    """
    Tracks the active data file of a session.

    Owned by the writer loop; the active name starts empty and is set
    on the first record.
    """

    def __init__(self, mode: RotationMode, start_time: datetime, prefix: str):
        self.mode = mode
        self.start_time = start_time
        self.prefix = prefix
        self.active_file_name = ""

    def check(self, now: datetime) -> Tuple[str, bool]:
        """
        Compute the file name for `now` and detect rotation.

        Args:
            now: Timestamp of the record about to be written

        Returns:
            Tuple of (file name, True if a new file starts with this record)
        """
        file_name = compute_file_name(self.mode, self.start_time, now, self.prefix)
        if file_name == self.active_file_name:
            return file_name, False

        logger.debug(f"Rotating from '{self.active_file_name}' to '{file_name}'")
        self.active_file_name = file_name
        return file_name, True
