"""
Clock truncation helpers used by the file rotation policy.
"""

from datetime import datetime


def truncate_to_hour(dt: datetime) -> datetime:
    """Return dt with minutes, seconds and microseconds zeroed."""
    return dt.replace(minute=0, second=0, microsecond=0)


def truncate_to_day(dt: datetime) -> datetime:
    """Return dt at midnight of the same day."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)
