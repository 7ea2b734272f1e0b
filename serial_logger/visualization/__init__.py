"""
Simple Serial Logger Visualization Package.

Provides a rich terminal UI for real-time session monitoring.
"""

from .tui import SessionTUI
from .record_log import RecordLog, LogEntry, EntryType

__all__ = [
    'SessionTUI',
    'RecordLog',
    'LogEntry',
    'EntryType',
]
