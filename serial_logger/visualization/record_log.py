"""
Record Log for the Simple Serial Logger live view.

Maintains a scrolling window of recent session events with timestamps.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from threading import Lock
from typing import Deque, List, Optional

from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text


class EntryType(Enum):
    """Type of session event."""
    RECEIVED = "received"     # Record written to a data file
    COMMAND = "command"       # Poll command sent to the port
    NEW_FILE = "new_file"     # Data file rotation
    ERROR = "error"           # Read, write or command failure


@dataclass
class LogEntry:
    """Single session event."""
    timestamp: datetime
    entry_type: EntryType
    text: str


STYLES = {
    EntryType.RECEIVED: Style(color="green"),
    EntryType.COMMAND: Style(color="cyan", bold=True),
    EntryType.NEW_FILE: Style(color="yellow", bold=True),
    EntryType.ERROR: Style(color="red", bold=True),
}

DIRECTION_SYMBOLS = {
    EntryType.RECEIVED: "RX",
    EntryType.COMMAND: "TX",
    EntryType.NEW_FILE: "FILE",
    EntryType.ERROR: "ERR",
}


class RecordLog:
    """
    Thread-safe event log with fixed-size scrolling window.

    Keeps the last N entries and renders them as a rich table.
    """

    def __init__(self, max_entries: int = 20):
        """
        Initialize record log.

        Args:
            max_entries: Maximum number of entries to keep
        """
        self.max_entries = max_entries
        self._entries: Deque[LogEntry] = deque(maxlen=max_entries)
        self._lock = Lock()
        self._total_count = 0

    def add(self, entry_type: EntryType, text: str,
            timestamp: Optional[datetime] = None) -> None:
        """Add an entry, stamped now unless a timestamp is given."""
        with self._lock:
            self._entries.append(LogEntry(
                timestamp=timestamp or datetime.now(),
                entry_type=entry_type,
                text=text,
            ))
            self._total_count += 1

    def get_entries(self) -> List[LogEntry]:
        """Get a copy of current entries."""
        with self._lock:
            return list(self._entries)

    @property
    def total_count(self) -> int:
        """Total number of entries since start."""
        return self._total_count

    def render(self) -> Panel:
        """
        Render the log as a rich Panel.

        Returns:
            Rich Panel containing the entry table
        """
        table = Table(
            show_header=True,
            header_style="bold white",
            box=None,
            padding=(0, 1),
            expand=True,
        )

        table.add_column("TIME", style="dim", width=10, no_wrap=True)
        table.add_column("DIR", width=5, no_wrap=True)
        table.add_column("DATA", no_wrap=False)

        entries = self.get_entries()

        for entry in entries:
            style = STYLES.get(entry.entry_type)
            table.add_row(
                entry.timestamp.strftime("%H:%M:%S"),
                Text(DIRECTION_SYMBOLS.get(entry.entry_type, "?"), style=style),
                Text(entry.text, style=style),
            )

        # Fill empty rows if needed
        for _ in range(self.max_entries - len(entries)):
            table.add_row("", "", "")

        title = f"Records (Last {self.max_entries})"
        if self._total_count > self.max_entries:
            title += f" - Total: {self._total_count:,}"

        return Panel(
            table,
            title=title,
            title_align="left",
            border_style="blue",
        )
