"""
Live terminal view for Simple Serial Logger.

Shows the port settings, active data file, counters and the most recent
records while a session runs.
"""

import threading
import time
from typing import Optional, TYPE_CHECKING

from rich.console import Console
from rich.layout import Layout
from rich.live import Live

from .panels import ActivityPanel, HeaderPanel, StatsPanel
from .record_log import EntryType, RecordLog

if TYPE_CHECKING:
    from ..config import LoggerConfig
    from ..sink import Record
    from ..stats import SessionStats


class SessionTUI:
    """
    Terminal User Interface for a logging session.

    Provides real-time visualization of:
    - Port settings and the active data file
    - Record log with auto-scrolling
    - Session counters
    """

    def __init__(
        self,
        port: str = "",
        baud_rate: int = 0,
        mode: str = "",
        read_mode: str = "",
        poll_interval: Optional[float] = None,
        max_entries: int = 20,
        refresh_rate: float = 4.0,
        console: Optional[Console] = None,
    ):
        """
        Initialize the TUI.

        Args:
            port: Serial port identifier
            baud_rate: Baud rate
            mode: Rotation mode name
            read_mode: Read mode name
            poll_interval: Seconds between poll commands, None when listening
            max_entries: Maximum records to display
            refresh_rate: Screen refresh rate in Hz
            console: Rich console to draw on
        """
        self.console = console or Console()
        self.refresh_rate = refresh_rate

        # Components
        self.header = HeaderPanel(port, baud_rate, mode, read_mode)
        self.record_log = RecordLog(max_entries=max_entries)
        self.stats = StatsPanel()
        self.activity = ActivityPanel(poll_interval)

        # State
        self.closed_notice: Optional[str] = None
        self._running = False
        self._live: Optional[Live] = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: 'LoggerConfig') -> 'SessionTUI':
        """Create a TUI labelled with a session's settings."""
        return cls(
            port=config.port,
            baud_rate=config.baud_rate,
            mode=config.rotation_mode.value,
            read_mode=config.read_mode.value,
            poll_interval=config.poll_interval if config.polling else None,
        )

    def record_received(self, record: 'Record') -> None:
        """Record a payload written to the data file."""
        with self._lock:
            self.record_log.add(EntryType.RECEIVED, record.payload, record.timestamp)
            self.stats.record_received()
            self.activity.mark_record()

    def record_command(self, command: str) -> None:
        """Record a poll command sent to the port."""
        with self._lock:
            self.record_log.add(EntryType.COMMAND, command)
            self.stats.record_command()
            self.activity.mark_command()

    def record_new_file(self, file_name: str) -> None:
        """Record the start of a new data file."""
        with self._lock:
            self.header.active_file = file_name
            self.record_log.add(EntryType.NEW_FILE, f"Starting new file: {file_name}")
            self.stats.record_new_file()

    def record_error(self, message: str) -> None:
        with self._lock:
            self.record_log.add(EntryType.ERROR, message)
            self.stats.record_error()

    def record_closed(self, message: str) -> None:
        """Remember the closure notice for the summary printed after the view stops."""
        with self._lock:
            self.closed_notice = message

    def _build_layout(self) -> Layout:
        """Build the screen layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="main", ratio=1),
            Layout(name="footer", size=8),
        )

        layout["header"].update(self.header.render())
        layout["main"].update(self.record_log.render())

        layout["footer"].split_row(
            Layout(name="stats", ratio=2),
            Layout(name="activity", ratio=1),
        )
        layout["footer"]["stats"].update(self.stats.render())
        layout["footer"]["activity"].update(self.activity.render())

        return layout

    def _render(self) -> Layout:
        """Render the full TUI."""
        with self._lock:
            return self._build_layout()

    def start(self) -> None:
        """Run the display loop until stop() is called."""
        self._running = True
        self.header.set_running(True)

        with Live(
            self._render(),
            console=self.console,
            refresh_per_second=self.refresh_rate,
            screen=True,
        ) as live:
            self._live = live
            while self._running:
                live.update(self._render())
                time.sleep(1.0 / self.refresh_rate)

    def start_async(self) -> threading.Thread:
        """
        Start the TUI in a background thread.

        Returns:
            The background thread running the TUI
        """
        thread = threading.Thread(target=self.start, name="tui", daemon=True)
        thread.start()
        return thread

    def stop(self) -> None:
        """Stop the TUI display loop."""
        self._running = False
        self.header.set_running(False)

    def print_summary(self, stats: Optional['SessionStats'] = None) -> None:
        """Print a summary after the TUI stops."""
        self.console.print()
        if self.closed_notice:
            self.console.print(self.closed_notice)
        self.console.print("[bold]Session Summary[/bold]")
        self.console.print(f"  Records:       {self.stats.records:,}")
        self.console.print(f"  Commands:      {self.stats.commands:,}")
        self.console.print(f"  Files started: {self.stats.files:,}")
        self.console.print(f"  Errors:        {self.stats.errors}")
        if stats is not None:
            self.console.print(f"  Uptime:        {stats.get_uptime():.1f} s")
        self.console.print()
