"""
UI Panel components for the Simple Serial Logger live view.
"""

from datetime import datetime
from typing import Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text


class HeaderPanel:
    """Header panel showing port settings, active file and status."""

    def __init__(self, port: str = "", baud_rate: int = 0, mode: str = "", read_mode: str = ""):
        self.port = port
        self.baud_rate = baud_rate
        self.mode = mode
        self.read_mode = read_mode
        self.active_file = ""
        self.start_time: Optional[datetime] = None
        self.status = "Stopped"

    def set_running(self, running: bool = True) -> None:
        """Set running status."""
        self.status = "Running" if running else "Stopped"
        if running and self.start_time is None:
            self.start_time = datetime.now()

    def render(self) -> Panel:
        """Render the header panel."""
        if self.start_time:
            uptime = datetime.now() - self.start_time
            hours, remainder = divmod(int(uptime.total_seconds()), 3600)
            minutes, seconds = divmod(remainder, 60)
            uptime_str = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        else:
            uptime_str = "--:--:--"

        if self.status == "Running":
            status_text = Text("●", style="bold green")
            status_text.append(f" {self.status}", style="green")
        else:
            status_text = Text("○", style="bold red")
            status_text.append(f" {self.status}", style="red")

        info_parts = [
            f"Port: [cyan]{self.port}[/cyan] @ [cyan]{self.baud_rate}[/cyan]",
            f"Rotation: [yellow]{self.mode}[/yellow]",
            f"Read: [yellow]{self.read_mode}[/yellow]",
            f"File: [green]{self.active_file or '-'}[/green]",
            f"Uptime: [blue]{uptime_str}[/blue]",
        ]
        content = Text.from_markup("    ".join(info_parts))

        title_text = Text("Simple Serial Logger  ", style="bold white")

        return Panel(
            content,
            title=title_text,
            title_align="left",
            subtitle=status_text,
            subtitle_align="right",
            border_style="bright_blue",
        )


class StatsPanel:
    """Statistics panel showing session counters."""

    def __init__(self):
        self.records = 0
        self.commands = 0
        self.files = 0
        self.errors = 0

    def record_received(self) -> None:
        self.records += 1

    def record_command(self) -> None:
        self.commands += 1

    def record_new_file(self) -> None:
        self.files += 1

    def record_error(self) -> None:
        self.errors += 1

    def render(self) -> Panel:
        """Render the stats panel."""
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("Label", style="bold")
        table.add_column("Value", justify="right")

        table.add_row("Records:", f"[green]{self.records:,}[/green]")
        table.add_row("Commands:", f"[cyan]{self.commands:,}[/cyan]")
        table.add_row("Files:", f"[yellow]{self.files:,}[/yellow]")
        table.add_row("Errors:", f"[red]{self.errors}[/red]")

        return Panel(
            table,
            title="Statistics",
            title_align="left",
            border_style="green",
        )


class ActivityPanel:
    """
    Device activity panel.

    In listen mode the device counts as live while records keep arriving.
    When polling, the panel tracks commands the device has not answered yet.
    """

    # Seconds without a record before a listening device shows as quiet
    QUIET_AFTER = 5.0

    STATES = {
        "LIVE": Text("● LIVE", style="bold green"),
        "WAITING": Text("◉ WAITING", style="yellow"),
        "NO REPLY": Text("○ NO REPLY", style="bold red"),
        "QUIET": Text("○ QUIET", style="dim red"),
        "IDLE": Text("○ IDLE", style="dim"),
    }

    def __init__(self, poll_interval: Optional[float] = None):
        self.poll_interval = poll_interval
        self.last_record: Optional[datetime] = None
        self.unanswered = 0

    def mark_record(self, when: Optional[datetime] = None) -> None:
        self.last_record = when or datetime.now()
        self.unanswered = 0

    def mark_command(self) -> None:
        self.unanswered += 1

    def state(self, now: Optional[datetime] = None) -> str:
        """Current activity state name."""
        if self.poll_interval is not None:
            if self.unanswered > 1:
                return "NO REPLY"
            if self.unanswered == 1:
                return "WAITING"

        if self.last_record is None:
            return "IDLE"

        age = ((now or datetime.now()) - self.last_record).total_seconds()
        return "LIVE" if age < self.QUIET_AFTER else "QUIET"

    def render(self) -> Panel:
        """Render the activity panel."""
        text = self.STATES[self.state()].copy()
        if self.poll_interval is not None:
            text.append(f"\npoll every {self.poll_interval:g}s", style="dim")
        return Panel(text, title="Activity", title_align="left", border_style="magenta")
