"""
Statistics Module for Simple Serial Logger.

Tracks session counters (records, bytes, files, commands, errors) and
reports them periodically and at session end.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class SessionStats:
    """
    Session statistics.

    Updated from both the reader thread and the writer loop.
    """
    # Timing
    start_time: Optional[float] = None
    last_record_time: Optional[float] = None

    # Counters
    records_written: int = 0
    bytes_written: int = 0
    files_started: int = 0
    commands_sent: int = 0
    read_timeouts: int = 0
    read_errors: int = 0
    write_errors: int = 0
    command_errors: int = 0

    # Lock for thread safety
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def start(self) -> None:
        """Mark session start time."""
        self.start_time = time.time()

    def record_written(self, payload_size: int) -> None:
        """Record a payload stored in a data file."""
        with self._lock:
            self.records_written += 1
            self.bytes_written += payload_size
            self.last_record_time = time.time()

    def record_new_file(self) -> None:
        with self._lock:
            self.files_started += 1

    def record_command(self) -> None:
        with self._lock:
            self.commands_sent += 1

    def record_timeout(self) -> None:
        with self._lock:
            self.read_timeouts += 1

    def record_read_error(self) -> None:
        with self._lock:
            self.read_errors += 1

    def record_write_error(self) -> None:
        with self._lock:
            self.write_errors += 1

    def record_command_error(self) -> None:
        with self._lock:
            self.command_errors += 1

    @property
    def total_errors(self) -> int:
        """All transient errors seen so far."""
        return self.read_timeouts + self.read_errors + self.write_errors + self.command_errors

    def get_uptime(self) -> float:
        """Get session uptime in seconds."""
        if self.start_time is None:
            return 0.0
        return time.time() - self.start_time

    def get_summary(self) -> dict:
        """
        Get summary statistics.

        Returns:
            Dictionary of statistics
        """
        with self._lock:
            uptime = self.get_uptime()
            rate = self.records_written / uptime if uptime > 0 else 0

            return {
                'uptime_seconds': round(uptime, 1),
                'records_written': self.records_written,
                'bytes_written': self.bytes_written,
                'records_per_second': round(rate, 2),
                'files_started': self.files_started,
                'commands_sent': self.commands_sent,
                'read_timeouts': self.read_timeouts,
                'read_errors': self.read_errors,
                'write_errors': self.write_errors,
                'command_errors': self.command_errors,
                'total_errors': self.total_errors,
            }

    def format_report(self) -> str:
        """
        Format a human-readable statistics report.

        Returns:
            Formatted report string
        """
        summary = self.get_summary()

        lines = []
        lines.append("=" * 50)
        lines.append("Serial Logger Session Statistics")
        lines.append("=" * 50)
        lines.append(f"Uptime: {summary['uptime_seconds']:.1f} seconds")
        lines.append(f"Record rate: {summary['records_per_second']:.2f} rec/sec")
        lines.append("")
        lines.append(f"  Records written:    {summary['records_written']}")
        lines.append(f"  Payload bytes:      {summary['bytes_written']}")
        lines.append(f"  Files started:      {summary['files_started']}")
        lines.append(f"  Commands sent:      {summary['commands_sent']}")
        lines.append(f"  Read timeouts:      {summary['read_timeouts']}")
        lines.append(f"  Read errors:        {summary['read_errors']}")
        lines.append(f"  Write errors:       {summary['write_errors']}")
        lines.append(f"  Command errors:     {summary['command_errors']}")
        lines.append("=" * 50)
        return "\n".join(lines)


class StatsReporter:
    """
    Periodic statistics reporter.

    Reports statistics at configurable intervals.
    """

    def __init__(self, stats: SessionStats, interval_seconds: float = 60.0):
        """
        Initialize reporter.

        Args:
            stats: SessionStats instance
            interval_seconds: Reporting interval
        """
        self.stats = stats
        self.interval = interval_seconds
        self._timer: Optional[threading.Timer] = None
        self._running = False

    def start(self) -> None:
        """Start periodic reporting."""
        self._running = True
        self._schedule_report()

    def stop(self) -> None:
        """Stop periodic reporting."""
        self._running = False
        if self._timer:
            self._timer.cancel()
            self._timer = None

    def _schedule_report(self) -> None:
        """Schedule next report."""
        if not self._running:
            return

        self._timer = threading.Timer(self.interval, self._report)
        self._timer.daemon = True
        self._timer.start()

    def _report(self) -> None:
        """Generate and log report."""
        if not self._running:
            return

        summary = self.stats.get_summary()
        logger.info(f"Stats: {summary['records_written']} records, "
                    f"{summary['files_started']} files, "
                    f"{summary['total_errors']} errors, "
                    f"{summary['records_per_second']:.1f} rec/sec")

        self._schedule_report()
