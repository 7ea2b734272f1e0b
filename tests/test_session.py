"""
Tests for the port session.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime

import serial

from serial_logger.config import ReadMode, RotationMode
from serial_logger.port import PortIO
from serial_logger.rotation import RotationState
from serial_logger.session import PortSession, SessionPhase
from serial_logger.sink import Record


class SpyTUI:
    """Records the live view calls a session makes."""

    def __init__(self):
        self.errors = []
        self.received = []
        self.closed = None

    def record_error(self, message):
        self.errors.append(message)

    def record_received(self, record):
        self.received.append(record.payload)

    def record_new_file(self, file_name):
        pass

    def record_command(self, command):
        pass

    def record_closed(self, message):
        self.closed = message


def run_in_thread(session):
    """Run a session on a background thread; returns (thread, result dict)."""
    result = {}

    def target():
        result['code'] = session.run()

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, result


class TestOpenFailure:
    """Tests for a port that cannot be opened."""

    def test_reports_and_closes(self, base_config, caplog, capsys):
        caplog.set_level(logging.INFO)

        def failing_factory(config):
            raise serial.SerialException("could not open port 'COM3': FileNotFoundError")

        session = PortSession(base_config, port_factory=failing_factory)
        code = session.run()

        assert code == 0
        assert session.phase == SessionPhase.CLOSED
        assert session.reader is None
        assert "Failed to open the serial port" in caplog.text
        assert "Serial port closed. Exiting..." in capsys.readouterr().out

    def test_no_data_file_created(self, base_config, tmp_path):
        def failing_factory(config):
            raise OSError("no such device")

        PortSession(base_config, port_factory=failing_factory).run()

        assert list(tmp_path.iterdir()) == []


class TestHandleRecord:
    """Tests for PortSession.handle_record."""

    def make_session(self, config, mode, start):
        config = replace(config, rotation_mode=mode, prefix="x")
        session = PortSession(config)
        session.rotation = RotationState(mode, start, "x")
        return session

    def test_hourly_rotation_scenario(self, base_config, start_time, tmp_path, caplog):
        caplog.set_level(logging.INFO)
        session = self.make_session(base_config, RotationMode.HOURLY, start_time)

        session.handle_record(Record(start_time, "before"))
        session.handle_record(Record(datetime(2024, 1, 1, 10, 59, 59), "still before"))
        session.handle_record(Record(datetime(2024, 1, 1, 11, 0, 1), "after"))

        first = tmp_path / "x_240101105958.txt"
        second = tmp_path / "x_240101110000.txt"
        assert first.read_text(encoding="utf-8").splitlines() == [
            "24-01-01 10:59:58,before",
            "24-01-01 10:59:59,still before",
        ]
        assert second.read_text(encoding="utf-8").splitlines() == ["24-01-01 11:00:01,after"]
        assert session.active_file_name == "x_240101110000.txt"

    def test_rotation_notice_only_on_change(self, base_config, start_time, caplog):
        caplog.set_level(logging.INFO)
        session = self.make_session(base_config, RotationMode.HOURLY, start_time)

        for second in range(58, 60):
            session.handle_record(Record(datetime(2024, 1, 1, 10, 59, second), "a"))
        for minute in range(0, 3):
            session.handle_record(Record(datetime(2024, 1, 1, 11, minute, 0), "b"))

        notices = [r for r in caplog.records if "Starting new file" in r.getMessage()]
        assert [n.getMessage() for n in notices] == [
            "Starting new file: x_240101105958.txt",
            "Starting new file: x_240101110000.txt",
        ]
        assert session.stats.files_started == 2

    def test_echo(self, base_config, start_time, caplog):
        caplog.set_level(logging.INFO)
        session = self.make_session(base_config, RotationMode.ONE, start_time)

        session.handle_record(Record(start_time, "T=20.1"))

        assert "Received: 24-01-01 10:59:58,T=20.1" in caplog.text
        assert session.stats.records_written == 1

    def test_empty_payload_ignored(self, base_config, start_time, tmp_path, caplog):
        caplog.set_level(logging.INFO)
        session = self.make_session(base_config, RotationMode.ONE, start_time)

        assert not session.handle_record(Record(start_time, ""))
        assert list(tmp_path.iterdir()) == []
        assert "Received" not in caplog.text

    def test_sink_error_logged_and_continues(self, base_config, start_time, tmp_path, caplog):
        config = replace(base_config, output_dir=str(tmp_path / "gone"))
        session = self.make_session(config, RotationMode.ONE, start_time)

        assert not session.handle_record(Record(start_time, "lost"))
        assert session.stats.write_errors == 1
        assert "Error while processing data" in caplog.text

        # Directory appears; the next record succeeds
        (tmp_path / "gone").mkdir()
        assert session.handle_record(Record(start_time, "kept"))


class TestSendCommand:
    """Tests for PortSession.send_command."""

    def test_writes_command_line(self, base_config, mock_port):
        session = PortSession(replace(base_config, command="MEAS?"))
        session.port_io = PortIO(mock_port)

        assert session.send_command()
        assert mock_port.written == [b"MEAS?\n"]
        assert session.stats.commands_sent == 1

    def test_write_timeout_reported(self, base_config, mock_port, caplog):
        mock_port.write_error = serial.SerialTimeoutException("Write timeout")
        session = PortSession(replace(base_config, command="MEAS?"))
        session.port_io = PortIO(mock_port)

        assert not session.send_command()
        assert session.stats.command_errors == 1
        assert "write timeout" in caplog.text


class TestRunListening:
    """End-to-end listen mode against a mock port."""

    def test_logs_lines_until_cancelled(self, base_config, mock_port, fixed_clock, tmp_path, wait_until):
        session = PortSession(base_config, port_factory=lambda c: mock_port, clock=fixed_clock)
        thread, result = run_in_thread(session)

        assert wait_until(lambda: session.phase == SessionPhase.LISTENING)
        mock_port.feed(b"alpha\r\nbeta\n")
        assert wait_until(lambda: session.stats.records_written == 2)

        session.stop()
        thread.join(timeout=3.0)

        assert result['code'] == 0
        assert session.phase == SessionPhase.CLOSED
        assert mock_port.close_count == 1
        data = (tmp_path / "serialData_240101105958.txt").read_text(encoding="utf-8")
        assert data.splitlines() == [
            "24-01-01 10:59:58,alpha",
            "24-01-01 10:59:58,beta",
        ]
        assert mock_port.written == []

    def test_buffer_mode(self, base_config, mock_port, fixed_clock, tmp_path, wait_until):
        config = replace(base_config, read_mode=ReadMode.BUFFER)
        session = PortSession(config, port_factory=lambda c: mock_port, clock=fixed_clock)
        thread, _ = run_in_thread(session)

        assert wait_until(lambda: session.phase == SessionPhase.LISTENING)
        mock_port.feed(b"raw chunk")
        assert wait_until(lambda: session.stats.records_written == 1)

        session.stop()
        thread.join(timeout=3.0)

        assert "read_until" not in mock_port.calls
        data = (tmp_path / "serialData_240101105958.txt").read_text(encoding="utf-8")
        assert data == "24-01-01 10:59:58,raw chunk\n"


class TestRunPolling:
    """End-to-end polling mode against a mock port."""

    def test_sends_command_on_interval(self, base_config, mock_port, fixed_clock, wait_until):
        config = replace(base_config, command="READ?", poll_interval=0.05)
        session = PortSession(config, port_factory=lambda c: mock_port, clock=fixed_clock)
        thread, result = run_in_thread(session)

        assert wait_until(lambda: len(mock_port.written) >= 3)
        assert session.phase == SessionPhase.POLLING

        mock_port.feed(b"42\n")
        assert wait_until(lambda: session.stats.records_written == 1)

        session.stop()
        thread.join(timeout=3.0)

        assert result['code'] == 0
        assert set(mock_port.written) == {b"READ?\n"}

    def test_write_errors_do_not_stop_polling(self, base_config, mock_port, fixed_clock, wait_until):
        mock_port.write_error = serial.SerialTimeoutException("Write timeout")
        config = replace(base_config, command="READ?", poll_interval=0.02)
        session = PortSession(config, port_factory=lambda c: mock_port, clock=fixed_clock)
        thread, _ = run_in_thread(session)

        assert wait_until(lambda: session.stats.command_errors >= 3)
        assert session.phase == SessionPhase.POLLING

        session.stop()
        thread.join(timeout=3.0)
        assert session.phase == SessionPhase.CLOSED


class TestClose:
    """Tests for PortSession.close."""

    def test_close_twice(self, base_config, mock_port):
        session = PortSession(base_config, port_factory=lambda c: mock_port)
        session.port = mock_port

        session.close()
        session.close()

        assert mock_port.close_count == 1
        assert session.phase == SessionPhase.CLOSED
        assert session.cancel_event.is_set()

    def test_statistics_logged(self, base_config, mock_port, caplog):
        caplog.set_level(logging.DEBUG)
        session = PortSession(base_config, port_factory=lambda c: mock_port)
        session.port = mock_port

        session.close()

        assert "Serial Logger Session Statistics" in caplog.text
        assert "Records written:" in caplog.text

    def test_closure_printed_regardless_of_log_level(self, base_config, mock_port,
                                                     restore_package_logger, capsys):
        restore_package_logger.setLevel(logging.ERROR)
        session = PortSession(base_config, port_factory=lambda c: mock_port)
        session.port = mock_port

        session.close()

        assert "Serial port closed. Exiting..." in capsys.readouterr().out


class TestLiveViewReporting:
    """Session events reach the live view when one is attached."""

    def test_read_timeout_shown(self, base_config, mock_port, fixed_clock, wait_until):
        tui = SpyTUI()
        session = PortSession(base_config, port_factory=lambda c: mock_port,
                              clock=fixed_clock, tui=tui)
        thread, _ = run_in_thread(session)

        assert wait_until(lambda: session.phase == SessionPhase.LISTENING)
        mock_port.feed(b"no terminator")
        assert wait_until(lambda: "Error: serial port timeout" in tui.errors)

        session.stop()
        thread.join(timeout=3.0)

    def test_read_error_shown(self, base_config, mock_port, fixed_clock, wait_until):
        mock_port.read_error = serial.SerialException("device disconnected")
        tui = SpyTUI()
        session = PortSession(base_config, port_factory=lambda c: mock_port,
                              clock=fixed_clock, tui=tui)
        thread, _ = run_in_thread(session)

        assert wait_until(lambda: any("Error while processing data" in e for e in tui.errors))

        session.stop()
        thread.join(timeout=3.0)
        assert session.stats.read_errors >= 1

    def test_closure_goes_to_live_view(self, base_config, mock_port, capsys):
        tui = SpyTUI()
        session = PortSession(base_config, port_factory=lambda c: mock_port, tui=tui)
        session.port = mock_port

        session.close()

        assert tui.closed == "Serial port closed. Exiting..."
        assert "Serial port closed" not in capsys.readouterr().out
