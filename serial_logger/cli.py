#!/usr/bin/env python3
"""
Command Line Interface for Simple Serial Logger.
"""

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Callable, List, Optional

from . import __version__
from .config import ConfigError, DEFAULT_PREFIX, check_options_from_args, load_config_from_args
from .console import ConsoleWatcher
from .logging_config import get_log_level, setup_logging
from .session import PortSession

BANNER = f"SimpleSerialLogger v{__version__}"


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="serial_logger",
        description="Log timestamped serial port data to rotating text files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Listen on COM3 at 9600 baud, one file for the whole session
  serial_logger --port COM3 --baud 9600

  # New file every hour, custom prefix
  serial_logger -p /dev/ttyUSB0 -b 115200 --prefix scale -m Hourly

  # Poll a meter once per second and log whatever it answers
  serial_logger -p COM4 -b 19200 -c "READ?" -r Buffer

  # Live view with periodic statistics
  serial_logger -p COM3 -b 9600 --tui --stats-interval 60
"""
    )

    # Version
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    # Serial port options
    port_group = parser.add_argument_group("Serial Port Options")
    port_group.add_argument(
        "--port", "-p",
        default=None,
        help="Serial port name (e.g. COM3, /dev/ttyUSB0). Prompted if omitted."
    )
    port_group.add_argument(
        "--baud", "-b",
        type=int,
        default=None,
        help="Baud rate (e.g. 9600, 19200). Prompted if omitted."
    )
    port_group.add_argument(
        "--timeout",
        type=int,
        default=500,
        help="Read/write timeout in milliseconds (default: 500)"
    )

    # File options
    file_group = parser.add_argument_group("Data File Options")
    file_group.add_argument(
        "--prefix",
        default=DEFAULT_PREFIX,
        help=f"Data file name prefix (default: {DEFAULT_PREFIX})"
    )
    file_group.add_argument(
        "--mode", "-m",
        type=str.capitalize,
        choices=["One", "Hourly", "Daily"],
        default="One",
        help="File mode: One (default), Hourly or Daily"
    )
    file_group.add_argument(
        "--output-dir", "-o",
        default=".",
        help="Directory for data files (default: current directory)"
    )

    # Session options
    session_group = parser.add_argument_group("Session Options")
    session_group.add_argument(
        "--command", "-c",
        default=None,
        help="Command to send on every poll interval (default: listen only)"
    )
    session_group.add_argument(
        "--read-mode", "-r",
        type=str.capitalize,
        choices=["Line", "Buffer"],
        default="Line",
        help="Read whole lines (default) or drain the receive buffer"
    )
    session_group.add_argument(
        "--poll-interval",
        type=float,
        default=1.0,
        help="Seconds between poll commands (default: 1.0)"
    )

    # Logging options
    log_group = parser.add_argument_group("Logging Options")
    log_group.add_argument(
        "--log-level",
        choices=["debug", "info", "warn", "error"],
        default="info",
        help="Log level (default: info)"
    )
    log_group.add_argument(
        "--log-file",
        default=None,
        help="Diagnostic log file (default: stdout only)"
    )

    # Display options
    display_group = parser.add_argument_group("Display Options")
    display_group.add_argument(
        "--tui",
        action="store_true",
        help="Enable terminal UI with live record display"
    )
    display_group.add_argument(
        "--stats-interval",
        type=int,
        default=0,
        help="Log statistics every N seconds (0 = disabled)"
    )

    return parser


def prompt_port(input_func: Callable[[str], str] = input) -> Optional[str]:
    """
    Ask the operator for a port name.

    Returns:
        Port name, or None if nothing usable was entered
    """
    print("Enter the serial port number (e.g. COM2):")
    try:
        answer = input_func("").strip()
    except (EOFError, KeyboardInterrupt):
        return None
    return answer or None


def prompt_baud(input_func: Callable[[str], str] = input) -> Optional[int]:
    """
    Ask the operator for a baud rate.

    Returns:
        Positive baud rate, or None if the answer was not one
    """
    print("Enter the baud rate (e.g., 9600, 19200):")
    try:
        answer = input_func("").strip()
    except (EOFError, KeyboardInterrupt):
        return None

    try:
        baud_rate = int(answer)
    except ValueError:
        return None
    return baud_rate if baud_rate > 0 else None


def validate_args(args) -> bool:
    """
    Validate command line arguments.

    Args:
        args: Parsed argparse namespace

    Returns:
        True if valid, False otherwise
    """
    output_dir = Path(args.output_dir)
    if not output_dir.is_dir():
        print(f"Error: Output directory not found: {args.output_dir}", file=sys.stderr)
        return False

    if args.poll_interval != 1.0 and args.command is None:
        print("Warning: --poll-interval has no effect without --command", file=sys.stderr)

    return True


def main(argv: Optional[List[str]] = None,
         input_func: Callable[[str], str] = input) -> int:
    """
    Main entry point for the serial logger.

    Args:
        argv: Command line arguments (default: sys.argv[1:])
        input_func: Source of interactive answers

    Returns:
        Exit code: 0 once the session ends or an answer is invalid,
        non-zero for bad option values
    """
    print(f"{BANNER}\n")

    parser = create_parser()
    args = parser.parse_args(argv)

    # Reject bad flag values before asking the operator anything
    if not validate_args(args):
        return 1

    try:
        check_options_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Resolve port and baud rate, prompting when missing
    port = (args.port or "").strip() or prompt_port(input_func)
    if not port:
        print("Invalid port name. Exiting...")
        return 0

    baud_rate = args.baud if args.baud is not None and args.baud > 0 else prompt_baud(input_func)
    if not baud_rate:
        print("Invalid baud rate. Exiting...")
        return 0

    try:
        config = load_config_from_args(args, port, baud_rate)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    log_level = get_log_level(config.log_level)
    setup_logging(
        level=log_level,
        verbose=(log_level == logging.DEBUG),
        log_file=config.log_file,
        quiet=config.tui,
    )
    logger = logging.getLogger('serial_logger')

    if not config.tui:
        logger.info(f"Port: {config.port} @ {config.baud_rate} bps, "
                    f"file mode: {config.rotation_mode.value}, "
                    f"read mode: {config.read_mode.value}")

    # TUI setup
    tui = None
    if config.tui:
        from .visualization.tui import SessionTUI
        tui = SessionTUI.from_config(config)

    cancel_event = threading.Event()
    session = PortSession(config, cancel_event=cancel_event, tui=tui)

    # Setup signal handlers
    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        cancel_event.set()

    previous_handlers = {
        signum: signal.signal(signum, signal_handler)
        for signum in (signal.SIGINT, signal.SIGTERM)
    }

    watcher = ConsoleWatcher(cancel_event)
    watcher.start()

    tui_thread = tui.start_async() if tui else None

    try:
        return session.run()
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)
        if tui:
            tui.stop()
            tui_thread.join(timeout=1.0)
            tui.print_summary(session.stats)


if __name__ == "__main__":
    sys.exit(main())
