"""
Simple Serial Logger - Package entry point.

Allows running the logger with: python -m serial_logger
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
