"""
logstreamer - follow, buffer and query the host unified log.

This package tails the operating system's log facility, normalizes every
line into a uniform record, keeps a bounded rolling window of recent entries
and answers time-windowed history queries.
"""

from .__version__ import __version__

# Import main modules for easy access
from . import config
from . import core
from . import parsers
from . import utils

from .core.log_service import LogService
from .core.models import LogEntry, LogLevel

# Define what gets imported with "from logstreamer import *"
__all__ = [
    "config",
    "core",
    "parsers",
    "utils",
    "LogService",
    "LogEntry",
    "LogLevel",
    "__version__"
]


# Define the CLI entry point function
def main():
    """Main entry point for the CLI."""
    from .cli import main as cli_main
    return cli_main()
