"""
Settings management for logstreamer.

This module provides application-wide settings and constants.
"""

from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings and constants."""

    # Default paths
    DEFAULT_CONFIG_PATH: str = "logstreamer.yaml"

    # Host log facility
    DEFAULT_EXECUTABLE: str = "log"
    DEFAULT_STYLE: str = "compact"
    DEFAULT_STREAM_LEVEL: str = "info"
    DEFAULT_TERMINATE_TIMEOUT: float = 5.0  # seconds
    DEFAULT_QUERY_TIMEOUT: float = 120.0  # seconds

    # Buffering
    DEFAULT_BUFFER_CAPACITY: int = 1000
    DEFAULT_QUERY_LIMIT: int = 500
    DEFAULT_RECENT_COUNT: int = 100
    DEFAULT_QUERY_MINUTES: int = 5

    # Logging settings
    DEFAULT_LOG_LEVEL: str = "INFO"

    # Plain log file discovery
    SOURCE_DIRECTORIES: tuple = ('/var/log', '~/Library/Logs')
    SOURCE_EXTENSIONS: tuple = ('.log', '.txt')

    # Parsed record values
    UNKNOWN_PROCESS: str = "unknown"
    SYSTEM_PROCESS: str = "system"

    def __post_init__(self):
        # Ensure tuples to prevent modification
        if not isinstance(self.SOURCE_DIRECTORIES, tuple):
            self.SOURCE_DIRECTORIES = tuple(self.SOURCE_DIRECTORIES)
        if not isinstance(self.SOURCE_EXTENSIONS, tuple):
            self.SOURCE_EXTENSIONS = tuple(self.SOURCE_EXTENSIONS)
