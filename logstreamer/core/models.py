"""
Core data models for logstreamer.
"""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class LogLevel(str, Enum):
    """
    Normalized severity of a log entry.
    """
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"
    DEFAULT = "default"


@dataclass(frozen=True)
class LogEntry:
    """
    Represents one normalized record from the host log facility.

    The timestamp is kept exactly as the host formatted it.
    """
    timestamp: str
    level: LogLevel
    process: str
    message: str = ""
    pid: Optional[int] = None
    subsystem: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['level'] = self.level.value
        return data


@dataclass(frozen=True)
class ActivitySummary:
    """
    Per-process activity derived from the buffered entries.
    """
    name: str
    count: int
    last_seen: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LogSource:
    """
    A plain log file available on the host.
    """
    id: str
    name: str
    path: str
    size: int
    modified: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
