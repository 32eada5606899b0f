"""
Log parser module for logstreamer.

This module turns single lines emitted by the host log facility into
normalized ``LogEntry`` records. Two line shapes are understood:

* structured records, one JSON object per line
  (``{"timestamp": ..., "messageType": ..., "eventMessage": ...}``)
* compact text lines
  (``2024-01-01 12:00:00.000000+0300 host kernel[0] <Notice>: message``)

Anything else becomes a fallback entry carrying the raw text, so parsing
never fails for a non-empty line.
"""

import json
from typing import Any, Dict, Optional

from .base_parser import BaseParser
from ..config.settings import Settings
from ..core.models import LogEntry, LogLevel


# Checked in order; the first matching rule wins.
_LEVEL_RULES = (
    (('error', 'fault'), LogLevel.ERROR),
    (('warn',), LogLevel.WARNING),
    (('info', 'notice'), LogLevel.INFO),
    (('debug',), LogLevel.DEBUG),
)


# Bracketed ids are 32-bit signed integers
_PID_MIN, _PID_MAX = -2 ** 31, 2 ** 31 - 1


def classify_level(value: Optional[str]) -> LogLevel:
    """
    Map a free-form severity string onto a ``LogLevel``.

    Args:
        value: Severity text such as ``"Error"``, ``"Notice"`` or ``"Fault"``

    Returns:
        The matching level, ``LogLevel.DEFAULT`` when nothing matches
    """
    if not value:
        return LogLevel.DEFAULT
    lowered = value.lower()
    for keywords, level in _LEVEL_RULES:
        if any(keyword in lowered for keyword in keywords):
            return level
    return LogLevel.DEFAULT


class LogParser(BaseParser):
    """
    Parser for lines produced by ``log stream`` and ``log show``.
    """

    def __init__(self, config=None):
        """
        Initialize the log parser.

        Args:
            config: Application configuration
        """
        super().__init__(config)
        settings = Settings()
        self.unknown_process = settings.UNKNOWN_PROCESS
        self.system_process = settings.SYSTEM_PROCESS

    def parse(self, source: str) -> Optional[LogEntry]:
        """
        Parse one line into a log entry.

        Args:
            source: Raw line, with or without its trailing newline

        Returns:
            Parsed entry, or None only when the line is blank
        """
        line = source.strip()
        if not line:
            return None

        if line.startswith('{'):
            entry = self._parse_structured(line)
            if entry is not None:
                return entry

        entry = self._parse_compact(line)
        if entry is not None:
            return entry

        return self._fallback(line)

    def _parse_structured(self, line: str) -> Optional[LogEntry]:
        """Decode a JSON record; None sends the line on to the compact form."""
        try:
            record = json.loads(line)
        except (ValueError, RecursionError):
            return None
        if not isinstance(record, dict):
            return None

        level_text = self.safe_get_str(record, 'messageType') or self.safe_get_str(record, 'level')
        message = self.safe_get_str(record, 'eventMessage')
        if message is None:
            message = self.safe_get_str(record, 'message', '')

        return LogEntry(
            timestamp=self.safe_get_str(record, 'timestamp') or self.now_timestamp(),
            level=classify_level(level_text),
            process=self._structured_process(record),
            pid=self._structured_pid(record.get('processID')),
            message=message,
            subsystem=self.safe_get_str(record, 'subsystem'),
            category=self.safe_get_str(record, 'category'),
        )

    def _structured_process(self, record: Dict[str, Any]) -> str:
        image_path = self.safe_get_str(record, 'processImagePath')
        if image_path:
            name = image_path.rsplit('/', 1)[-1]
            if name:
                return name
        return self.safe_get_str(record, 'process') or self.unknown_process

    def _structured_pid(self, value: Any) -> Optional[int]:
        # Only genuine JSON integers count as a process id
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return None

    def _parse_compact(self, line: str) -> Optional[LogEntry]:
        """Parse ``<date> <time> <host> <name>[<id>] <message>``."""
        parts = line.split(None, 3)
        if len(parts) < 4:
            return None

        date_token, time_token, _host, rest = parts
        if len(date_token) < 10 or '-' not in date_token:
            return None

        open_pos = rest.find('[')
        close_pos = rest.find(']')
        if open_pos < 0 or close_pos < open_pos:
            return None

        message = rest[close_pos + 1:].strip()
        return LogEntry(
            timestamp=f"{date_token} {time_token}",
            level=classify_level(self._level_marker(message)),
            process=rest[:open_pos] or self.unknown_process,
            pid=self._compact_pid(rest[open_pos + 1:close_pos]),
            message=message,
        )

    def _compact_pid(self, text: str) -> Optional[int]:
        pid = self.safe_parse_int(text)
        if pid is None or not _PID_MIN <= pid <= _PID_MAX:
            return None
        return pid

    @staticmethod
    def _level_marker(message: str) -> Optional[str]:
        """Return the text of a leading ``<Tag>`` marker, if any."""
        if message.startswith('<'):
            end = message.find('>')
            if end > 0:
                return message[1:end]
        return None

    def _fallback(self, line: str) -> LogEntry:
        return LogEntry(
            timestamp=self.now_timestamp(),
            level=LogLevel.DEFAULT,
            process=self.system_process,
            pid=None,
            message=line,
        )


_default_parser = LogParser()


def parse_line(line: str) -> Optional[LogEntry]:
    """Parse one line with a shared default parser."""
    return _default_parser.parse(line)
