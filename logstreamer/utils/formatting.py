"""
Formatting utilities module for logstreamer.

This module renders log entries, activity summaries and log sources for the
command line, as rich tables or as JSON/YAML documents.
"""

from typing import Any, Dict, List, Union
import json

import yaml
from rich.table import Table
from rich.text import Text

from ..core.models import ActivitySummary, LogEntry, LogLevel, LogSource


class FormattingUtils:
    """
    Utility class for formatting operations.
    """

    # Level color mapping
    LEVEL_COLORS = {
        LogLevel.ERROR: 'red',
        LogLevel.WARNING: 'yellow',
        LogLevel.INFO: 'green',
        LogLevel.DEBUG: 'cyan',
        LogLevel.DEFAULT: 'white',
    }

    MESSAGE_WIDTH = 160

    @staticmethod
    def format_level(level: LogLevel) -> Text:
        """
        Format a log level for display.

        Args:
            level: Normalized level

        Returns:
            Styled level text
        """
        color = FormattingUtils.LEVEL_COLORS.get(level, 'white')
        return Text(level.value.upper(), style=f"bold {color}" if level is LogLevel.ERROR else color)

    @staticmethod
    def format_log_entry(entry: LogEntry) -> Text:
        """
        Format a log entry as a single styled line.

        Args:
            entry: Log entry to format

        Returns:
            Styled line: timestamp, level, process[pid], message
        """
        process = entry.process if entry.pid is None else f"{entry.process}[{entry.pid}]"
        line = Text()
        line.append(entry.timestamp, style="dim")
        line.append(" ")
        line.append_text(FormattingUtils.format_level(entry.level))
        line.append(" ")
        line.append(process, style="bold")
        line.append(" ")
        line.append(entry.message)
        return line

    @staticmethod
    def entries_table(entries: List[LogEntry], title: str = "Log entries") -> Table:
        table = Table(title=title, show_lines=False)
        table.add_column("Timestamp", style="dim", no_wrap=True)
        table.add_column("Level")
        table.add_column("Process", style="bold")
        table.add_column("PID", justify="right")
        table.add_column("Message")

        for entry in entries:
            table.add_row(
                entry.timestamp,
                FormattingUtils.format_level(entry.level),
                entry.process,
                "" if entry.pid is None else str(entry.pid),
                FormattingUtils.truncate_text(entry.message, FormattingUtils.MESSAGE_WIDTH),
            )
        return table

    @staticmethod
    def summary_table(summaries: List[ActivitySummary], title: str = "Active processes") -> Table:
        table = Table(title=title)
        table.add_column("Process", style="bold")
        table.add_column("Entries", justify="right")
        table.add_column("Last seen", style="dim")

        for summary in summaries:
            table.add_row(summary.name, str(summary.count), summary.last_seen)
        return table

    @staticmethod
    def sources_table(sources: List[LogSource], title: str = "Log files") -> Table:
        table = Table(title=title)
        table.add_column("Name", style="bold")
        table.add_column("Size", justify="right")
        table.add_column("Modified", style="dim")
        table.add_column("Path")

        for source in sources:
            table.add_row(source.name, FormattingUtils.format_bytes(source.size), source.modified, source.path)
        return table

    @staticmethod
    def to_records(items: List[Union[LogEntry, ActivitySummary, LogSource]]) -> List[Dict[str, Any]]:
        return [item.to_dict() for item in items]

    @staticmethod
    def format_json(data: Any, indent: int = 2) -> str:
        """JSON text for ``data``; ``indent=None`` gives a single line."""
        return json.dumps(data, indent=indent, default=str, ensure_ascii=False)

    @staticmethod
    def format_yaml(data: Any) -> str:
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    @staticmethod
    def format_bytes(size: Union[int, float]) -> str:
        """Human-readable file size, e.g. ``"4.0 KB"``."""
        value = float(size)
        for unit in ('B', 'KB', 'MB', 'GB'):
            if value < 1024:
                return f"{value:.1f} {unit}"
            value /= 1024
        return f"{value:.1f} TB"

    @staticmethod
    def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
        """Shorten ``text`` to at most ``max_length`` characters, marking the cut with ``suffix``."""
        if len(text) <= max_length:
            return text
        if max_length <= len(suffix):
            return suffix[:max_length]
        return text[:max_length - len(suffix)] + suffix
