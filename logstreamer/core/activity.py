"""
Per-process activity summaries over the rolling buffer.
"""

from typing import Dict, Iterable, List

from .models import ActivitySummary, LogEntry


def summarize(entries: Iterable[LogEntry]) -> List[ActivitySummary]:
    """
    Group entries by process name.

    ``last_seen`` is the greatest timestamp string of each group; timestamps
    are compared as text, so it is chronological only while the host keeps a
    single timestamp format.

    Args:
        entries: Entries to summarize, typically a buffer snapshot

    Returns:
        One summary per process, busiest first, ties ordered by name
    """
    counts: Dict[str, int] = {}
    last_seen: Dict[str, str] = {}

    for entry in entries:
        name = entry.process
        counts[name] = counts.get(name, 0) + 1
        if name not in last_seen or entry.timestamp > last_seen[name]:
            last_seen[name] = entry.timestamp

    summaries = [ActivitySummary(name, count, last_seen[name]) for name, count in counts.items()]
    summaries.sort(key=lambda s: (-s.count, s.name))
    return summaries
