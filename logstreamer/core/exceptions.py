"""
Exceptions describing operational failures of the host log facility.

These never escape the public operations; they are carried as the ``error``
field of failure events so subscribers can tell what went wrong.
"""


class LogStreamError(Exception):
    """Base exception for host log facility failures."""
    pass


class StreamSpawnError(LogStreamError):
    """Raised when the continuous stream subprocess cannot be launched."""
    pass


class QueryExecutionError(LogStreamError):
    """Raised when a one-shot history query cannot produce output."""
    pass
