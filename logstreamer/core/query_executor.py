"""
Historical query module for logstreamer.

Runs the host's one-shot ``log show`` command for a trailing time window and
parses its output. Querying never raises for operational problems: a missing
executable, a non-zero exit or a timeout all produce an empty result and a
``query_failed`` event.
"""

import asyncio
import logging
from typing import List, Optional

from .event_bus import EventBus, QueryEvent, QUERY_FAILED
from .exceptions import QueryExecutionError
from .models import LogEntry
from ..config.settings import Settings
from ..parsers.log_parser import LogParser


class QueryExecutor:
    """
    One-shot retrieval of recent history from the host log facility.
    """

    def __init__(self, config=None, parser: Optional[LogParser] = None,
                 event_bus: Optional[EventBus] = None):
        """
        Initialize the query executor.

        Args:
            config: Application configuration (optional)
            parser: Line parser, a default ``LogParser`` when omitted
            event_bus: Bus receiving ``query_failed`` events (optional)
        """
        self.config = config
        self.parser = parser or LogParser(config)
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

        settings = Settings()
        if config is not None:
            self.executable = config.host.executable
            self.style = config.host.style
            self.timeout = config.host.query_timeout
            self.limit = config.buffer.query_limit
        else:
            self.executable = settings.DEFAULT_EXECUTABLE
            self.style = settings.DEFAULT_STYLE
            self.timeout = settings.DEFAULT_QUERY_TIMEOUT
            self.limit = settings.DEFAULT_QUERY_LIMIT

    def build_command(self, minutes: int, predicate: Optional[str] = None) -> List[str]:
        """
        Command line for a history query.

        Args:
            minutes: Length of the trailing window
            predicate: Filter expression passed through untouched

        Returns:
            Argument vector for the subprocess
        """
        command = [self.executable, 'show', '--last', f'{minutes}m', '--style', self.style]
        if predicate:
            command.extend(['--predicate', predicate])
        return command

    async def query(self, minutes: int, predicate: Optional[str] = None) -> List[LogEntry]:
        """
        Fetch entries logged during the last ``minutes`` minutes.

        Args:
            minutes: Positive window length in minutes
            predicate: Optional host filter expression, forwarded verbatim

        Returns:
            At most ``limit`` entries, oldest first; empty on any failure
        """
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise ValueError(f"minutes must be a positive integer, got {minutes!r}")

        command = self.build_command(minutes, predicate)
        try:
            output = await self._run(command)
        except QueryExecutionError as e:
            self.logger.warning(f"Log query failed: {e}")
            if self.event_bus is not None:
                self.event_bus.publish(QueryEvent(
                    type=QUERY_FAILED,
                    data={'command': command, 'error': e},
                    source='query_executor',
                ))
            return []

        entries = self.parse_output(output)
        self.logger.debug(f"Log query returned {len(entries)} entries")
        return entries

    async def query_by_process(self, process_name: str, minutes: int) -> List[LogEntry]:
        """Query the window for entries from one process."""
        escaped = process_name.replace('\\', '\\\\').replace('"', '\\"')
        return await self.query(minutes, f'process == "{escaped}"')

    def parse_output(self, output: str) -> List[LogEntry]:
        """
        Parse captured output, keeping only the newest ``limit`` entries.

        Args:
            output: Full standard output of the query command

        Returns:
            Parsed entries, oldest first
        """
        entries = []
        for line in output.split('\n'):
            entry = self.parser.parse(line)
            if entry is not None:
                entries.append(entry)
        if len(entries) > self.limit:
            entries = entries[-self.limit:]
        return entries

    async def _run(self, command: List[str]) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            raise QueryExecutionError(f"cannot run {command[0]!r}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            try:
                process.kill()
            except ProcessLookupError:
                pass  # Process already exited
            await process.wait()
            raise QueryExecutionError(f"{command[0]!r} timed out after {self.timeout}s") from e
        except OSError as e:
            raise QueryExecutionError(f"reading output of {command[0]!r} failed: {e}") from e

        if process.returncode != 0:
            detail = stderr.decode('utf-8', errors='replace').strip()
            raise QueryExecutionError(
                f"{command[0]!r} exited with status {process.returncode}" + (f": {detail}" if detail else "")
            )
        return stdout.decode('utf-8', errors='replace')
