"""
Stream supervision module for logstreamer.

This module runs the host's continuous ``log stream`` command in the
background, parses every line it prints and appends the result to the
context's rolling buffer.
"""

import asyncio
import logging
from typing import List, Optional

from .event_bus import (
    StreamEvent, LOG_ENTRY_ADDED, STREAM_STARTED, STREAM_ENDED, STREAM_SPAWN_FAILED,
)
from .exceptions import StreamSpawnError
from .log_context import LogContext
from ..config.settings import Settings
from ..parsers.log_parser import LogParser


# StreamReader line limit; unified log lines can be far longer than asyncio's 64 KiB default
READ_LIMIT = 1024 * 1024


class StreamSupervisor:
    """
    Owns the lifecycle of the background ``log stream`` subprocess.

    ``start()`` and ``stop()`` return immediately. The actual work happens in
    an asyncio task; ``wait_stopped()`` lets a caller wait for the teardown to
    finish.
    """

    def __init__(self, context: LogContext, parser: Optional[LogParser] = None):
        """
        Initialize the supervisor.

        Args:
            context: Shared context owning the buffer and the running flag
            parser: Line parser, a default ``LogParser`` when omitted
        """
        self.context = context
        self.config = context.config
        self.parser = parser or LogParser(self.config)
        self.logger = logging.getLogger(__name__)

        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_requested: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self.context.stream_running

    def build_command(self) -> List[str]:
        """Command line for the continuous stream."""
        settings = Settings()
        if self.config is not None:
            host = self.config.host
            return [host.executable, 'stream', '--style', host.style, '--level', host.stream_level]
        return [settings.DEFAULT_EXECUTABLE, 'stream', '--style', settings.DEFAULT_STYLE,
                '--level', settings.DEFAULT_STREAM_LEVEL]

    def start(self) -> None:
        """
        Start streaming unless a stream is already running.

        Must be called from within a running event loop.
        """
        generation = self.context.try_begin_stream()
        if generation is None:
            self.logger.debug("Log stream already running")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.context.end_stream(generation)
            raise

        previous = self._task
        stop_requested = asyncio.Event()
        self._loop = loop
        self._stop_requested = stop_requested
        self._task = loop.create_task(self._run(generation, stop_requested, previous))

    def stop(self) -> None:
        """Ask the running stream to shut down and return immediately."""
        self.context.request_stop()
        loop, stop_requested = self._loop, self._stop_requested
        if loop is not None and stop_requested is not None and not loop.is_closed():
            loop.call_soon_threadsafe(stop_requested.set)

    async def wait_stopped(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the background task has finished its teardown.

        Args:
            timeout: Seconds to wait, None to wait indefinitely

        Returns:
            True if no run is active any more, False on timeout
        """
        task = self._task
        if task is None or task.done():
            return True
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def _run(self, generation: int, stop_requested: asyncio.Event,
                   previous: Optional[asyncio.Task]) -> None:
        command = self.build_command()
        try:
            # A run that is still tearing down keeps its subprocess until it exits
            if previous is not None and not previous.done():
                await asyncio.wait({previous})
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                limit=READ_LIMIT,
            )
        except asyncio.CancelledError:
            self.context.end_stream(generation)
            raise
        except (OSError, ValueError) as e:
            self.logger.warning(f"Failed to start log stream {command[0]!r}: {e}")
            self.context.end_stream(generation)
            self._publish(STREAM_SPAWN_FAILED, {
                'command': command,
                'error': StreamSpawnError(str(e)),
            })
            return

        self.logger.info(f"Log stream started (pid {process.pid})")
        self._publish(STREAM_STARTED, {'command': command, 'pid': process.pid})

        reason = 'stopped'
        read = None
        stop_wait = asyncio.ensure_future(stop_requested.wait())
        try:
            while self.context.is_current(generation):
                read = asyncio.ensure_future(self._read_line(process.stdout))
                done, _ = await asyncio.wait({read, stop_wait}, return_when=asyncio.FIRST_COMPLETED)
                if read not in done:
                    break
                raw = read.result()
                if not raw:
                    reason = 'eof'
                    break
                self._handle_line(raw.decode('utf-8', errors='replace'))
        except OSError as e:
            reason = 'error'
            self.logger.warning(f"Log stream read failed: {e}")
        finally:
            if read is not None and not read.done():
                read.cancel()
            stop_wait.cancel()
            await self._terminate(process)
            self.context.end_stream(generation)

        self.logger.info(f"Log stream ended ({reason})")
        self._publish(STREAM_ENDED, {'reason': reason, 'returncode': process.returncode})

    async def _read_line(self, stdout: asyncio.StreamReader) -> bytes:
        """
        Read one newline-terminated line.

        A line longer than ``READ_LIMIT`` is cut to its first ``READ_LIMIT``
        bytes and the rest of it is discarded, so one oversized message does
        not end the stream. Returns ``b''`` at end of stream.
        """
        head = None
        while True:
            try:
                chunk = await stdout.readuntil(b'\n')
            except asyncio.IncompleteReadError as e:
                chunk = e.partial
            except asyncio.LimitOverrunError as e:
                chunk = await stdout.read(e.consumed)
                if head is None:
                    self.logger.warning(f"Log line longer than {READ_LIMIT} bytes, truncating")
                    head = chunk[:READ_LIMIT]
                continue
            return chunk if head is None else head

    def _handle_line(self, line: str) -> None:
        entry = self.parser.parse(line)
        if entry is None:
            return
        self.context.buffer.append(entry)
        self._publish(LOG_ENTRY_ADDED, entry)

    async def _terminate(self, process) -> None:
        """Terminate the subprocess, killing it if it ignores SIGTERM."""
        if process.returncode is not None:
            return
        timeout = self.config.host.terminate_timeout if self.config is not None else Settings().DEFAULT_TERMINATE_TIMEOUT
        try:
            process.terminate()
            await asyncio.wait_for(process.wait(), timeout=timeout)
        except ProcessLookupError:
            pass  # Process already exited
        except asyncio.TimeoutError:
            self.logger.warning("Log stream did not exit after SIGTERM, killing it")
            try:
                process.kill()
            except ProcessLookupError:
                return
            await process.wait()

    def _publish(self, event_type: str, data) -> None:
        self.context.event_bus.publish(StreamEvent(type=event_type, data=data, source='stream_supervisor'))
