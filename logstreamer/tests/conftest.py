"""
Pytest configuration for logstreamer tests.

This file contains fixtures and fake subprocesses standing in for the host
``log`` command.
"""

import asyncio
import pytest

from logstreamer.config.config import Config
from logstreamer.core.log_context import LogContext
from logstreamer.core.models import LogEntry, LogLevel
from logstreamer.core.stream_supervisor import READ_LIMIT


COMPACT_LINE = b"2024-01-01 12:00:00.000000+0300 myhost.local kernel[0] <Notice>: disk mounted\n"


class StreamProcess:
    """Fake ``log stream`` subprocess whose stdout is fed by the test."""

    def __init__(self, lines=(), eof=False, ignore_terminate=False, pid=4242):
        self.pid = pid
        self.returncode = None
        self.stdout = asyncio.StreamReader(limit=READ_LIMIT)
        self.terminated = False
        self.killed = False
        self.ignore_terminate = ignore_terminate
        self._exited = asyncio.Event()

        for line in lines:
            self.stdout.feed_data(line)
        if eof:
            self.stdout.feed_eof()

    def terminate(self):
        self.terminated = True
        if not self.ignore_terminate:
            self._exit(-15)

    def kill(self):
        self.killed = True
        self._exit(-9)

    def _exit(self, code):
        if self.returncode is None:
            self.returncode = code
            self.stdout.feed_eof()
            self._exited.set()

    async def wait(self):
        await self._exited.wait()
        return self.returncode


class QueryProcess:
    """Fake ``log show`` subprocess with canned output."""

    def __init__(self, stdout=b'', stderr=b'', returncode=0, hang=False, pid=4343):
        self.pid = pid
        self.returncode = None
        self.killed = False
        self._stdout = stdout
        self._stderr = stderr
        self._final_returncode = returncode
        self._hang = hang

    async def communicate(self):
        if self._hang:
            await asyncio.sleep(3600)
        self.returncode = self._final_returncode
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        return self.returncode


class SpawnRecorder:
    """Replacement for ``asyncio.create_subprocess_exec`` that records calls."""

    def __init__(self):
        self.calls = []
        self.processes = []
        self.alive_at_spawn = []
        self.factory = StreamProcess
        self.error = None

    async def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.error is not None:
            raise self.error
        self.alive_at_spawn.append(sum(1 for p in self.processes if p.returncode is None))
        process = self.factory()
        self.processes.append(process)
        return process


@pytest.fixture
def sample_config(monkeypatch):
    """Create a sample configuration for testing."""
    for name in ('LOGSTREAMER_LOG_LEVEL', 'LOGSTREAMER_EXECUTABLE',
                 'LOGSTREAMER_BUFFER_CAPACITY', 'LOGSTREAMER_QUERY_LIMIT', 'LOGSTREAMER_CONFIG'):
        monkeypatch.delenv(name, raising=False)
    config = Config()
    config.host.terminate_timeout = 0.5  # Faster for tests
    config.host.query_timeout = 5.0
    return config


@pytest.fixture
def context(sample_config):
    """Create a fresh log context for testing."""
    return LogContext(sample_config)


@pytest.fixture
def spawn_recorder(monkeypatch):
    """Patch subprocess creation with a recorder."""
    recorder = SpawnRecorder()
    monkeypatch.setattr(asyncio, 'create_subprocess_exec', recorder)
    return recorder


@pytest.fixture
def eventually():
    """Return a coroutine function polling a condition until it holds."""
    async def wait_for(condition, timeout=2.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not condition():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.005)
    return wait_for


@pytest.fixture
def make_entry():
    """Factory for log entries."""
    def factory(process='kernel', timestamp='2024-01-01 12:00:00', message='message',
                level=LogLevel.INFO, pid=0):
        return LogEntry(timestamp=timestamp, level=level, process=process, message=message, pid=pid)
    return factory

