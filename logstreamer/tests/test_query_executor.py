"""
Tests for historical queries.
"""

import pytest

from conftest import QueryProcess
from logstreamer.core.event_bus import EventBus, QUERY_FAILED
from logstreamer.core.exceptions import QueryExecutionError
from logstreamer.core.query_executor import QueryExecutor


def _compact_output(count):
    lines = [f"2024-01-01 12:00:00.{i:06d}+0300 host proc[{i}] message {i}" for i in range(count)]
    return ("\n".join(lines) + "\n").encode()


class TestQueryExecutor:
    """Tests for the QueryExecutor class."""

    def test_build_command(self, sample_config):
        executor = QueryExecutor(sample_config)

        assert executor.build_command(5) == ['log', 'show', '--last', '5m', '--style', 'compact']
        assert executor.build_command(30, 'messageType == error') == [
            'log', 'show', '--last', '30m', '--style', 'compact', '--predicate', 'messageType == error',
        ]

    def test_defaults_without_config(self):
        executor = QueryExecutor()
        assert executor.executable == 'log'
        assert executor.limit == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize("minutes", [0, -5, True, 2.5, "5"])
    async def test_rejects_invalid_minutes(self, sample_config, minutes):
        executor = QueryExecutor(sample_config)
        with pytest.raises(ValueError):
            await executor.query(minutes)

    @pytest.mark.asyncio
    async def test_parses_output(self, sample_config, spawn_recorder):
        spawn_recorder.factory = lambda: QueryProcess(stdout=_compact_output(3) + b"\n\nloose text\n")
        executor = QueryExecutor(sample_config)

        entries = await executor.query(10, 'process == "proc"')

        args, _ = spawn_recorder.calls[0]
        assert args[-2:] == ('--predicate', 'process == "proc"')
        assert [e.pid for e in entries] == [0, 1, 2, None]
        assert entries[-1].message == "loose text"

    @pytest.mark.asyncio
    async def test_keeps_newest_entries(self, sample_config, spawn_recorder):
        spawn_recorder.factory = lambda: QueryProcess(stdout=_compact_output(600))
        executor = QueryExecutor(sample_config)

        entries = await executor.query(60)

        assert len(entries) == 500
        assert entries[0].message == "message 100"
        assert entries[-1].message == "message 599"

    @pytest.mark.asyncio
    async def test_limit_from_config(self, sample_config, spawn_recorder):
        sample_config.buffer.query_limit = 2
        spawn_recorder.factory = lambda: QueryProcess(stdout=_compact_output(5))

        entries = await QueryExecutor(sample_config).query(1)

        assert [e.pid for e in entries] == [3, 4]

    @pytest.mark.asyncio
    async def test_non_zero_exit_returns_empty(self, sample_config, spawn_recorder):
        spawn_recorder.factory = lambda: QueryProcess(stdout=_compact_output(3), stderr=b"bad predicate",
                                                      returncode=64)
        bus = EventBus()
        failures = []
        bus.subscribe(QUERY_FAILED, failures.append)
        executor = QueryExecutor(sample_config, event_bus=bus)

        assert await executor.query(5, 'nonsense ==') == []

        assert len(failures) == 1
        error = failures[0].data['error']
        assert isinstance(error, QueryExecutionError)
        assert "bad predicate" in str(error)

    @pytest.mark.asyncio
    async def test_missing_executable_returns_empty(self, sample_config):
        sample_config.host.executable = '/nonexistent/logstreamer-test/log'
        bus = EventBus()
        failures = []
        bus.subscribe(QUERY_FAILED, failures.append)

        entries = await QueryExecutor(sample_config, event_bus=bus).query(5)

        assert entries == []
        assert len(failures) == 1

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self, sample_config, spawn_recorder):
        sample_config.host.query_timeout = 0.05
        spawn_recorder.factory = lambda: QueryProcess(hang=True)

        entries = await QueryExecutor(sample_config).query(5)

        assert entries == []
        assert spawn_recorder.processes[0].killed

    @pytest.mark.asyncio
    async def test_query_by_process(self, sample_config, spawn_recorder):
        spawn_recorder.factory = lambda: QueryProcess()
        executor = QueryExecutor(sample_config)

        await executor.query_by_process('kernel', 5)
        await executor.query_by_process('odd"name\\', 5)

        assert spawn_recorder.calls[0][0][-1] == 'process == "kernel"'
        assert spawn_recorder.calls[1][0][-1] == 'process == "odd\\"name\\\\"'

    def test_only_newlines_separate_records(self, sample_config):
        executor = QueryExecutor(sample_config)
        output = ("2024-01-01 12:00:00 host app[7] first part\u2028second part\x0cthird\x85end\r\n"
                  "2024-01-01 12:00:01 host app[7] next\n")

        entries = executor.parse_output(output)

        assert [(e.process, e.message) for e in entries] == [
            ("app", "first part\u2028second part\x0cthird\x85end"),
            ("app", "next"),
        ]

    def test_parse_output_without_subprocess(self, sample_config):
        executor = QueryExecutor(sample_config)
        assert executor.parse_output("") == []
        assert len(executor.parse_output(_compact_output(2).decode())) == 2
