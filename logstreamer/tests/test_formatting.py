"""
Tests for the formatting utilities.
"""

import json

import yaml
from rich.console import Console

from logstreamer.core.models import LogLevel
from logstreamer.utils.formatting import FormattingUtils


class TestFormattingUtils:
    """Tests for the FormattingUtils class."""

    def test_format_log_entry(self, make_entry):
        text = FormattingUtils.format_log_entry(make_entry(process="sshd", pid=77, message="hello",
                                                           level=LogLevel.ERROR))
        assert text.plain == "2024-01-01 12:00:00 ERROR sshd[77] hello"

    def test_format_log_entry_without_pid(self, make_entry):
        text = FormattingUtils.format_log_entry(make_entry(process="system", pid=None, message="raw"))
        assert "system raw" in text.plain

    def test_records_serialize(self, make_entry):
        records = FormattingUtils.to_records([make_entry(level=LogLevel.WARNING)])

        assert json.loads(FormattingUtils.format_json(records))[0]['level'] == 'warning'
        assert yaml.safe_load(FormattingUtils.format_yaml(records))[0]['process'] == 'kernel'
        assert "\n" not in FormattingUtils.format_json(records[0], indent=None)

    def test_entries_table_renders(self, make_entry):
        console = Console(width=200, no_color=True, record=True)
        console.print(FormattingUtils.entries_table([make_entry(message="disk mounted")]))

        assert "disk mounted" in console.export_text()

    def test_format_bytes(self):
        assert FormattingUtils.format_bytes(512) == "512.0 B"
        assert FormattingUtils.format_bytes(4096) == "4.0 KB"
        assert FormattingUtils.format_bytes(3 * 1024 ** 3) == "3.0 GB"

    def test_truncate_text(self):
        assert FormattingUtils.truncate_text("short", 10) == "short"
        assert FormattingUtils.truncate_text("a long message", 9) == "a long..."
        assert FormattingUtils.truncate_text("abcdef", 2) == ".."
