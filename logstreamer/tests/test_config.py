"""
Tests for configuration loading, validation and persistence.
"""

import logging
from pathlib import Path

import yaml

from logstreamer.config.config import Config
from logstreamer.config.settings import Settings
from logstreamer.utils.log_setup import resolve_log_level, setup_logging


class TestConfig:
    """Tests for the Config class."""

    def test_defaults(self, sample_config):
        config = Config()

        assert config.host.executable == 'log'
        assert config.host.style == 'compact'
        assert config.buffer.capacity == 1000
        assert config.buffer.query_limit == 500
        assert config.query.default_minutes == 5
        assert config.sources.directories == ['/var/log', '~/Library/Logs']
        assert config.validate() == []

    def test_load_missing_file_gives_defaults(self, sample_config, tmp_path):
        config = Config.load(tmp_path / "absent.yaml")
        assert config.buffer.capacity == 1000

    def test_load_from_file(self, sample_config, tmp_path):
        path = tmp_path / "logstreamer.yaml"
        path.write_text(yaml.dump({
            'host': {'executable': '/usr/bin/log'},
            'buffer': {'capacity': 50},
            'unknown': {'ignored': True},
        }))

        config = Config.load(path)

        assert config.host.executable == '/usr/bin/log'
        assert config.host.style == 'compact'
        assert config.buffer.capacity == 50

    def test_load_empty_file(self, sample_config, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Config.load(path).to_dict() == Config().to_dict()

    def test_config_path_from_environment(self, sample_config, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text(yaml.dump({'query': {'default_minutes': 42}}))
        monkeypatch.setenv('LOGSTREAMER_CONFIG', str(path))

        assert Config.load().query.default_minutes == 42

    def test_environment_overrides(self, sample_config, monkeypatch):
        monkeypatch.setenv('LOGSTREAMER_EXECUTABLE', '/opt/log')
        monkeypatch.setenv('LOGSTREAMER_BUFFER_CAPACITY', '20')
        monkeypatch.setenv('LOGSTREAMER_LOG_LEVEL', 'DEBUG')

        config = Config()

        assert config.host.executable == '/opt/log'
        assert config.buffer.capacity == 20
        assert config.logging.level == 'DEBUG'
        assert config.get_env_overrides()['buffer.capacity'] == 20

    def test_save_round_trip(self, sample_config, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        config = Config()
        config.buffer.query_limit = 123

        config.save(path)

        assert Config.load(path).buffer.query_limit == 123

    def test_validate_reports_errors(self, sample_config):
        config = Config()
        config.buffer.capacity = 0
        config.query.default_minutes = -1
        config.logging.level = 'LOUD'
        config.host.executable = ''

        errors = config.validate()

        assert len(errors) == 4
        assert any('capacity' in error for error in errors)

    def test_apply_cli_overrides(self, sample_config):
        config = Config()
        config.apply_cli_overrides({'log_level': 'WARNING', 'capacity': 10})

        assert config.logging.level == 'WARNING'
        assert config.buffer.capacity == 10

    def test_default_config_dict(self, sample_config):
        data = Config.get_default_config_dict()
        assert set(data) == {'host', 'buffer', 'query', 'sources', 'logging'}
        assert data['host']['executable'] == 'log'


class TestSettings:
    """Tests for the Settings class."""

    def test_tuples_are_enforced(self):
        settings = Settings(SOURCE_DIRECTORIES=['/tmp'])
        assert settings.SOURCE_DIRECTORIES == ('/tmp',)

    def test_default_config_path(self):
        assert Settings().DEFAULT_CONFIG_PATH == 'logstreamer.yaml'


class TestLogSetup:
    """Tests for logging configuration helpers."""

    def test_resolve_log_level(self, monkeypatch):
        monkeypatch.delenv('LOGSTREAMER_LOG_LEVEL', raising=False)
        assert resolve_log_level() == "INFO"
        assert resolve_log_level("DEBUG") == "DEBUG"

        monkeypatch.setenv('LOGSTREAMER_LOG_LEVEL', 'ERROR')
        assert resolve_log_level("DEBUG") == "ERROR"

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logstreamer.log"
        root = logging.getLogger()
        before = list(root.handlers)
        try:
            setup_logging("DEBUG", log_file)
            logging.getLogger("logstreamer.test").warning("written to file")
            for handler in root.handlers:
                handler.flush()
            assert "written to file" in Path(log_file).read_text()
        finally:
            for handler in list(root.handlers):
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()
