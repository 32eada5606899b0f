"""
Configuration management for logstreamer.

Configuration is grouped into sections (host, buffer, query, sources,
logging), read from YAML and overridable through LOGSTREAMER_* environment
variables.
"""

import yaml
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict, field
from .settings import Settings


_settings = Settings()


@dataclass
class HostConfig:
    """Configuration for the host log facility commands."""
    executable: str = _settings.DEFAULT_EXECUTABLE
    style: str = _settings.DEFAULT_STYLE
    stream_level: str = _settings.DEFAULT_STREAM_LEVEL
    terminate_timeout: float = _settings.DEFAULT_TERMINATE_TIMEOUT  # seconds
    query_timeout: float = _settings.DEFAULT_QUERY_TIMEOUT  # seconds


@dataclass
class BufferConfig:
    """Configuration for the rolling window and query bounds."""
    capacity: int = _settings.DEFAULT_BUFFER_CAPACITY
    query_limit: int = _settings.DEFAULT_QUERY_LIMIT
    default_recent: int = _settings.DEFAULT_RECENT_COUNT


@dataclass
class QueryConfig:
    """Configuration for historical queries."""
    default_minutes: int = _settings.DEFAULT_QUERY_MINUTES


@dataclass
class SourcesConfig:
    """Configuration for plain log file discovery."""
    directories: List[str] = field(default_factory=lambda: list(_settings.SOURCE_DIRECTORIES))
    extensions: List[str] = field(default_factory=lambda: list(_settings.SOURCE_EXTENSIONS))


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = _settings.DEFAULT_LOG_LEVEL
    file: Optional[str] = None


_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

_SECTIONS = {
    'host': HostConfig,
    'buffer': BufferConfig,
    'query': QueryConfig,
    'sources': SourcesConfig,
    'logging': LoggingConfig,
}


@dataclass
class Config:
    """Main configuration class for logstreamer."""
    host: HostConfig = field(default_factory=HostConfig)
    buffer: BufferConfig = field(default_factory=BufferConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        # Environment variable overrides
        if os.getenv('LOGSTREAMER_LOG_LEVEL'):
            self.logging.level = os.getenv('LOGSTREAMER_LOG_LEVEL')
        if os.getenv('LOGSTREAMER_EXECUTABLE'):
            self.host.executable = os.getenv('LOGSTREAMER_EXECUTABLE')
        if os.getenv('LOGSTREAMER_BUFFER_CAPACITY'):
            self.buffer.capacity = int(os.getenv('LOGSTREAMER_BUFFER_CAPACITY'))
        if os.getenv('LOGSTREAMER_QUERY_LIMIT'):
            self.buffer.query_limit = int(os.getenv('LOGSTREAMER_QUERY_LIMIT'))

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Read configuration from YAML.

        ``LOGSTREAMER_CONFIG`` names the file when ``config_path`` is omitted.
        A missing or empty file yields the defaults.
        """
        if not config_path and os.getenv('LOGSTREAMER_CONFIG'):
            config_path = Path(os.getenv('LOGSTREAMER_CONFIG'))
        if not config_path or not config_path.exists():
            return cls()

        with open(config_path) as f:
            return cls.from_dict(yaml.safe_load(f) or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """
        Create Config instance from dictionary.

        Unknown top-level sections are ignored.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance
        """
        sections = {}
        for name, section_class in _SECTIONS.items():
            section_data = data.get(name)
            sections[name] = section_class(**section_data) if isinstance(section_data, dict) else section_class()
        return cls(**sections)

    @classmethod
    def get_default_config_dict(cls) -> Dict[str, Any]:
        """Return the default configuration as a plain dictionary."""
        return {name: asdict(section_class()) for name, section_class in _SECTIONS.items()}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, config_path: Path) -> None:
        """Write the configuration as YAML, creating parent directories."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """
        Validate the configuration and return a list of errors.

        Returns:
            List of validation errors, empty if valid
        """
        errors = []

        if not self.host.executable:
            errors.append("Host executable must not be empty")
        if self.host.terminate_timeout <= 0:
            errors.append("Host terminate timeout must be positive")
        if self.host.query_timeout <= 0:
            errors.append("Host query timeout must be positive")

        if self.buffer.capacity <= 0:
            errors.append("Buffer capacity must be positive")
        if self.buffer.query_limit <= 0:
            errors.append("Buffer query limit must be positive")
        if self.buffer.default_recent <= 0:
            errors.append("Buffer default recent count must be positive")

        if self.query.default_minutes <= 0:
            errors.append("Query default minutes must be positive")

        if self.logging.level.upper() not in _LOG_LEVELS:
            errors.append(f"Unknown logging level {self.logging.level!r}, expected one of {', '.join(_LOG_LEVELS)}")

        return errors

    def get_env_overrides(self) -> Dict[str, Any]:
        """
        Get configuration values that are overridden by environment variables.

        Returns:
            Dictionary of environment variable overrides
        """
        overrides = {}

        if os.getenv('LOGSTREAMER_LOG_LEVEL'):
            overrides['logging.level'] = os.getenv('LOGSTREAMER_LOG_LEVEL')
        if os.getenv('LOGSTREAMER_EXECUTABLE'):
            overrides['host.executable'] = os.getenv('LOGSTREAMER_EXECUTABLE')
        if os.getenv('LOGSTREAMER_BUFFER_CAPACITY'):
            overrides['buffer.capacity'] = int(os.getenv('LOGSTREAMER_BUFFER_CAPACITY'))
        if os.getenv('LOGSTREAMER_QUERY_LIMIT'):
            overrides['buffer.query_limit'] = int(os.getenv('LOGSTREAMER_QUERY_LIMIT'))

        return overrides

    def apply_cli_overrides(self, cli_options: Dict[str, Any]) -> None:
        """
        Apply command-line interface options as overrides to the configuration.

        Args:
            cli_options: Dictionary of CLI options to apply
        """
        if cli_options.get('log_level'):
            self.logging.level = cli_options['log_level']
        if cli_options.get('executable'):
            self.host.executable = cli_options['executable']
        if cli_options.get('capacity'):
            self.buffer.capacity = cli_options['capacity']
