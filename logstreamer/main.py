"""
Main application entry point for logstreamer.

This module provides the ``run_*`` functions behind each CLI command. Every
function loads configuration, sets up logging, does its work and returns a
process exit code.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from rich.console import Console

from .config.config import Config
from .config.settings import Settings
from .core.event_bus import Event, STREAM_SPAWN_FAILED
from .core.log_service import LogService
from .core.models import LogEntry
from .utils.formatting import FormattingUtils
from .utils.log_setup import setup_logging, resolve_log_level


logger = logging.getLogger(__name__)

# Seconds to wait for the stream subprocess to exit when a command finishes
SHUTDOWN_TIMEOUT = 10.0


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration and configure logging from it."""
    config = Config.load(config_path)
    setup_logging(resolve_log_level(config.logging.level),
                  Path(config.logging.file) if config.logging.file else None)
    return config


def write_output(records: List[dict], table_factory: Callable, output_path: Optional[Path] = None,
                 output_format: str = 'text', console: Optional[Console] = None) -> None:
    """
    Render records as a rich table, JSON or YAML to stdout or a file.

    Args:
        records: Plain dictionaries for the JSON/YAML formats
        table_factory: Zero-argument callable building the rich table for text output
        output_path: File to write instead of stdout
        output_format: 'text', 'json' or 'yaml'
        console: Console for stdout output
    """
    if output_format == 'json':
        rendered = FormattingUtils.format_json(records)
    elif output_format == 'yaml':
        rendered = FormattingUtils.format_yaml(records)
    else:
        rendered = None

    if output_path:
        with open(output_path, 'w') as f:
            if rendered is not None:
                f.write(rendered if rendered.endswith('\n') else rendered + '\n')
            else:
                Console(file=f, width=200, no_color=True).print(table_factory())
        return

    console = console or Console()
    if rendered is not None:
        print(rendered.rstrip('\n'))
    else:
        console.print(table_factory())


async def _stream_for(service: LogService, duration: Optional[float],
                      on_entry: Optional[Callable[[LogEntry], None]] = None) -> bool:
    """
    Run the live stream until it ends, or for at most ``duration`` seconds.

    Returns:
        False when the stream subprocess could not be spawned
    """
    spawn_failures = []

    def on_spawn_failed(event: Event):
        spawn_failures.append(event.data)

    service.context.event_bus.subscribe(STREAM_SPAWN_FAILED, on_spawn_failed)
    if on_entry is not None:
        service.subscribe(on_entry)
    try:
        service.start()
        await service.wait_stopped(duration)
    finally:
        service.stop()
        if not await service.wait_stopped(SHUTDOWN_TIMEOUT):
            logger.warning("Log stream did not shut down in time")
        if on_entry is not None:
            service.unsubscribe(on_entry)
        service.context.event_bus.unsubscribe(STREAM_SPAWN_FAILED, on_spawn_failed)

    for failure in spawn_failures:
        logger.error(f"Could not start log stream: {failure['error']}")
    return not spawn_failures


def run_tail(config_path: Optional[Path] = None, count: Optional[int] = None,
             process: Optional[str] = None, duration: Optional[float] = None,
             output_format: str = 'text') -> int:
    """
    Run tail mode: print live entries as they arrive.

    Args:
        config_path: Path to configuration file
        count: Number of buffered entries to print when the stream ends
        process: Only show entries whose process name contains this text
        duration: Seconds to stream, None to stream until interrupted
        output_format: 'text' for styled lines, 'json' for one object per line

    Returns:
        Exit code
    """
    try:
        config = load_config(config_path)
        service = LogService(config)
        console = Console()
        needle = process.lower() if process else None

        def print_entry(entry: LogEntry):
            if needle and needle not in entry.process.lower():
                return
            if output_format == 'json':
                print(FormattingUtils.format_json(entry.to_dict(), indent=None), flush=True)
            else:
                console.print(FormattingUtils.format_log_entry(entry), soft_wrap=True)

        try:
            started = asyncio.run(_stream_for(service, duration, print_entry))
        except KeyboardInterrupt:
            started = True

        if not started:
            return 1

        if count:
            entries = service.recent(count, process)
            write_output(FormattingUtils.to_records(entries),
                         lambda: FormattingUtils.entries_table(entries, title="Most recent entries"),
                         output_format=output_format, console=console)
        return 0

    except Exception as e:
        logging.error(f"Tail error: {str(e)}")
        return 1


def run_query(config_path: Optional[Path] = None, minutes: Optional[int] = None,
              predicate: Optional[str] = None, process: Optional[str] = None,
              output_path: Optional[Path] = None, output_format: str = 'text') -> int:
    """
    Run query mode to show historical entries.

    Args:
        config_path: Path to configuration file
        minutes: Trailing window in minutes, configured default when None
        predicate: Host filter expression, forwarded verbatim
        process: Process name to filter by (builds the predicate)
        output_path: Output file for results
        output_format: Output format ('text', 'json', 'yaml')

    Returns:
        Exit code
    """
    try:
        config = load_config(config_path)
        service = LogService(config)

        if process:
            entries = asyncio.run(service.query_by_process(process, minutes))
        else:
            entries = asyncio.run(service.query(minutes, predicate))

        window = minutes or config.query.default_minutes
        write_output(FormattingUtils.to_records(entries),
                     lambda: FormattingUtils.entries_table(entries, title=f"Last {window} minutes"),
                     output_path, output_format)
        return 0

    except Exception as e:
        logging.error(f"Query error: {str(e)}")
        return 1


def run_summary(config_path: Optional[Path] = None, duration: float = 10.0,
                output_path: Optional[Path] = None, output_format: str = 'text') -> int:
    """
    Run summary mode: stream for a while, then show per-process activity.

    Args:
        config_path: Path to configuration file
        duration: Seconds to collect live entries
        output_path: Output file for the summary
        output_format: Output format ('text', 'json', 'yaml')

    Returns:
        Exit code
    """
    try:
        config = load_config(config_path)
        service = LogService(config)

        try:
            started = asyncio.run(_stream_for(service, duration))
        except KeyboardInterrupt:
            started = True

        if not started:
            return 1

        summaries = service.summarize()
        write_output(FormattingUtils.to_records(summaries),
                     lambda: FormattingUtils.summary_table(summaries),
                     output_path, output_format)
        return 0

    except Exception as e:
        logging.error(f"Summary error: {str(e)}")
        return 1


def run_sources(config_path: Optional[Path] = None, output_path: Optional[Path] = None,
                output_format: str = 'text') -> int:
    """List plain log files on the host."""
    try:
        config = load_config(config_path)
        sources = LogService(config).sources()
        write_output(FormattingUtils.to_records(sources),
                     lambda: FormattingUtils.sources_table(sources),
                     output_path, output_format)
        return 0

    except Exception as e:
        logging.error(f"Sources error: {str(e)}")
        return 1


def _convert_value(current_value, value: str):
    """Convert a CLI string to the type of the option's current value."""
    if isinstance(current_value, bool):
        return value.lower() in ['true', '1', 'yes', 'on']
    if isinstance(current_value, int):
        return int(value)
    if isinstance(current_value, float):
        return float(value)
    if isinstance(current_value, list):
        return [item.strip() for item in value.split(',') if item.strip()]
    return value


def _lookup_option(config: Config, key: str):
    """Return (section object, option name) for a 'section.option' key, or an error string."""
    parts = key.split('.')
    if len(parts) != 2:
        return None, f"Invalid option format: {key}. Use 'section.option' format"
    section, option = parts
    if not hasattr(config, section):
        return None, f"Unknown section: {section}"
    section_obj = getattr(config, section)
    if not hasattr(section_obj, option):
        return None, f"Unknown option: {option} in section {section}"
    return section_obj, option


def run_config_commands(config_path: Optional[Path] = None, set_options: Optional[List[tuple]] = None,
                        get_option: Optional[str] = None, list_config: bool = False,
                        validate_config: bool = False, reset_config: bool = False) -> int:
    """
    Run configuration management commands.

    Args:
        config_path: Path to configuration file
        set_options: List of (key, value) tuples to set
        get_option: Option to get
        list_config: Whether to list all configuration options
        validate_config: Whether to validate the configuration
        reset_config: Whether to reset to default configuration

    Returns:
        Exit code
    """
    try:
        # Determine config path (use default if not provided)
        if not config_path:
            config_path = Path(Settings().DEFAULT_CONFIG_PATH)
            if not config_path.exists():
                config_path = Path.home() / ".logstreamer" / "config.yaml"

        setup_logging(resolve_log_level())

        if reset_config:
            Config().save(config_path)
            print(f"Configuration reset to defaults: {config_path}")
            return 0

        config = Config.load(config_path)

        if validate_config:
            errors = config.validate()
            if errors:
                for error in errors:
                    print(f"Configuration error: {error}", file=sys.stderr)
                return 1
            print("Configuration is valid")
            return 0

        if set_options:
            for key, value in set_options:
                section_obj, option = _lookup_option(config, key)
                if section_obj is None:
                    print(option, file=sys.stderr)
                    return 1
                setattr(section_obj, option, _convert_value(getattr(section_obj, option), value))

            errors = config.validate()
            if errors:
                for error in errors:
                    print(f"Configuration error: {error}", file=sys.stderr)
                return 1
            config.save(config_path)
            print(f"Configuration updated: {config_path}")

        if get_option:
            section_obj, option = _lookup_option(config, get_option)
            if section_obj is None:
                print(option, file=sys.stderr)
                return 1
            print(f"{get_option} = {getattr(section_obj, option)}")

        if list_config:
            print("Configuration:")
            for section, options in config.to_dict().items():
                print(f"  [{section}]")
                for key, value in options.items():
                    print(f"    {key} = {value}")
                print()

        return 0

    except Exception as e:
        logging.error(f"Config command error: {str(e)}")
        return 1
