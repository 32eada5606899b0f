"""
Command Line Interface for logstreamer.

This module provides a CLI for following the host's unified log, querying
recent history, summarizing which processes are logging, and managing
configuration.
"""

import click
import sys
import yaml
from pathlib import Path
from typing import Optional, List
import os

from .main import run_tail, run_query, run_summary, run_sources, run_config_commands
from .__version__ import __version__
from .config.config import Config
from .config.settings import Settings


FORMATS = ['text', 'json', 'yaml']

config_option = click.option('--config', '-c', type=click.Path(exists=True, path_type=Path),
                             help='Path to configuration file')
verbose_option = click.option('--verbose', '-V', count=True,
                              help='Increase verbosity (use -VV for debug)')


def _apply_verbosity(verbose: int) -> None:
    if verbose == 1:
        os.environ['LOGSTREAMER_LOG_LEVEL'] = 'INFO'
    elif verbose >= 2:
        os.environ['LOGSTREAMER_LOG_LEVEL'] = 'DEBUG'


@click.group(invoke_without_command=True, help="logstreamer - follow, query and summarize the host unified log.")
@config_option
@click.option('--version', '-v', is_flag=True, help='Show version and exit')
@verbose_option
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], version: bool, verbose: int) -> None:
    """
    logstreamer - follow, query and summarize the host unified log.

    Usage Examples:
      logstreamer tail                               # Follow the live log
      logstreamer tail --process kernel -d 30        # Follow kernel entries for 30s
      logstreamer query --minutes 10                 # Entries from the last 10 minutes
      logstreamer query --predicate 'subsystem == "com.apple.wifi"'
      logstreamer summary -d 15                      # Busiest processes over 15s
      logstreamer sources                            # Plain log files on disk
    """
    if version:
        click.echo(f"logstreamer v{__version__}")
        return

    _apply_verbosity(verbose)

    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command(help="Follow the live log stream.")
@config_option
@click.option('--process', '-p', type=str, default=None,
              help='Only show entries whose process name contains this text')
@click.option('--duration', '-d', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Stop after this many seconds (default: run until interrupted)')
@click.option('--count', '-n', type=click.IntRange(min=0), default=0,
              help='Print this many buffered entries when the stream ends')
@click.option('--format', type=click.Choice(['text', 'json']), default='text',
              help='Output format (default: text)')
@verbose_option
@click.pass_context
def tail(ctx, config: Optional[Path], process: Optional[str], duration: Optional[float],
         count: int, format: str, verbose: int) -> None:
    """
    Follow the live log stream.

    Entries are printed as the host emits them. Press Ctrl-C to stop.

    Examples:
      logstreamer tail                        # Follow everything at info level
      logstreamer tail -p WindowServer        # Only WindowServer entries
      logstreamer tail -d 60 -n 20            # One minute, then the last 20 entries
      logstreamer tail --format json          # One JSON object per line
    """
    _apply_verbosity(verbose)
    config = config or ctx.obj.get('config_path')

    exit_code = run_tail(config_path=config, count=count, process=process,
                         duration=duration, output_format=format)
    sys.exit(exit_code)


@cli.command(help="Query entries logged during the last few minutes.")
@config_option
@click.option('--minutes', '-m', type=click.IntRange(min=1), default=None,
              help='Length of the window in minutes (default: from configuration)')
@click.option('--predicate', type=str, default=None,
              help='Filter expression passed verbatim to the host log facility')
@click.option('--process', '-p', type=str, default=None,
              help='Only entries from this process (overrides --predicate)')
@click.option('--output', '-o', type=click.Path(path_type=Path),
              help='Output file for query results')
@click.option('--format', type=click.Choice(FORMATS), default='text',
              help='Output format (default: text)')
@verbose_option
@click.pass_context
def query(ctx, config: Optional[Path], minutes: Optional[int], predicate: Optional[str],
          process: Optional[str], output: Optional[Path], format: str, verbose: int) -> None:
    """
    Query entries logged during the last few minutes.

    At most the configured query limit (500 by default) of the newest
    entries is returned. When the host command fails the result is empty.

    Examples:
      logstreamer query                                   # Default window
      logstreamer query -m 30 --format json               # Last 30 minutes as JSON
      logstreamer query -p kernel                         # Only kernel entries
      logstreamer query --predicate 'messageType == error' -o errors.yaml --format yaml
    """
    _apply_verbosity(verbose)
    config = config or ctx.obj.get('config_path')

    exit_code = run_query(config_path=config, minutes=minutes, predicate=predicate,
                          process=process, output_path=output, output_format=format)
    sys.exit(exit_code)


@cli.command(help="Stream for a while and summarize which processes are logging.")
@config_option
@click.option('--duration', '-d', type=click.FloatRange(min=0, min_open=True), default=10.0,
              help='Seconds to collect entries (default: 10)')
@click.option('--output', '-o', type=click.Path(path_type=Path),
              help='Output file for the summary')
@click.option('--format', type=click.Choice(FORMATS), default='text',
              help='Output format (default: text)')
@verbose_option
@click.pass_context
def summary(ctx, config: Optional[Path], duration: float, output: Optional[Path],
            format: str, verbose: int) -> None:
    """
    Stream for a while and summarize which processes are logging.

    Examples:
      logstreamer summary                   # 10 seconds of activity
      logstreamer summary -d 60 --format json
    """
    _apply_verbosity(verbose)
    config = config or ctx.obj.get('config_path')

    exit_code = run_summary(config_path=config, duration=duration,
                            output_path=output, output_format=format)
    sys.exit(exit_code)


@cli.command(help="List plain log files on disk.")
@config_option
@click.option('--output', '-o', type=click.Path(path_type=Path),
              help='Output file for the listing')
@click.option('--format', type=click.Choice(FORMATS), default='text',
              help='Output format (default: text)')
@verbose_option
@click.pass_context
def sources(ctx, config: Optional[Path], output: Optional[Path], format: str, verbose: int) -> None:
    """
    List plain log files on disk.

    The directories scanned come from ``sources.directories``
    (/var/log and ~/Library/Logs by default).
    """
    _apply_verbosity(verbose)
    config = config or ctx.obj.get('config_path')

    exit_code = run_sources(config_path=config, output_path=output, output_format=format)
    sys.exit(exit_code)


@cli.command('config', help="Manage configuration settings.")
@click.option('--config', '-c', type=click.Path(path_type=Path),
              help='Path to configuration file (default: logstreamer.yaml)')
@click.option('--set', 'set_options', multiple=True, nargs=2, metavar='KEY VALUE',
              help='Set configuration option (e.g., --set buffer.capacity 2000)')
@click.option('--get', 'get_option', type=str,
              help='Get specific configuration option')
@click.option('--list', 'list_config', is_flag=True,
              help='List all configuration options')
@click.option('--validate', 'validate_config', is_flag=True,
              help='Validate configuration file')
@click.option('--reset', 'reset_config', is_flag=True,
              help='Reset to default configuration')
@verbose_option
def config_cmd(config: Optional[Path], set_options: List[tuple],
               get_option: str, list_config: bool, validate_config: bool,
               reset_config: bool, verbose: int) -> None:
    """
    Manage configuration settings.

    Configuration options follow the format 'section.option', such as:
    - host.executable
    - buffer.capacity
    - query.default_minutes
    - logging.level

    Examples:
      logstreamer config --list                           # List all config options
      logstreamer config --get buffer.capacity            # Get specific option
      logstreamer config --set query.default_minutes 15   # Set an option
      logstreamer config --validate                       # Validate config
      logstreamer config --reset                          # Reset to defaults
    """
    _apply_verbosity(verbose)

    exit_code = run_config_commands(config_path=config, set_options=list(set_options),
                                    get_option=get_option, list_config=list_config,
                                    validate_config=validate_config,
                                    reset_config=reset_config)
    sys.exit(exit_code)


@cli.command(help="Initialize a new configuration file.")
def init() -> None:
    """
    Initialize a new configuration file.

    Creates a default logstreamer.yaml file in the current directory.

    Example:
      logstreamer init    # Create default configuration
    """
    config_path = Path(Settings().DEFAULT_CONFIG_PATH)
    if config_path.exists():
        click.echo(f"Configuration file already exists: {config_path}", err=True)
        sys.exit(1)

    default_config = Config.get_default_config_dict()

    with open(config_path, 'w') as f:
        yaml.dump(default_config, f, default_flow_style=False)

    click.echo(f"Created default configuration file: {config_path}")


def main() -> None:
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
