"""
CLI entry point for TransparentLog.

Provides command-line interface for appending to a log, fetching tree heads
and proofs, and verifying the log as a skeptical client.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from transparentlog._version import __version__
from transparentlog.config.settings import get_default_config_path, load_config
from transparentlog.exceptions import InvalidConfigurationError
from transparentlog.logging_config import setup_logging
from transparentlog.cli.context import CLIContext, pass_context


@click.group()
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help=f'Path to configuration file (default: {get_default_config_path()})',
)
@click.option(
    '--log-level',
    '-l',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Set logging level (default: logging.level from configuration)',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output',
)
@click.version_option(version=__version__, prog_name='tlog')
@pass_context
def cli(ctx: CLIContext, config: Optional[Path], log_level: Optional[str], verbose: bool):
    """
    TransparentLog - Append-only verifiable log backed by a Merkle tree.

    Appends records, serves tree heads and proofs, and verifies the log.
    """
    ctx.verbose = verbose
    ctx.config_path = str(config) if config else None

    # Keep stdout for command output until the configured logging is in place
    setup_logging(level=log_level or "WARNING", json_format=False)

    # Load configuration
    try:
        ctx.config = load_config(ctx.config_path)
    except InvalidConfigurationError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: Failed to load configuration: {e}", err=True)
        sys.exit(1)

    # Set up logging
    try:
        effective_log_level = log_level.upper() if log_level else ctx.config.logging.level
        log_file = Path(ctx.config.logging.file).expanduser() if ctx.config.logging.file else None
        setup_logging(
            level=effective_log_level,
            log_file=log_file,
            json_format=ctx.config.logging.format == "json",
        )

        if verbose:
            logger = logging.getLogger("transparentlog")
            logger.info(f"Loaded configuration from: {ctx.config_path or 'defaults'}")
            logger.info(f"Log level: {effective_log_level}")
    except Exception as e:
        click.echo(f"Error: Failed to set up logging: {e}", err=True)
        sys.exit(1)


# Import and register log commands
from transparentlog.cli.log import append, get, head, prove_record, prove_tree
cli.add_command(append)
cli.add_command(get)
cli.add_command(head)
cli.add_command(prove_record)
cli.add_command(prove_tree)


# Import and register verification commands
from transparentlog.cli.verify import audit, check_record, check_tree, rebuild
cli.add_command(check_record)
cli.add_command(check_tree)
cli.add_command(audit)
cli.add_command(rebuild)


if __name__ == '__main__':
    cli()
