"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

CLI commands for log operations.

Provides commands for appending and reading records, and for fetching tree
heads, inclusion proofs and consistency proofs. All output is JSON.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from transparentlog.cli.context import CLIContext, pass_context
from transparentlog.core.log import TransparentLog, open_log
from transparentlog.exceptions import TransparentLogError
from transparentlog.logging_config import get_logger

logger = get_logger(__name__)

EXIT_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def get_log(config) -> TransparentLog:
    """
    Open the log selected by configuration.

    Args:
        config: Configuration object

    Returns:
        TransparentLog instance
    """
    return open_log(config.storage)


def echo_json(data) -> None:
    """Print a JSON document to stdout."""
    click.echo(json.dumps(data, indent=2))


def fail(message: str, exit_code: int = EXIT_ERROR) -> None:
    """Print an error to stderr and exit."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(exit_code)


def read_payload(data: Optional[str], file: Optional[Path]) -> bytes:
    """
    Resolve a record payload given either inline or as a file.

    Raises:
        click.UsageError: If neither or both are given
    """
    if (data is None) == (file is None):
        raise click.UsageError("Provide exactly one of DATA or --file")
    if file is not None:
        return file.read_bytes()
    return data.encode("utf-8")


@click.command('append')
@click.argument('data', required=False)
@click.option(
    '--file',
    '-f',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Read the record payload from a file',
)
@pass_context
def append(ctx: CLIContext, data: Optional[str], file: Optional[Path]):
    """
    Append a record to the log.

    DATA is encoded as UTF-8. Use --file for binary payloads.

    Examples:

        tlog append "entry1"

        tlog append --file ./payload.bin
    """
    payload = read_payload(data, file)
    try:
        with get_log(ctx.config) as log:
            handle = log.append(payload)
            output = handle.to_dict()
            output["tree_size"] = log.size
        echo_json(output)
    except TransparentLogError as e:
        fail(str(e))
    except Exception as e:
        logger.error(f"Failed to append record: {e}", exc_info=True)
        fail(f"Unexpected error: {e}")


@click.command('get')
@click.argument('record_id', type=int)
@click.option(
    '--hex',
    'as_hex',
    is_flag=True,
    help='Print the payload as hex instead of UTF-8 text',
)
@pass_context
def get(ctx: CLIContext, record_id: int, as_hex: bool):
    """
    Read a record by id.

    Example:

        tlog get 0
    """
    try:
        with get_log(ctx.config) as log:
            record = log.get(record_id)
        if as_hex:
            data = record.data.hex()
        else:
            data = record.data.decode("utf-8", errors="backslashreplace")
        echo_json({
            "id": record.id,
            "data": data,
            "leaf_hash": record.leaf_hash.hex(),
        })
    except TransparentLogError as e:
        fail(str(e))
    except Exception as e:
        logger.error(f"Failed to read record {record_id}: {e}", exc_info=True)
        fail(f"Unexpected error: {e}")


@click.command('head')
@click.option(
    '--size',
    '-s',
    type=int,
    default=None,
    help='Tree size (default: current size)',
)
@pass_context
def head(ctx: CLIContext, size: Optional[int]):
    """
    Print the tree head of the log.

    Examples:

        tlog head

        tlog head --size 4
    """
    try:
        with get_log(ctx.config) as log:
            tree_head = log.tree_head(size)
        echo_json(tree_head.to_dict())
    except TransparentLogError as e:
        fail(str(e))
    except Exception as e:
        logger.error(f"Failed to compute tree head: {e}", exc_info=True)
        fail(f"Unexpected error: {e}")


@click.command('prove-record')
@click.argument('record_id', type=int)
@click.option(
    '--size',
    '-s',
    type=int,
    default=None,
    help='Tree size to prove against (default: current size)',
)
@pass_context
def prove_record(ctx: CLIContext, record_id: int, size: Optional[int]):
    """
    Print an inclusion proof for a record.

    Example:

        tlog prove-record 3 --size 8
    """
    try:
        with get_log(ctx.config) as log:
            proof = log.prove_record(record_id, size)
        echo_json(proof.to_dict())
    except TransparentLogError as e:
        fail(str(e))
    except Exception as e:
        logger.error(f"Failed to prove record {record_id}: {e}", exc_info=True)
        fail(f"Unexpected error: {e}")


@click.command('prove-tree')
@click.argument('size1', type=int)
@click.option(
    '--size2',
    type=int,
    default=None,
    help='Later tree size (default: current size)',
)
@pass_context
def prove_tree(ctx: CLIContext, size1: int, size2: Optional[int]):
    """
    Print a consistency proof between two tree sizes.

    Example:

        tlog prove-tree 4 --size2 8
    """
    try:
        with get_log(ctx.config) as log:
            proof = log.prove_tree(size1, size2)
        echo_json(proof.to_dict())
    except TransparentLogError as e:
        fail(str(e))
    except Exception as e:
        logger.error(f"Failed to prove tree {size1}..{size2}: {e}", exc_info=True)
        fail(f"Unexpected error: {e}")
