"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

CLI commands for verifying a log.

Provides commands for:
- Checking record inclusion and log growth as a skeptical client
- Auditing stored hashes against records
- Rebuilding the hash file from records
"""

import os
from pathlib import Path
from typing import Optional

import click

from transparentlog.cli.context import CLIContext, pass_context
from transparentlog.cli.log import (
    EXIT_VERIFICATION_FAILED,
    echo_json,
    fail,
    get_log,
    read_payload,
)
from transparentlog.core.client import LogClient
from transparentlog.core.log import Record, open_stores
from transparentlog.core.recovery import audit_hashes, rebuild_hashes
from transparentlog.exceptions import TransparentLogError, VerificationFailedError
from transparentlog.logging_config import get_logger
from transparentlog.storage.file import HASH_FILE, FileHashStore, FileRecordStore

logger = get_logger(__name__)

state_file_option = click.option(
    '--state-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Trusted head file (default: client.state_file from configuration)',
)


def _state_path(config, state_file: Optional[Path]) -> Optional[Path]:
    if state_file is not None:
        return state_file
    if config.client.state_file:
        return Path(config.client.state_file).expanduser()
    return None


def _run_check(log, state_path: Optional[Path], check) -> None:
    """
    Run a client check against the log and report the outcome.

    The trusted head is loaded from and saved to state_path, so trust is
    carried across invocations. A failed check leaves the file untouched.
    """
    if state_path is not None:
        client = LogClient.load_state(log, state_path)
    else:
        client = LogClient(log)
    previous = client.trusted

    try:
        check(client)
    except VerificationFailedError as e:
        echo_json({
            "ok": False,
            "error": str(e),
            "trusted": previous.to_dict(),
        })
        fail(str(e), EXIT_VERIFICATION_FAILED)

    if state_path is not None:
        client.save_state(state_path)
    echo_json({
        "ok": True,
        "previous": previous.to_dict(),
        "trusted": client.trusted.to_dict(),
    })


@click.command('check-record')
@click.argument('record_id', type=int)
@click.argument('data', required=False)
@click.option(
    '--file',
    '-f',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Read the expected payload from a file',
)
@state_file_option
@pass_context
def check_record(
    ctx: CLIContext,
    record_id: int,
    data: Optional[str],
    file: Optional[Path],
    state_file: Optional[Path],
):
    """
    Check that a record with the given payload is in the log.

    The log's current head must also extend the trusted head. Exits with
    status 2 if verification fails.

    Example:

        tlog check-record 0 "entry1"
    """
    payload = read_payload(data, file)
    try:
        with get_log(ctx.config) as log:
            _run_check(
                log,
                _state_path(ctx.config, state_file),
                lambda client: client.verify_record(Record(id=record_id, data=payload)),
            )
    except TransparentLogError as e:
        fail(str(e))
    except Exception as e:
        logger.error(f"Failed to check record {record_id}: {e}", exc_info=True)
        fail(f"Unexpected error: {e}")


@click.command('check-tree')
@state_file_option
@pass_context
def check_tree(ctx: CLIContext, state_file: Optional[Path]):
    """
    Check that the log's current head extends the trusted head.

    Exits with status 2 on rollback or a fork.

    Example:

        tlog check-tree --state-file ~/.tlog/trusted_head.json
    """
    try:
        with get_log(ctx.config) as log:
            _run_check(
                log,
                _state_path(ctx.config, state_file),
                lambda client: client.verify_tree(),
            )
    except TransparentLogError as e:
        fail(str(e))
    except Exception as e:
        logger.error(f"Failed to check tree: {e}", exc_info=True)
        fail(f"Unexpected error: {e}")


@click.command('audit')
@pass_context
def audit(ctx: CLIContext):
    """
    Recompute every stored hash from the records and compare.

    Exits with status 2 if any stored hash is wrong or missing.

    Example:

        tlog audit
    """
    try:
        records, hashes = open_stores(ctx.config.storage)
        try:
            result = audit_hashes(records, hashes)
        finally:
            records.close()
            hashes.close()
    except TransparentLogError as e:
        fail(str(e))
    except Exception as e:
        logger.error(f"Failed to audit hashes: {e}", exc_info=True)
        fail(f"Unexpected error: {e}")

    echo_json(result.to_dict())
    if not result.ok:
        fail(
            f"{len(result.mismatched_slots)} mismatched, {result.missing_slots} missing "
            f"and {result.extra_slots} extra slots",
            EXIT_VERIFICATION_FAILED,
        )


@click.command('rebuild')
@pass_context
def rebuild(ctx: CLIContext):
    """
    Rebuild the hash file from the records.

    The existing hash file is kept next to the new one as hashes.dat.bak.
    Only the file backend can be rebuilt.

    Example:

        tlog rebuild
    """
    storage = ctx.config.storage
    if storage.backend != "file":
        fail(f"rebuild requires the file backend, got '{storage.backend}'")

    directory = Path(storage.path).expanduser()
    hash_path = directory / HASH_FILE
    backup_path = directory / (HASH_FILE + ".bak")

    try:
        records = FileRecordStore(directory, fsync=storage.fsync)
        try:
            backup = None
            if hash_path.exists():
                os.replace(hash_path, backup_path)
                backup = str(backup_path)
                logger.info(f"Moved {hash_path} to {backup_path}")
            hashes = FileHashStore(hash_path, fsync=storage.fsync)
            try:
                replayed = rebuild_hashes(records, hashes)
                slots = len(hashes)
            finally:
                hashes.close()
        finally:
            records.close()
    except TransparentLogError as e:
        fail(str(e))
    except Exception as e:
        logger.error(f"Failed to rebuild hashes: {e}", exc_info=True)
        fail(f"Unexpected error: {e}")

    echo_json({
        "records": replayed,
        "slots": slots,
        "backup": backup,
    })
