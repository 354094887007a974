"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

Skeptical client for a transparent log.

The client does not trust the log. It remembers the last tree head it
verified and only moves to a new head after checking a consistency proof
that links the two. Record checks additionally verify an inclusion proof
against the new head.

Trust state has a single shape, Trusted(size, root_hash). A successful check
moves it to a head of equal or larger size; a failed check leaves it
unchanged and is reported to the caller.

Hashes from verified proofs are cached by leaf range. The hash of a range
only depends on the leaves it covers, so a cached entry stays valid for every
later tree size, and a proof whose ranges are all cached is rebuilt locally
instead of being fetched from the log.
"""

import json
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from transparentlog.exceptions import (
    ConsistencyMismatchError,
    InclusionMismatchError,
    RollbackDetectedError,
    StorageReadError,
    StorageWriteError,
    VerificationFailedError,
)
from transparentlog.logging_config import get_logger, log_verification_failure
from transparentlog.merkle.proofs import (
    ConsistencyProof,
    InclusionProof,
    TreeHead,
    verify_consistency,
    verify_inclusion,
)
from transparentlog.merkle.tree_math import Range, consistency_ranges, inclusion_ranges

logger = get_logger(__name__)


class LogClient:
    """
    Client that verifies a log's growth and record inclusion.

    The log may be a TransparentLog or any object exposing ``tree_head()``,
    ``prove_record(id, size)`` and ``prove_tree(size1, size2)``.

    Two families of checks are offered:
    - verify_record / verify_tree raise VerificationFailedError on failure
    - check_record / check_tree return False on verification failure

    Storage and range errors from the log are never turned into False: they
    mean the check could not be performed, not that it failed.

    Example:
        >>> log = TransparentLog()
        >>> client = LogClient(log)
        >>> handle = log.append(b"entry1")
        >>> client.check_record(handle)
        True
        >>> client.trusted.size
        1
    """

    def __init__(self, log, trusted: Optional[TreeHead] = None, cache: bool = True):
        """
        Create a client.

        Args:
            log: Log to verify
            trusted: Bootstrap tree head (default: the empty tree)
            cache: Keep verified proof hashes and reuse them (default: True)
        """
        self.log = log
        self._trusted = trusted if trusted is not None else TreeHead.empty()
        self._cache: Optional[Dict[Range, bytes]] = {} if cache else None
        self._lock = threading.Lock()

    @classmethod
    def from_log(cls, log, cache: bool = True) -> "LogClient":
        """
        Create a client that trusts the log's current head on first use.

        Args:
            log: Log to verify
            cache: Keep verified proof hashes and reuse them (default: True)

        Returns:
            LogClient bootstrapped from log.tree_head()
        """
        return cls(log, trusted=log.tree_head(), cache=cache)

    @classmethod
    def load_state(cls, log, path, cache: bool = True) -> "LogClient":
        """
        Create a client from a previously saved trust state.

        A missing file bootstraps from the empty tree. Only the trusted head
        is persisted; the proof cache starts empty.

        Args:
            log: Log to verify
            path: Path to the JSON state file
            cache: Keep verified proof hashes and reuse them (default: True)

        Returns:
            LogClient with the saved trusted head

        Raises:
            StorageReadError: If the file exists but cannot be read or parsed
        """
        path = Path(path).expanduser()
        if not path.exists():
            logger.info(f"No trust state at {path}, starting from the empty tree")
            return cls(log, cache=cache)

        try:
            trusted = TreeHead.from_dict(json.loads(path.read_text()))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load trust state from {path}: {e}", exc_info=True)
            raise StorageReadError(f"Failed to load trust state from {path}: {e}") from e

        logger.info(f"Loaded trusted head of size {trusted.size} from {path}")
        return cls(log, trusted=trusted, cache=cache)

    @property
    def trusted(self) -> TreeHead:
        """Last verified tree head."""
        return self._trusted

    def cached(self, lo: int, hi: int) -> Optional[bytes]:
        """
        Verified hash of the leaves [lo, hi), if the cache holds it.

        Always None when caching is disabled.
        """
        if self._cache is None:
            return None
        return self._cache.get((lo, hi))

    def save_state(self, path) -> None:
        """
        Persist the trusted head as JSON.

        The file is written to a temporary sibling and renamed into place, so
        a crash never leaves a half-written state file.

        Raises:
            StorageWriteError: If the file cannot be written
        """
        path = Path(path).expanduser()
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(self._trusted.to_dict()))
            tmp_path.replace(path)
        except OSError as e:
            logger.error(f"Failed to save trust state to {path}: {e}", exc_info=True)
            raise StorageWriteError(f"Failed to save trust state to {path}: {e}") from e

    def verify_tree(self) -> TreeHead:
        """
        Verify that the log's current head extends the trusted head.

        Returns:
            The new trusted head

        Raises:
            RollbackDetectedError: If the log's head is smaller than the trusted one
            ConsistencyMismatchError: If the log's history diverges (fork/tamper)
        """
        with self._lock:
            trusted = self._trusted
            head = self.log.tree_head()
            try:
                verified = self._verify_extension(trusted, head)
            except VerificationFailedError as e:
                log_verification_failure(
                    logger, "tree", str(e), trusted_size=trusted.size, offered_size=head.size
                )
                raise
            self._remember(verified)
            self._advance(head)
            return head

    def verify_record(self, record) -> TreeHead:
        """
        Verify that a record is included in the log's current head.

        The current head must first extend the trusted head; the trusted head
        only advances if both the consistency and the inclusion check pass.

        Args:
            record: RecordHandle or Record (anything with id and leaf_hash)

        Returns:
            The new trusted head

        Raises:
            RollbackDetectedError: If the log's head is smaller than the trusted one
            ConsistencyMismatchError: If the log's history diverges
            InclusionMismatchError: If the record is not in the log's head
        """
        with self._lock:
            trusted = self._trusted
            head = self.log.tree_head()
            try:
                verified = self._verify_extension(trusted, head)
                if not 0 <= record.id < head.size:
                    raise InclusionMismatchError(
                        f"Record {record.id} is not covered by tree head of size {head.size}",
                        trusted=trusted,
                        offered=head,
                    )
                ranges = inclusion_ranges(record.id, head.size)
                hashes = self._cached_hashes(ranges)
                if hashes is None:
                    proof = self.log.prove_record(record.id, head.size)
                    if proof.leaf_index != record.id:
                        raise InclusionMismatchError(
                            f"Log returned a proof for leaf {proof.leaf_index}, expected {record.id}",
                            trusted=trusted,
                            offered=head,
                        )
                else:
                    logger.debug(f"Inclusion proof for record {record.id} served from cache")
                    proof = InclusionProof(leaf_index=record.id, tree_size=head.size, hashes=hashes)
                verify_inclusion(proof, record.leaf_hash, head)
                verified.extend(zip(ranges, proof.hashes))
            except VerificationFailedError as e:
                log_verification_failure(
                    logger,
                    "record",
                    str(e),
                    trusted_size=trusted.size,
                    offered_size=head.size,
                    record_id=record.id,
                )
                raise
            self._remember(verified)
            self._advance(head)
            return head

    def check_tree(self) -> bool:
        """
        Check the log's growth, returning False on verification failure.

        Returns:
            True if the log's current head extends the trusted head
        """
        try:
            self.verify_tree()
        except VerificationFailedError:
            return False
        return True

    def check_record(self, record) -> bool:
        """
        Check a record's inclusion, returning False on verification failure.

        Args:
            record: RecordHandle or Record (anything with id and leaf_hash)

        Returns:
            True if the record is included in a head that extends the trusted head
        """
        try:
            self.verify_record(record)
        except VerificationFailedError:
            return False
        return True

    def _verify_extension(self, trusted: TreeHead, head: TreeHead) -> List[Tuple[Range, bytes]]:
        """Check head extends trusted; returns the proof hashes that were verified."""
        if head.size < trusted.size:
            raise RollbackDetectedError(
                f"Log presented tree size {head.size}, trusted size is {trusted.size}",
                trusted=trusted,
                offered=head,
            )
        if trusted.size == 0:
            return []
        if head.size == trusted.size:
            if head.root_hash != trusted.root_hash:
                raise ConsistencyMismatchError(
                    f"Log presented a different root for trusted size {trusted.size}",
                    trusted=trusted,
                    offered=head,
                )
            return []

        ranges = consistency_ranges(trusted.size, head.size)
        hashes = self._cached_hashes(ranges)
        if hashes is None:
            proof = self.log.prove_tree(trusted.size, head.size)
        else:
            logger.debug(f"Consistency proof {trusted.size} -> {head.size} served from cache")
            proof = ConsistencyProof(size1=trusted.size, size2=head.size, hashes=hashes)
        verify_consistency(proof, trusted, head)
        return list(zip(ranges, proof.hashes))

    def _cached_hashes(self, ranges: Sequence[Range]) -> Optional[Tuple[bytes, ...]]:
        # None unless every range is cached
        if self._cache is None:
            return None
        try:
            return tuple(self._cache[r] for r in ranges)
        except KeyError:
            return None

    def _remember(self, verified: List[Tuple[Range, bytes]]) -> None:
        if self._cache is not None:
            self._cache.update(verified)

    def _advance(self, head: TreeHead) -> None:
        if head != self._trusted:
            logger.info(f"Trusted head advanced from size {self._trusted.size} to {head.size}")
        self._trusted = head
