"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

The transparent log: an append-only record sequence committed to by a
Merkle tree.

The log keeps two stores:
- a RecordStore with every record payload, in id order
- a HashStore with the hash of every complete subtree, in slot order

Appending record n writes its leaf hash and the hash of each subtree that
leaf completes, so an append costs O(log n) hashes. Root hashes and proofs
read complete subtrees from the store and recompute only the partial,
rightmost subtrees, which are never stored.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from transparentlog.config.settings import StorageConfig
from transparentlog.core.recovery import reconcile_hashes, write_subtree_hashes
from transparentlog.exceptions import (
    InvalidConfigurationError,
    InvalidRangeError,
    RecordNotFoundError,
    StorageWriteError,
)
from transparentlog.logging_config import get_logger
from transparentlog.merkle.hashing import EMPTY_ROOT_HASH, leaf_hash, node_hash
from transparentlog.merkle.proofs import ConsistencyProof, InclusionProof, TreeHead
from transparentlog.merkle.tree_math import (
    complete_subtrees,
    consistency_ranges,
    inclusion_ranges,
    stored_slot,
    subtree_coordinate,
)
from transparentlog.storage.base import HashStore, RecordStore
from transparentlog.storage.file import HASH_FILE, FileHashStore, FileRecordStore
from transparentlog.storage.memory import MemoryHashStore, MemoryRecordStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class Record:
    """
    A record stored in the log.

    Attributes:
        id: 0-based append position
        data: Opaque record payload
    """
    id: int
    data: bytes

    @property
    def leaf_hash(self) -> bytes:
        """Leaf hash recomputed from the payload."""
        return leaf_hash(self.data)


@dataclass(frozen=True)
class RecordHandle:
    """
    Receipt returned by append.

    Attributes:
        id: Assigned record id
        leaf_hash: Leaf hash of the appended payload
    """
    id: int
    leaf_hash: bytes

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"id": self.id, "leaf_hash": self.leaf_hash.hex()}


class TransparentLog:
    """
    Append-only, verifiable log of records.

    Appends are serialized by an internal lock (single writer). Reads take
    no lock: each read fixes the tree size once and only touches slots that
    were written before that size was published.

    Example:
        >>> log = TransparentLog()
        >>> handle = log.append(b"entry1")
        >>> log.get(handle.id).data
        b'entry1'
        >>> proof = log.prove_record(handle.id)
    """

    def __init__(
        self,
        records: Optional[RecordStore] = None,
        hashes: Optional[HashStore] = None,
    ):
        """
        Create a log over existing stores, or over fresh in-memory stores.

        If the hash store lags behind the record store (a crash between a
        record write and its hash writes), the missing hashes are replayed.

        Args:
            records: Record store (default: new MemoryRecordStore)
            hashes: Hash store (default: new MemoryHashStore)

        Raises:
            StorageReadError: If the stores are inconsistent beyond repair
            SlotConflictError: If replaying records contradicts stored hashes
        """
        self.records = records if records is not None else MemoryRecordStore()
        self.hashes = hashes if hashes is not None else MemoryHashStore()
        self._write_lock = threading.Lock()

        reconcile_hashes(self.records, self.hashes)
        self._size = len(self.records)

        logger.info(f"Opened transparent log with {self._size} records")

    @classmethod
    def from_config(cls, config: StorageConfig) -> "TransparentLog":
        """
        Create a log from storage configuration.

        Args:
            config: Storage configuration selecting the backend

        Returns:
            TransparentLog over the configured stores

        Raises:
            InvalidConfigurationError: If the backend is unknown or misconfigured
        """
        records, hashes = open_stores(config)
        return cls(records, hashes)

    @property
    def size(self) -> int:
        """Number of committed records."""
        return self._size

    def __len__(self) -> int:
        return self._size

    def append(self, data: Union[bytes, str]) -> RecordHandle:
        """
        Append a record to the log.

        Args:
            data: Record payload; str is encoded as UTF-8

        Returns:
            RecordHandle with the assigned id and leaf hash

        Raises:
            TypeError: If data is not bytes or str
            StorageWriteError: If a backend write fails
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Record data must be bytes or str, got {type(data).__name__}")
        data = bytes(data)

        with self._write_lock:
            if len(self.records) != self._size:
                # An earlier append stored its record but failed on its hashes
                reconcile_hashes(self.records, self.hashes)
                self._size = len(self.records)

            record_id = self.records.append(data)
            if record_id != self._size:
                raise StorageWriteError(
                    f"Record store assigned id {record_id}, expected {self._size}"
                )
            leaf = write_subtree_hashes(self.hashes, record_id, data)
            # Publish the new size only once every slot it depends on is written
            self._size = record_id + 1

        logger.debug(f"Appended record {record_id}, tree size {record_id + 1}")
        return RecordHandle(id=record_id, leaf_hash=leaf)

    def get(self, record_id: int) -> Record:
        """
        Read a record by id.

        Raises:
            RecordNotFoundError: If record_id is not below the tree size
        """
        if not 0 <= record_id < self._size:
            raise RecordNotFoundError(
                f"Record {record_id} does not exist in a log of size {self._size}"
            )
        return Record(id=record_id, data=self.records.get(record_id))

    def leaf_hash(self, record_id: int) -> bytes:
        """
        Read the stored leaf hash of a record.

        Raises:
            RecordNotFoundError: If record_id is not below the tree size
        """
        if not 0 <= record_id < self._size:
            raise RecordNotFoundError(
                f"Record {record_id} does not exist in a log of size {self._size}"
            )
        return self.hashes.get(stored_slot(0, record_id))

    def tree_head(self, size: Optional[int] = None) -> TreeHead:
        """
        Compute the tree head for the current size, or for an earlier size.

        Args:
            size: Tree size (default: current size)

        Returns:
            TreeHead for that size

        Raises:
            InvalidRangeError: If size is negative or larger than the log
        """
        size = self._resolve_size(size)
        if size == 0:
            return TreeHead.empty()
        return TreeHead(size=size, root_hash=self._range_hash(0, size))

    def prove_record(self, record_id: int, size: Optional[int] = None) -> InclusionProof:
        """
        Build an inclusion proof for a record in the tree of a given size.

        Args:
            record_id: Record to prove
            size: Tree size (default: current size)

        Returns:
            InclusionProof with sibling hashes from leaf to root

        Raises:
            InvalidRangeError: If size exceeds the log or record_id >= size
        """
        size = self._resolve_size(size)
        ranges = inclusion_ranges(record_id, size)
        return InclusionProof(
            leaf_index=record_id,
            tree_size=size,
            hashes=tuple(self._range_hash(lo, hi) for lo, hi in ranges),
        )

    def prove_tree(self, size1: int, size2: Optional[int] = None) -> ConsistencyProof:
        """
        Build a consistency proof between two tree sizes.

        The proof is empty when size1 is 0 or equal to size2.

        Args:
            size1: Earlier tree size
            size2: Later tree size (default: current size)

        Returns:
            ConsistencyProof linking the two trees

        Raises:
            InvalidRangeError: If size1 > size2 or size2 exceeds the log
        """
        size2 = self._resolve_size(size2)
        ranges = consistency_ranges(size1, size2)
        return ConsistencyProof(
            size1=size1,
            size2=size2,
            hashes=tuple(self._range_hash(lo, hi) for lo, hi in ranges),
        )

    def _resolve_size(self, size: Optional[int]) -> int:
        current = self._size
        if size is None:
            return current
        if not 0 <= size <= current:
            raise InvalidRangeError(f"Tree size {size} is outside [0, {current}]")
        return size

    def _range_hash(self, lo: int, hi: int) -> bytes:
        """
        Hash of the leaves [lo, hi), folding stored complete subtrees.

        The split rule decomposes the range into complete subtrees of
        decreasing size; their hashes are combined right to left.
        """
        parts: List[bytes] = [
            self.hashes.get(stored_slot(*subtree_coordinate(a, b)))
            for a, b in complete_subtrees(lo, hi)
        ]
        if not parts:
            return EMPTY_ROOT_HASH
        result = parts[-1]
        for part in reversed(parts[:-1]):
            result = node_hash(part, result)
        return result

    def close(self) -> None:
        """Release backend resources."""
        self.records.close()
        self.hashes.close()

    def __enter__(self) -> "TransparentLog":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def open_stores(config: StorageConfig) -> Tuple[RecordStore, HashStore]:
    """
    Open the record and hash stores selected by storage configuration.

    The stores are returned as-is, without reconciling hashes against
    records, so they can be audited or rebuilt before a log is opened.

    Args:
        config: Storage configuration selecting the backend

    Returns:
        Tuple of (record store, hash store)

    Raises:
        InvalidConfigurationError: If the backend is unknown or misconfigured
    """
    if config.backend == "memory":
        return MemoryRecordStore(), MemoryHashStore()

    if config.backend == "file":
        if not config.path:
            raise InvalidConfigurationError("storage.path is required for the file backend")
        directory = Path(config.path).expanduser()
        records = FileRecordStore(directory, fsync=config.fsync)
        try:
            hashes = FileHashStore(directory / HASH_FILE, fsync=config.fsync)
        except Exception:
            records.close()
            raise
        return records, hashes

    raise InvalidConfigurationError(f"Invalid storage backend: {config.backend}")


def open_log(config: StorageConfig) -> TransparentLog:
    """
    Open a log from storage configuration.

    Args:
        config: Storage configuration

    Returns:
        TransparentLog instance
    """
    return TransparentLog.from_config(config)
