"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

File-backed storage backends.

On-disk layout inside a log directory:
- hashes.dat: fixed-width 32-byte hashes, one per slot, in slot order
- records.dat: record frames, each a 4-byte big-endian length then the payload
- records.idx: one 8-byte big-endian offset into records.dat per record

All files are opened in append mode, so writes only ever land at the end of
a file and previously written bytes are never modified. Each hash, frame and
index entry is written with a single buffered write, then flushed and
(optionally) fsynced. A crash can therefore only leave a torn tail, which is
detected and discarded when the store is reopened.
"""

import os
import struct
import threading
from pathlib import Path
from typing import BinaryIO

from transparentlog.exceptions import (
    RecordNotFoundError,
    SlotNotFoundError,
    StorageReadError,
    StorageWriteError,
)
from transparentlog.logging_config import get_logger
from transparentlog.merkle.hashing import HASH_SIZE
from transparentlog.storage.base import HashStore, RecordStore, check_slot_write

logger = get_logger(__name__)

HASH_FILE = "hashes.dat"
DATA_FILE = "records.dat"
INDEX_FILE = "records.idx"

_LENGTH = struct.Struct(">I")
_OFFSET = struct.Struct(">Q")

MAX_RECORD_SIZE = 0xFFFFFFFF


def _read_at(f: BinaryIO, offset: int, size: int) -> bytes:
    f.seek(offset)
    chunk = f.read(size)
    if len(chunk) != size:
        raise StorageReadError(
            f"Short read from {f.name}: wanted {size} bytes at offset {offset}, got {len(chunk)}"
        )
    return chunk


def _file_size(f: BinaryIO) -> int:
    f.flush()
    return os.fstat(f.fileno()).st_size


def _durable_write(f: BinaryIO, chunk: bytes, fsync: bool) -> None:
    f.write(chunk)
    f.flush()
    if fsync:
        os.fsync(f.fileno())


class FileHashStore(HashStore):
    """
    Hash store persisted as a flat file of fixed-width hash records.

    Slot ``s`` lives at byte offset ``s * HASH_SIZE``, so reads are a single
    seek and read.

    Example:
        >>> store = FileHashStore("/var/lib/tlog/hashes.dat")
        >>> store.put(len(store), leaf_hash(b"entry1"))
    """

    def __init__(self, path, fsync: bool = True):
        """
        Open or create a hash file.

        Args:
            path: Path to the hash file
            fsync: Force every write to disk before returning (default: True)

        Raises:
            StorageReadError: If the file cannot be opened
        """
        self.path = Path(path)
        self.fsync = fsync
        self._lock = threading.RLock()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a+b")
            self._count = self._discard_torn_tail()
        except OSError as e:
            logger.error(f"Failed to open hash store {self.path}: {e}", exc_info=True)
            raise StorageReadError(f"Failed to open hash store {self.path}: {e}") from e

        logger.info(f"Opened hash store at {self.path} with {self._count} slots")

    def _discard_torn_tail(self) -> int:
        size = _file_size(self._file)
        torn = size % HASH_SIZE
        if torn:
            logger.warning(
                f"Discarding {torn} trailing bytes of a partially written hash in {self.path}"
            )
            self._file.truncate(size - torn)
        return size // HASH_SIZE

    def get(self, slot: int) -> bytes:
        if not 0 <= slot < self._count:
            raise SlotNotFoundError(f"Slot {slot} has not been written")
        with self._lock:
            try:
                return _read_at(self._file, slot * HASH_SIZE, HASH_SIZE)
            except OSError as e:
                logger.error(f"Failed to read slot {slot} from {self.path}: {e}", exc_info=True)
                raise StorageReadError(f"Failed to read slot {slot} from {self.path}: {e}") from e

    def put(self, slot: int, value: bytes) -> None:
        with self._lock:
            if check_slot_write(self, self._count, slot, value):
                return
            try:
                _durable_write(self._file, bytes(value), self.fsync)
            except OSError as e:
                logger.error(f"Failed to write slot {slot} to {self.path}: {e}", exc_info=True)
                self._truncate_to_count()
                raise StorageWriteError(f"Failed to write slot {slot} to {self.path}: {e}") from e
            self._count += 1

    def _truncate_to_count(self) -> None:
        # Drop any partial hash so later slots stay aligned
        try:
            self._file.truncate(self._count * HASH_SIZE)
        except OSError as e:
            logger.error(f"Failed to truncate {self.path} after a failed write: {e}")

    def __len__(self) -> int:
        return self._count

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._file.close()


class FileRecordStore(RecordStore):
    """
    Record store persisted as a length-prefixed data file plus an offset index.

    The index gives O(1) addressed reads. The length prefixes make the index
    recoverable: frames written after the last indexed record are re-indexed
    when the store is opened.
    """

    def __init__(self, directory, fsync: bool = True):
        """
        Open or create the record files in a directory.

        Args:
            directory: Log directory
            fsync: Force every write to disk before returning (default: True)

        Raises:
            StorageReadError: If the files cannot be opened or are inconsistent
        """
        self.directory = Path(directory)
        self.fsync = fsync
        self._lock = threading.RLock()

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._data = open(self.directory / DATA_FILE, "a+b")
            self._index = open(self.directory / INDEX_FILE, "a+b")
        except OSError as e:
            logger.error(f"Failed to open record store in {self.directory}: {e}", exc_info=True)
            raise StorageReadError(f"Failed to open record store in {self.directory}: {e}") from e

        try:
            self._count = self._repair_index()
        except OSError as e:
            self.close()
            logger.error(f"Failed to repair record store in {self.directory}: {e}", exc_info=True)
            raise StorageReadError(f"Failed to repair record store in {self.directory}: {e}") from e
        except StorageReadError:
            self.close()
            raise

        logger.info(f"Opened record store in {self.directory} with {self._count} records")

    def _repair_index(self) -> int:
        """
        Reconcile the index with the data file after an unclean shutdown.

        Returns:
            Number of records
        """
        index_size = _file_size(self._index)
        torn = index_size % _OFFSET.size
        if torn:
            logger.warning(f"Discarding a partially written index entry in {self.directory}")
            self._index.truncate(index_size - torn)
        count = index_size // _OFFSET.size

        data_size = _file_size(self._data)
        end = 0
        if count:
            (offset,) = _OFFSET.unpack(_read_at(self._index, (count - 1) * _OFFSET.size, _OFFSET.size))
            if offset + _LENGTH.size > data_size:
                raise StorageReadError(f"Index of {self.directory} points past the end of the data file")
            (length,) = _LENGTH.unpack(_read_at(self._data, offset, _LENGTH.size))
            end = offset + _LENGTH.size + length
            if end > data_size:
                raise StorageReadError(f"Last indexed record in {self.directory} is truncated")

        recovered = 0
        while end + _LENGTH.size <= data_size:
            (length,) = _LENGTH.unpack(_read_at(self._data, end, _LENGTH.size))
            if end + _LENGTH.size + length > data_size:
                break
            _durable_write(self._index, _OFFSET.pack(end), self.fsync)
            count += 1
            recovered += 1
            end += _LENGTH.size + length

        if recovered:
            logger.warning(f"Re-indexed {recovered} unindexed records in {self.directory}")
        if end < data_size:
            logger.warning(
                f"Discarding {data_size - end} trailing bytes of a partially written record in {self.directory}"
            )
            self._data.truncate(end)
        return count

    def get(self, record_id: int) -> bytes:
        if not 0 <= record_id < self._count:
            raise RecordNotFoundError(f"Record {record_id} does not exist")
        with self._lock:
            try:
                (offset,) = _OFFSET.unpack(
                    _read_at(self._index, record_id * _OFFSET.size, _OFFSET.size)
                )
                (length,) = _LENGTH.unpack(_read_at(self._data, offset, _LENGTH.size))
                return _read_at(self._data, offset + _LENGTH.size, length)
            except OSError as e:
                logger.error(f"Failed to read record {record_id}: {e}", exc_info=True)
                raise StorageReadError(f"Failed to read record {record_id}: {e}") from e

    def append(self, data: bytes) -> int:
        if len(data) > MAX_RECORD_SIZE:
            raise ValueError(f"Record of {len(data)} bytes exceeds {MAX_RECORD_SIZE} bytes")
        with self._lock:
            offset = None
            try:
                offset = _file_size(self._data)
                _durable_write(self._data, _LENGTH.pack(len(data)) + bytes(data), self.fsync)
                _durable_write(self._index, _OFFSET.pack(offset), self.fsync)
            except OSError as e:
                logger.error(f"Failed to append record to {self.directory}: {e}", exc_info=True)
                if offset is not None:
                    self._truncate_to_count(offset)
                raise StorageWriteError(f"Failed to append record to {self.directory}: {e}") from e
            self._count += 1
            return self._count - 1

    def _truncate_to_count(self, data_size: int) -> None:
        # Drop a partial frame and index entry so later records stay aligned
        try:
            self._index.truncate(self._count * _OFFSET.size)
            self._data.truncate(data_size)
        except OSError as e:
            logger.error(f"Failed to truncate records in {self.directory} after a failed write: {e}")

    def __len__(self) -> int:
        return self._count

    def close(self) -> None:
        with self._lock:
            for f in (self._data, self._index):
                if not f.closed:
                    f.close()
