"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

Storage contracts for the transparent log.

Two append-only stores back a log:
- HashStore: hashes of complete subtrees, addressed by linear slot
- RecordStore: record payloads, addressed by record id

Each contract has an in-memory and a file-backed implementation.
"""

from abc import ABC, abstractmethod

from transparentlog.exceptions import SlotConflictError
from transparentlog.merkle.hashing import HASH_SIZE


class HashStore(ABC):
    """
    Abstract append-only array of subtree hashes.

    Slots are written in increasing address order and are immutable once
    written. Writing the same value to an existing slot is a no-op.
    """

    @abstractmethod
    def get(self, slot: int) -> bytes:
        """
        Read the hash stored at a slot.

        Raises:
            SlotNotFoundError: If the slot has never been written
            StorageReadError: If the backend read fails
        """
        pass

    @abstractmethod
    def put(self, slot: int, value: bytes) -> None:
        """
        Write a hash to a slot.

        Raises:
            SlotConflictError: If the slot holds a different value, or if
                the slot is beyond the next unwritten address
            StorageWriteError: If the backend write fails
        """
        pass

    @abstractmethod
    def __len__(self) -> int:
        """Number of slots written."""
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass


class RecordStore(ABC):
    """Abstract append-only sequence of record payloads."""

    @abstractmethod
    def get(self, record_id: int) -> bytes:
        """
        Read the payload of a record.

        Raises:
            RecordNotFoundError: If the record does not exist
            StorageReadError: If the backend read fails
        """
        pass

    @abstractmethod
    def append(self, data: bytes) -> int:
        """
        Append a payload and return its record id.

        Raises:
            StorageWriteError: If the backend write fails
        """
        pass

    @abstractmethod
    def __len__(self) -> int:
        """Number of records stored."""
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass


def check_slot_write(store: HashStore, count: int, slot: int, value: bytes) -> bool:
    """
    Validate a slot write against the current contents of a store.

    Args:
        store: Store being written
        count: Number of slots currently written
        slot: Target slot address
        value: Hash to write

    Returns:
        True if the slot already holds this exact value (nothing to write),
        False if the value should be appended

    Raises:
        ValueError: If value is not a HASH_SIZE-byte hash
        SlotConflictError: If the slot holds a different value or the write
            would leave a gap
    """
    if len(value) != HASH_SIZE:
        raise ValueError(f"Hash must be {HASH_SIZE} bytes, got {len(value)}")
    if slot < count:
        if store.get(slot) != value:
            raise SlotConflictError(f"Slot {slot} already holds a different hash")
        return True
    if slot > count:
        raise SlotConflictError(
            f"Slot {slot} written out of order, next free slot is {count}"
        )
    return False
