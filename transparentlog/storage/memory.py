"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

In-memory storage backends. Contents are lost when the process exits.
"""

import threading
from typing import List

from transparentlog.exceptions import RecordNotFoundError, SlotNotFoundError
from transparentlog.storage.base import HashStore, RecordStore, check_slot_write


class MemoryHashStore(HashStore):
    """Hash store backed by a Python list indexed by slot address."""

    def __init__(self):
        self._hashes: List[bytes] = []
        self._lock = threading.Lock()

    def get(self, slot: int) -> bytes:
        if not 0 <= slot < len(self._hashes):
            raise SlotNotFoundError(f"Slot {slot} has not been written")
        return self._hashes[slot]

    def put(self, slot: int, value: bytes) -> None:
        with self._lock:
            if check_slot_write(self, len(self._hashes), slot, bytes(value)):
                return
            self._hashes.append(bytes(value))

    def __len__(self) -> int:
        return len(self._hashes)


class MemoryRecordStore(RecordStore):
    """Record store backed by a Python list indexed by record id."""

    def __init__(self):
        self._records: List[bytes] = []
        self._lock = threading.Lock()

    def get(self, record_id: int) -> bytes:
        if not 0 <= record_id < len(self._records):
            raise RecordNotFoundError(f"Record {record_id} does not exist")
        return self._records[record_id]

    def append(self, data: bytes) -> int:
        with self._lock:
            self._records.append(bytes(data))
            return len(self._records) - 1

    def __len__(self) -> int:
        return len(self._records)
