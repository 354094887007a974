"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

Deriving stored hashes from records.

Every stored slot is a function of the record payloads alone, so a hash
store can always be re-derived by replaying records. This module provides:
- write_subtree_hashes: store the slots completed by one record (used by append)
- rebuild_hashes: replay records into a hash store after a crash or loss
- audit_hashes: recompute every slot and report those that differ
"""

from dataclasses import dataclass, field
from typing import List

from transparentlog.exceptions import StorageReadError
from transparentlog.logging_config import get_logger
from transparentlog.merkle.hashing import leaf_hash, node_hash
from transparentlog.merkle.tree_math import new_subtrees, stored_slot, stored_slot_count
from transparentlog.storage.base import HashStore, RecordStore
from transparentlog.storage.memory import MemoryHashStore

logger = get_logger(__name__)


@dataclass
class AuditResult:
    """
    Result of auditing a hash store against its records.

    Attributes:
        records_checked: Number of records replayed
        slots_checked: Number of stored slots compared
        mismatched_slots: Slots whose stored hash differs from the recomputed one
        missing_slots: Number of slots the store should hold but does not
        extra_slots: Number of slots beyond those the records account for
    """
    records_checked: int
    slots_checked: int
    mismatched_slots: List[int] = field(default_factory=list)
    missing_slots: int = 0
    extra_slots: int = 0

    @property
    def ok(self) -> bool:
        """True if the store holds exactly the expected slots, all correct."""
        return not self.mismatched_slots and self.missing_slots == 0 and self.extra_slots == 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "ok": self.ok,
            "records_checked": self.records_checked,
            "slots_checked": self.slots_checked,
            "mismatched_slots": list(self.mismatched_slots),
            "missing_slots": self.missing_slots,
            "extra_slots": self.extra_slots,
        }


def write_subtree_hashes(hashes: HashStore, n: int, data: bytes) -> bytes:
    """
    Store the leaf hash of record n and every subtree hash it completes.

    Parent hashes are combined from children already in the store, so
    records 0..n-1 must have been written first.

    Args:
        hashes: Hash store to write to
        n: Record id
        data: Record payload

    Returns:
        Leaf hash of the record
    """
    leaf = leaf_hash(data)
    for level, index in new_subtrees(n):
        if level == 0:
            value = leaf
        else:
            left = hashes.get(stored_slot(level - 1, 2 * index))
            right = hashes.get(stored_slot(level - 1, 2 * index + 1))
            value = node_hash(left, right)
        hashes.put(stored_slot(level, index), value)
    return leaf


def first_unhashed_record(slot_count: int, size: int) -> int:
    """
    Find the first record whose slots are not all present.

    Args:
        slot_count: Number of slots in the hash store
        size: Number of records

    Returns:
        Smallest record id r such that stored_slot_count(r + 1) > slot_count,
        or size if every record is fully hashed
    """
    lo, hi = 0, size
    while lo < hi:
        mid = (lo + hi) // 2
        if stored_slot_count(mid + 1) > slot_count:
            hi = mid
        else:
            lo = mid + 1
    return lo


def rebuild_hashes(records: RecordStore, hashes: HashStore, start: int = 0) -> int:
    """
    Replay records into a hash store.

    Slots that already exist are compared rather than rewritten, so replaying
    over a partially populated store also detects corrupted slots.

    Args:
        records: Record store to replay
        hashes: Hash store to fill
        start: First record to replay (default: 0)

    Returns:
        Number of records replayed

    Raises:
        SlotConflictError: If an existing slot differs from the replayed hash
    """
    size = len(records)
    for n in range(start, size):
        write_subtree_hashes(hashes, n, records.get(n))
    replayed = max(size - start, 0)
    if replayed:
        logger.info(f"Replayed hashes for records {start}..{size - 1}")
    return replayed


def reconcile_hashes(records: RecordStore, hashes: HashStore) -> int:
    """
    Bring a hash store up to date with its record store.

    A crash between writing a record and writing its hashes leaves the hash
    store behind; the missing slots are derived again from the records.

    Returns:
        Number of records replayed

    Raises:
        StorageReadError: If the hash store holds more slots than the records explain
    """
    size = len(records)
    expected = stored_slot_count(size)
    present = len(hashes)
    if present > expected:
        raise StorageReadError(
            f"Hash store holds {present} slots but {size} records only account for {expected}"
        )
    if present == expected:
        return 0
    start = first_unhashed_record(present, size)
    logger.warning(
        f"Hash store is missing {expected - present} slots, replaying from record {start}"
    )
    return rebuild_hashes(records, hashes, start)


def audit_hashes(records: RecordStore, hashes: HashStore) -> AuditResult:
    """
    Recompute every stored slot from the records and compare.

    Args:
        records: Record store holding the source payloads
        hashes: Hash store to audit

    Returns:
        AuditResult listing mismatched, missing and extra slots
    """
    size = len(records)
    expected = MemoryHashStore()
    rebuild_hashes(records, expected, 0)

    checked = min(len(expected), len(hashes))
    mismatched = [slot for slot in range(checked) if hashes.get(slot) != expected.get(slot)]
    result = AuditResult(
        records_checked=size,
        slots_checked=checked,
        mismatched_slots=mismatched,
        missing_slots=len(expected) - checked,
        extra_slots=len(hashes) - checked,
    )

    if result.ok:
        logger.info(f"Audit passed: {checked} slots match {size} records")
    else:
        logger.warning(
            f"Audit failed: {len(mismatched)} mismatched slots, "
            f"{result.missing_slots} missing slots, "
            f"{result.extra_slots} extra slots"
        )
    return result
