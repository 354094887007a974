"""
Unit tests for hash recovery and auditing.
"""

from pathlib import Path

import pytest

from transparentlog.core.log import TransparentLog
from transparentlog.core.recovery import (
    AuditResult,
    audit_hashes,
    first_unhashed_record,
    rebuild_hashes,
    reconcile_hashes,
    write_subtree_hashes,
)
from transparentlog.exceptions import SlotConflictError, StorageReadError
from transparentlog.merkle.hashing import HASH_SIZE, leaf_hash, node_hash
from transparentlog.merkle.tree_math import stored_slot, stored_slot_count
from transparentlog.storage.file import HASH_FILE, FileHashStore, FileRecordStore
from transparentlog.storage.memory import MemoryHashStore, MemoryRecordStore


def record_store(count: int) -> MemoryRecordStore:
    records = MemoryRecordStore()
    for i in range(count):
        records.append(f"rec{i}".encode())
    return records


class TestWriteSubtreeHashes:
    """Test per-append hash writes."""

    def test_second_leaf_completes_parent(self):
        """Test appending leaf 1 stores the leaf and the pair's parent."""
        hashes = MemoryHashStore()
        write_subtree_hashes(hashes, 0, b"a")
        leaf = write_subtree_hashes(hashes, 1, b"b")

        assert leaf == leaf_hash(b"b")
        assert len(hashes) == 3
        assert hashes.get(stored_slot(1, 0)) == node_hash(leaf_hash(b"a"), leaf_hash(b"b"))


class TestFirstUnhashedRecord:
    """Test locating where replay must start."""

    @pytest.mark.parametrize(
        "slot_count, size, expected",
        [(0, 5, 0), (1, 5, 1), (2, 5, 1), (3, 5, 2), (4, 5, 3), (6, 5, 3), (7, 5, 4), (8, 5, 5)],
    )
    def test_known_positions(self, slot_count, size, expected):
        """Test the first record whose slots are incomplete."""
        assert first_unhashed_record(slot_count, size) == expected


class TestRebuild:
    """Test replaying records into a hash store."""

    def test_rebuild_from_scratch(self):
        """Test a rebuilt store matches one built by appends."""
        reference = TransparentLog()
        for i in range(13):
            reference.append(f"rec{i}".encode())

        hashes = MemoryHashStore()
        assert rebuild_hashes(record_store(13), hashes) == 13
        assert len(hashes) == stored_slot_count(13)
        for slot in range(len(hashes)):
            assert hashes.get(slot) == reference.hashes.get(slot)

    def test_rebuild_detects_conflicting_slot(self):
        """Test replaying over a corrupted slot raises SlotConflictError."""
        hashes = MemoryHashStore()
        hashes.put(0, leaf_hash(b"not rec0"))
        with pytest.raises(SlotConflictError):
            rebuild_hashes(record_store(2), hashes)

    def test_reconcile_is_noop_when_current(self):
        """Test reconciling an up-to-date store replays nothing."""
        records = record_store(5)
        hashes = MemoryHashStore()
        rebuild_hashes(records, hashes)
        assert reconcile_hashes(records, hashes) == 0

    def test_reconcile_replays_missing_records(self):
        """Test reconciling replays only the records after the last hashed one."""
        records = record_store(8)
        hashes = MemoryHashStore()
        rebuild_hashes(record_store(5), hashes)
        assert reconcile_hashes(records, hashes) == 3
        assert len(hashes) == stored_slot_count(8)

    def test_reconcile_rejects_extra_hashes(self):
        """Test more slots than records is reported."""
        hashes = MemoryHashStore()
        rebuild_hashes(record_store(6), hashes)
        with pytest.raises(StorageReadError):
            reconcile_hashes(record_store(2), hashes)


class TestAudit:
    """Test auditing stored hashes."""

    def test_clean_store_passes(self):
        """Test a correct store audits clean."""
        records = record_store(9)
        hashes = MemoryHashStore()
        rebuild_hashes(records, hashes)

        result = audit_hashes(records, hashes)
        assert result.ok
        assert result.records_checked == 9
        assert result.slots_checked == stored_slot_count(9)
        assert result.to_dict()["ok"] is True

    def test_missing_slots_are_reported(self):
        """Test a lagging store reports how many slots are missing."""
        records = record_store(4)
        hashes = MemoryHashStore()
        rebuild_hashes(record_store(2), hashes)

        result = audit_hashes(records, hashes)
        assert not result.ok
        assert result.missing_slots == stored_slot_count(4) - stored_slot_count(2)
        assert result.mismatched_slots == []

    def test_tampered_slot_is_reported(self, temp_dir: Path):
        """Test an overwritten hash on disk is found."""
        records = FileRecordStore(temp_dir, fsync=False)
        hashes = FileHashStore(temp_dir / HASH_FILE, fsync=False)
        for i in range(4):
            data = f"rec{i}".encode()
            write_subtree_hashes(hashes, records.append(data), data)
        hashes.close()

        raw = bytearray((temp_dir / HASH_FILE).read_bytes())
        raw[3 * HASH_SIZE] ^= 0xFF
        (temp_dir / HASH_FILE).write_bytes(bytes(raw))

        hashes = FileHashStore(temp_dir / HASH_FILE, fsync=False)
        try:
            result = audit_hashes(records, hashes)
        finally:
            hashes.close()
            records.close()

        assert result.mismatched_slots == [3]
        assert result.missing_slots == 0
        assert not result.ok

    def test_extra_slots_are_reported(self):
        """Test slots the records do not account for fail the audit."""
        records = record_store(1)
        hashes = MemoryHashStore()
        rebuild_hashes(records, hashes)
        hashes.put(1, leaf_hash(b"junk"))

        result = audit_hashes(records, hashes)
        assert not result.ok
        assert result.extra_slots == 1
        assert result.missing_slots == 0
        assert result.mismatched_slots == []
        assert result.to_dict()["extra_slots"] == 1

        with pytest.raises(StorageReadError):
            TransparentLog(records, hashes)

    def test_result_dict(self):
        """Test AuditResult serialization."""
        result = AuditResult(records_checked=2, slots_checked=3, mismatched_slots=[1])
        assert result.to_dict() == {
            "ok": False,
            "records_checked": 2,
            "slots_checked": 3,
            "mismatched_slots": [1],
            "missing_slots": 0,
            "extra_slots": 0,
        }
