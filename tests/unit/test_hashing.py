"""
Unit tests for Merkle leaf and node hashing.

Expected values are the RFC 6962 reference test vectors.
"""

import hashlib

import pytest

from transparentlog.merkle.hashing import (
    EMPTY_ROOT_HASH,
    HASH_SIZE,
    leaf_hash,
    node_hash,
)


class TestLeafHash:
    """Test leaf hashing."""

    def test_empty_leaf_vector(self):
        """Test leaf hash of empty data matches RFC 6962."""
        assert leaf_hash(b"").hex() == (
            "6e340b9cffb37a989ca544e6bb780a2c78901d3fb33738768511a30617afa01d"
        )

    def test_leaf_hash_uses_leaf_prefix(self):
        """Test leaf hash is SHA-256 over 0x00 || data."""
        assert leaf_hash(b"entry1") == hashlib.sha256(b"\x00entry1").digest()

    def test_leaf_hash_is_deterministic(self):
        """Test hashing the same data twice gives the same hash."""
        assert leaf_hash(b"entry1") == leaf_hash(b"entry1")
        assert leaf_hash(b"entry1") != leaf_hash(b"entry2")

    def test_leaf_hash_size(self):
        """Test leaf hashes are HASH_SIZE bytes."""
        assert len(leaf_hash(b"x" * 1000)) == HASH_SIZE


class TestNodeHash:
    """Test interior node hashing."""

    def test_two_leaf_root_vector(self):
        """Test node hash of the first two RFC 6962 leaves."""
        left = leaf_hash(b"")
        right = leaf_hash(b"\x00")
        assert node_hash(left, right).hex() == (
            "fac54203e7cc696cf0dfcb42c92a1d9dbaf70ad9e621f4bd8d98662f00e3c125"
        )

    def test_node_hash_uses_node_prefix(self):
        """Test node hash is SHA-256 over 0x01 || left || right."""
        left = leaf_hash(b"a")
        right = leaf_hash(b"b")
        assert node_hash(left, right) == hashlib.sha256(b"\x01" + left + right).digest()

    def test_node_hash_is_ordered(self):
        """Test swapping children changes the hash."""
        left = leaf_hash(b"a")
        right = leaf_hash(b"b")
        assert node_hash(left, right) != node_hash(right, left)

    def test_leaf_and_node_domains_differ(self):
        """Test a leaf over 64 bytes of child hashes is not a node hash."""
        left = leaf_hash(b"a")
        right = leaf_hash(b"b")
        assert leaf_hash(left + right) != node_hash(left, right)

    def test_node_hash_rejects_wrong_sizes(self):
        """Test node hash rejects children that are not 32-byte hashes."""
        with pytest.raises(ValueError):
            node_hash(b"short", leaf_hash(b"b"))
        with pytest.raises(ValueError):
            node_hash(leaf_hash(b"a"), EMPTY_ROOT_HASH)


class TestEmptyRoot:
    """Test the empty-tree sentinel."""

    def test_empty_root_differs_from_every_hash(self):
        """Test the empty root can never equal a real hash."""
        assert len(EMPTY_ROOT_HASH) != HASH_SIZE
        assert EMPTY_ROOT_HASH != leaf_hash(b"")
