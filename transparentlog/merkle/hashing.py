"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

Leaf and interior node hashing for the log's Merkle tree.

Hashes follow RFC 6962:
- leaf_hash(data) = SHA256(0x00 || data)
- node_hash(left, right) = SHA256(0x01 || left || right)

The prefixes keep leaf and node inputs in separate domains, so no leaf hash
can be replayed as an interior node hash.
"""

import hashlib

HASH_SIZE = 32

# Root of the empty tree. Zero length, so it can never equal a real hash.
EMPTY_ROOT_HASH = b""

LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"


def leaf_hash(data: bytes) -> bytes:
    """
    Hash a record payload as a Merkle leaf.

    Args:
        data: Raw record bytes

    Returns:
        32-byte leaf hash
    """
    return hashlib.sha256(LEAF_PREFIX + data).digest()


def node_hash(left: bytes, right: bytes) -> bytes:
    """
    Hash two child subtree hashes into their parent hash.

    Args:
        left: Hash of the left subtree
        right: Hash of the right subtree

    Returns:
        32-byte interior node hash

    Raises:
        ValueError: If either child is not a HASH_SIZE-byte hash
    """
    if len(left) != HASH_SIZE or len(right) != HASH_SIZE:
        raise ValueError(
            f"Child hashes must be {HASH_SIZE} bytes, got {len(left)} and {len(right)}"
        )
    return hashlib.sha256(NODE_PREFIX + left + right).digest()
