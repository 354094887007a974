"""
Merkle tree hashing, tree arithmetic and proof verification.

This package holds the pure, storage-independent parts of the transparent
log: the hash engine, the split and slot-address arithmetic, and the proof
shapes with their client-side verification.
"""

from transparentlog.merkle.hashing import (
    EMPTY_ROOT_HASH,
    HASH_SIZE,
    leaf_hash,
    node_hash,
)
from transparentlog.merkle.proofs import (
    ConsistencyProof,
    InclusionProof,
    TreeHead,
    root_from_inclusion_proof,
    roots_from_consistency_proof,
    verify_consistency,
    verify_inclusion,
)
from transparentlog.merkle.tree_math import (
    complete_subtrees,
    consistency_ranges,
    inclusion_ranges,
    is_complete,
    new_subtrees,
    split_point,
    stored_slot,
    stored_slot_count,
    subtree_coordinate,
)

__all__ = [
    "EMPTY_ROOT_HASH",
    "HASH_SIZE",
    "leaf_hash",
    "node_hash",
    "ConsistencyProof",
    "InclusionProof",
    "TreeHead",
    "root_from_inclusion_proof",
    "roots_from_consistency_proof",
    "verify_consistency",
    "verify_inclusion",
    "complete_subtrees",
    "consistency_ranges",
    "inclusion_ranges",
    "is_complete",
    "new_subtrees",
    "split_point",
    "stored_slot",
    "stored_slot_count",
    "subtree_coordinate",
]
