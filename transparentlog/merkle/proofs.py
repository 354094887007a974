"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

Tree heads, proofs and client-side proof verification.

This module defines the three shapes exchanged between a log and its
clients, and verifies proofs without access to the log:
- TreeHead: (size, root hash) commitment to the first `size` records
- InclusionProof: sibling hashes linking one leaf to a tree head
- ConsistencyProof: hashes linking an earlier tree head to a later one

Verification follows RFC 9162 section 2.1.3 (inclusion) and 2.1.4
(consistency). Every failure raises a VerificationFailedError subclass.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from transparentlog.exceptions import (
    ConsistencyMismatchError,
    InclusionMismatchError,
)
from transparentlog.merkle.hashing import EMPTY_ROOT_HASH, HASH_SIZE, node_hash


@dataclass(frozen=True)
class TreeHead:
    """
    Commitment to the first `size` records of a log.

    Attributes:
        size: Number of records covered
        root_hash: Merkle root over those records (EMPTY_ROOT_HASH for size 0)
    """
    size: int
    root_hash: bytes

    @classmethod
    def empty(cls) -> "TreeHead":
        """Tree head of the empty log."""
        return cls(size=0, root_hash=EMPTY_ROOT_HASH)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"size": self.size, "root_hash": self.root_hash.hex()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TreeHead":
        """Create TreeHead from dictionary."""
        return cls(size=int(data["size"]), root_hash=bytes.fromhex(data["root_hash"]))


@dataclass(frozen=True)
class InclusionProof:
    """
    Proof that a leaf is included in the tree of a given size.

    Attributes:
        leaf_index: Index of the proven leaf
        tree_size: Tree size the proof is for
        hashes: Sibling subtree hashes, ordered from the leaf to the root
    """
    leaf_index: int
    tree_size: int
    hashes: Tuple[bytes, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "leaf_index": self.leaf_index,
            "tree_size": self.tree_size,
            "hashes": [h.hex() for h in self.hashes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InclusionProof":
        """Create InclusionProof from dictionary."""
        return cls(
            leaf_index=int(data["leaf_index"]),
            tree_size=int(data["tree_size"]),
            hashes=tuple(bytes.fromhex(h) for h in data["hashes"]),
        )


@dataclass(frozen=True)
class ConsistencyProof:
    """
    Proof that the tree of size2 extends the tree of size1.

    Attributes:
        size1: Earlier tree size
        size2: Later tree size
        hashes: Subtree hashes in RFC 6962 SUBPROOF order
    """
    size1: int
    size2: int
    hashes: Tuple[bytes, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "size1": self.size1,
            "size2": self.size2,
            "hashes": [h.hex() for h in self.hashes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConsistencyProof":
        """Create ConsistencyProof from dictionary."""
        return cls(
            size1=int(data["size1"]),
            size2=int(data["size2"]),
            hashes=tuple(bytes.fromhex(h) for h in data["hashes"]),
        )


def _check_hash_sizes(hashes: Sequence[bytes], error_cls) -> None:
    for h in hashes:
        if len(h) != HASH_SIZE:
            raise error_cls(f"Proof contains a {len(h)}-byte hash, expected {HASH_SIZE}")


def root_from_inclusion_proof(
    leaf_index: int,
    tree_size: int,
    leaf: bytes,
    hashes: Sequence[bytes],
) -> bytes:
    """
    Recompute the root hash implied by an inclusion proof.

    Args:
        leaf_index: Index of the leaf
        tree_size: Tree size the proof claims to be for
        leaf: Leaf hash of the record
        hashes: Proof hashes, leaf to root

    Returns:
        Candidate root hash

    Raises:
        InclusionMismatchError: If the proof is malformed for this index and size
    """
    if not 0 <= leaf_index < tree_size:
        raise InclusionMismatchError(
            f"Leaf {leaf_index} cannot be in a tree of size {tree_size}"
        )
    _check_hash_sizes([leaf, *hashes], InclusionMismatchError)

    fn, sn = leaf_index, tree_size - 1
    result = leaf
    for sibling in hashes:
        if sn == 0:
            raise InclusionMismatchError("Inclusion proof is too long")
        if fn & 1 or fn == sn:
            result = node_hash(sibling, result)
            # Skip the levels where this node has no right sibling
            while fn and not fn & 1:
                fn >>= 1
                sn >>= 1
        else:
            result = node_hash(result, sibling)
        fn >>= 1
        sn >>= 1

    if sn != 0:
        raise InclusionMismatchError("Inclusion proof is too short")
    return result


def verify_inclusion(proof: InclusionProof, leaf: bytes, head: TreeHead) -> None:
    """
    Verify that a leaf hash is included in a tree head.

    Args:
        proof: Inclusion proof for the leaf
        leaf: Leaf hash of the record, computed by the caller
        head: Tree head to verify against

    Raises:
        InclusionMismatchError: If the proof does not reproduce head.root_hash
    """
    if proof.tree_size != head.size:
        raise InclusionMismatchError(
            f"Proof is for tree size {proof.tree_size}, head has size {head.size}",
            offered=head,
        )
    root = root_from_inclusion_proof(proof.leaf_index, proof.tree_size, leaf, proof.hashes)
    if root != head.root_hash:
        raise InclusionMismatchError(
            f"Inclusion proof for leaf {proof.leaf_index} does not match root at size {head.size}",
            offered=head,
        )


def roots_from_consistency_proof(
    size1: int,
    size2: int,
    root1: bytes,
    hashes: Sequence[bytes],
) -> Tuple[bytes, bytes]:
    """
    Replay a consistency proof, recomputing both tree roots.

    Requires 0 < size1 < size2. The old root is needed as input when size1 is
    a power of two, because the proof omits it in that case.

    Args:
        size1: Earlier tree size
        size2: Later tree size
        root1: Trusted root hash at size1
        hashes: Proof hashes

    Returns:
        Tuple of (recomputed root at size1, recomputed root at size2)

    Raises:
        ConsistencyMismatchError: If the proof is malformed for these sizes
    """
    if not 0 < size1 < size2:
        raise ConsistencyMismatchError(f"Cannot replay consistency proof {size1} -> {size2}")
    if not hashes:
        raise ConsistencyMismatchError("Consistency proof is empty")
    _check_hash_sizes([root1, *hashes], ConsistencyMismatchError)

    path: List[bytes] = list(hashes)
    if size1 & (size1 - 1) == 0:
        path.insert(0, root1)

    fn, sn = size1 - 1, size2 - 1
    while fn & 1:
        fn >>= 1
        sn >>= 1

    first = second = path[0]
    for h in path[1:]:
        if sn == 0:
            raise ConsistencyMismatchError("Consistency proof is too long")
        if fn & 1 or fn == sn:
            first = node_hash(h, first)
            second = node_hash(h, second)
            while fn and not fn & 1:
                fn >>= 1
                sn >>= 1
        else:
            second = node_hash(second, h)
        fn >>= 1
        sn >>= 1

    if sn != 0:
        raise ConsistencyMismatchError("Consistency proof is too short")
    return first, second


def verify_consistency(proof: ConsistencyProof, old: TreeHead, new: TreeHead) -> None:
    """
    Verify that tree head `new` is an append-only extension of `old`.

    Empty proofs are valid when old is the empty tree, or when both heads
    have the same size and the same root.

    Args:
        proof: Consistency proof from old.size to new.size
        old: Trusted earlier tree head
        new: Later tree head presented by the log

    Raises:
        ConsistencyMismatchError: If the proof does not link the two heads
    """
    if (proof.size1, proof.size2) != (old.size, new.size):
        raise ConsistencyMismatchError(
            f"Proof is for {proof.size1} -> {proof.size2}, "
            f"heads are {old.size} -> {new.size}",
            trusted=old,
            offered=new,
        )
    if old.size > new.size:
        raise ConsistencyMismatchError(
            f"Tree size {new.size} cannot extend size {old.size}", trusted=old, offered=new
        )

    if old.size == 0 or old.size == new.size:
        if proof.hashes:
            raise ConsistencyMismatchError(
                "Expected an empty consistency proof", trusted=old, offered=new
            )
        if old.size == 0 and old.root_hash != EMPTY_ROOT_HASH:
            raise ConsistencyMismatchError(
                "Empty tree head has a non-empty root", trusted=old, offered=new
            )
        if old.size == new.size and old.root_hash != new.root_hash:
            raise ConsistencyMismatchError(
                f"Two different roots for tree size {old.size}", trusted=old, offered=new
            )
        return

    first, second = roots_from_consistency_proof(
        old.size, new.size, old.root_hash, proof.hashes
    )
    if first != old.root_hash:
        raise ConsistencyMismatchError(
            f"Consistency proof does not reproduce the trusted root at size {old.size}",
            trusted=old,
            offered=new,
        )
    if second != new.root_hash:
        raise ConsistencyMismatchError(
            f"Consistency proof does not reproduce the offered root at size {new.size}",
            trusted=old,
            offered=new,
        )
