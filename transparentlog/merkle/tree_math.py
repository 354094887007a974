"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

Tree arithmetic for the transparent log.

Everything in this module is a pure function of tree sizes and leaf ranges.
Ranges are half-open ``(lo, hi)`` pairs of leaf indices.

The split rule is the one from RFC 6962: a range of ``n > 1`` leaves is split
into a left subtree holding the largest power of two strictly smaller than
``n`` and a right remainder. The same rule drives root hashing, appending,
inclusion proofs and consistency proofs.

Complete subtrees (a power-of-two span aligned on its own size) are
identified by ``(level, index)``: level ``L`` index ``k`` covers leaves
``[k * 2**L, (k + 1) * 2**L)``. Each one gets a linear slot address in the
order subtrees complete as the log grows, so the hash store is a plain
append-only array:

    slot:     0   1   2   3   4   5   6   7 ...
    (L, k): (0,0)(0,1)(1,0)(0,2)(0,3)(1,1)(2,0)(0,4)
"""

from typing import List, Tuple

from transparentlog.exceptions import InvalidRangeError

Range = Tuple[int, int]
Coordinate = Tuple[int, int]


def split_point(n: int) -> int:
    """
    Size of the left subtree when splitting a range of n leaves.

    Args:
        n: Number of leaves in the range (must be at least 2)

    Returns:
        Largest power of two strictly less than n

    Raises:
        InvalidRangeError: If n < 2
    """
    if n < 2:
        raise InvalidRangeError(f"Cannot split a range of {n} leaves")
    return 1 << ((n - 1).bit_length() - 1)


def is_complete(lo: int, hi: int) -> bool:
    """Return True if [lo, hi) is a power-of-two span aligned on its size."""
    width = hi - lo
    return width > 0 and width & (width - 1) == 0 and lo % width == 0


def subtree_coordinate(lo: int, hi: int) -> Coordinate:
    """
    Convert a complete range to its (level, index) coordinate.

    Raises:
        InvalidRangeError: If the range is not a complete subtree
    """
    if not is_complete(lo, hi):
        raise InvalidRangeError(f"Range [{lo}, {hi}) is not a complete subtree")
    level = (hi - lo).bit_length() - 1
    return level, lo >> level


def stored_slot(level: int, index: int) -> int:
    """
    Linear slot address of the complete subtree (level, index).

    The subtree completes when its last leaf, ``(index << level) + 2**level - 1``,
    is appended. Appending leaf ``n`` is preceded by ``n + n//2 + n//4 + ...``
    slots (every leaf and every subtree completed by earlier leaves) plus the
    ``level`` slots of lower subtrees completed by leaf ``n`` itself.

    Args:
        level: Height of the subtree (0 for a leaf)
        index: Position of the subtree among subtrees of the same level

    Returns:
        Slot address

    Raises:
        InvalidRangeError: If level or index is negative
    """
    if level < 0 or index < 0:
        raise InvalidRangeError(f"Invalid subtree coordinate ({level}, {index})")
    last_leaf = (index << level) + (1 << level) - 1
    slot = 0
    while last_leaf > 0:
        slot += last_leaf
        last_leaf >>= 1
    return slot + level


def new_subtrees(n: int) -> List[Coordinate]:
    """
    Coordinates of the subtrees completed by appending leaf n.

    The leaf itself comes first, followed by each parent it completes, so the
    corresponding slot addresses are consecutive and increasing.

    Args:
        n: Index of the leaf being appended

    Returns:
        List of (level, index) coordinates, level 0 first
    """
    if n < 0:
        raise InvalidRangeError(f"Invalid leaf index {n}")
    coordinates = [(0, n)]
    level, index = 0, n
    while index & 1:
        index >>= 1
        level += 1
        coordinates.append((level, index))
    return coordinates


def stored_slot_count(size: int) -> int:
    """
    Number of slots written by a log holding size records.

    Args:
        size: Tree size

    Returns:
        Slot count (0 for the empty tree)
    """
    if size < 0:
        raise InvalidRangeError(f"Invalid tree size {size}")
    if size == 0:
        return 0
    last = new_subtrees(size - 1)[-1]
    return stored_slot(*last) + 1


def complete_subtrees(lo: int, hi: int) -> List[Range]:
    """
    Decompose [lo, hi) into maximal complete subtrees following the split rule.

    For [0, 13) this yields [(0, 8), (8, 12), (12, 13)].
    """
    if lo < 0 or hi < lo:
        raise InvalidRangeError(f"Invalid range [{lo}, {hi})")
    ranges = []
    while lo < hi:
        if is_complete(lo, hi):
            ranges.append((lo, hi))
            break
        k = split_point(hi - lo)
        ranges.append((lo, lo + k))
        lo += k
    return ranges


def inclusion_ranges(index: int, size: int) -> List[Range]:
    """
    Ranges whose subtree hashes form the inclusion proof for a leaf.

    Ordered from the leaf towards the root, as in RFC 6962 PATH(m, D[n]).

    Args:
        index: Leaf index
        size: Tree size the proof is for

    Returns:
        List of (lo, hi) ranges

    Raises:
        InvalidRangeError: If index is not below size
    """
    if not 0 <= index < size:
        raise InvalidRangeError(f"Leaf {index} is not in a tree of size {size}")
    return _path(index, 0, size)


def _path(index: int, lo: int, hi: int) -> List[Range]:
    if hi - lo == 1:
        return []
    k = split_point(hi - lo)
    if index < lo + k:
        return _path(index, lo, lo + k) + [(lo + k, hi)]
    return _path(index, lo + k, hi) + [(lo, lo + k)]


def consistency_ranges(size1: int, size2: int) -> List[Range]:
    """
    Ranges whose subtree hashes form the consistency proof between two sizes.

    Follows RFC 6962 PROOF(m, D[n]). The proof is empty when size1 is 0 (the
    empty tree is a prefix of every tree) or when both sizes are equal.

    Args:
        size1: Earlier tree size
        size2: Later tree size

    Returns:
        List of (lo, hi) ranges

    Raises:
        InvalidRangeError: If size1 > size2 or either is negative
    """
    if size1 < 0 or size1 > size2:
        raise InvalidRangeError(f"Invalid consistency range {size1} -> {size2}")
    if size1 == 0 or size1 == size2:
        return []
    return _subproof(size1, 0, size2, True)


def _subproof(boundary: int, lo: int, hi: int, whole: bool) -> List[Range]:
    # whole: [lo, hi) is a complete subtree of the old tree whose hash the
    # verifier already has, so it need not be sent
    if boundary == hi:
        return [] if whole else [(lo, hi)]
    k = split_point(hi - lo)
    if boundary <= lo + k:
        return _subproof(boundary, lo, lo + k, whole) + [(lo + k, hi)]
    return _subproof(boundary, lo + k, hi, False) + [(lo, lo + k)]
