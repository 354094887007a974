"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

TransparentLog - Append-only verifiable log backed by a Merkle tree

TransparentLog stores records in an append-only log, commits to them with
RFC 6962 Merkle tree heads, and serves inclusion and consistency proofs that
a skeptical client can verify without trusting the log.
"""

from transparentlog._version import __version__
from transparentlog.core.client import LogClient
from transparentlog.core.log import Record, RecordHandle, TransparentLog, open_log
from transparentlog.merkle.proofs import ConsistencyProof, InclusionProof, TreeHead

__all__ = [
    "__version__",
    "LogClient",
    "Record",
    "RecordHandle",
    "TransparentLog",
    "open_log",
    "ConsistencyProof",
    "InclusionProof",
    "TreeHead",
]
