"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

Core components for TransparentLog.

This module contains the core primitives:
- The transparent log (append, read, tree heads, proofs)
- The skeptical client that verifies the log
- Hash recovery and auditing
"""

from transparentlog.core.client import LogClient
from transparentlog.core.log import Record, RecordHandle, TransparentLog, open_log, open_stores
from transparentlog.core.recovery import (
    AuditResult,
    audit_hashes,
    rebuild_hashes,
    reconcile_hashes,
)

__all__ = [
    "LogClient",
    "Record",
    "RecordHandle",
    "TransparentLog",
    "open_log",
    "open_stores",
    "AuditResult",
    "audit_hashes",
    "rebuild_hashes",
    "reconcile_hashes",
]
