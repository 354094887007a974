"""
Storage backends for the transparent log.

Provides the HashStore and RecordStore contracts with in-memory and
file-backed implementations, selected via the storage.backend setting.
"""

from transparentlog.storage.base import HashStore, RecordStore
from transparentlog.storage.file import FileHashStore, FileRecordStore
from transparentlog.storage.memory import MemoryHashStore, MemoryRecordStore

__all__ = [
    "HashStore",
    "RecordStore",
    "FileHashStore",
    "FileRecordStore",
    "MemoryHashStore",
    "MemoryRecordStore",
]
