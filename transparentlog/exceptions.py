"""
Exception hierarchy for TransparentLog.

All custom exceptions inherit from TransparentLogError base class.
"""


class TransparentLogError(Exception):
    """Base exception for all TransparentLog errors."""
    pass


# Lookup Errors
class NotFoundError(TransparentLogError):
    """Base exception for lookups outside the current bounds of a store or log."""
    pass


class SlotNotFoundError(NotFoundError):
    """Raised when a hash slot has never been written."""
    pass


class RecordNotFoundError(NotFoundError):
    """Raised when a record id is not below the current tree size."""
    pass


# Integrity Errors
class SlotConflictError(TransparentLogError):
    """
    Raised when a write would change an already-written hash slot or
    leave a gap in the slot sequence.

    Stored slots are immutable once written, so this always indicates a
    logic error or on-disk corruption.
    """
    pass


class InvalidRangeError(TransparentLogError):
    """Raised when a tree size, record id or proof range is out of bounds."""
    pass


# Verification Errors
class VerificationFailedError(TransparentLogError):
    """
    Raised when client-side verification of a proof fails.

    This is distinct from storage failures: it means the data was checked
    and did not match, which implies tampering or a forked log.

    Attributes:
        trusted: Tree head the client trusted when the check started
        offered: Tree head the log presented, if any
    """

    def __init__(self, message: str, trusted=None, offered=None):
        super().__init__(message)
        self.trusted = trusted
        self.offered = offered


class InclusionMismatchError(VerificationFailedError):
    """Raised when an inclusion proof does not reproduce the tree head root."""
    pass


class ConsistencyMismatchError(VerificationFailedError):
    """Raised when a consistency proof does not link two tree heads (fork)."""
    pass


class RollbackDetectedError(VerificationFailedError):
    """Raised when the log presents a tree head smaller than the trusted one."""
    pass


# Storage Errors
class StorageError(TransparentLogError):
    """Base exception for storage backend failures."""
    pass


class StorageReadError(StorageError):
    """Raised when reading from a storage backend fails."""
    pass


class StorageWriteError(StorageError):
    """Raised when writing to a storage backend fails."""
    pass


# Configuration Errors
class ConfigurationError(TransparentLogError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration is invalid or malformed."""
    pass
