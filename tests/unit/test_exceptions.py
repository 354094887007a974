"""
Unit tests for exception hierarchy.
"""

import pytest
from transparentlog.exceptions import (
    TransparentLogError,
    NotFoundError,
    SlotNotFoundError,
    RecordNotFoundError,
    SlotConflictError,
    InvalidRangeError,
    VerificationFailedError,
    InclusionMismatchError,
    ConsistencyMismatchError,
    RollbackDetectedError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    ConfigurationError,
    InvalidConfigurationError,
)
from transparentlog.merkle.proofs import TreeHead


class TestExceptionHierarchy:
    """Test that exception hierarchy is correctly defined."""

    def test_base_exception(self):
        """Test that TransparentLogError is the base exception."""
        error = TransparentLogError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    def test_not_found_errors_inherit_from_base(self):
        """Test that lookup errors inherit from NotFoundError."""
        assert issubclass(NotFoundError, TransparentLogError)
        assert issubclass(SlotNotFoundError, NotFoundError)
        assert issubclass(RecordNotFoundError, NotFoundError)

    def test_integrity_errors_inherit_from_base(self):
        """Test that slot and range errors inherit from TransparentLogError."""
        assert issubclass(SlotConflictError, TransparentLogError)
        assert issubclass(InvalidRangeError, TransparentLogError)

    def test_verification_errors_inherit_from_base(self):
        """Test that verification errors inherit from VerificationFailedError."""
        assert issubclass(VerificationFailedError, TransparentLogError)
        assert issubclass(InclusionMismatchError, VerificationFailedError)
        assert issubclass(ConsistencyMismatchError, VerificationFailedError)
        assert issubclass(RollbackDetectedError, VerificationFailedError)

    def test_storage_errors_inherit_from_base(self):
        """Test that storage errors inherit from StorageError."""
        assert issubclass(StorageError, TransparentLogError)
        assert issubclass(StorageReadError, StorageError)
        assert issubclass(StorageWriteError, StorageError)

    def test_configuration_errors_inherit_from_base(self):
        """Test that configuration errors inherit from ConfigurationError."""
        assert issubclass(ConfigurationError, TransparentLogError)
        assert issubclass(InvalidConfigurationError, ConfigurationError)

    def test_verification_failures_are_not_storage_errors(self):
        """Test that a failed check is distinguishable from an I/O failure."""
        assert not issubclass(VerificationFailedError, StorageError)
        assert not issubclass(StorageError, VerificationFailedError)


class TestVerificationFailedError:
    """Test the heads carried by verification failures."""

    def test_heads_default_to_none(self):
        """Test trusted and offered default to None."""
        error = ConsistencyMismatchError("fork")
        assert error.trusted is None
        assert error.offered is None

    def test_heads_are_kept(self):
        """Test trusted and offered heads are attached to the error."""
        trusted = TreeHead(size=5, root_hash=b"\x01" * 32)
        offered = TreeHead(size=3, root_hash=b"\x02" * 32)
        error = RollbackDetectedError("rollback", trusted=trusted, offered=offered)

        assert str(error) == "rollback"
        assert error.trusted == trusted
        assert error.offered == offered

    def test_can_be_caught_as_base(self):
        """Test subclasses are caught by the base class."""
        with pytest.raises(VerificationFailedError):
            raise InclusionMismatchError("mismatch")
