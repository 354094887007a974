"""
Pytest configuration and shared fixtures for TransparentLog tests.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Generator, Optional

import pytest

from transparentlog.config.settings import StorageConfig
from transparentlog.core.log import TransparentLog


def create_test_config_content(temp_dir: Path, backend: str = "file", state_file: Optional[Path] = None) -> str:
    """
    Generate test configuration YAML content.

    Logs go to a file inside temp_dir so CLI output stays pure JSON.

    Args:
        temp_dir: Temporary directory for storage paths.
        backend: Storage backend ("file" or "memory").
        state_file: Optional trusted head file. If None, uses temp_dir/trusted_head.json.

    Returns:
        YAML configuration content as string.
    """
    if state_file is None:
        state_file = temp_dir / "trusted_head.json"

    return f"""
storage:
  backend: {backend}
  path: {temp_dir}/log
  fsync: false

client:
  state_file: {state_file}

logging:
  level: DEBUG
  file: {temp_dir}/tlog.log
  format: json
"""


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Close handlers installed by setup_logging so temp files can be removed."""
    yield
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to temporary directory that is cleaned up after test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def memory_log() -> TransparentLog:
    """
    Create an empty in-memory log.

    Returns:
        TransparentLog over memory stores.
    """
    return TransparentLog()


@pytest.fixture
def file_log(temp_dir: Path) -> Generator[TransparentLog, None, None]:
    """
    Create an empty file-backed log in a temporary directory.

    Yields:
        TransparentLog over file stores, closed after the test.
    """
    log = TransparentLog.from_config(StorageConfig(backend="file", path=str(temp_dir / "log"), fsync=False))
    yield log
    log.close()


@pytest.fixture
def sample_config_path(temp_dir: Path) -> Path:
    """
    Create a sample configuration file for testing.

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Path to sample config file.
    """
    config_path = temp_dir / "config.yaml"
    config_path.write_text(create_test_config_content(temp_dir))
    return config_path


# Hypothesis settings for property-based tests
from hypothesis import settings, Verbosity

# Register custom profile for TransparentLog tests
settings.register_profile("tlog", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("tlog-ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("tlog-dev", max_examples=10, verbosity=Verbosity.verbose)

# Load profile from environment or use default
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "tlog"))
