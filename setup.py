"""
Setup script for TransparentLog.

Package metadata, dependencies and the tlog console script are declared here.
"""

from pathlib import Path
from setuptools import find_packages, setup

# Read version from VERSION file
version_file = Path(__file__).parent / "VERSION"
version = version_file.read_text().strip()

setup(
    name="transparentlog",
    version=version,
    description="Append-only verifiable log backed by an RFC 6962 Merkle tree",
    author="Garudex Labs",
    python_requires=">=3.9",
    packages=find_packages(include=["transparentlog", "transparentlog.*"]),
    install_requires=[
        "click>=8.0",
        "PyYAML>=6.0",
        "structlog>=23.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "tlog=transparentlog.cli.main:cli",
        ],
    },
)
