"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

Version of the transparentlog package, taken from the VERSION file that sits
beside setup.py so the package and its distribution report the same number.
"""

from pathlib import Path

VERSION_FILE = Path(__file__).parent.parent / "VERSION"


def get_version() -> str:
    """
    Return the package version.

    Returns:
        str: Contents of VERSION such as "0.1.0", or "unknown" when the file
        is not present
    """
    if VERSION_FILE.exists():
        return VERSION_FILE.read_text().strip()
    return "unknown"


__version__ = get_version()
