"""
Configuration management for TransparentLog.

Handles loading and validation of configuration files.
"""

from transparentlog.config.settings import (
    ClientConfig,
    LoggingConfig,
    StorageConfig,
    TransparentLogConfig,
    get_default_config,
    get_default_config_path,
    load_config,
)

__all__ = [
    "ClientConfig",
    "LoggingConfig",
    "StorageConfig",
    "TransparentLogConfig",
    "get_default_config",
    "get_default_config_path",
    "load_config",
]
