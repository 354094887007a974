"""
Configuration management for TransparentLog.

Loads YAML configuration from file with sensible defaults and validation.
Supports environment variable substitution using ${ENV_VAR} syntax.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from transparentlog.exceptions import InvalidConfigurationError
from transparentlog.logging_config import get_logger

logger = get_logger(__name__)

STORAGE_BACKENDS = ("memory", "file")
LOG_FORMATS = ("json", "console")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _expand_env_vars(value: Any) -> Any:
    """
    Recursively expand environment variables in configuration values.

    Supports ${ENV_VAR} syntax with optional default values: ${ENV_VAR:default}

    Args:
        value: Configuration value (string, dict, list, or other)

    Returns:
        Value with environment variables expanded

    Examples:
        "${TLOG_DIR}" -> value of TLOG_DIR env var
        "${TLOG_DIR:/var/lib/tlog}" -> value of TLOG_DIR or "/var/lib/tlog" if not set
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

        def replace_env_var(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    else:
        return value


@dataclass
class StorageConfig:
    """Storage backend configuration."""

    backend: str = "memory"  # "memory" or "file"
    path: str = ""  # Log directory, required for the file backend
    fsync: bool = True  # fsync every hash and record write


@dataclass
class ClientConfig:
    """Client trust state configuration."""

    state_file: str = ""  # JSON file holding the last verified tree head


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    format: str = "console"  # "json" or "console"


@dataclass
class TransparentLogConfig:
    """Main TransparentLog configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_default_config_path() -> str:
    """Get the default configuration file path."""
    return os.path.expanduser("~/.tlog/config.yaml")


def get_default_config() -> TransparentLogConfig:
    """
    Get default configuration with sensible defaults.

    Returns:
        TransparentLogConfig: Default configuration object
    """
    home_dir = os.path.expanduser("~/.tlog")

    storage = StorageConfig(
        backend="file",
        path=os.path.join(home_dir, "log"),
        fsync=True,
    )

    client = ClientConfig(
        state_file=os.path.join(home_dir, "trusted_head.json"),
    )

    logging = LoggingConfig(
        level="INFO",
        file=os.path.join(home_dir, "tlog.log"),
        format="console",
    )

    return TransparentLogConfig(storage=storage, client=client, logging=logging)


def load_config(config_path: Optional[str] = None) -> TransparentLogConfig:
    """
    Load configuration from YAML file with validation.

    If config file is not found, returns default configuration.
    If config file is malformed or invalid, raises InvalidConfigurationError.

    Args:
        config_path: Path to configuration file. If None, uses default path.

    Returns:
        TransparentLogConfig: Loaded and validated configuration

    Raises:
        InvalidConfigurationError: If configuration is invalid or malformed
    """
    if config_path is None:
        config_path = get_default_config_path()

    config_path = os.path.expanduser(config_path)

    if not os.path.exists(config_path):
        logger.info(f"Configuration file not found at {config_path}, using defaults")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
        logger.debug(f"Loaded configuration from {config_path}")
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration file '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Failed to parse YAML configuration file '{config_path}': {e}"
        ) from e
    except OSError as e:
        logger.error(f"Failed to read configuration file '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Failed to read configuration file '{config_path}': {e}"
        ) from e

    if config_data is None:
        logger.info(f"Configuration file {config_path} is empty, using defaults")
        return get_default_config()

    if not isinstance(config_data, dict):
        raise InvalidConfigurationError(
            f"Configuration file '{config_path}' must contain a mapping at the top level"
        )

    config_data = _expand_env_vars(config_data)

    config = _build_config_from_dict(config_data)
    _validate_config(config)
    logger.info(f"Successfully loaded and validated configuration from {config_path}")
    return config


def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(f"Configuration section '{name}' must be a mapping")
    return section


def _build_config_from_dict(config_data: Dict[str, Any]) -> TransparentLogConfig:
    """
    Build configuration object from dictionary, filling unset values from defaults.

    Raises:
        InvalidConfigurationError: If a section contains unknown keys
    """
    default_config = get_default_config()

    try:
        storage = StorageConfig(**{**vars(default_config.storage), **_section(config_data, "storage")})
        client = ClientConfig(**{**vars(default_config.client), **_section(config_data, "client")})
        logging = LoggingConfig(**{**vars(default_config.logging), **_section(config_data, "logging")})
    except TypeError as e:
        raise InvalidConfigurationError(f"Invalid configuration structure: {e}") from e

    return TransparentLogConfig(storage=storage, client=client, logging=logging)


def _validate_config(config: TransparentLogConfig) -> None:
    """
    Validate configuration values.

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    if config.storage.backend not in STORAGE_BACKENDS:
        raise InvalidConfigurationError(
            f"storage.backend must be one of {', '.join(STORAGE_BACKENDS)}, "
            f"got '{config.storage.backend}'"
        )
    if config.storage.backend == "file" and not config.storage.path:
        raise InvalidConfigurationError("storage.path is required for the file backend")
    if not isinstance(config.storage.fsync, bool):
        raise InvalidConfigurationError(
            f"storage.fsync must be true or false, got '{config.storage.fsync}'"
        )
    if config.logging.level.upper() not in LOG_LEVELS:
        raise InvalidConfigurationError(
            f"logging.level must be one of {', '.join(LOG_LEVELS)}, got '{config.logging.level}'"
        )
    if config.logging.format not in LOG_FORMATS:
        raise InvalidConfigurationError(
            f"logging.format must be one of {', '.join(LOG_FORMATS)}, got '{config.logging.format}'"
        )
