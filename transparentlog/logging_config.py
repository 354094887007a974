"""
Logging configuration for TransparentLog.

Provides centralized structured logging setup with JSON output for production
and human-readable output for development.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import structlog


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = True,
) -> None:
    """
    Configure structured logging for TransparentLog.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs only to stderr.
        json_format: If True, use JSON format. If False, use human-readable format.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        handler: logging.Handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance for a specific module.

    Args:
        name: Logger name (typically __name__ of the module).

    Returns:
        Structured logger instance.
    """
    return structlog.get_logger(name)


def log_verification_failure(
    logger: structlog.stdlib.BoundLogger,
    check: str,
    reason: str,
    trusted_size: Optional[int] = None,
    offered_size: Optional[int] = None,
    **kwargs: Any,
) -> None:
    """
    Log a failed client-side verification.

    A failed verification means the log presented data that does not match
    what the client already trusts, so it is always logged at warning level.

    Args:
        logger: Logger instance
        check: Check that failed ("record" or "tree")
        reason: Reason for failure
        trusted_size: Size of the trusted tree head
        offered_size: Size of the tree head presented by the log
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "verification_failure",
        "check": check,
        "reason": reason,
    }

    if trusted_size is not None:
        log_data["trusted_size"] = trusted_size
    if offered_size is not None:
        log_data["offered_size"] = offered_size

    log_data.update(kwargs)

    logger.warning("verification_failure", **log_data)
