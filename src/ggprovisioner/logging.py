"""
Provisioner Structured Logging Configuration.

Provides consistent logging across provisioner components with:
- Structured JSON output for production
- Human-readable output for development
- Sensitive data filtering (private keys never reach a log line)

Usage:
    from ggprovisioner.logging import get_logger, configure_logging

    # At application startup (level and format default to the GGP_ settings)
    configure_logging()

    # In modules
    logger = get_logger(__name__)
    logger.info("Reusing certificate", extra={"group_id": "group1"})
"""

import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from .utils.config import ProvisionerSettings


# Sensitive field patterns to filter from logs
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "private_key",
        "privatekey",
        "key_pair",
        "keypair",
        "secret_key",
        "secretkey",
        "access_key",
        "accesskey",
        "session_token",
    }
)

# LogRecord attributes that are never treated as extras
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)


def _is_sensitive_key(key: str) -> bool:
    """Check if a key name suggests sensitive data."""
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in SENSITIVE_PATTERNS)


def _filter_sensitive(data: Dict[str, Any]) -> Dict[str, Any]:
    """Replace sensitive values, descending into nested dicts (e.g. raw responses)."""
    return {
        key: "[REDACTED]" if _is_sensitive_key(key)
        else _filter_sensitive(value) if isinstance(value, dict)
        else value
        for key, value in data.items()
    }


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.filename:
            log_data["location"] = f"{record.filename}:{record.lineno}"

        extra_fields = _filter_sensitive(
            {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}
        )
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "") if self.use_color else ""
        reset = self.RESET if color else ""

        timestamp = datetime.utcnow().strftime("%H:%M:%S.%f")[:-3]
        level = f"{color}{record.levelname:8}{reset}"
        name = record.name.split(".")[-1][:15].ljust(15)
        message = record.getMessage()

        # Prefix with the identity being provisioned, if present
        group_id = getattr(record, "group_id", None)
        if group_id:
            sub_name = getattr(record, "sub_name", None)
            scope = f"{group_id}/{sub_name}" if sub_name else group_id
            message = f"[{scope}] {message}"

        formatted = f"{timestamp} {level} {name} {message}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def configure_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    stream: Any = None,
    settings: Optional[ProvisionerSettings] = None,
) -> None:
    """
    Configure logging for provisioner components.

    Args:
        level: Log level. Default: settings.LOG_LEVEL
        json_format: Use JSON output. Default: True in production, False otherwise
        stream: Output stream. Default: sys.stderr
        settings: Source of the defaults. Default: read from the GGP_ environment
    """
    if level is None or json_format is None:
        settings = settings or ProvisionerSettings()
        level = level or settings.LOG_LEVEL
        if json_format is None:
            json_format = settings.is_production()

    root_logger = logging.getLogger("ggprovisioner")
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter(use_color=stream is None))

    root_logger.addHandler(handler)
    root_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a provisioner module.

    Usage:
        logger = get_logger(__name__)
        logger.info("Message", extra={"group_id": "group1"})
    """
    if not name.startswith("ggprovisioner"):
        name = f"ggprovisioner.{name}"
    return logging.getLogger(name)


__all__ = [
    "configure_logging",
    "get_logger",
    "StructuredFormatter",
    "DevelopmentFormatter",
]
