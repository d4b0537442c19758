"""
Logging configuration for the launcher.

This module configures structlog for JSON logging on stderr so that the
servers' own stdout stays untouched.
"""

import logging
import re
import sys
from typing import Any

import structlog

# Keys whose values are never written to the log
SECRET_KEYS = [
    "api_key",
    "token",
    "password",
    "secret",
    "credential",
]

SECRET_PATTERNS = [
    r"://[^:/@\s]+:[^@\s]+@",  # URLs with credentials
    r"(?:token|key|password)=[^&\s]+",  # Query/assignment secrets
]


def redact_secrets(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive information from log events."""

    def redact_value(value: Any) -> Any:
        if isinstance(value, str):
            for pattern in SECRET_PATTERNS:
                value = re.sub(pattern, _mask_match, value)
            return value
        elif isinstance(value, dict):
            return {
                k: "***REDACTED***" if _is_secret_key(k) else redact_value(v)
                for k, v in value.items()
            }
        elif isinstance(value, (list, tuple)):
            return [redact_value(item) for item in value]
        return value

    for key in list(event_dict.keys()):
        if _is_secret_key(key):
            event_dict[key] = "***REDACTED***"
        else:
            event_dict[key] = redact_value(event_dict[key])

    return event_dict


def _is_secret_key(key: Any) -> bool:
    lowered = str(key).lower()
    return any(secret in lowered for secret in SECRET_KEYS)


def _mask_match(match: re.Match[str]) -> str:
    text = match.group(0)
    if text.startswith("://"):
        return "://***@"
    return text.split("=", 1)[0] + "=***"


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog for JSON output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            redact_secrets,  # Redact secrets before rendering
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
