"""
Required environment variable check.

DeepWiki needs an OpenAI and a Google API key to answer questions. The
launcher only checks that both are present and non-empty; it never validates
them and never refuses to start without them.
"""

from __future__ import annotations

import os
from typing import Callable, Mapping

import structlog

logger = structlog.get_logger(__name__)

REQUIRED_VARIABLES = ("OPENAI_API_KEY", "GOOGLE_API_KEY")


def missing_required(
    environ: Mapping[str, str] | None = None,
    required: tuple[str, ...] = REQUIRED_VARIABLES,
) -> list[str]:
    """Names from `required` that are unset or empty in `environ`."""
    env = os.environ if environ is None else environ
    return [name for name in required if not env.get(name)]


def warning_lines(missing: list[str]) -> list[str]:
    """Human-readable warning for the missing variables (empty if none)."""
    if not missing:
        return []
    return [
        f"Warning: {' and/or '.join(missing)} environment variables are not set.",
        "These are required for DeepWiki to function properly.",
        "You can provide them via a mounted .env file or as environment variables "
        "when running the container.",
    ]


def warn_missing(missing: list[str], echo: Callable[[str], None] = print) -> bool:
    """
    Emit the missing-variable warning through `echo`.

    Returns:
        True if a warning was emitted. Startup continues either way.
    """
    lines = warning_lines(missing)
    if not lines:
        return False
    logger.warning("required_variables_missing", missing=missing)
    for line in lines:
        echo(line)
    return True
