"""
`.env` file loading.

The container ships an empty `.env` in the app directory; operators mount a
real one over it. Every assignment found in the file is exported into the
launcher's environment, overriding values already present, so both servers
inherit them.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import MutableMapping

import structlog
from dotenv import dotenv_values

logger = structlog.get_logger(__name__)

ENV_FILE_OVERRIDE = "LAUNCHER_ENV_FILE"


def resolve_env_file(explicit: str | os.PathLike[str] | None = None) -> Path:
    """
    Pick the env file to load.

    Order: explicit argument, then LAUNCHER_ENV_FILE, then `.env` in the
    current working directory. The returned path may not exist.
    """
    if explicit:
        return Path(explicit)
    override = os.environ.get(ENV_FILE_OVERRIDE)
    if override:
        return Path(override)
    return Path.cwd() / ".env"


def load_env_file(
    path: str | os.PathLike[str],
    environ: MutableMapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Export the assignments in `path` into `environ` (os.environ by default).

    Comment and blank lines are skipped; keys declared without a value are
    ignored. A missing file is not an error.

    Returns:
        The applied key/value pairs, in file order.
    """
    target = os.environ if environ is None else environ
    env_path = Path(path)
    if not env_path.is_file():
        logger.debug("env_file_absent", path=str(env_path))
        return {}

    applied: dict[str, str] = {}
    for key, value in dotenv_values(env_path).items():
        if value is None:
            continue
        target[key] = value
        applied[key] = value

    logger.info("env_file_loaded", path=str(env_path), keys=sorted(applied))
    return applied
