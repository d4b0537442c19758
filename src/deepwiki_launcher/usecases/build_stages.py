"""
Build stages for the DeepWiki image.

Four stages with a strictly linear artifact flow:

  frontend-deps  -> npm ci (node_modules)
  frontend       -> next build (standalone output + static assets)
  backend-deps   -> pip / Poetry install of the API's main dependencies
  assemble       -> copy the artifacts into the runtime app directory

Each stage is a plan of `BuildStep`s; `run_stage` executes a plan and aborts
on the first failing step.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

import structlog

from ..infra.exceptions import BuildError
from .package_index import (
    POETRY_MAX_WORKERS,
    POETRY_VERSION,
    PackageIndex,
    pip_config_entries,
    pip_install_args,
    poetry_config_entries,
    poetry_source_command,
)

logger = structlog.get_logger(__name__)

NODE_BUILD_ENV = {
    "NODE_OPTIONS": "--max-old-space-size=4096",
    "NEXT_TELEMETRY_DISABLED": "1",
    "NODE_ENV": "production",
}


@dataclass(frozen=True)
class BuildStep:
    """One command of a build stage."""

    name: str
    argv: list[str]
    cwd: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    allow_failure: bool = False


Runner = Callable[..., subprocess.CompletedProcess]


def run_step(step: BuildStep, runner: Runner = subprocess.run) -> int:
    """
    Execute a single build step.

    Returns:
        The command's exit status (non-zero only for steps allowed to fail).

    Raises:
        BuildError: If the command cannot be found or exits non-zero.
    """
    logger.info("build_step_start", step=step.name, argv=step.argv, cwd=step.cwd)
    env = {**os.environ, **step.env}
    try:
        result = runner(step.argv, cwd=step.cwd, env=env, check=False)
    except FileNotFoundError as e:
        if step.allow_failure:
            logger.warning("build_step_skipped", step=step.name, error=str(e))
            return 127
        raise BuildError(step.name, f"command not found: {step.argv[0]}", 127) from e

    if result.returncode != 0:
        if step.allow_failure:
            logger.warning("build_step_failed_ignored", step=step.name, returncode=result.returncode)
            return result.returncode
        raise BuildError(
            step.name,
            f"{' '.join(step.argv)} exited with status {result.returncode}",
            result.returncode,
        )
    logger.info("build_step_done", step=step.name)
    return 0


def run_stage(steps: Sequence[BuildStep], runner: Runner = subprocess.run) -> None:
    """Run the steps of a stage in order, stopping at the first failure."""
    for step in steps:
        run_step(step, runner=runner)


def frontend_deps_steps(source_dir: str) -> list[BuildStep]:
    """Install the frontend's locked npm dependencies."""
    return [BuildStep("npm-ci", ["npm", "ci", "--legacy-peer-deps"], cwd=source_dir)]


def frontend_build_steps(source_dir: str) -> list[BuildStep]:
    """Production Next.js build with a raised heap limit and telemetry off."""
    return [BuildStep("next-build", ["npm", "run", "build"], cwd=source_dir, env=dict(NODE_BUILD_ENV))]


def backend_deps_steps(
    api_dir: str,
    index: PackageIndex | None,
    python: str | None = None,
) -> list[BuildStep]:
    """
    Install Poetry and the API's main dependencies into an in-project virtualenv.

    Args:
        api_dir: Directory holding pyproject.toml and poetry.lock.
        index: Mirror to use, or None for the official index.
        python: Interpreter that runs pip (defaults to the current one).
    """
    py = python or sys.executable
    pip_args = pip_install_args(index)
    steps = [
        BuildStep(
            "pip-upgrade",
            [py, "-m", "pip", "install", "--upgrade", "pip", "setuptools", "wheel", *pip_args],
            cwd=api_dir,
        ),
        BuildStep(
            "poetry-install",
            [py, "-m", "pip", "install", f"poetry=={POETRY_VERSION}", *pip_args],
            cwd=api_dir,
        ),
    ]
    for key, value in pip_config_entries(index):
        steps.append(
            BuildStep(f"pip-config:{key}", [py, "-m", "pip", "config", "set", key, value], cwd=api_dir)
        )
    for key, value, local in poetry_config_entries():
        argv = ["poetry", "config", key, value]
        if local:
            argv.append("--local")
        steps.append(BuildStep(f"poetry-config:{key}", argv, cwd=api_dir))

    source_cmd = poetry_source_command(index)
    if source_cmd is not None:
        steps.append(BuildStep("poetry-source", source_cmd, cwd=api_dir, allow_failure=True))

    steps += [
        # Re-lock in case pyproject.toml and poetry.lock drifted apart
        BuildStep("poetry-lock", ["poetry", "lock", "--no-interaction"], cwd=api_dir),
        BuildStep(
            "poetry-install-main",
            ["poetry", "install", "--no-interaction", "--no-ansi", "--only", "main", "--no-root"],
            cwd=api_dir,
            env={"POETRY_MAX_WORKERS": str(POETRY_MAX_WORKERS)},
        ),
        BuildStep(
            "poetry-cache-clear",
            ["poetry", "cache", "clear", "--all", "--no-interaction", "."],
            cwd=api_dir,
            allow_failure=True,
        ),
    ]
    return steps


def _copy_tree(src: Path, dest: Path, step: str) -> None:
    if not src.is_dir():
        raise BuildError(step, f"build output not found: {src}")
    shutil.copytree(src, dest, dirs_exist_ok=True, symlinks=True)


def assemble_runtime(source_dir: str | Path, app_dir: str | Path, api_dir: str = "api") -> Path:
    """
    Lay out the runtime app directory from the build outputs.

    - `<source>/<api_dir>`          -> `<app>/api`
    - `<source>/public`             -> `<app>/public`
    - `<source>/.next/standalone/*` -> `<app>/`
    - `<source>/.next/static`       -> `<app>/.next/static`

    An empty `.env` is created if the app directory has none, so a mounted
    file can replace it at runtime.

    Returns:
        The app directory.

    Raises:
        BuildError: If one of the build outputs is missing.
    """
    source = Path(source_dir)
    app = Path(app_dir)
    app.mkdir(parents=True, exist_ok=True)

    _copy_tree(source / api_dir, app / "api", "assemble:api")
    _copy_tree(source / "public", app / "public", "assemble:public")
    _copy_tree(source / ".next" / "standalone", app, "assemble:standalone")
    _copy_tree(source / ".next" / "static", app / ".next" / "static", "assemble:static")

    env_file = app / ".env"
    if not env_file.exists():
        env_file.touch()

    logger.info("runtime_assembled", app_dir=str(app))
    return app
