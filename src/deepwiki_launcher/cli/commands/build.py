"""
Build command group.

One command per build stage, plus `all` which runs them in order. A failing
step aborts the stage and the command exits with the step's status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import typer

from ...infra.exceptions import BuildError, ConfigurationError
from ...infra.settings import BuildSettings, load_build_settings
from ...usecases.build_stages import (
    assemble_runtime,
    backend_deps_steps,
    frontend_build_steps,
    frontend_deps_steps,
    run_stage,
)
from ...usecases.package_index import resolve_index

app = typer.Typer(help="Dependency, asset, and runtime layout build stages")

SOURCE_HELP = "Project checkout (default: $SOURCE_DIR or .)"


def _settings(**overrides) -> BuildSettings:
    try:
        return load_build_settings(**overrides)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)


def _guard(stage: Callable[[], None]) -> None:
    try:
        stage()
    except BuildError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(e.returncode or 1)


def _frontend_deps(settings: BuildSettings) -> None:
    run_stage(frontend_deps_steps(settings.source_dir))


def _frontend(settings: BuildSettings) -> None:
    run_stage(frontend_build_steps(settings.source_dir))


def _backend_deps(settings: BuildSettings) -> None:
    index = resolve_index(settings.use_pypi_mirror)
    if index is not None:
        typer.echo(f"Using {index.name} PyPI mirror: {index.index_url}")
    else:
        typer.echo("Using the official PyPI index")
    api_dir = Path(settings.source_dir) / settings.api_dir
    run_stage(backend_deps_steps(str(api_dir), index))


def _assemble(settings: BuildSettings) -> None:
    app_dir = assemble_runtime(settings.source_dir, settings.app_dir, api_dir=settings.api_dir)
    typer.echo(f"Runtime assembled in {app_dir}")


@app.command("frontend-deps")
def frontend_deps(source_dir: str = typer.Option(None, "--source-dir", help=SOURCE_HELP)):
    """Install the frontend's locked npm dependencies."""
    settings = _settings(source_dir=source_dir)
    _guard(lambda: _frontend_deps(settings))


@app.command("frontend")
def frontend(source_dir: str = typer.Option(None, "--source-dir", help=SOURCE_HELP)):
    """Build the Next.js frontend (standalone output)."""
    settings = _settings(source_dir=source_dir)
    _guard(lambda: _frontend(settings))


@app.command("backend-deps")
def backend_deps(
    source_dir: str = typer.Option(None, "--source-dir", help=SOURCE_HELP),
    mirror: Optional[bool] = typer.Option(None, "--mirror/--no-mirror", help="Use the PyPI mirror (default: $USE_PYPI_MIRROR or true)"),
):
    """Install Poetry and the API's main dependencies."""
    settings = _settings(source_dir=source_dir, use_pypi_mirror=mirror)
    _guard(lambda: _backend_deps(settings))


@app.command("assemble")
def assemble(
    source_dir: str = typer.Option(None, "--source-dir", help=SOURCE_HELP),
    app_dir: str = typer.Option(None, "--app-dir", help="Runtime directory (default: $APP_DIR or /app)"),
):
    """Copy the API source and frontend build output into the runtime directory."""
    settings = _settings(source_dir=source_dir, app_dir=app_dir)
    _guard(lambda: _assemble(settings))


@app.command("all")
def build_all(
    source_dir: str = typer.Option(None, "--source-dir", help=SOURCE_HELP),
    app_dir: str = typer.Option(None, "--app-dir", help="Runtime directory (default: $APP_DIR or /app)"),
    mirror: Optional[bool] = typer.Option(None, "--mirror/--no-mirror", help="Use the PyPI mirror (default: $USE_PYPI_MIRROR or true)"),
):
    """Run every build stage in order."""
    settings = _settings(source_dir=source_dir, app_dir=app_dir, use_pypi_mirror=mirror)

    def stages() -> None:
        _frontend_deps(settings)
        _frontend(settings)
        _backend_deps(settings)
        _assemble(settings)

    _guard(stages)
