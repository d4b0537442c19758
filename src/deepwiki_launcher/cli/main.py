"""
Main CLI application using Typer with router-based command dispatch.

Top-level commands run the container's processes (`start`, `check-env`);
command groups cover the build stages, certificate installation, and
configuration inspection.
"""

from __future__ import annotations

import typer

from ..infra.logging import configure_logging
from .commands import build, certs, config, run
from .router import get_router

app = typer.Typer(help="DeepWiki container launcher", no_args_is_help=True)


@app.callback()
def main(
    log_level: str = typer.Option(
        "INFO", "--log-level", envvar="LOG_LEVEL", help="Log level for the launcher's JSON logs"
    ),
) -> None:
    """Build and run the DeepWiki API and frontend servers."""
    configure_logging(log_level)


app.command("start")(run.start)
app.command("check-env")(run.check_env)

router = get_router(app)

router.register(
    "build",
    build.app,
    help_text="Dependency, asset, and runtime layout build stages",
)

router.register(
    "certs",
    certs.app,
    help_text="Custom CA certificate operations",
)

router.register(
    "config",
    config.app,
    help_text="Resolved configuration",
)


def cli() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    cli()
