"""
Runtime commands: start the servers, check the environment.

`start` is the container's entrypoint. It loads the `.env` file, warns about
missing provider keys, then runs the API and frontend servers until either
exits, and exits with that server's status.
"""

from __future__ import annotations

import json

import typer

from ...infra.envfile import load_env_file, resolve_env_file
from ...infra.exceptions import ConfigurationError, LaunchError
from ...infra.settings import load_settings
from ...runtime.config import default_server_specs
from ...runtime.supervisor import Supervisor
from ...usecases.preflight import missing_required, warn_missing


def start(
    env_file: str = typer.Option(None, "--env-file", "-e", help="Env file to load (default: ./.env)"),
    port: int = typer.Option(None, "--port", help="API server port (default: $PORT or 8001)"),
    app_dir: str = typer.Option(None, "--app-dir", help="Directory holding api/ and server.js"),
):
    """
    Start the API server and the frontend server.

    The launcher exits as soon as either server exits, with that server's
    exit status; the other server is stopped first.
    """
    load_env_file(resolve_env_file(env_file))
    try:
        settings = load_settings(port=port, app_dir=app_dir)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)

    warn_missing(missing_required(), echo=typer.echo)

    supervisor = Supervisor(
        default_server_specs(settings),
        shutdown_timeout=settings.shutdown_timeout,
    )
    try:
        result = supervisor.run()
    except LaunchError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(e.exit_code)

    raise typer.Exit(result.exit_code)


def check_env(
    env_file: str = typer.Option(None, "--env-file", "-e", help="Env file to load (default: ./.env)"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Report required environment variables that are not set.

    Missing variables are a warning, not an error: the exit status is 0.
    """
    load_env_file(resolve_env_file(env_file))
    missing = missing_required()

    if json_output:
        typer.echo(json.dumps({"missing": missing, "ok": not missing}, indent=2))
        return

    if not warn_missing(missing, echo=typer.echo):
        typer.echo("All required environment variables are set.")
