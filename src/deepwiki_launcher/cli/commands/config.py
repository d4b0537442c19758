"""
Configuration command group.

Shows the runtime settings the launcher would start the servers with.
"""

from __future__ import annotations

import json

import typer

from ...infra.envfile import load_env_file, resolve_env_file
from ...infra.exceptions import ConfigurationError
from ...infra.settings import load_settings
from ...runtime.config import default_server_specs

app = typer.Typer(help="Resolved configuration")


@app.command("show")
def show(
    env_file: str = typer.Option(None, "--env-file", "-e", help="Env file to load (default: ./.env)"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Print the resolved settings (provider keys masked) and server commands."""
    load_env_file(resolve_env_file(env_file))
    try:
        settings = load_settings()
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    payload = {
        "settings": settings.redacted(),
        "servers": {spec.name: spec.command_line() for spec in default_server_specs(settings)},
    }

    if json_output:
        typer.echo(json.dumps(payload, indent=2))
        return

    for key, value in payload["settings"].items():
        typer.echo(f"{key}: {value}")
    for name, command in payload["servers"].items():
        typer.echo(f"server {name}: {command}")
