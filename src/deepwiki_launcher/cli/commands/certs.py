"""
Certificate command group.

Installs operator-provided CA certificates into the system trust store.
"""

from __future__ import annotations

from pathlib import Path

import typer

from ...infra.exceptions import CertificateError, ConfigurationError
from ...infra.settings import load_build_settings
from ...usecases.certificates import SYSTEM_CERT_DIR, install_custom_certificates

app = typer.Typer(help="Custom CA certificate operations")


@app.command("install")
def install(
    cert_dir: str = typer.Option(None, "--cert-dir", help="Certificate directory (default: $CUSTOM_CERT_DIR or certs)"),
    target: Path = typer.Option(SYSTEM_CERT_DIR, "--target", help="System certificate directory"),
):
    """
    Copy custom certificates into the system trust directory and refresh it.

    A missing certificate directory is skipped with a warning.
    """
    try:
        settings = load_build_settings(custom_cert_dir=cert_dir)
        install_custom_certificates(settings.custom_cert_dir, target_dir=target, echo=typer.echo)
    except (CertificateError, ConfigurationError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
