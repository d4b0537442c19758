"""
Custom CA certificate installation.

Operators behind a TLS-intercepting proxy drop their CA files into a
directory (build argument CUSTOM_CERT_DIR, default `certs`). The files are
copied into the system trust directory and the trust store is regenerated.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Sequence

import structlog

from ..infra.exceptions import CertificateError

logger = structlog.get_logger(__name__)

SYSTEM_CERT_DIR = Path("/usr/local/share/ca-certificates")
UPDATE_COMMAND = ("update-ca-certificates",)


def copy_certificates(cert_dir: Path, target_dir: Path) -> list[Path]:
    """
    Copy every entry of `cert_dir` into `target_dir`.

    Entries that cannot be copied are logged and skipped.

    Returns:
        Paths created under `target_dir`.
    """
    copied: list[Path] = []
    for entry in sorted(cert_dir.iterdir()):
        dest = target_dir / entry.name
        try:
            if entry.is_dir():
                shutil.copytree(entry, dest, dirs_exist_ok=True)
            else:
                shutil.copy2(entry, dest)
        except OSError as e:
            logger.warning("certificate_copy_failed", source=str(entry), error=str(e))
            continue
        copied.append(dest)
    return copied


def install_custom_certificates(
    cert_dir: str | Path | None,
    target_dir: Path = SYSTEM_CERT_DIR,
    updater: Sequence[str] = UPDATE_COMMAND,
    echo=print,
) -> bool:
    """
    Install custom certificates from `cert_dir` if the directory exists.

    Args:
        cert_dir: Directory holding the CA files. Empty or None disables installation.
        target_dir: System directory the files are copied into.
        updater: Command that regenerates the trust store.
        echo: Sink for the operator-facing messages.

    Returns:
        True if certificates were installed, False if installation was skipped.

    Raises:
        CertificateError: If `target_dir` cannot be created. A failing
            trust store update is logged and does not raise.
    """
    if not cert_dir:
        return False

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CertificateError(f"Cannot create {target_dir}: {e}") from e
    source = Path(cert_dir)
    if not source.is_dir():
        logger.warning("certificate_dir_missing", cert_dir=str(source))
        echo(f"Warning: {cert_dir} not found. Skipping certificate installation.")
        return False

    copied = copy_certificates(source, target_dir)
    try:
        subprocess.run(list(updater), check=True)
    except FileNotFoundError as e:
        logger.warning("certificate_update_failed", command=list(updater), error=str(e))
    except subprocess.CalledProcessError as e:
        logger.warning(
            "certificate_update_failed", command=list(updater), returncode=e.returncode
        )

    logger.info("certificates_installed", cert_dir=str(source), count=len(copied))
    echo("Custom certificates installed successfully.")
    return True
