"""
Unit tests for custom CA certificate installation.
"""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from deepwiki_launcher.infra.exceptions import CertificateError
from deepwiki_launcher.usecases.certificates import install_custom_certificates


def test_empty_cert_dir_disables_installation(tmp_path):
    target = tmp_path / "ca"
    with patch("deepwiki_launcher.usecases.certificates.subprocess.run") as run:
        assert install_custom_certificates("", target_dir=target) is False
    run.assert_not_called()
    assert not target.exists()


def test_missing_dir_warns_and_skips(tmp_path):
    messages: list[str] = []
    target = tmp_path / "ca"
    with patch("deepwiki_launcher.usecases.certificates.subprocess.run") as run:
        installed = install_custom_certificates(
            tmp_path / "nope", target_dir=target, echo=messages.append
        )

    assert installed is False
    run.assert_not_called()
    assert target.is_dir()
    assert messages == [f"Warning: {tmp_path / 'nope'} not found. Skipping certificate installation."]


def test_copies_and_updates_trust_store(tmp_path):
    certs = tmp_path / "certs"
    (certs / "corp").mkdir(parents=True)
    (certs / "proxy.crt").write_text("PEM", encoding="utf-8")
    (certs / "corp" / "root.crt").write_text("PEM", encoding="utf-8")
    target = tmp_path / "ca"
    messages: list[str] = []

    with patch("deepwiki_launcher.usecases.certificates.subprocess.run") as run:
        installed = install_custom_certificates(
            certs, target_dir=target, updater=("update-ca-certificates",), echo=messages.append
        )

    assert installed is True
    assert (target / "proxy.crt").read_text() == "PEM"
    assert (target / "corp" / "root.crt").is_file()
    run.assert_called_once_with(["update-ca-certificates"], check=True)
    assert messages == ["Custom certificates installed successfully."]


def test_empty_cert_dir_still_runs_update(tmp_path):
    certs = tmp_path / "certs"
    certs.mkdir()
    with patch("deepwiki_launcher.usecases.certificates.subprocess.run") as run:
        assert install_custom_certificates(certs, target_dir=tmp_path / "ca", echo=lambda _: None)
    run.assert_called_once()


def test_updater_failure_is_logged_and_installation_continues(tmp_path):
    certs = tmp_path / "certs"
    certs.mkdir()
    (certs / "proxy.crt").write_text("PEM", encoding="utf-8")
    messages: list[str] = []
    err = subprocess.CalledProcessError(1, ["update-ca-certificates"])
    with patch("deepwiki_launcher.usecases.certificates.subprocess.run", side_effect=err), patch(
        "deepwiki_launcher.usecases.certificates.logger"
    ) as logger:
        installed = install_custom_certificates(
            certs, target_dir=tmp_path / "ca", echo=messages.append
        )

    assert installed is True
    assert (tmp_path / "ca" / "proxy.crt").is_file()
    assert messages == ["Custom certificates installed successfully."]
    logger.warning.assert_called_once_with(
        "certificate_update_failed", command=["update-ca-certificates"], returncode=1
    )


def test_updater_missing_is_logged_and_installation_continues(tmp_path):
    certs = tmp_path / "certs"
    certs.mkdir()
    messages: list[str] = []
    with patch("deepwiki_launcher.usecases.certificates.logger") as logger:
        installed = install_custom_certificates(
            certs,
            target_dir=tmp_path / "ca",
            updater=("definitely-not-a-real-updater-binary",),
            echo=messages.append,
        )

    assert installed is True
    assert messages == ["Custom certificates installed successfully."]
    assert logger.warning.call_args.args == ("certificate_update_failed",)


def test_uncreatable_target_dir_raises_certificate_error(tmp_path):
    certs = tmp_path / "certs"
    certs.mkdir()
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with patch("deepwiki_launcher.usecases.certificates.subprocess.run") as run:
        with pytest.raises(CertificateError, match="Cannot create"):
            install_custom_certificates(certs, target_dir=blocker / "ca", echo=lambda _: None)
    run.assert_not_called()


def test_permission_denied_on_target_dir_raises_certificate_error(tmp_path):
    certs = tmp_path / "certs"
    certs.mkdir()
    denied = PermissionError(13, "Permission denied")
    with patch("deepwiki_launcher.usecases.certificates.Path.mkdir", side_effect=denied):
        with pytest.raises(CertificateError, match="Permission denied"):
            install_custom_certificates(certs, target_dir=tmp_path / "ca", echo=lambda _: None)
