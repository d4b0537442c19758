"""Check-Env Contract Tests.

Coverage: help, human output, JSON output, env file handling.
"""

from __future__ import annotations

import json

from typer.testing import CliRunner

from deepwiki_launcher.cli.main import app


def test_check_env__help_flag():
    r = CliRunner().invoke(app, ["check-env", "--help"])
    assert r.exit_code == 0


def test_check_env__missing_is_warning_not_error():
    res = CliRunner().invoke(app, ["check-env"])

    assert res.exit_code == 0
    assert "Warning: OPENAI_API_KEY and/or GOOGLE_API_KEY" in res.stdout


def test_check_env__all_set(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk")
    monkeypatch.setenv("GOOGLE_API_KEY", "g")
    res = CliRunner().invoke(app, ["check-env"])

    assert res.exit_code == 0
    assert "All required environment variables are set." in res.stdout


def test_check_env__json(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk")
    res = CliRunner().invoke(app, ["check-env", "--json"])

    assert res.exit_code == 0
    payload = json.loads(res.stdout)
    assert payload == {"missing": ["GOOGLE_API_KEY"], "ok": False}


def test_check_env__cwd_env_file_is_loaded(tmp_path):
    # conftest runs every test inside tmp_path
    (tmp_path / ".env").write_text("OPENAI_API_KEY=sk\nGOOGLE_API_KEY=g\n", encoding="utf-8")
    res = CliRunner().invoke(app, ["check-env", "--json"])

    assert json.loads(res.stdout)["ok"] is True
