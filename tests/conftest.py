"""
Global test configuration for the launcher.

This module provides global pytest configuration and fixtures.
"""

import os
import sys
from pathlib import Path

import pytest

# Ensure the project src directory is importable without relying on external environment.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

LAUNCHER_VARIABLES = (
    "PORT",
    "SERVER_BASE_URL",
    "FRONTEND_PORT",
    "FRONTEND_HOSTNAME",
    "NODE_ENV",
    "OPENAI_API_KEY",
    "GOOGLE_API_KEY",
    "APP_DIR",
    "LAUNCHER_ENV_FILE",
    "PYTHON_BIN",
    "NODE_BIN",
    "SHUTDOWN_TIMEOUT",
    "CUSTOM_CERT_DIR",
    "USE_PYPI_MIRROR",
    "SOURCE_DIR",
    "API_DIR",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch, tmp_path):
    """
    Isolate every test from the developer's environment.

    Launcher variables are removed, the working directory is an empty temp
    dir (so no stray .env is picked up), and logs are kept quiet.
    """
    for name in LAUNCHER_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    monkeypatch.chdir(tmp_path)

    # .env loading writes straight into os.environ
    snapshot = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(snapshot)
