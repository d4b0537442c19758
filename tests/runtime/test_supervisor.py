"""
Supervisor contract: the launcher lives as long as the first server.

- The exit status is the status of whichever server exits first.
- The surviving server is terminated.
- Stop signals reach every server.

Tests use real `python -c` children; no API server or Node is needed.
"""

from __future__ import annotations

import os
import signal
import sys
import threading

import pytest

from deepwiki_launcher.infra.exceptions import LaunchError
from deepwiki_launcher.runtime.config import ServerSpec
from deepwiki_launcher.runtime.supervisor import Supervisor
from deepwiki_launcher.usecases.server_launch import launch_server

SLEEPER = "import time; time.sleep(60)"


def _py(name: str, code: str) -> ServerSpec:
    return ServerSpec(name=name, argv=[sys.executable, "-c", code])


def test_first_exit_status_propagated_and_survivor_stopped():
    supervisor = Supervisor(
        [_py("api", "import sys; sys.exit(3)"), _py("frontend", SLEEPER)],
        shutdown_timeout=10,
    )
    result = supervisor.run()

    assert result.first_exited == "api"
    assert result.exit_code == 3
    assert result.codes["api"] == 3
    assert result.codes["frontend"] == -signal.SIGTERM


def test_frontend_exiting_first_wins():
    supervisor = Supervisor(
        [_py("api", SLEEPER), _py("frontend", "pass")],
        shutdown_timeout=10,
    )
    result = supervisor.run()

    assert result.first_exited == "frontend"
    assert result.exit_code == 0
    assert supervisor.processes["api"].poll() is not None


def test_signal_death_reported_shell_style():
    code = "import os, signal; os.kill(os.getpid(), signal.SIGKILL)"
    result = Supervisor([_py("api", code), _py("frontend", SLEEPER)], shutdown_timeout=10).run()

    assert result.first_exited == "api"
    assert result.exit_code == 128 + signal.SIGKILL


def test_stop_from_another_thread():
    supervisor = Supervisor([_py("api", SLEEPER), _py("frontend", SLEEPER)], shutdown_timeout=10)
    timer = threading.Timer(1.0, supervisor.stop)
    timer.start()
    try:
        result = supervisor.run()
    finally:
        timer.cancel()

    assert result.exit_code == 128 + signal.SIGTERM
    assert all(code == -signal.SIGTERM for code in result.codes.values())


def test_sigterm_to_launcher_is_forwarded():
    before = signal.getsignal(signal.SIGTERM)
    supervisor = Supervisor([_py("api", SLEEPER), _py("frontend", SLEEPER)], shutdown_timeout=10)
    timer = threading.Timer(1.0, os.kill, args=(os.getpid(), signal.SIGTERM))
    timer.start()
    try:
        result = supervisor.run()
    finally:
        timer.cancel()

    assert result.exit_code == 143
    assert signal.getsignal(signal.SIGTERM) == before


def test_launch_failure_stops_started_servers():
    started = []

    def launcher(spec):
        proc = launch_server(spec)
        started.append(proc)
        return proc

    supervisor = Supervisor(
        [_py("api", SLEEPER), ServerSpec(name="frontend", argv=["definitely-not-node-binary"])],
        shutdown_timeout=10,
        launcher=launcher,
    )
    with pytest.raises(LaunchError):
        supervisor.run()

    assert len(started) == 1
    assert started[0].returncode == -signal.SIGTERM


def test_requires_specs():
    with pytest.raises(ValueError):
        Supervisor([])


def test_rejects_duplicate_names():
    with pytest.raises(ValueError):
        Supervisor([_py("api", "pass"), _py("api", "pass")])
