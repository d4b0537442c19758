"""
Server process management.

The supervisor uses this module to spawn the API and frontend servers and to
terminate whichever one is still running when the other exits. Both servers
write straight to the launcher's stdout/stderr, as they would under a shell.
"""

from __future__ import annotations

import os
import signal
import subprocess
from typing import Mapping

import structlog

from ..infra.exceptions import LaunchError
from ..runtime.config import ServerSpec

logger = structlog.get_logger(__name__)

# Type alias for subprocess.Popen
ProcessHandle = subprocess.Popen

# Shell statuses for "command not found" and "permission denied"
EXIT_COMMAND_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


def server_environment(spec: ServerSpec, base: Mapping[str, str] | None = None) -> dict[str, str]:
    """The launcher's environment (or `base`) with the spec's overrides applied."""
    env = dict(os.environ if base is None else base)
    env.update(spec.env)
    return env


def launch_server(spec: ServerSpec) -> ProcessHandle:
    """
    Start the server described by `spec`.

    Raises:
        LaunchError: If the executable is missing or cannot be executed.
    """
    try:
        proc = subprocess.Popen(
            spec.argv,
            cwd=spec.cwd,
            env=server_environment(spec),
            stdin=subprocess.DEVNULL,
        )
    except PermissionError as e:
        raise LaunchError(spec.name, spec.argv, str(e), exit_code=EXIT_NOT_EXECUTABLE) from e
    except (FileNotFoundError, NotADirectoryError) as e:
        raise LaunchError(spec.name, spec.argv, str(e), exit_code=EXIT_COMMAND_NOT_FOUND) from e
    logger.info("server_started", server=spec.name, pid=proc.pid, argv=spec.argv)
    return proc


def terminate_server(process: ProcessHandle, timeout: float = 5.0) -> None:
    """
    Stop a server: SIGTERM, then SIGKILL if it has not exited after `timeout` seconds.

    Does nothing if the process already exited.
    """
    if process.poll() is None:  # Process still running
        process.terminate()
        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("server_kill", pid=process.pid, timeout=timeout)
            process.kill()
            process.wait()


def exit_status(returncode: int) -> int:
    """
    Shell-compatible exit status for a Popen return code.

    A child killed by signal N reports -N; the shell reports 128 + N.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


def signal_name(returncode: int) -> str | None:
    """Name of the signal that killed the process, if any."""
    if returncode >= 0:
        return None
    try:
        return signal.Signals(-returncode).name
    except ValueError:
        return None


__all__ = [
    "EXIT_COMMAND_NOT_FOUND",
    "EXIT_NOT_EXECUTABLE",
    "ProcessHandle",
    "exit_status",
    "launch_server",
    "server_environment",
    "signal_name",
    "terminate_server",
]
