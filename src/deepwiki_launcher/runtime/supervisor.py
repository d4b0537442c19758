"""
Two-server supervisor.

Starts the API server and the frontend server side by side and ties the
launcher's lifetime to whichever exits first: the survivor is terminated and
the launcher exits with the first server's status. Stop signals delivered to
the launcher are forwarded to both servers.
"""

from __future__ import annotations

import queue
import signal
import threading
from dataclasses import dataclass, field
from typing import Callable, Sequence

import structlog

from ..infra.exceptions import LaunchError
from ..usecases.server_launch import (
    ProcessHandle,
    exit_status,
    launch_server,
    signal_name,
    terminate_server,
)
from .config import ServerSpec

logger = structlog.get_logger(__name__)

FORWARDED_SIGNALS = (signal.SIGTERM, signal.SIGINT, signal.SIGHUP)

# Poll interval for the exit queue, so signal handlers run promptly
_EXIT_POLL_S = 0.2


@dataclass(frozen=True)
class SupervisorResult:
    """Outcome of a supervised run."""

    first_exited: str
    exit_code: int
    codes: dict[str, int | None] = field(default_factory=dict)


class Supervisor:
    """
    First-to-finish supervisor for a fixed set of servers.

    Usage:
        result = Supervisor(default_server_specs(settings)).run()
        raise SystemExit(result.exit_code)
    """

    def __init__(
        self,
        specs: Sequence[ServerSpec],
        shutdown_timeout: float = 5.0,
        launcher: Callable[[ServerSpec], ProcessHandle] = launch_server,
        forward_signals: Sequence[signal.Signals] = FORWARDED_SIGNALS,
    ) -> None:
        if not specs:
            raise ValueError("Supervisor needs at least one server spec")
        names = [spec.name for spec in specs]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate server names: {names}")
        self.specs = list(specs)
        self.shutdown_timeout = shutdown_timeout
        self._launcher = launcher
        self._forward_signals = tuple(forward_signals)
        self._procs: dict[str, ProcessHandle] = {}
        self._exits: queue.Queue[tuple[str, int]] = queue.Queue()
        self._lock = threading.Lock()

    @property
    def processes(self) -> dict[str, ProcessHandle]:
        with self._lock:
            return dict(self._procs)

    def run(self) -> SupervisorResult:
        """
        Start every server, wait for the first to exit, stop the rest.

        Raises:
            LaunchError: If a server cannot be started. Servers already
                started are terminated first.
        """
        previous = self._install_signal_handlers()
        try:
            self._start_all()
            name, returncode = self._wait_first()
            logger.info(
                "server_exited",
                server=name,
                returncode=returncode,
                signal=signal_name(returncode),
            )
            self._shutdown(exclude=name)
            codes = {n: p.returncode for n, p in self.processes.items()}
            return SupervisorResult(
                first_exited=name,
                exit_code=exit_status(returncode),
                codes=codes,
            )
        finally:
            self._restore_signal_handlers(previous)

    def stop(self, sig: int = signal.SIGTERM) -> None:
        """Send `sig` to every server that is still running."""
        for name, proc in self.processes.items():
            if proc.poll() is None:
                logger.info("server_signal", server=name, signal=signal.Signals(sig).name)
                try:
                    proc.send_signal(sig)
                except ProcessLookupError:
                    pass

    def _start_all(self) -> None:
        for spec in self.specs:
            try:
                proc = self._launcher(spec)
            except LaunchError:
                self._shutdown()
                raise
            with self._lock:
                self._procs[spec.name] = proc
            threading.Thread(
                target=self._wait_one,
                args=(spec.name, proc),
                name=f"wait-{spec.name}",
                daemon=True,
            ).start()

    def _wait_one(self, name: str, proc: ProcessHandle) -> None:
        self._exits.put((name, proc.wait()))

    def _wait_first(self) -> tuple[str, int]:
        while True:
            try:
                return self._exits.get(timeout=_EXIT_POLL_S)
            except queue.Empty:
                continue

    def _shutdown(self, exclude: str | None = None) -> None:
        for name, proc in self.processes.items():
            if name == exclude:
                continue
            if proc.poll() is None:
                logger.info("server_stopping", server=name, pid=proc.pid)
            terminate_server(proc, timeout=self.shutdown_timeout)

    def _handle_signal(self, signum, frame) -> None:
        logger.info("launcher_signal", signal=signal.Signals(signum).name)
        self.stop(signum)

    def _install_signal_handlers(self) -> dict[int, object]:
        # signal.signal only works from the main thread
        if threading.current_thread() is not threading.main_thread():
            return {}
        previous: dict[int, object] = {}
        for sig in self._forward_signals:
            previous[sig] = signal.getsignal(sig)
            signal.signal(sig, self._handle_signal)
        return previous

    def _restore_signal_handlers(self, previous: dict[int, object]) -> None:
        for sig, handler in previous.items():
            if handler is None:
                handler = signal.SIG_DFL
            signal.signal(sig, handler)  # type: ignore[arg-type]
