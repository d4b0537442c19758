"""
Server process specifications.

Defines ServerSpec, the description of one server process, and the two
specs the container runs: the Python API server and the Node frontend server.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..infra.settings import LauncherSettings

API_SERVER = "api"
FRONTEND_SERVER = "frontend"


@dataclass(frozen=True)
class ServerSpec:
    """
    One server process to launch.

    `env` holds overrides layered on top of the launcher's own environment.
    """
    name: str
    argv: list[str]
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None

    def command_line(self) -> str:
        return " ".join(self.argv)


def _shared_env(settings: LauncherSettings) -> dict[str, str]:
    return {
        "NODE_ENV": settings.node_env,
        "SERVER_BASE_URL": settings.base_url,
    }


def api_server_spec(settings: LauncherSettings) -> ServerSpec:
    """`python -m api.main --port <PORT>`."""
    return ServerSpec(
        name=API_SERVER,
        argv=[settings.python_bin, "-m", "api.main", "--port", str(settings.port)],
        env={**_shared_env(settings), "PORT": str(settings.port)},
        cwd=settings.app_dir,
    )


def frontend_server_spec(settings: LauncherSettings) -> ServerSpec:
    """`node server.js` on the frontend port, bound to all interfaces."""
    return ServerSpec(
        name=FRONTEND_SERVER,
        argv=[settings.node_bin, "server.js"],
        env={
            **_shared_env(settings),
            "PORT": str(settings.frontend_port),
            "HOSTNAME": settings.frontend_host,
        },
        cwd=settings.app_dir,
    )


def default_server_specs(settings: LauncherSettings) -> list[ServerSpec]:
    """API server first, then the frontend."""
    return [api_server_spec(settings), frontend_server_spec(settings)]
