"""
Launcher settings.

This module defines the runtime and build configuration using Pydantic
BaseSettings. Values come from the process environment; a `.env` file is
applied to the environment beforehand by `infra.envfile` so the spawned
servers see the same values as the launcher.
"""

from __future__ import annotations

import sys

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

DEFAULT_API_PORT = 8001
DEFAULT_FRONTEND_PORT = 3000


class LauncherSettings(BaseSettings):
    """Runtime settings for the API server and the frontend server."""

    # API server
    port: int = Field(default=DEFAULT_API_PORT, alias="PORT")
    server_base_url: str | None = Field(default=None, alias="SERVER_BASE_URL")

    # Frontend server (Next.js standalone)
    frontend_port: int = Field(default=DEFAULT_FRONTEND_PORT, alias="FRONTEND_PORT")
    frontend_host: str = Field(default="0.0.0.0", alias="FRONTEND_HOSTNAME")
    node_env: str = Field(default="production", alias="NODE_ENV")

    # Provider keys (presence-checked only)
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    google_api_key: str = Field(default="", alias="GOOGLE_API_KEY")

    # Process layout
    app_dir: str = Field(default=".", alias="APP_DIR")
    python_bin: str = Field(default_factory=lambda: sys.executable, alias="PYTHON_BIN")
    node_bin: str = Field(default="node", alias="NODE_BIN")
    shutdown_timeout: float = Field(default=5.0, alias="SHUTDOWN_TIMEOUT")

    model_config: SettingsConfigDict = SettingsConfigDict(
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def base_url(self) -> str:
        """SERVER_BASE_URL, defaulting to the local API address."""
        return self.server_base_url or f"http://localhost:{self.port}"

    def redacted(self) -> dict[str, object]:
        """Settings as a dict with provider keys masked (for display)."""
        data = self.model_dump()
        for key in ("openai_api_key", "google_api_key"):
            data[key] = "***" if data[key] else ""
        data["server_base_url"] = self.base_url
        return data


class BuildSettings(BaseSettings):
    """Build arguments for the dependency and asset stages."""

    custom_cert_dir: str = Field(default="certs", alias="CUSTOM_CERT_DIR")
    use_pypi_mirror: bool = Field(default=True, alias="USE_PYPI_MIRROR")
    source_dir: str = Field(default=".", alias="SOURCE_DIR")
    app_dir: str = Field(default="/app", alias="APP_DIR")
    api_dir: str = Field(default="api", alias="API_DIR")

    model_config: SettingsConfigDict = SettingsConfigDict(
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("use_pypi_mirror", mode="before")
    @classmethod
    def _mirror_only_when_true(cls, value: object) -> bool:
        # Only the literal "true" enables the mirror; any other value selects the official index
        if isinstance(value, bool):
            return value
        return str(value) == "true"


def _by_alias(model: type[BaseSettings], overrides: dict[str, object]) -> dict[str, object]:
    # Init values keyed by alias take precedence over the same variable in the environment
    fields = model.model_fields
    return {
        (fields[k].alias or k) if k in fields else k: v
        for k, v in overrides.items()
        if v is not None
    }


def _build(model, overrides: dict[str, object]):
    try:
        return model(**_by_alias(model, overrides))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid {model.__name__}: {problems}") from e


def load_settings(**overrides: object) -> LauncherSettings:
    """
    Build runtime settings from the current environment plus explicit overrides.

    Raises:
        ConfigurationError: If a value cannot be parsed (e.g. a non-numeric PORT).
    """
    return _build(LauncherSettings, overrides)


def load_build_settings(**overrides: object) -> BuildSettings:
    """Build the build-argument settings from the current environment plus overrides."""
    return _build(BuildSettings, overrides)
