"""
Custom exceptions for launcher operations.

This module provides custom exception classes for the different failures
that can occur while building, configuring, or running the DeepWiki stack.
"""


class LauncherError(Exception):
    """Base exception for all launcher errors."""

    pass


class ConfigurationError(LauncherError):
    """Raised when configuration cannot be loaded or is inconsistent."""

    pass


class LaunchError(LauncherError):
    """Raised when a server process cannot be started."""

    def __init__(self, name: str, argv: list[str], reason: str, exit_code: int = 127) -> None:
        self.name = name
        self.argv = list(argv)
        self.reason = reason
        self.exit_code = exit_code
        super().__init__(f"Failed to start {name} ({' '.join(argv)}): {reason}")


class BuildError(LauncherError):
    """Raised when a build step fails."""

    def __init__(self, step: str, message: str, returncode: int = 1) -> None:
        self.step = step
        self.returncode = returncode
        super().__init__(f"{step}: {message}")


class CertificateError(LauncherError):
    """Raised when custom certificates cannot be registered."""

    pass
