"""
Python package index selection for the backend dependency stage.

With the mirror toggle on (the default), pip and Poetry download from the
Tsinghua PyPI mirror, which is much faster for users in mainland China.
Otherwise the official index is used.
"""

from __future__ import annotations

from dataclasses import dataclass

POETRY_VERSION = "2.0.1"

MIRROR_NAME = "tsinghua"
MIRROR_INDEX_URL = "https://pypi.tuna.tsinghua.edu.cn/simple"
MIRROR_TRUSTED_HOST = "pypi.tuna.tsinghua.edu.cn"

# pip network settings applied regardless of the index
PIP_TIMEOUT_SECONDS = 600
PIP_RETRIES = 15

POETRY_MAX_WORKERS = 2


@dataclass(frozen=True)
class PackageIndex:
    """An alternate package index (mirror) for pip and Poetry."""

    name: str
    index_url: str
    trusted_host: str


TSINGHUA_MIRROR = PackageIndex(
    name=MIRROR_NAME,
    index_url=MIRROR_INDEX_URL,
    trusted_host=MIRROR_TRUSTED_HOST,
)


def resolve_index(use_mirror: bool) -> PackageIndex | None:
    """The mirror to use, or None for the official PyPI index."""
    return TSINGHUA_MIRROR if use_mirror else None


def pip_install_args(index: PackageIndex | None) -> list[str]:
    """Extra `pip install` arguments for the chosen index."""
    args = ["--no-cache-dir", "--root-user-action=ignore"]
    if index is not None:
        args += ["--index-url", index.index_url, "--trusted-host", index.trusted_host]
    return args


def pip_config_entries(index: PackageIndex | None) -> list[tuple[str, str]]:
    """`pip config set` key/value pairs, in the order they are applied."""
    entries: list[tuple[str, str]] = []
    if index is not None:
        entries.append(("global.index-url", index.index_url))
        entries.append(("global.trusted-host", index.trusted_host))
    entries += [
        ("global.timeout", str(PIP_TIMEOUT_SECONDS)),
        ("global.retries", str(PIP_RETRIES)),
        ("global.default-timeout", str(PIP_TIMEOUT_SECONDS)),
    ]
    return entries


def poetry_config_entries() -> list[tuple[str, str, bool]]:
    """`poetry config` settings as (key, value, local) triples."""
    return [
        ("virtualenvs.create", "true", True),
        ("virtualenvs.in-project", "true", True),
        ("virtualenvs.options.always-copy", "true", True),
        ("installer.max-workers", str(POETRY_MAX_WORKERS), False),
        ("installer.parallel", "false", False),
    ]


def poetry_source_command(index: PackageIndex | None) -> list[str] | None:
    """`poetry source add` command registering the mirror, or None."""
    if index is None:
        return None
    return ["poetry", "source", "add", "--priority=primary", index.name, index.index_url]
