"""Run-scoped configuration.

Settings are built once (by the CLI, from options and environment variables)
and handed to every component explicitly; nothing below the CLI reads the
environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from niv_updater.core.github import DEFAULT_HOST
from niv_updater.core.github_client import DEFAULT_API_URL
from niv_updater.engines.pins.models import ManifestSnapshot
from niv_updater.exceptions import ConfigError

DEFAULT_SOURCES_FILE = "nix/sources.json"
DEFAULT_BRANCH_PREFIX = "update/"


def split_list(value: str | None, separator: str = ",") -> tuple[str, ...]:
    """Split a separated list, dropping blanks and duplicates but keeping order."""
    if not value:
        return ()
    items: list[str] = []
    for raw in value.split(separator):
        item = raw.strip()
        if item and item not in items:
            items.append(item)
    return tuple(items)


def branch_from_ref(ref: str | None) -> str | None:
    """``refs/heads/main`` -> ``main``; tags and pull refs have no branch."""
    if not ref:
        return None
    if ref.startswith("refs/heads/"):
        return ref[len("refs/heads/") :]
    if ref.startswith("refs/"):
        return None
    return ref


@dataclass(frozen=True)
class Settings:
    repository: str
    token: str
    sources_file: str = DEFAULT_SOURCES_FILE
    trigger_ref: str | None = None
    pull_request_base: str | None = None
    allow: tuple[str, ...] = ()
    deny: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()
    skip_ssh_repos: bool = False
    skip_versioned_revisions: bool = True
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    title_prefix: str = ""
    message_prefix: str = ""
    message_suffix: str = ""
    show_merges: bool = False
    niv_command: tuple[str, ...] = ("niv",)
    github_host: str = DEFAULT_HOST
    api_url: str = DEFAULT_API_URL
    http_timeout: float = 30.0
    tool_timeout: float = 600.0

    def __post_init__(self) -> None:
        if not self.repository or "/" not in self.repository:
            raise ConfigError(f"repository must look like 'owner/name', got {self.repository!r}")
        if not self.token:
            raise ConfigError("a GitHub token is required")
        if not self.niv_command:
            raise ConfigError("niv command must not be empty")

    @property
    def requested_base(self) -> str | None:
        """Base branch for pull requests before falling back to the repo default."""
        return self.pull_request_base or branch_from_ref(self.trigger_ref)


@dataclass(frozen=True)
class RunContext:
    """Settings plus the snapshot frozen at the start of the run."""

    settings: Settings
    base_branch: str
    base_commit: str
    manifest: ManifestSnapshot = field(repr=False)
