"""Pin manifest models."""

from __future__ import annotations

import json
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, ValidationError

from niv_updater.core.github import DEFAULT_HOST, extract_owner_repo, ssh_owner_repo


def _is_git_url(value: str) -> bool:
    return "://" in value or value.startswith("git@")


class PinEntry(BaseModel):
    """One manifest entry.

    Only the fields the updater reads are typed; everything else the pin
    tool writes (``sha256``, ``url_template``, ...) is kept as extra data.
    niv stores the tracked ref as ``branch``; ``ref`` is accepted too.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    owner: str | None = None
    repo: str | None = None
    url: str | None = None
    rev: str | None = None
    ref: str | None = None
    branch: str | None = None
    type: str | None = None

    @property
    def tracked_ref(self) -> str | None:
        return self.ref or self.branch

    @property
    def git_url(self) -> str | None:
        """The arbitrary Git URL form of the location, if that is the form used."""
        if self.repo and _is_git_url(self.repo):
            return self.repo
        if self.owner and self.repo:
            return None
        if self.url and (self.type == "git" or _is_git_url(self.url)):
            return self.url
        return None

    def github_repo(self, host: str = DEFAULT_HOST) -> tuple[str, str] | None:
        """Resolve the location to ``(owner, repo)`` on the hosting provider."""
        if self.owner and self.repo and not _is_git_url(self.repo):
            return self.owner, self.repo
        git_url = self.git_url
        if git_url is None:
            return None
        owner_repo = extract_owner_repo(git_url, host)
        if owner_repo is None:
            return None
        owner, repo = owner_repo.split("/", 1)
        return owner, repo

    def ssh_repo(self, host: str = DEFAULT_HOST) -> str | None:
        """Return ``owner/repo`` when the location is an SSH URL on *host*."""
        git_url = self.git_url
        if git_url is None:
            return None
        return ssh_owner_repo(git_url, host)


PinManifest = dict[str, PinEntry]


@dataclass(frozen=True)
class ManifestSnapshot:
    """Manifest content as read from the host repository at the frozen base commit."""

    content: str
    blob_sha: str
    entries: PinManifest


def parse_manifest(content: str) -> PinManifest:
    """Decode manifest JSON into entries, keeping the manifest's key order.

    Raises ValueError on malformed content.
    """
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ValueError(f"manifest is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ValueError("manifest must be a JSON object")

    entries: PinManifest = {}
    for name, value in raw.items():
        if not isinstance(value, dict):
            raise ValueError(f"entry {name!r} must be a JSON object")
        try:
            entries[name] = PinEntry.model_validate(value)
        except ValidationError as exc:
            raise ValueError(f"entry {name!r} is invalid: {exc}") from exc
    return entries


def read_revision(content: str, name: str) -> str | None:
    """Return the ``rev`` of *name* in manifest *content*, or None."""
    entry = parse_manifest(content).get(name)
    return entry.rev if entry is not None else None
