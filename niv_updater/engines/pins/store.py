"""Read the pin manifest from the host repository at a frozen commit."""

from __future__ import annotations

import structlog

from niv_updater.core.github_client import GitHubClient
from niv_updater.engines.pins.models import ManifestSnapshot, parse_manifest
from niv_updater.exceptions import GitHubAPIError, PinStoreError

log = structlog.get_logger("niv_updater.pins")


async def resolve_base_commit(client: GitHubClient, repository: str, branch: str) -> str:
    """Freeze the head commit of *branch*; every update branch forks from it."""
    try:
        sha = await client.get_branch_head(repository, branch)
    except (GitHubAPIError, KeyError, TypeError) as exc:
        raise PinStoreError(
            f"cannot resolve base branch '{branch}' of {repository}: {exc}"
        ) from exc
    log.info("pins.base_commit", repository=repository, branch=branch, commit=sha)
    return sha


async def fetch_manifest(
    client: GitHubClient, repository: str, path: str, ref: str
) -> ManifestSnapshot:
    """Fetch and decode the manifest at *ref*.

    The returned blob sha is required for the later update-in-place write.
    Any failure is fatal: nothing can be proposed without the manifest.
    """
    try:
        content, blob_sha = await client.get_contents(repository, path, ref)
    except (GitHubAPIError, KeyError, UnicodeDecodeError, ValueError) as exc:
        raise PinStoreError(f"cannot fetch {path} from {repository}@{ref}: {exc}") from exc

    try:
        entries = parse_manifest(content)
    except ValueError as exc:
        raise PinStoreError(f"cannot parse {path}: {exc}") from exc

    log.info("pins.manifest_loaded", path=path, ref=ref, dependencies=len(entries))
    return ManifestSnapshot(content=content, blob_sha=blob_sha, entries=entries)
