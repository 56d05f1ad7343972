"""Render the pull request body describing an upstream revision bump."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from niv_updater.core.github import DEFAULT_HOST, web_url
from niv_updater.core.github_client import GitHubClient
from niv_updater.engines.changelog.ref_parser import qualify_refs
from niv_updater.engines.pins.models import PinEntry
from niv_updater.exceptions import GitHubAPIError

log = structlog.get_logger("niv_updater.changelog")

SHORT_SHA = 8


def is_merge_commit(commit: dict[str, Any]) -> bool:
    return len(commit.get("parents") or []) > 1


def filter_merges(commits: Iterable[dict[str, Any]], show_merges: bool) -> list[dict[str, Any]]:
    if show_merges:
        return list(commits)
    return [c for c in commits if not is_merge_commit(c)]


def render_commit_line(
    commit: dict[str, Any], owner: str, repo: str, host: str = DEFAULT_HOST
) -> str:
    sha = commit.get("sha", "")
    url = commit.get("html_url") or f"{web_url(host, owner, repo)}/commit/{sha}"
    message = (commit.get("commit") or {}).get("message", "")
    title = message.split("\n", 1)[0].strip()
    return f"* [`{sha[:SHORT_SHA]}`]({url}) {qualify_refs(title, owner, repo)}"


def render_changelog(
    name: str,
    owner: str,
    repo: str,
    old_revision: str,
    new_revision: str,
    commits: Iterable[dict[str, Any]],
    *,
    show_merges: bool = False,
    host: str = DEFAULT_HOST,
) -> str:
    compare_url = f"{web_url(host, owner, repo)}/compare/{old_revision}...{new_revision}"
    lines = [
        f"## Changelog for {name}:",
        f"Commits: [{owner}/{repo}@{old_revision[:SHORT_SHA]}...{new_revision[:SHORT_SHA]}]"
        f"({compare_url})",
        "",
    ]
    lines += [
        render_commit_line(c, owner, repo, host) for c in filter_merges(commits, show_merges)
    ]
    return "\n".join(lines) + "\n"


def unavailable_notice(name: str, host: str = DEFAULT_HOST) -> str:
    return f"No changelog available: {name} is not hosted on {host}.\n"


def wrap_message(body: str, prefix: str = "", suffix: str = "") -> str:
    """Surround *body* with the configured prefix/suffix.

    Each non-empty part is followed by a newline; without it the trailing
    blank lines would be collapsed when the body is rendered.
    """
    parts = []
    if prefix:
        parts.append(prefix + "\n")
    parts.append(body)
    if suffix:
        parts.append(suffix + "\n")
    return "\n".join(parts)


async def build_changelog(
    client: GitHubClient,
    name: str,
    entry: PinEntry,
    old_revision: str,
    new_revision: str,
    *,
    show_merges: bool = False,
    host: str = DEFAULT_HOST,
) -> str:
    """Fetch ``old...new`` from the provider and render it.

    A failed comparison yields an empty commit list; it never fails the update.
    """
    location = entry.github_repo(host)
    if location is None:
        return unavailable_notice(name, host)
    owner, repo = location

    try:
        commits = await client.compare(owner, repo, old_revision, new_revision)
    except GitHubAPIError as exc:
        log.warning("changelog.compare_failed", dependency=name, error=str(exc))
        commits = []

    return render_changelog(
        name,
        owner,
        repo,
        old_revision,
        new_revision,
        commits,
        show_merges=show_merges,
        host=host,
    )
