"""Publish one update: branch, commit, pull request — with rollback.

Steps, in order:

1. create ``branch`` at the frozen base commit (failure is fatal for the run)
2. commit the new manifest onto it
3. open the pull request

If step 2 or 3 fails the branch is deleted again (best effort) so no empty
branch blocks the next attempt at the same revision.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from niv_updater.config import RunContext
from niv_updater.core.github_client import GitHubClient
from niv_updater.exceptions import BranchCreationError, GitHubAPIError
from niv_updater.models import UpdateCandidate

log = structlog.get_logger("niv_updater.publisher")


@dataclass
class PublishResult:
    pull_request: dict[str, Any] | None = None
    error: str | None = None
    rolled_back: bool = False

    @property
    def ok(self) -> bool:
        return self.pull_request is not None


def commit_message(candidate: UpdateCandidate) -> str:
    return f"{candidate.title}\n\n{candidate.body}"


async def publish(
    client: GitHubClient, ctx: RunContext, candidate: UpdateCandidate
) -> PublishResult:
    """Publish *candidate*; raise :class:`BranchCreationError` if step 1 fails."""
    settings = ctx.settings
    repository = settings.repository
    if candidate.new_content is None:
        raise ValueError(f"candidate {candidate.name} has no updated content")

    try:
        await client.create_branch(repository, candidate.branch, ctx.base_commit)
    except GitHubAPIError as exc:
        raise BranchCreationError(candidate.branch, str(exc)) from exc
    log.info("publish.branch_created", branch=candidate.branch, base_commit=ctx.base_commit)

    try:
        await client.update_file(
            repository,
            settings.sources_file,
            content=candidate.new_content,
            blob_sha=ctx.manifest.blob_sha,
            branch=candidate.branch,
            message=commit_message(candidate),
        )
    except GitHubAPIError as exc:
        log.warning("publish.commit_failed", branch=candidate.branch, error=str(exc))
        rolled_back = await rollback(client, repository, candidate.branch)
        return PublishResult(error=f"commit failed: {exc}", rolled_back=rolled_back)

    try:
        pull_request = await client.create_pull_request(
            repository,
            title=candidate.title,
            body=candidate.body,
            head=candidate.branch,
            base=ctx.base_branch,
        )
    except GitHubAPIError as exc:
        log.warning("publish.pull_request_failed", branch=candidate.branch, error=str(exc))
        rolled_back = await rollback(client, repository, candidate.branch)
        return PublishResult(error=f"pull request failed: {exc}", rolled_back=rolled_back)

    log.info(
        "publish.pull_request_created",
        branch=candidate.branch,
        number=pull_request.get("number"),
        url=pull_request.get("html_url"),
    )
    return PublishResult(pull_request=pull_request)


async def rollback(client: GitHubClient, repository: str, branch: str) -> bool:
    """Delete *branch*; a failure is logged and swallowed."""
    try:
        await client.delete_branch(repository, branch)
    except GitHubAPIError as exc:
        log.warning("publish.rollback_failed", branch=branch, error=str(exc))
        return False
    log.info("publish.rollback", branch=branch)
    return True
