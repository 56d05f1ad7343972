"""UpdateRunner — drives every selected dependency through probe and publish."""

from __future__ import annotations

import structlog

from niv_updater.config import RunContext, Settings
from niv_updater.core.github_client import GitHubClient
from niv_updater.engines.changelog import build_changelog, wrap_message
from niv_updater.engines.changelog.builder import SHORT_SHA
from niv_updater.engines.pins import (
    branch_name,
    classify_revision,
    fetch_manifest,
    resolve_base_commit,
    select_dependencies,
)
from niv_updater.engines.prober import (
    NivTool,
    ScratchWorkspace,
    probe_update,
    restore_ssh_source,
    rewrite_ssh_source,
)
from niv_updater.engines.publisher import apply_labels, publish
from niv_updater.exceptions import GitHubAPIError, NivError, PinStoreError
from niv_updater.models import DependencyOutcome, RunReport, UpdateCandidate

log = structlog.get_logger("niv_updater.runner")


def pull_request_title(settings: Settings, candidate: UpdateCandidate) -> str:
    old = candidate.old_revision[:SHORT_SHA]
    new = (candidate.new_revision or "")[:SHORT_SHA]
    return f"{settings.title_prefix}{candidate.name}: update {old} -> {new}"


async def prepare(client: GitHubClient, settings: Settings) -> RunContext:
    """Resolve the base branch, freeze its commit and read the manifest there."""
    base_branch = settings.requested_base
    if base_branch is None:
        try:
            base_branch = await client.get_default_branch(settings.repository)
        except (GitHubAPIError, KeyError) as exc:
            raise PinStoreError(f"cannot determine default branch: {exc}") from exc

    base_commit = await resolve_base_commit(client, settings.repository, base_branch)
    manifest = await fetch_manifest(client, settings.repository, settings.sources_file, base_commit)
    return RunContext(
        settings=settings,
        base_branch=base_branch,
        base_commit=base_commit,
        manifest=manifest,
    )


class UpdateRunner:
    """Sequential update run.

    1. ``prepare()`` freezes the base commit and manifest (fatal on failure)
    2. select dependencies from allow/deny lists
    3. ``process()`` each one in turn; per-dependency failures become
       ``errored`` outcomes, only branch creation failures abort the run
    """

    def __init__(self, client: GitHubClient, niv: NivTool) -> None:
        self._client = client
        self._niv = niv

    async def run(self, settings: Settings) -> RunReport:
        ctx = await prepare(self._client, settings)
        names = select_dependencies(ctx.manifest.entries, settings.allow, settings.deny)
        log.info("run.started", base=ctx.base_branch, commit=ctx.base_commit, dependencies=names)

        report = RunReport()
        for name in names:
            with structlog.contextvars.bound_contextvars(dependency=name):
                outcome = await self.process(ctx, name)
            report.add(outcome)

        log.info("run.finished", **report.count_by_status())
        return report

    async def process(self, ctx: RunContext, name: str) -> DependencyOutcome:
        settings = ctx.settings
        entry = ctx.manifest.entries[name]
        if not entry.rev:
            return _skip(name, "no revision pinned")

        branch = branch_name(settings.branch_prefix, name, entry.rev)
        try:
            exists = await self._client.branch_exists(settings.repository, branch)
        except GitHubAPIError as exc:
            return _fail(name, f"branch lookup failed: {exc}")
        if exists:
            return _skip(name, f"branch {branch} already exists")

        if settings.skip_versioned_revisions and classify_revision(entry.rev) == "version":
            return _skip(name, f"revision {entry.rev!r} looks like a version")

        ssh_repo = entry.ssh_repo(settings.github_host)
        if ssh_repo is not None and settings.skip_ssh_repos:
            return _skip(name, "ssh source")

        candidate = UpdateCandidate(name=name, entry=entry, old_revision=entry.rev, branch=branch)
        try:
            with ScratchWorkspace(ctx.manifest.content) as workspace:
                if ssh_repo is not None:
                    await rewrite_ssh_source(self._niv, workspace, name, entry, ssh_repo)
                    candidate.rewritten = True

                probe = await probe_update(self._niv, workspace, name, entry.rev)
                if probe.status == "unchanged":
                    return DependencyOutcome.unchanged(name)

                candidate.new_revision = probe.new_revision
                candidate.new_content = probe.content
                if candidate.rewritten:
                    candidate.new_content = await restore_ssh_source(
                        self._niv, workspace, name, probe.new_revision or ""
                    )
        except NivError as exc:
            return _fail(name, str(exc))

        candidate.title = pull_request_title(settings, candidate)
        changelog = await build_changelog(
            self._client,
            name,
            entry,
            candidate.old_revision,
            candidate.new_revision or "",
            show_merges=settings.show_merges,
            host=settings.github_host,
        )
        candidate.body = wrap_message(changelog, settings.message_prefix, settings.message_suffix)

        result = await publish(self._client, ctx, candidate)
        if not result.ok or result.pull_request is None:
            # a branch left behind by a failed rollback blocks the next attempt
            leftover = None if result.rolled_back else branch
            return _fail(name, result.error or "publish failed", branch=leftover)

        await apply_labels(self._client, settings.repository, result.pull_request, settings.labels)
        return DependencyOutcome.updated(name, branch, result.pull_request)


def _skip(name: str, reason: str) -> DependencyOutcome:
    log.info("dependency.skipped", reason=reason)
    return DependencyOutcome.skipped(name, reason)


def _fail(name: str, reason: str, branch: str | None = None) -> DependencyOutcome:
    log.warning("dependency.failed", reason=reason)
    return DependencyOutcome.errored(name, reason, branch=branch)
