"""CLI entry point: niv-updater.

Every option can also be given through the environment variable listed in
``--help``, which is how a CI workflow usually drives it.
"""

from __future__ import annotations

import asyncio
import shlex
import sys

import click
import structlog

from niv_updater.config import DEFAULT_BRANCH_PREFIX, DEFAULT_SOURCES_FILE, Settings, split_list
from niv_updater.core.github import DEFAULT_HOST
from niv_updater.core.github_client import DEFAULT_API_URL, GitHubClient
from niv_updater.core.logging import setup_logging
from niv_updater.engines.prober import NivTool
from niv_updater.exceptions import ConfigError, UpdaterError
from niv_updater.models import RunReport
from niv_updater.runner import UpdateRunner

log = structlog.get_logger("niv_updater.cli")


async def _run(settings: Settings) -> RunReport:
    niv = NivTool(settings.niv_command, timeout=settings.tool_timeout, token=settings.token)
    async with GitHubClient(
        settings.token, base_url=settings.api_url, timeout=settings.http_timeout
    ) as client:
        return await UpdateRunner(client, niv).run(settings)


@click.command(context_settings={"show_default": True})
@click.option("--repository", envvar="GITHUB_REPOSITORY", help="owner/name of the host repository")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token used for the API and niv")
@click.option("--ref", "trigger_ref", envvar="GITHUB_REF", help="Ref that triggered the run")
@click.option("--sources-file", envvar="SOURCES_FILE", default=DEFAULT_SOURCES_FILE)
@click.option("--allow", envvar=["ALLOWLIST", "WHITELIST"], help="Comma-separated names to update")
@click.option("--deny", envvar=["DENYLIST", "BLACKLIST"], help="Comma-separated names to skip")
@click.option("--labels", envvar="LABELS", help="Newline-separated labels for each pull request")
@click.option("--skip-ssh-repos/--no-skip-ssh-repos", envvar="SKIP_SSH_REPOS", default=False)
@click.option(
    "--skip-versioned-revisions/--no-skip-versioned-revisions",
    envvar="SKIP_VERSIONED_REVISIONS",
    default=True,
)
@click.option("--branch-prefix", envvar="BRANCH_PREFIX", default=DEFAULT_BRANCH_PREFIX)
@click.option(
    "--pull-request-base", envvar="PULL_REQUEST_BASE", help="Defaults to the trigger branch"
)
@click.option("--title-prefix", envvar="TITLE_PREFIX", default="")
@click.option("--message-prefix", envvar="MESSAGE_PREFIX", default="")
@click.option("--message-suffix", envvar="MESSAGE_SUFFIX", default="")
@click.option("--show-merges/--hide-merges", envvar="SHOW_MERGES", default=False)
@click.option("--niv", "niv_command", envvar="NIV_COMMAND", default="niv")
@click.option("--github-host", envvar="GITHUB_HOST", default=DEFAULT_HOST)
@click.option("--api-url", envvar="GITHUB_API_URL", default=DEFAULT_API_URL)
@click.option("--http-timeout", envvar="HTTP_TIMEOUT", type=float, default=30.0)
@click.option("--tool-timeout", envvar="TOOL_TIMEOUT", type=float, default=600.0)
@click.option("--log-level", envvar="NIV_UPDATER_LOG_LEVEL", default=None)
@click.option(
    "--log-format",
    envvar="NIV_UPDATER_LOG_FORMAT",
    type=click.Choice(["console", "json", "github"]),
    default=None,
)
def main(
    repository: str | None,
    token: str | None,
    trigger_ref: str | None,
    sources_file: str,
    allow: str | None,
    deny: str | None,
    labels: str | None,
    skip_ssh_repos: bool,
    skip_versioned_revisions: bool,
    branch_prefix: str,
    pull_request_base: str | None,
    title_prefix: str,
    message_prefix: str,
    message_suffix: str,
    show_merges: bool,
    niv_command: str,
    github_host: str,
    api_url: str,
    http_timeout: float,
    tool_timeout: float,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Open one pull request per outdated pin in a niv sources file."""
    setup_logging(log_level, log_format)

    try:
        settings = Settings(
            repository=repository or "",
            token=token or "",
            sources_file=sources_file,
            trigger_ref=trigger_ref,
            pull_request_base=pull_request_base or None,
            allow=split_list(allow),
            deny=split_list(deny),
            labels=split_list(labels, "\n"),
            skip_ssh_repos=skip_ssh_repos,
            skip_versioned_revisions=skip_versioned_revisions,
            branch_prefix=branch_prefix,
            title_prefix=title_prefix,
            message_prefix=message_prefix,
            message_suffix=message_suffix,
            show_merges=show_merges,
            niv_command=tuple(shlex.split(niv_command)),
            github_host=github_host,
            api_url=api_url,
            http_timeout=http_timeout,
            tool_timeout=tool_timeout,
        )
    except ConfigError as exc:
        log.error("run.invalid_settings", error=str(exc))
        sys.exit(1)

    try:
        report = asyncio.run(_run(settings))
    except UpdaterError as exc:
        log.error("run.aborted", error=str(exc))
        sys.exit(1)

    for outcome in report.by_status("updated"):
        click.echo(f"{outcome.name}: {outcome.pull_request_url or outcome.branch}")
