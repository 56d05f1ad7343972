"""Attach configured labels to a freshly created pull request."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from niv_updater.core.github_client import GitHubClient
from niv_updater.exceptions import GitHubAPIError

log = structlog.get_logger("niv_updater.publisher")


async def apply_labels(
    client: GitHubClient,
    repository: str,
    pull_request: dict[str, Any],
    labels: Sequence[str],
) -> bool:
    """Best effort: returns False instead of raising when labelling fails."""
    if not labels:
        return True

    number = pull_request.get("number")
    if not isinstance(number, int):
        log.warning("labels.no_pull_request_number", labels=list(labels))
        return False

    try:
        await client.add_labels(repository, number, list(labels))
    except GitHubAPIError as exc:
        log.warning("labels.failed", number=number, labels=list(labels), error=str(exc))
        return False
    log.info("labels.applied", number=number, labels=list(labels))
    return True
