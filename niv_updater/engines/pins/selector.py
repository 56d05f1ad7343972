"""Choose which dependencies to look at, and whether their pin is eligible."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Literal

import structlog

log = structlog.get_logger("niv_updater.pins")

RevisionKind = Literal["hash", "version"]

# The short form is a prefix match: anything starting with 7 hex digits counts.
FULL_HASH_PATTERN = re.compile(r"^[0-9a-f]{40}$")
SHORT_HASH_PATTERN = re.compile(r"^[0-9a-f]{7}")


def select_dependencies(
    manifest_names: Iterable[str],
    allow: Sequence[str] = (),
    deny: Sequence[str] = (),
) -> list[str]:
    """Compute the ordered working set.

    With an allow-list the result is exactly its entries (in the given
    order), otherwise every manifest key in manifest order. Deny-listed
    names are then removed.
    """
    known = list(manifest_names)
    if allow:
        selected: list[str] = []
        for name in allow:
            if name not in known:
                log.warning("dependency.not_in_manifest", dependency=name)
                continue
            if name not in selected:
                selected.append(name)
    else:
        selected = known

    denied = set(deny)
    result = []
    for name in selected:
        if name in denied:
            log.info("dependency.skipped", dependency=name, reason="denied")
            continue
        result.append(name)
    return result


def classify_revision(revision: str) -> RevisionKind:
    """Tell content hashes from human-assigned version labels."""
    if FULL_HASH_PATTERN.match(revision) or SHORT_HASH_PATTERN.match(revision):
        return "hash"
    return "version"


def branch_name(prefix: str, name: str, revision: str) -> str:
    """Deterministic branch for proposing an update of *name* away from *revision*."""
    return f"{prefix}{name}-{revision}"
