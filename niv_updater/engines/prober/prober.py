"""Run the pin-update tool for one dependency and classify the result."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import structlog

from niv_updater.engines.pins.models import read_revision
from niv_updater.engines.prober.niv import NivTool
from niv_updater.engines.prober.workspace import ScratchWorkspace
from niv_updater.exceptions import NivError

log = structlog.get_logger("niv_updater.prober")

ProbeStatus = Literal["updated", "unchanged"]


@dataclass
class ProbeResult:
    status: ProbeStatus
    new_revision: str | None = None
    content: str | None = None  # full working manifest when updated


async def probe_update(
    niv: NivTool, workspace: ScratchWorkspace, name: str, old_revision: str
) -> ProbeResult:
    """Update *name* in the working copy and compare it with the original.

    Raises :class:`NivError` when the tool fails or leaves an unreadable
    manifest behind.
    """
    await niv.update(workspace.working, name)

    original = workspace.read_original()
    updated = workspace.read_working()
    if updated == original:
        log.info("prober.unchanged", dependency=name, reason="identical content")
        return ProbeResult(status="unchanged")

    try:
        new_revision = read_revision(updated, name)
    except ValueError as exc:
        raise NivError(["update", name], f"left an invalid manifest: {exc}") from exc
    if not new_revision:
        raise NivError(["update", name], "entry has no revision after update")

    if new_revision == old_revision:
        # The entry was reformatted but still points at the same commit.
        log.info("prober.unchanged", dependency=name, reason="same revision")
        return ProbeResult(status="unchanged")

    log.info("prober.updated", dependency=name, old=old_revision, new=new_revision)
    return ProbeResult(status="updated", new_revision=new_revision, content=updated)
