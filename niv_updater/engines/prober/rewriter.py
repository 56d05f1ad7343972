"""Swap SSH-only sources for a token-authenticated owner/repo pin and back.

niv cannot fetch ``ssh://git@github.com/...`` sources without SSH keys. The
pin is therefore re-added as a plain GitHub pin (fetched through the API
token) for the duration of the probe. Once the new revision is known the
working copy is reset to the original content and only ``rev`` is changed,
so the published pin keeps its SSH location.
"""

from __future__ import annotations

import structlog

from niv_updater.engines.pins.models import PinEntry
from niv_updater.engines.prober.niv import NivTool
from niv_updater.engines.prober.workspace import ScratchWorkspace

log = structlog.get_logger("niv_updater.prober")


async def rewrite_ssh_source(
    niv: NivTool, workspace: ScratchWorkspace, name: str, entry: PinEntry, owner_repo: str
) -> None:
    """Replace the SSH pin with an owner/repo pin at the same revision and ref."""
    log.info("rewriter.rewrite", dependency=name, owner_repo=owner_repo)
    await niv.drop(workspace.working, name)
    await niv.add(
        workspace.working,
        owner_repo,
        name=name,
        rev=entry.rev or "",
        branch=entry.tracked_ref,
    )


async def restore_ssh_source(
    niv: NivTool, workspace: ScratchWorkspace, name: str, new_revision: str
) -> str:
    """Reset to the original pin and apply only *new_revision*; return the content."""
    log.info("rewriter.restore", dependency=name, rev=new_revision)
    workspace.reset_working()
    await niv.modify(workspace.working, name, new_revision)
    return workspace.read_working()
