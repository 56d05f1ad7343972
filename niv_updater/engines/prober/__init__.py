"""Update probing — run niv in a scratch workspace, without touching the host repo."""

from niv_updater.engines.prober.niv import NivTool
from niv_updater.engines.prober.prober import ProbeResult, probe_update
from niv_updater.engines.prober.rewriter import restore_ssh_source, rewrite_ssh_source
from niv_updater.engines.prober.workspace import ScratchWorkspace

__all__ = [
    "NivTool",
    "ProbeResult",
    "ScratchWorkspace",
    "probe_update",
    "restore_ssh_source",
    "rewrite_ssh_source",
]
