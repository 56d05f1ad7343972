"""Pin manifest reading and dependency selection."""

from niv_updater.engines.pins.models import ManifestSnapshot, PinEntry, PinManifest, parse_manifest
from niv_updater.engines.pins.selector import branch_name, classify_revision, select_dependencies
from niv_updater.engines.pins.store import fetch_manifest, resolve_base_commit

__all__ = [
    "ManifestSnapshot",
    "PinEntry",
    "PinManifest",
    "branch_name",
    "classify_revision",
    "fetch_manifest",
    "parse_manifest",
    "resolve_base_commit",
    "select_dependencies",
]
