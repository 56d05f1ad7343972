"""Changelog rendering for update pull requests."""

from niv_updater.engines.changelog.builder import (
    build_changelog,
    filter_merges,
    render_changelog,
    wrap_message,
)
from niv_updater.engines.changelog.ref_parser import qualify_refs

__all__ = ["build_changelog", "filter_merges", "qualify_refs", "render_changelog", "wrap_message"]
