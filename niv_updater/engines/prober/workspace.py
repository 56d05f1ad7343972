"""Scratch workspace holding the original and working copies of the manifest."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

ORIGINAL_NAME = "original.json"
WORKING_NAME = "working.json"


class ScratchWorkspace:
    """Per-dependency scratch directory, removed on exit.

    Usage::

        with ScratchWorkspace(manifest_text) as ws:
            await niv.update(ws.working, name)
            new_text = ws.read_working()
    """

    def __init__(self, content: str) -> None:
        self._content = content
        self._tmpdir: tempfile.TemporaryDirectory[str] | None = None

    def __enter__(self) -> ScratchWorkspace:
        self._tmpdir = tempfile.TemporaryDirectory(prefix="niv-updater-")
        self.original.write_text(self._content, encoding="utf-8")
        self.working.write_text(self._content, encoding="utf-8")
        return self

    def __exit__(self, *exc: object) -> None:
        if self._tmpdir is not None:
            self._tmpdir.cleanup()
            self._tmpdir = None

    @property
    def path(self) -> Path:
        if self._tmpdir is None:
            raise RuntimeError("workspace is not open")
        return Path(self._tmpdir.name)

    @property
    def original(self) -> Path:
        return self.path / ORIGINAL_NAME

    @property
    def working(self) -> Path:
        return self.path / WORKING_NAME

    def read_original(self) -> str:
        return self.original.read_text(encoding="utf-8")

    def read_working(self) -> str:
        return self.working.read_text(encoding="utf-8")

    def reset_working(self) -> None:
        """Throw away every change made to the working copy."""
        shutil.copyfile(self.original, self.working)
