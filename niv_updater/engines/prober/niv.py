"""Subprocess wrapper around the niv command line."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from pathlib import Path

import structlog

from niv_updater.exceptions import NivError

log = structlog.get_logger("niv_updater.niv")


class NivTool:
    """Run niv verbs against an explicit sources file.

    Each verb edits the file in place and raises :class:`NivError` if niv
    exits non-zero, cannot be started, or exceeds *timeout* seconds. A *token*
    is exported to niv as ``GITHUB_TOKEN`` so private repositories can be fetched.
    """

    def __init__(
        self,
        command: Sequence[str] = ("niv",),
        *,
        timeout: float = 600.0,
        token: str | None = None,
    ) -> None:
        self._command = list(command)
        self._timeout = timeout
        self._token = token

    async def drop(self, sources: Path, name: str) -> None:
        await self._run(sources, ["drop", name])

    async def add(
        self,
        sources: Path,
        owner_repo: str,
        *,
        name: str,
        rev: str,
        branch: str | None = None,
    ) -> None:
        args = ["add", owner_repo, "--name", name, "--rev", rev]
        if branch:
            args += ["--branch", branch]
        await self._run(sources, args)

    async def update(self, sources: Path, name: str) -> None:
        await self._run(sources, ["update", name])

    async def modify(self, sources: Path, name: str, rev: str) -> None:
        await self._run(sources, ["modify", name, "--attribute", f"rev={rev}"])

    async def _run(self, sources: Path, args: list[str]) -> None:
        cmd = [*self._command, "--sources-file", str(sources), *args]
        log.debug("niv.run", cmd=cmd)
        env = None
        if self._token:
            env = {**os.environ, "GITHUB_TOKEN": self._token}
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(sources.parent),
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise NivError(cmd, str(exc)) from exc

        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise NivError(cmd, f"timed out after {self._timeout:g}s") from exc

        if proc.returncode != 0:
            raise NivError(
                cmd, f"exit {proc.returncode}: {stderr.decode(errors='replace').strip()}"
            )
