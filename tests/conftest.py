"""Shared fixtures: an in-memory GitHub behind httpx.MockTransport and a fake niv."""

from __future__ import annotations

import base64
import json
import re
from pathlib import Path
from typing import Any

import httpx
import pytest

from niv_updater.config import Settings
from niv_updater.core.github_client import GitHubClient
from niv_updater.exceptions import NivError

HOST_REPO = "acme/infra"
BASE_COMMIT = "c" * 40
BLOB_SHA = "b10b" * 10
OLD_REV = "a" * 40
NEW_REV = "b" * 40

_ROUTES: list[tuple[str, str, re.Pattern[str]]] = [
    ("GET", "branch_exists", re.compile(r"^/repos/[^/]+/[^/]+/git/ref/heads/(?P<branch>.+)$")),
    ("GET", "get_branch", re.compile(r"^/repos/[^/]+/[^/]+/branches/(?P<branch>.+)$")),
    ("GET", "get_contents", re.compile(r"^/repos/[^/]+/[^/]+/contents/(?P<path>.+)$")),
    (
        "GET",
        "compare",
        re.compile(
            r"^/repos/(?P<owner>[^/]+)/(?P<repo>[^/]+)/compare/(?P<base>.+)\.\.\.(?P<head>.+)$"
        ),
    ),
    ("GET", "get_repo", re.compile(r"^/repos/[^/]+/[^/]+$")),
    ("POST", "create_branch", re.compile(r"^/repos/[^/]+/[^/]+/git/refs$")),
    ("DELETE", "delete_branch", re.compile(r"^/repos/[^/]+/[^/]+/git/refs/heads/(?P<branch>.+)$")),
    ("PUT", "update_file", re.compile(r"^/repos/[^/]+/[^/]+/contents/(?P<path>.+)$")),
    ("POST", "create_pull_request", re.compile(r"^/repos/[^/]+/[^/]+/pulls$")),
    ("POST", "add_labels", re.compile(r"^/repos/[^/]+/[^/]+/issues/(?P<number>\d+)/labels$")),
]


def dump_manifest(entries: dict[str, Any]) -> str:
    return json.dumps(entries, indent=4) + "\n"


class FakeGitHub:
    """Just enough of the GitHub REST API for the updater."""

    def __init__(self, manifest: dict[str, Any], default_branch: str = "main") -> None:
        self.manifest_text = dump_manifest(manifest)
        self.default_branch = default_branch
        self.branches: set[str] = {default_branch}
        self.compares: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.failures: dict[str, int] = {}
        self.pr_response: dict[str, Any] | None = None
        self.requests: list[tuple[str, str, Any]] = []
        self.committed: dict[str, str] = {}
        self.pulls: list[dict[str, Any]] = []
        self.labels: dict[int, list[str]] = {}

    # -- helpers for assertions --

    @property
    def writes(self) -> list[tuple[str, str, Any]]:
        return [r for r in self.requests if r[0] != "GET"]

    def calls(self, route: str) -> list[tuple[str, str, Any]]:
        return [r for r in self.requests if r[1] == route]

    def client(self) -> GitHubClient:
        return GitHubClient("test-token", transport=httpx.MockTransport(self.handler))

    # -- transport --

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        for method, name, pattern in _ROUTES:
            match = pattern.match(path)
            if request.method == method and match:
                self.requests.append((request.method, name, body))
                if name in self.failures:
                    return httpx.Response(self.failures[name], json={"message": f"{name} broke"})
                return getattr(self, f"_{name}")(request, body, **match.groupdict())
        raise AssertionError(f"unexpected request {request.method} {path}")

    def _get_repo(self, request, body):
        return httpx.Response(200, json={"default_branch": self.default_branch})

    def _get_branch(self, request, body, branch):
        if branch not in self.branches:
            return httpx.Response(404, json={"message": "Branch not found"})
        return httpx.Response(200, json={"name": branch, "commit": {"sha": BASE_COMMIT}})

    def _branch_exists(self, request, body, branch):
        if branch in self.branches:
            return httpx.Response(200, json={"ref": f"refs/heads/{branch}"})
        return httpx.Response(404, json={"message": "Not Found"})

    def _get_contents(self, request, body, path):
        encoded = base64.b64encode(self.manifest_text.encode()).decode()
        return httpx.Response(
            200,
            json={"type": "file", "encoding": "base64", "content": encoded, "sha": BLOB_SHA},
        )

    def _compare(self, request, body, owner, repo, base, head):
        return httpx.Response(200, json={"commits": self.compares.get((owner, repo), [])})

    def _create_branch(self, request, body):
        branch = body["ref"].removeprefix("refs/heads/")
        if branch in self.branches:
            return httpx.Response(422, json={"message": "Reference already exists"})
        self.branches.add(branch)
        return httpx.Response(201, json={"ref": body["ref"], "object": {"sha": body["sha"]}})

    def _delete_branch(self, request, body, branch):
        self.branches.discard(branch)
        return httpx.Response(204)

    def _update_file(self, request, body, path):
        self.committed[body["branch"]] = base64.b64decode(body["content"]).decode()
        return httpx.Response(200, json={"commit": {"sha": "d" * 40}})

    def _create_pull_request(self, request, body):
        number = len(self.pulls) + 1
        self.pulls.append(body)
        if self.pr_response is not None:
            return httpx.Response(201, json=self.pr_response)
        return httpx.Response(
            201,
            json={"number": number, "html_url": f"https://github.com/{HOST_REPO}/pull/{number}"},
        )

    def _add_labels(self, request, body, number):
        self.labels[int(number)] = body["labels"]
        return httpx.Response(200, json=[{"name": name} for name in body["labels"]])


class FakeNiv:
    """In-memory stand-in for NivTool: edits the sources file like niv would."""

    def __init__(self) -> None:
        self.new_revisions: dict[str, str] = {}
        self.reformat: set[str] = set()
        self.failing: set[str] = set()
        self.calls: list[tuple[str, ...]] = []

    async def drop(self, sources: Path, name: str) -> None:
        self.calls.append(("drop", name))
        entries = self._load(sources)
        del entries[name]
        self._save(sources, entries)

    async def add(
        self, sources: Path, owner_repo: str, *, name: str, rev: str, branch=None
    ) -> None:
        self.calls.append(("add", owner_repo, name, rev, branch or ""))
        owner, repo = owner_repo.split("/")
        entries = self._load(sources)
        entries[name] = {
            "branch": branch,
            "owner": owner,
            "repo": repo,
            "rev": rev,
            "type": "tarball",
        }
        self._save(sources, entries)

    async def update(self, sources: Path, name: str) -> None:
        self.calls.append(("update", name))
        if name in self.failing:
            raise NivError(["niv", "update", name], "exit 1: boom")
        entries = self._load(sources)
        if name in self.new_revisions:
            entries[name]["rev"] = self.new_revisions[name]
        elif name in self.reformat:
            entries[name]["sha256"] = "0" * 52
        else:
            return
        self._save(sources, entries)

    async def modify(self, sources: Path, name: str, rev: str) -> None:
        self.calls.append(("modify", name, rev))
        entries = self._load(sources)
        entries[name]["rev"] = rev
        self._save(sources, entries)

    @staticmethod
    def _load(sources: Path) -> dict[str, Any]:
        return json.loads(sources.read_text())

    @staticmethod
    def _save(sources: Path, entries: dict[str, Any]) -> None:
        sources.write_text(dump_manifest(entries))


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_niv() -> FakeNiv:
    return FakeNiv()


@pytest.fixture
def make_github():
    return FakeGitHub


@pytest.fixture
def make_settings():
    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "repository": HOST_REPO,
            "token": "test-token",
            "trigger_ref": "refs/heads/main",
            "branch_prefix": "auto-",
        }
        values.update(overrides)
        return Settings(**values)

    return _make
