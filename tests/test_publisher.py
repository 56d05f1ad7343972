"""Tests for publishing and labelling, including rollback."""

from __future__ import annotations

import json

import pytest

from niv_updater.config import RunContext
from niv_updater.engines.pins import ManifestSnapshot, PinEntry, parse_manifest
from niv_updater.engines.publisher import apply_labels, publish, rollback
from niv_updater.exceptions import BranchCreationError
from niv_updater.models import UpdateCandidate

OLD = "a" * 40
NEW = "b" * 40
BRANCH = f"auto-libA-{OLD}"


@pytest.fixture
def ctx(make_settings):
    text = json.dumps({"libA": {"owner": "x", "repo": "y", "rev": OLD}})
    snapshot = ManifestSnapshot(content=text, blob_sha="b10b" * 10, entries=parse_manifest(text))
    return RunContext(
        settings=make_settings(), base_branch="main", base_commit="c" * 40, manifest=snapshot
    )


@pytest.fixture
def candidate():
    return UpdateCandidate(
        name="libA",
        entry=PinEntry(owner="x", repo="y", rev=OLD),
        old_revision=OLD,
        branch=BRANCH,
        new_revision=NEW,
        new_content='{"libA": {"rev": "%s"}}' % NEW,
        title="libA: update aaaaaaaa -> bbbbbbbb",
        body="## Changelog for libA:\n",
    )


class TestPublish:
    @pytest.mark.anyio
    async def test_success(self, make_github, ctx, candidate):
        github = make_github({})
        async with github.client() as client:
            result = await publish(client, ctx, candidate)
        assert result.ok
        assert result.pull_request["number"] == 1
        assert [r[1] for r in github.writes] == [
            "create_branch",
            "update_file",
            "create_pull_request",
        ]
        assert github.committed[BRANCH] == candidate.new_content

    @pytest.mark.anyio
    async def test_branch_creation_failure_is_fatal(self, make_github, ctx, candidate):
        github = make_github({})
        github.failures["create_branch"] = 403
        async with github.client() as client:
            with pytest.raises(BranchCreationError) as excinfo:
                await publish(client, ctx, candidate)
        assert excinfo.value.branch == BRANCH
        assert github.calls("delete_branch") == []

    @pytest.mark.anyio
    @pytest.mark.parametrize("step", ["update_file", "create_pull_request"])
    async def test_later_failure_rolls_back(self, make_github, ctx, candidate, step):
        github = make_github({})
        github.failures[step] = 500
        async with github.client() as client:
            result = await publish(client, ctx, candidate)
        assert not result.ok
        assert result.error
        assert len(github.calls("delete_branch")) == 1
        assert BRANCH not in github.branches
        assert result.rolled_back

    @pytest.mark.anyio
    async def test_rollback_failure_is_swallowed(self, make_github, ctx, candidate):
        github = make_github({})
        github.failures["update_file"] = 500
        github.failures["delete_branch"] = 500
        async with github.client() as client:
            result = await publish(client, ctx, candidate)
        assert not result.ok
        assert not result.rolled_back

    @pytest.mark.anyio
    async def test_rollback_reports_outcome(self, make_github):
        github = make_github({})
        github.branches.add("tmp")
        async with github.client() as client:
            assert await rollback(client, "acme/infra", "tmp") is True
            github.failures["delete_branch"] = 404
            assert await rollback(client, "acme/infra", "tmp") is False


class TestApplyLabels:
    @pytest.mark.anyio
    async def test_no_labels_no_request(self, make_github):
        github = make_github({})
        async with github.client() as client:
            assert await apply_labels(client, "acme/infra", {"number": 3}, ())
        assert github.requests == []

    @pytest.mark.anyio
    async def test_applies(self, make_github):
        github = make_github({})
        async with github.client() as client:
            assert await apply_labels(client, "acme/infra", {"number": 3}, ["deps"])
        assert github.labels == {3: ["deps"]}

    @pytest.mark.anyio
    async def test_missing_number(self, make_github):
        github = make_github({})
        async with github.client() as client:
            assert not await apply_labels(client, "acme/infra", {}, ["deps"])
        assert github.requests == []

    @pytest.mark.anyio
    async def test_failure_is_not_raised(self, make_github):
        github = make_github({})
        github.failures["add_labels"] = 422
        async with github.client() as client:
            assert not await apply_labels(client, "acme/infra", {"number": 3}, ["deps"])
