"""Per-dependency work items and results."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Literal

from niv_updater.engines.pins.models import PinEntry

OutcomeStatus = Literal["skipped", "unchanged", "updated", "errored"]


@dataclass
class UpdateCandidate:
    """One dependency travelling through probe, changelog and publish."""

    name: str
    entry: PinEntry
    old_revision: str
    branch: str
    rewritten: bool = False
    new_revision: str | None = None
    new_content: str | None = None
    title: str = ""
    body: str = ""


@dataclass
class DependencyOutcome:
    """Terminal state of one dependency in one run."""

    name: str
    status: OutcomeStatus
    reason: str | None = None
    branch: str | None = None
    pull_request_number: int | None = None
    pull_request_url: str | None = None

    @classmethod
    def skipped(cls, name: str, reason: str) -> DependencyOutcome:
        return cls(name=name, status="skipped", reason=reason)

    @classmethod
    def unchanged(cls, name: str) -> DependencyOutcome:
        return cls(name=name, status="unchanged")

    @classmethod
    def errored(cls, name: str, reason: str, branch: str | None = None) -> DependencyOutcome:
        return cls(name=name, status="errored", reason=reason, branch=branch)

    @classmethod
    def updated(
        cls, name: str, branch: str, pull_request: dict[str, Any]
    ) -> DependencyOutcome:
        return cls(
            name=name,
            status="updated",
            branch=branch,
            pull_request_number=pull_request.get("number"),
            pull_request_url=pull_request.get("html_url"),
        )


@dataclass
class RunReport:
    outcomes: list[DependencyOutcome] = field(default_factory=list)

    def add(self, outcome: DependencyOutcome) -> None:
        self.outcomes.append(outcome)

    def count_by_status(self) -> dict[str, int]:
        return dict(Counter(o.status for o in self.outcomes))

    def by_status(self, status: OutcomeStatus) -> list[DependencyOutcome]:
        return [o for o in self.outcomes if o.status == status]
