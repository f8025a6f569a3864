"""Deployment result contracts.

Every result here is built fresh per invocation and never persisted. Aggregate
statuses and summaries are derived from the collected outcomes, never passed in.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from redeploy.timeutil import now_iso


class BranchStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"


class RepositoryStatus(StrEnum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RepoDeployConfig:
    owner: str
    repo: str
    branches: tuple[str, ...]
    message: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_full_name(
        cls,
        full_name: str,
        branches: Sequence[str],
        message: str | None = None,
    ) -> RepoDeployConfig:
        owner, _, repo = full_name.partition("/")
        if not owner or not repo or "/" in repo:
            raise ValueError(f"expected owner/repo, got {full_name!r}")
        return cls(owner=owner, repo=repo, branches=tuple(branches), message=message)


@dataclass(frozen=True, slots=True)
class CommitResult:
    sha: str
    branch: str
    message: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "sha": self.sha,
            "branch": self.branch,
            "message": self.message,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class BranchOutcome:
    branch: str
    status: BranchStatus
    sha: str | None = None
    timestamp: str | None = None
    error: str | None = None
    code: str | None = None

    @classmethod
    def succeeded(cls, commit: CommitResult) -> BranchOutcome:
        return cls(
            branch=commit.branch,
            status=BranchStatus.SUCCESS,
            sha=commit.sha,
            timestamp=commit.timestamp,
        )

    @classmethod
    def failed(cls, branch: str, error: str, code: str | None = None) -> BranchOutcome:
        return cls(branch=branch, status=BranchStatus.FAILED, error=error, code=code)

    @property
    def ok(self) -> bool:
        return self.status is BranchStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"branch": self.branch, "status": self.status.value}
        for key in ("sha", "timestamp", "error", "code"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


@dataclass(frozen=True, slots=True)
class RepositoryDeploymentResult:
    repo: str
    branches: tuple[BranchOutcome, ...]

    @property
    def successful(self) -> int:
        return sum(1 for outcome in self.branches if outcome.ok)

    @property
    def failed(self) -> int:
        return len(self.branches) - self.successful

    @property
    def status(self) -> RepositoryStatus:
        # An empty branch list counts as all-failed, matching the failed == total rule.
        if self.failed == len(self.branches):
            return RepositoryStatus.FAILED
        if self.failed > 0:
            return RepositoryStatus.PARTIAL
        return RepositoryStatus.SUCCESS

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.branches),
            "successful": self.successful,
            "failed": self.failed,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "status": self.status.value,
            "branches": [outcome.to_dict() for outcome in self.branches],
            "summary": self.summary(),
        }


@dataclass(frozen=True, slots=True)
class BatchDeploymentResult:
    results: tuple[RepositoryDeploymentResult, ...]
    timestamp: str = field(default_factory=now_iso)

    def _count(self, status: RepositoryStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "successful": self._count(RepositoryStatus.SUCCESS),
            "failed": self._count(RepositoryStatus.FAILED),
            "partial": self._count(RepositoryStatus.PARTIAL),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "summary": self.summary(),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class QueueOutcome:
    status: str
    result: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"status": self.status, "result": self.result}
        return {"status": self.status, "error": self.error}


@dataclass(frozen=True, slots=True)
class RateLimitWindow:
    request_count: int
    window_start: float
    rate_limit: int
    rate_limit_window_ms: int
