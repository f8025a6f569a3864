"""Stored record shapes shared by the storage ports and services."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any


class DeploymentStatus(StrEnum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


class WebhookTarget(StrEnum):
    ALL = "all"
    GROUP = "group"
    REPOS = "repos"


@dataclass(slots=True)
class RepoConfig:
    id: str
    user_id: str
    repo_id: str
    full_name: str
    selected_branches: list[str]
    is_active: bool
    created_at: str
    updated_at: str | None = None

    @property
    def owner(self) -> str:
        return self.full_name.partition("/")[0]

    @property
    def name(self) -> str:
        return self.full_name.partition("/")[2]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class DeploymentGroup:
    id: str
    user_id: str
    name: str
    description: str
    repo_ids: list[str]
    color: str
    created_at: str
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class DeploymentRecord:
    id: str
    user_id: str
    repo: str
    branch: str
    status: DeploymentStatus
    triggered_at: str
    sha: str | None = None
    commit_message: str | None = None
    error_message: str | None = None
    completed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["status"] = self.status.value
        return payload


@dataclass(slots=True)
class Webhook:
    id: str
    user_id: str
    name: str
    token: str
    target_type: WebhookTarget
    created_at: str
    target_id: str | None = None
    repo_ids: list[str] = field(default_factory=list)
    is_active: bool = True
    last_used_at: str | None = None
    usage_count: int = 0

    @property
    def masked_token(self) -> str:
        return f"{self.token[:8]}...{self.token[-8:]}"

    def to_dict(self, *, reveal_token: bool = False) -> dict[str, Any]:
        payload = asdict(self)
        payload["target_type"] = self.target_type.value
        if not reveal_token:
            payload["token"] = self.masked_token
        return payload
