"""Protocol interfaces for swappable storage backends.

Every store is partitioned by an opaque user id. Implementations own their
records: callers persist changes by passing the record back through ``put``.
"""

from __future__ import annotations

from typing import Protocol

from redeploy.store.records import DeploymentGroup, DeploymentRecord, RepoConfig, Webhook


class RepoConfigStore(Protocol):
    def list(self, user_id: str) -> list[RepoConfig]: ...

    def get(self, user_id: str, config_id: str) -> RepoConfig | None: ...

    def put(self, config: RepoConfig) -> None: ...

    def delete(self, user_id: str, config_id: str) -> bool: ...


class GroupStore(Protocol):
    def list(self, user_id: str) -> list[DeploymentGroup]: ...

    def get(self, user_id: str, group_id: str) -> DeploymentGroup | None: ...

    def put(self, group: DeploymentGroup) -> None: ...

    def delete(self, user_id: str, group_id: str) -> bool: ...


class HistoryStore(Protocol):
    def append(self, record: DeploymentRecord) -> None: ...

    def list(self, user_id: str) -> list[DeploymentRecord]: ...


class WebhookStore(Protocol):
    def list(self, user_id: str) -> list[Webhook]: ...

    def put(self, webhook: Webhook) -> None: ...

    def delete(self, user_id: str, webhook_id: str) -> bool: ...

    def find_by_token(self, token: str) -> Webhook | None: ...
