"""Process-local in-memory storage adapters.

Contents live only as long as the process. Swap these for persistent
implementations of the protocols in ``redeploy.store.interfaces``.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from redeploy.store.records import DeploymentGroup, DeploymentRecord, RepoConfig, Webhook

R = TypeVar("R", RepoConfig, DeploymentGroup, Webhook)


class _KeyedStore(Generic[R]):
    """Per-user insertion-ordered records keyed by id."""

    def __init__(self) -> None:
        self._by_user: dict[str, dict[str, R]] = {}

    def list(self, user_id: str) -> list[R]:
        return list(self._by_user.get(user_id, {}).values())

    def get(self, user_id: str, record_id: str) -> R | None:
        return self._by_user.get(user_id, {}).get(record_id)

    def put(self, record: R) -> None:
        self._by_user.setdefault(record.user_id, {})[record.id] = record

    def delete(self, user_id: str, record_id: str) -> bool:
        return self._by_user.get(user_id, {}).pop(record_id, None) is not None

    def clear(self) -> None:
        self._by_user.clear()


class InMemoryRepoConfigStore(_KeyedStore[RepoConfig]):
    pass


class InMemoryGroupStore(_KeyedStore[DeploymentGroup]):
    pass


class InMemoryWebhookStore(_KeyedStore[Webhook]):
    def find_by_token(self, token: str) -> Webhook | None:
        for webhooks in self._by_user.values():
            for webhook in webhooks.values():
                if webhook.is_active and hmac.compare_digest(
                    webhook.token.encode(), token.encode()
                ):
                    return webhook
        return None


class InMemoryHistoryStore:
    def __init__(self) -> None:
        self._by_user: dict[str, list[DeploymentRecord]] = {}

    def append(self, record: DeploymentRecord) -> None:
        self._by_user.setdefault(record.user_id, []).append(record)

    def list(self, user_id: str) -> list[DeploymentRecord]:
        return list(self._by_user.get(user_id, []))

    def clear(self) -> None:
        self._by_user.clear()


@dataclass(slots=True)
class Stores:
    repo_configs: InMemoryRepoConfigStore = field(default_factory=InMemoryRepoConfigStore)
    groups: InMemoryGroupStore = field(default_factory=InMemoryGroupStore)
    history: InMemoryHistoryStore = field(default_factory=InMemoryHistoryStore)
    webhooks: InMemoryWebhookStore = field(default_factory=InMemoryWebhookStore)


_stores: Stores | None = None


def get_stores() -> Stores:
    global _stores
    if _stores is None:
        _stores = Stores()
    return _stores


def reset_stores() -> None:
    global _stores
    _stores = None
