"""Saved repository configurations: which repos and branches a user deploys."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from redeploy.deploy.models import RepoDeployConfig
from redeploy.errors import RepoConfigError
from redeploy.ids import new_id
from redeploy.store.interfaces import RepoConfigStore
from redeploy.store.records import RepoConfig
from redeploy.timeutil import now_iso

_MUTABLE_FIELDS = {"selected_branches", "is_active"}
_IMMUTABLE_FIELDS = {"repo_id", "full_name"}


def _validate_branches(branches: object) -> list[str]:
    if not isinstance(branches, list | tuple) or not branches:
        raise RepoConfigError("selected_branches must be a non-empty array", "INVALID_BRANCHES")
    cleaned = [str(branch).strip() for branch in branches]
    if any(not branch for branch in cleaned):
        raise RepoConfigError("selected_branches must not contain blank names", "INVALID_BRANCHES")
    return cleaned


def validate_repo_config(data: dict[str, Any]) -> None:
    if not str(data.get("repo_id") or "").strip():
        raise RepoConfigError("repo_id is required", "MISSING_REPO_ID")
    full_name = str(data.get("full_name") or "").strip()
    if not full_name:
        raise RepoConfigError("full_name is required", "MISSING_FULL_NAME")
    owner, _, name = full_name.partition("/")
    if not owner or not name or "/" in name:
        raise RepoConfigError("full_name must look like owner/name", "INVALID_FULL_NAME")
    _validate_branches(data.get("selected_branches"))


class RepoConfigService:
    def __init__(self, store: RepoConfigStore) -> None:
        self._store = store

    def save(self, user_id: str, data: dict[str, Any]) -> RepoConfig:
        validate_repo_config(data)
        repo_id = str(data["repo_id"]).strip()
        if any(existing.repo_id == repo_id for existing in self._store.list(user_id)):
            raise RepoConfigError("Repository already configured", "DUPLICATE_REPO")
        config = RepoConfig(
            id=new_id("cfg"),
            user_id=user_id,
            repo_id=repo_id,
            full_name=str(data["full_name"]).strip(),
            selected_branches=_validate_branches(data["selected_branches"]),
            is_active=bool(data.get("is_active", True)),
            created_at=now_iso(),
        )
        self._store.put(config)
        return config

    def list(self, user_id: str, *, is_active: bool | None = None) -> list[RepoConfig]:
        configs = self._store.list(user_id)
        if is_active is not None:
            configs = [config for config in configs if config.is_active is is_active]
        return configs

    def get(self, user_id: str, config_id: str) -> RepoConfig:
        config = self._store.get(user_id, config_id)
        if config is None:
            raise RepoConfigError("Configuration not found", "NOT_FOUND")
        return config

    def select(self, user_id: str, config_ids: Iterable[str]) -> list[RepoConfig]:
        """Configs whose id is in ``config_ids``, in stored order."""
        wanted = set(config_ids)
        return [config for config in self._store.list(user_id) if config.id in wanted]

    def update(self, user_id: str, config_id: str, updates: dict[str, Any]) -> RepoConfig:
        config = self.get(user_id, config_id)
        for key in _IMMUTABLE_FIELDS:
            if key in updates:
                raise RepoConfigError(f"Cannot modify {key}", "IMMUTABLE_FIELD")
        if "selected_branches" in updates:
            config.selected_branches = _validate_branches(updates["selected_branches"])
        if "is_active" in updates:
            config.is_active = bool(updates["is_active"])
        if _MUTABLE_FIELDS & updates.keys():
            config.updated_at = now_iso()
        self._store.put(config)
        return config

    def delete(self, user_id: str, config_id: str) -> None:
        if not self._store.delete(user_id, config_id):
            raise RepoConfigError("Configuration not found", "NOT_FOUND")


def to_deploy_configs(
    configs: Sequence[RepoConfig],
    message: str | None = None,
) -> list[RepoDeployConfig]:
    return [
        RepoDeployConfig(
            owner=config.owner,
            repo=config.name,
            branches=tuple(config.selected_branches),
            message=message,
        )
        for config in configs
    ]
