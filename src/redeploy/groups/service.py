"""Deployment groups: named presets of saved repository configurations."""

from __future__ import annotations

from typing import Any

from redeploy.errors import GroupError
from redeploy.ids import new_id
from redeploy.store.interfaces import GroupStore
from redeploy.store.records import DeploymentGroup
from redeploy.timeutil import now_iso

DEFAULT_COLOR = "#3B82F6"


class GroupService:
    def __init__(self, store: GroupStore) -> None:
        self._store = store

    def _name_taken(self, user_id: str, name: str, *, exclude_id: str | None = None) -> bool:
        lowered = name.lower()
        return any(
            group.name.lower() == lowered and group.id != exclude_id
            for group in self._store.list(user_id)
        )

    def create(self, user_id: str, data: dict[str, Any]) -> DeploymentGroup:
        name = str(data.get("name") or "").strip()
        if not name:
            raise GroupError("Group name is required", "MISSING_NAME")
        if self._name_taken(user_id, name):
            raise GroupError("Group with this name already exists", "DUPLICATE_NAME")
        group = DeploymentGroup(
            id=new_id("grp"),
            user_id=user_id,
            name=name,
            description=str(data.get("description") or ""),
            repo_ids=list(data.get("repo_ids") or []),
            color=str(data.get("color") or DEFAULT_COLOR),
            created_at=now_iso(),
        )
        self._store.put(group)
        return group

    def list(self, user_id: str) -> list[DeploymentGroup]:
        return self._store.list(user_id)

    def find(self, user_id: str, group_id: str) -> DeploymentGroup | None:
        return self._store.get(user_id, group_id)

    def get(self, user_id: str, group_id: str) -> DeploymentGroup:
        group = self._store.get(user_id, group_id)
        if group is None:
            raise GroupError("Group not found", "NOT_FOUND")
        return group

    def update(self, user_id: str, group_id: str, updates: dict[str, Any]) -> DeploymentGroup:
        group = self.get(user_id, group_id)
        name = str(updates.get("name") or "").strip()
        if name:
            if self._name_taken(user_id, name, exclude_id=group_id):
                raise GroupError("Group with this name already exists", "DUPLICATE_NAME")
            group.name = name
        if updates.get("description") is not None:
            group.description = str(updates["description"])
        if updates.get("color"):
            group.color = str(updates["color"])
        if updates.get("repo_ids") is not None:
            group.repo_ids = list(updates["repo_ids"])
        group.updated_at = now_iso()
        self._store.put(group)
        return group

    def delete(self, user_id: str, group_id: str) -> None:
        if not self._store.delete(user_id, group_id):
            raise GroupError("Group not found", "NOT_FOUND")

    def add_repo(self, user_id: str, group_id: str, repo_id: str) -> DeploymentGroup:
        group = self.get(user_id, group_id)
        if repo_id not in group.repo_ids:
            group.repo_ids.append(repo_id)
            group.updated_at = now_iso()
            self._store.put(group)
        return group

    def remove_repo(self, user_id: str, group_id: str, repo_id: str) -> DeploymentGroup:
        group = self.get(user_id, group_id)
        group.repo_ids = [existing for existing in group.repo_ids if existing != repo_id]
        group.updated_at = now_iso()
        self._store.put(group)
        return group
