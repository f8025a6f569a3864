"""Incoming webhooks that trigger batch deployments for a user."""

from __future__ import annotations

import secrets
from typing import Any

from redeploy.deploy.models import RepoDeployConfig
from redeploy.errors import WebhookError
from redeploy.groups.service import GroupService
from redeploy.ids import new_id
from redeploy.repo_configs.service import RepoConfigService, to_deploy_configs
from redeploy.store.interfaces import WebhookStore
from redeploy.store.records import RepoConfig, Webhook, WebhookTarget
from redeploy.timeutil import now_iso


def generate_webhook_token() -> str:
    return secrets.token_hex(32)


class WebhookService:
    def __init__(
        self,
        store: WebhookStore,
        repo_configs: RepoConfigService,
        groups: GroupService,
    ) -> None:
        self._store = store
        self._repo_configs = repo_configs
        self._groups = groups

    def create(self, user_id: str, data: dict[str, Any]) -> Webhook:
        try:
            target = WebhookTarget(str(data.get("target_type") or WebhookTarget.ALL.value))
        except ValueError as exc:
            raise WebhookError(
                "target_type must be one of: all, group, repos", "INVALID_TARGET"
            ) from exc
        target_id = data.get("target_id")
        if target is WebhookTarget.GROUP and not target_id:
            raise WebhookError("target_id is required for group webhooks", "INVALID_TARGET")
        webhook = Webhook(
            id=new_id("wh"),
            user_id=user_id,
            name=str(data.get("name") or "Unnamed Webhook"),
            token=generate_webhook_token(),
            target_type=target,
            target_id=str(target_id) if target_id else None,
            repo_ids=list(data.get("repo_ids") or []),
            created_at=now_iso(),
        )
        self._store.put(webhook)
        return webhook

    def list(self, user_id: str) -> list[Webhook]:
        return self._store.list(user_id)

    def delete(self, user_id: str, webhook_id: str) -> None:
        if not self._store.delete(user_id, webhook_id):
            raise WebhookError("Webhook not found", "NOT_FOUND")

    def find_by_token(self, token: str) -> Webhook | None:
        if not token:
            return None
        return self._store.find_by_token(token)

    def record_usage(self, webhook: Webhook) -> None:
        webhook.last_used_at = now_iso()
        webhook.usage_count += 1
        self._store.put(webhook)

    def resolve_targets(self, webhook: Webhook) -> list[RepoDeployConfig]:
        """Repositories this webhook deploys; empty when nothing matches."""
        configs: list[RepoConfig]
        if webhook.target_type is WebhookTarget.ALL:
            configs = self._repo_configs.list(webhook.user_id, is_active=True)
        elif webhook.target_type is WebhookTarget.GROUP:
            group = self._groups.find(webhook.user_id, webhook.target_id or "")
            if group is None:
                return []
            configs = self._repo_configs.select(webhook.user_id, group.repo_ids)
        else:
            configs = self._repo_configs.select(webhook.user_id, webhook.repo_ids)
        return to_deploy_configs(configs)
