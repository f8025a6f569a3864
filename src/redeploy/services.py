"""Service providers bound to the process-wide stores."""

from functools import lru_cache

from redeploy.config import get_settings
from redeploy.github.cache import TTLCache
from redeploy.groups.service import GroupService
from redeploy.history.service import HistoryService
from redeploy.repo_configs.service import RepoConfigService
from redeploy.store import get_stores
from redeploy.webhooks.service import WebhookService


def get_repo_config_service() -> RepoConfigService:
    return RepoConfigService(get_stores().repo_configs)


def get_group_service() -> GroupService:
    return GroupService(get_stores().groups)


def get_history_service() -> HistoryService:
    return HistoryService(get_stores().history)


def get_webhook_service() -> WebhookService:
    return WebhookService(
        get_stores().webhooks,
        get_repo_config_service(),
        get_group_service(),
    )


@lru_cache(maxsize=1)
def get_repo_cache() -> TTLCache:
    return TTLCache(get_settings().repo_cache_ttl_seconds)
