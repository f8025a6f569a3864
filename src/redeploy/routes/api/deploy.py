"""Deployment trigger route."""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import AliasChoices, BaseModel, Field

from redeploy.auth.dependencies import require_github_token, require_user_id
from redeploy.deploy.models import RepoDeployConfig, RepositoryDeploymentResult
from redeploy.deploy.orchestrator import trigger_batch_deployment, trigger_deployment
from redeploy.deploy.queue import queue_from_settings
from redeploy.errors import RequestError
from redeploy.history.service import HistoryService, log_deployment_results
from redeploy.logging import log_context
from redeploy.repo_configs.service import RepoConfigService, to_deploy_configs
from redeploy.routes.limits import deploy_rate_limit, limiter
from redeploy.services import get_history_service, get_repo_config_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["api-deploy"])

DEFAULT_BRANCH = "main"

USAGE = {
    "deploy-all": {"action": "deploy-all"},
    "deploy-selected": {"action": "deploy-selected", "configIds": ["id1", "id2"]},
    "direct-repos": {"repos": [{"owner": "user", "repo": "name", "branches": ["main"]}]},
    "single-repo": {"owner": "user", "repo": "name", "branches": ["main"]},
}


class RepoTarget(BaseModel):
    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    branches: list[str] | None = None


class DeployBody(BaseModel):
    action: str | None = None
    config_ids: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("configIds", "config_ids")
    )
    repos: list[RepoTarget] | None = None
    owner: str | None = None
    repo: str | None = None
    branches: list[str] | None = None
    message: str | None = None


def _branches_or_default(branches: list[str] | None) -> tuple[str, ...]:
    # Only an omitted list defaults; an explicit [] deploys nothing.
    return (DEFAULT_BRANCH,) if branches is None else tuple(branches)


def _resolve_batch(
    body: DeployBody,
    user_id: str,
    repo_configs: RepoConfigService,
) -> list[RepoDeployConfig] | None:
    if body.action == "deploy-all":
        configs = repo_configs.list(user_id, is_active=True)
        if not configs:
            raise RequestError("No active repositories configured", code="NO_REPOSITORIES")
        return to_deploy_configs(configs, body.message)

    if body.action == "deploy-selected" and body.config_ids:
        configs = repo_configs.select(user_id, body.config_ids)
        if not configs:
            raise RequestError("No matching configurations found", code="NO_REPOSITORIES")
        return to_deploy_configs(configs, body.message)

    if body.repos:
        return [
            RepoDeployConfig(
                owner=target.owner,
                repo=target.repo,
                branches=_branches_or_default(target.branches),
                message=body.message,
            )
            for target in body.repos
        ]
    return None


@router.post("/deploy")
@limiter.limit(deploy_rate_limit)
async def deploy(
    request: Request,
    body: DeployBody,
    token: str = Depends(require_github_token),  # noqa: B008
    user_id: str = Depends(require_user_id),  # noqa: B008
    repo_configs: RepoConfigService = Depends(get_repo_config_service),  # noqa: B008
    history: HistoryService = Depends(get_history_service),  # noqa: B008
) -> dict[str, object]:
    """Trigger rebuilds. Per-repository failures are reported in the body, not the status."""
    del request
    with log_context(user_id=user_id, action=body.action or "direct"):
        batch_configs = _resolve_batch(body, user_id, repo_configs)
        if batch_configs is not None:
            batch = await trigger_batch_deployment(
                token, batch_configs, queue=queue_from_settings()
            )
            log_deployment_results(history, user_id, batch.results, commit_message=body.message)
            return batch.to_dict()

        if body.owner and body.repo:
            result: RepositoryDeploymentResult = await trigger_deployment(
                token,
                RepoDeployConfig(
                    owner=body.owner,
                    repo=body.repo,
                    branches=_branches_or_default(body.branches),
                    message=body.message,
                ),
            )
            log_deployment_results(history, user_id, [result], commit_message=body.message)
            return result.to_dict()

        logger.info("Rejected deploy request without a target")
        raise RequestError("Invalid request", code="INVALID_REQUEST", extra={"usage": USAGE})
