"""Webhook management and the token-authenticated trigger endpoint."""

import logging

from fastapi import APIRouter, Depends, Header, Query, Request, Response
from pydantic import AliasChoices, BaseModel, Field

from redeploy.auth.dependencies import require_user_id
from redeploy.deploy.orchestrator import trigger_batch_deployment
from redeploy.deploy.queue import queue_from_settings
from redeploy.errors import RequestError
from redeploy.history.service import HistoryService, log_deployment_results
from redeploy.logging import log_context
from redeploy.routes.limits import deploy_rate_limit, limiter
from redeploy.services import get_history_service, get_webhook_service
from redeploy.webhooks.service import WebhookService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["api-webhooks"])

TRIGGER_PATH = "/api/webhooks/trigger"


class WebhookBody(BaseModel):
    name: str | None = None
    target_type: str | None = Field(
        default=None, validation_alias=AliasChoices("targetType", "target_type")
    )
    target_id: str | None = Field(
        default=None, validation_alias=AliasChoices("targetId", "target_id")
    )
    repo_ids: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("repoIds", "repo_ids")
    )


@router.get("")
def list_webhooks(
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: WebhookService = Depends(get_webhook_service),  # noqa: B008
) -> dict[str, object]:
    return {"webhooks": [hook.to_dict() for hook in service.list(user_id)]}


@router.post("", status_code=201)
def create_webhook(
    body: WebhookBody,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: WebhookService = Depends(get_webhook_service),  # noqa: B008
) -> dict[str, object]:
    webhook = service.create(user_id, body.model_dump())
    payload = webhook.to_dict(reveal_token=True)
    payload["webhook_url"] = f"{TRIGGER_PATH}?token={webhook.token}"
    return payload


@router.delete("/{webhook_id}", status_code=204)
def delete_webhook(
    webhook_id: str,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: WebhookService = Depends(get_webhook_service),  # noqa: B008
) -> Response:
    service.delete(user_id, webhook_id)
    return Response(status_code=204)


@router.post("/trigger")
@limiter.limit(deploy_rate_limit)
async def trigger_webhook(
    request: Request,
    token: str | None = Query(default=None),
    x_webhook_token: str | None = Header(default=None),
    x_github_token: str | None = Header(default=None),
    service: WebhookService = Depends(get_webhook_service),  # noqa: B008
    history: HistoryService = Depends(get_history_service),  # noqa: B008
) -> dict[str, object]:
    """Deploy the webhook's targets with the caller-supplied GitHub credential."""
    del request
    webhook_token = x_webhook_token or token
    if not webhook_token:
        raise RequestError("Webhook token required", code="AUTH_REQUIRED", status=401)
    with log_context(webhook_token=webhook_token):
        webhook = service.find_by_token(webhook_token)
        if webhook is None:
            logger.warning("Rejected webhook trigger with unknown token")
            raise RequestError("Invalid webhook token", code="INVALID_TOKEN", status=401)
    if not x_github_token:
        raise RequestError(
            "GitHub token required in X-GitHub-Token header", code="GITHUB_TOKEN_REQUIRED"
        )

    configs = service.resolve_targets(webhook)
    if not configs:
        raise RequestError("No repositories to deploy", code="NO_REPOSITORIES")

    with log_context(user_id=webhook.user_id, webhook_id=webhook.id, webhook_token=webhook_token):
        batch = await trigger_batch_deployment(
            x_github_token, configs, queue=queue_from_settings()
        )
        service.record_usage(webhook)
        log_deployment_results(history, webhook.user_id, batch.results)
        logger.info("Webhook %s deployed %d repositories", webhook.id, len(configs))
    return {"message": "Deployment triggered", "webhook": webhook.name, **batch.to_dict()}
