"""Empty-commit trigger over the GitHub Git Data API.

A rebuild is triggered by writing a new commit whose tree is the tree of the
current branch head:

1. resolve ``refs/heads/<branch>`` to the head commit SHA
2. read that commit to get its tree SHA
3. create a commit with the same tree and the head as its only parent
4. move the branch ref to the new commit (``force: false``)

Each step depends on the previous one, so the calls are strictly sequential.
Every failure leaves this module as a ``DeploymentError``; nothing else escapes.
If step 3 succeeds and step 4 fails, the created commit stays orphaned and the
branch is untouched.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx

from redeploy.deploy.models import CommitResult
from redeploy.errors import DeploymentError
from redeploy.github.client import build_async_client, error_message
from redeploy.timeutil import now_iso

logger = logging.getLogger(__name__)

COMMIT_MESSAGE_PREFIX = "chore: trigger rebuild"


def generate_commit_message(now: datetime | None = None) -> str:
    moment = now or datetime.now(UTC)
    return f"{COMMIT_MESSAGE_PREFIX} [{moment.strftime('%Y-%m-%d %H:%M:%S')}]"


async def _call(
    client: httpx.AsyncClient,
    method: str,
    path: str,
    *,
    code: str,
    fallback_message: str,
    body: dict[str, Any] | None = None,
) -> dict[str, Any]:
    try:
        response = await client.request(method, path, json=body)
    except httpx.HTTPError as exc:
        logger.warning("GitHub %s %s transport failure: %s", method, path, exc)
        raise DeploymentError(
            f"{fallback_message}: {exc}",
            code="NETWORK_ERROR",
            status=502,
        ) from exc
    if response.is_error:
        message = error_message(response) or fallback_message
        logger.warning(
            "GitHub %s %s failed (code=%s status=%d): %s",
            method,
            path,
            code,
            response.status_code,
            message,
        )
        raise DeploymentError(message, code=code, status=response.status_code)
    try:
        payload = response.json()
    except ValueError as exc:
        raise DeploymentError(
            f"{fallback_message}: response is not JSON",
            code="INVALID_RESPONSE",
            status=502,
        ) from exc
    if not isinstance(payload, dict):
        raise DeploymentError(
            f"{fallback_message}: response is not an object",
            code="INVALID_RESPONSE",
            status=502,
        )
    return payload


def _sha_at(payload: dict[str, Any], *keys: str, step: str) -> str:
    node: Any = payload
    for key in keys:
        node = node.get(key) if isinstance(node, dict) else None
    if not isinstance(node, str) or not node:
        raise DeploymentError(
            f"{step}: missing {'.'.join(keys)} in response",
            code="INVALID_RESPONSE",
            status=502,
        )
    return node


async def _create_with_client(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    branch: str,
    message: str,
) -> CommitResult:
    # Branch names may hold "#" or "?", which httpx would read as URL syntax.
    repo_path = f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"
    ref_path = f"{repo_path}/git/refs/heads/{quote(branch, safe='/')}"

    ref = await _call(
        client,
        "GET",
        ref_path,
        code="REF_NOT_FOUND",
        fallback_message="Failed to get branch reference",
    )
    head_sha = _sha_at(ref, "object", "sha", step="Failed to get branch reference")

    head = await _call(
        client,
        "GET",
        f"{repo_path}/git/commits/{head_sha}",
        code="COMMIT_NOT_FOUND",
        fallback_message="Failed to get commit data",
    )
    tree_sha = _sha_at(head, "tree", "sha", step="Failed to get commit data")

    created = await _call(
        client,
        "POST",
        f"{repo_path}/git/commits",
        code="COMMIT_CREATE_FAILED",
        fallback_message="Failed to create commit",
        body={"message": message, "tree": tree_sha, "parents": [head_sha]},
    )
    new_sha = _sha_at(created, "sha", step="Failed to create commit")

    await _call(
        client,
        "PATCH",
        ref_path,
        code="REF_UPDATE_FAILED",
        fallback_message="Failed to update branch reference",
        body={"sha": new_sha, "force": False},
    )

    logger.debug("Created empty commit %s on %s/%s@%s", new_sha, owner, repo, branch)
    return CommitResult(sha=new_sha, branch=branch, message=message, timestamp=now_iso())


async def create_empty_commit(
    token: str,
    owner: str,
    repo: str,
    branch: str,
    *,
    message: str | None = None,
    client: httpx.AsyncClient | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CommitResult:
    """Create one empty commit on ``owner/repo@branch`` and advance the branch to it.

    Args:
        token: GitHub bearer credential; not validated locally.
        message: Commit message. Defaults to ``generate_commit_message()``.
        client: Reuse an open client (it must already carry the credential).
        transport: httpx transport for a freshly built client; ignored with ``client``.

    Raises:
        DeploymentError: any step failed; ``code`` names the step.
    """
    effective_message = message or generate_commit_message()
    if client is not None:
        return await _create_with_client(client, owner, repo, branch, effective_message)
    async with build_async_client(token, transport=transport) as own_client:
        return await _create_with_client(own_client, owner, repo, branch, effective_message)
