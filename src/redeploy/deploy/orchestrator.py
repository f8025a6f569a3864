"""Deployment orchestration across branches and repositories."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from itertools import islice
from typing import TypeVar

import httpx

from redeploy.config import get_settings
from redeploy.deploy.commit import create_empty_commit
from redeploy.deploy.models import (
    BatchDeploymentResult,
    BranchOutcome,
    RepoDeployConfig,
    RepositoryDeploymentResult,
)
from redeploy.deploy.queue import DeploymentQueue
from redeploy.errors import DeploymentError
from redeploy.github.client import build_async_client

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _chunked(items: Iterable[T], size: int) -> Iterator[list[T]]:
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk


async def trigger_deployment(
    token: str,
    config: RepoDeployConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RepositoryDeploymentResult:
    """Create one empty commit per branch, in order, and aggregate the outcomes.

    Branches run one after another. A failed branch is recorded and the next one
    still runs. This never raises for upstream failures: each one becomes a
    failed ``BranchOutcome``.
    """
    outcomes: list[BranchOutcome] = []
    async with build_async_client(token, transport=transport) as client:
        for branch in config.branches:
            try:
                commit = await create_empty_commit(
                    token,
                    config.owner,
                    config.repo,
                    branch,
                    message=config.message,
                    client=client,
                )
            except DeploymentError as exc:
                outcomes.append(BranchOutcome.failed(branch, exc.message, exc.code))
                continue
            outcomes.append(BranchOutcome.succeeded(commit))

    result = RepositoryDeploymentResult(repo=config.full_name, branches=tuple(outcomes))
    logger.info(
        "Deployment %s finished: %s (%d/%d branches)",
        result.repo,
        result.status.value,
        result.successful,
        len(result.branches),
    )
    return result


async def trigger_batch_deployment(
    token: str,
    configs: Iterable[RepoDeployConfig],
    *,
    concurrency: int | None = None,
    queue: DeploymentQueue | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BatchDeploymentResult:
    """Deploy many repositories and summarize.

    Without a queue, repositories run in consecutive groups of ``concurrency``:
    everything in a group runs concurrently and the next group starts only after
    every deployment in the current one has settled. With a queue, each
    repository becomes one queued task, run one at a time under the queue's
    rate limit. Either way ``results`` follows input order.
    """
    size = concurrency if concurrency is not None else get_settings().deploy_concurrency
    if size < 1:
        raise ValueError("concurrency must be >= 1")

    results: list[RepositoryDeploymentResult] = []
    if queue is not None:
        if len(queue):
            raise ValueError("deployment queue already holds unprocessed tasks")
        pending = list(configs)
        for config in pending:
            queue.add(lambda config=config: trigger_deployment(token, config, transport=transport))
        for config, outcome in zip(pending, await queue.process(), strict=True):
            if outcome.ok:
                results.append(outcome.result)
            else:
                # trigger_deployment only fails on programming errors; keep the batch shape.
                results.append(
                    RepositoryDeploymentResult(
                        repo=config.full_name,
                        branches=tuple(
                            BranchOutcome.failed(branch, outcome.error or "deployment failed")
                            for branch in config.branches
                        ),
                    )
                )
    else:
        for chunk in _chunked(configs, size):
            settled = await asyncio.gather(
                *(trigger_deployment(token, config, transport=transport) for config in chunk)
            )
            results.extend(settled)

    batch = BatchDeploymentResult(results=tuple(results))
    summary = batch.summary()
    logger.info(
        "Batch deployment finished: total=%d successful=%d partial=%d failed=%d",
        summary["total"],
        summary["successful"],
        summary["partial"],
        summary["failed"],
    )
    return batch
