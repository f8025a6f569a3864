"""Empty-commit deployment triggering."""

from redeploy.deploy.commit import create_empty_commit, generate_commit_message
from redeploy.deploy.models import (
    BatchDeploymentResult,
    BranchOutcome,
    CommitResult,
    RepoDeployConfig,
    RepositoryDeploymentResult,
)
from redeploy.deploy.orchestrator import trigger_batch_deployment, trigger_deployment
from redeploy.deploy.queue import DeploymentQueue, queue_from_settings

__all__ = [
    "BatchDeploymentResult",
    "BranchOutcome",
    "CommitResult",
    "DeploymentQueue",
    "RepoDeployConfig",
    "RepositoryDeploymentResult",
    "create_empty_commit",
    "generate_commit_message",
    "queue_from_settings",
    "trigger_batch_deployment",
    "trigger_deployment",
]
