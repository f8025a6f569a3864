"""Click CLI group: serve and trigger commands."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from redeploy.config import get_settings, validate_settings_for_env
from redeploy.deploy.models import RepoDeployConfig, RepositoryStatus
from redeploy.deploy.orchestrator import trigger_deployment
from redeploy.errors import ConfigError
from redeploy.logging import configure_logging


@click.group()
def cli() -> None:
    """reDeploy CLI."""


@cli.command()
@click.option("--host", type=str, default=None, help="Bind host (default: BIND_HOST).")
@click.option("--port", type=int, default=None, help="Bind port (default: BIND_PORT).")
@click.option("--reload", is_flag=True, help="Reload on source changes.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "redeploy.main:app",
        host=host or settings.bind_host,
        port=port or settings.bind_port,
        reload=reload,
    )


@cli.command()
@click.argument("target")
@click.option(
    "-b",
    "--branch",
    "branches",
    multiple=True,
    help="Branch to rebuild; repeat for several (default: main).",
)
@click.option("--message", type=str, default=None, help="Commit message override.")
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    required=True,
    help="GitHub token with contents:write (default: $GITHUB_TOKEN).",
)
@click.option("--json", "json_output", is_flag=True, help="Print structured JSON result.")
def trigger(
    target: str,
    branches: tuple[str, ...],
    message: str | None,
    token: str,
    json_output: bool,
) -> None:
    """Push an empty commit to each branch of TARGET (owner/repo)."""
    settings = get_settings()
    try:
        validate_settings_for_env(settings)
    except ConfigError as exc:
        raise click.ClickException(exc.message) from exc
    configure_logging(settings.log_level, app_env=settings.app_env)
    try:
        config = RepoDeployConfig.from_full_name(target, branches or ("main",), message=message)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="TARGET") from exc

    result = asyncio.run(trigger_deployment(token, config))

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        for outcome in result.branches:
            if outcome.ok:
                click.echo(f"{result.repo}@{outcome.branch}: {outcome.sha}")
            else:
                click.echo(f"{result.repo}@{outcome.branch}: FAILED ({outcome.error})", err=True)
        click.echo(f"status: {result.status.value}")
    if result.status is not RepositoryStatus.SUCCESS:
        sys.exit(1)
