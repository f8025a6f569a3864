"""GitHub repository and branch discovery routes."""

import hashlib

from fastapi import APIRouter, Depends, Query

from redeploy.auth.dependencies import require_github_token
from redeploy.github.cache import TTLCache
from redeploy.github.client import GitHubClient, summarize_repo
from redeploy.services import get_repo_cache

router = APIRouter(prefix="/repos", tags=["api-repos"])


def _cache_key(kind: str, token: str, suffix: str = "") -> str:
    # Listings are per credential; only a digest of the token is kept.
    digest = hashlib.sha256(token.encode()).hexdigest()[:16]
    return f"{kind}:{digest}:{suffix}"


def _matches(repo: dict[str, object], needle: str) -> bool:
    for key in ("name", "full_name", "description"):
        value = repo.get(key)
        if isinstance(value, str) and needle in value.lower():
            return True
    return False


@router.get("")
async def list_repos(
    search: str = "",
    refresh: bool = False,
    token: str = Depends(require_github_token),  # noqa: B008
    cache: TTLCache = Depends(get_repo_cache),  # noqa: B008
) -> dict[str, object]:
    key = _cache_key("repos", token)
    repos = None if refresh else cache.get(key)
    cached = repos is not None
    if repos is None:
        repos = await GitHubClient(token).fetch_all_user_repos()
        cache.set(key, repos)

    needle = search.strip().lower()
    filtered = [repo for repo in repos if _matches(repo, needle)] if needle else repos
    return {
        "repos": [summarize_repo(repo) for repo in filtered],
        "total": len(repos),
        "filtered": len(filtered),
        "cached": cached,
    }


@router.get("/{owner}/{repo}/branches")
async def list_branches(
    owner: str,
    repo: str,
    refresh: bool = Query(default=False),
    token: str = Depends(require_github_token),  # noqa: B008
    cache: TTLCache = Depends(get_repo_cache),  # noqa: B008
) -> dict[str, object]:
    key = _cache_key("branches", token, f"{owner}/{repo}")
    branches = None if refresh else cache.get(key)
    cached = branches is not None
    if branches is None:
        branches = await GitHubClient(token).fetch_repo_branches(owner, repo)
        cache.set(key, branches)
    return {"branches": branches, "cached": cached}
