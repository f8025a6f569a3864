"""GitHub REST client for repository and branch discovery."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

from redeploy.config import get_settings
from redeploy.errors import GitHubApiError

logger = logging.getLogger(__name__)

_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="([^"]+)"')
_PAGE_RE = re.compile(r"[?&]page=(\d+)")


def github_headers(token: str) -> dict[str, str]:
    settings = get_settings()
    return {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": settings.github_api_version,
        "User-Agent": settings.github_user_agent,
    }


def build_async_client(
    token: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Return an AsyncClient bound to the configured API base, credential and timeout."""
    settings = get_settings()
    return httpx.AsyncClient(
        base_url=settings.github_api_base_url.rstrip("/"),
        headers=github_headers(token),
        timeout=float(settings.github_timeout_seconds),
        transport=transport,
    )


def error_payload(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def error_message(response: httpx.Response) -> str | None:
    """Pull the ``message`` field out of a GitHub error body, if there is one."""
    message = error_payload(response).get("message")
    if isinstance(message, str) and message:
        return message
    return None


@dataclass(slots=True)
class Pagination:
    has_next: bool
    next_page: int | None
    last_page: int | None

    def to_dict(self) -> dict[str, object]:
        return {"has_next": self.has_next, "next_page": self.next_page, "last_page": self.last_page}


def parse_link_header(link_header: str | None) -> Pagination:
    if not link_header:
        return Pagination(has_next=False, next_page=None, last_page=None)
    links: dict[str, int] = {}
    for part in link_header.split(","):
        match = _LINK_RE.search(part)
        if not match:
            continue
        url, rel = match.group(1), match.group(2)
        page = _PAGE_RE.search(url)
        if page:
            links[rel] = int(page.group(1))
    return Pagination(
        has_next="next" in links,
        next_page=links.get("next"),
        last_page=links.get("last"),
    )


def summarize_repo(repo: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": repo.get("id"),
        "name": repo.get("name"),
        "full_name": repo.get("full_name"),
        "description": repo.get("description"),
        "default_branch": repo.get("default_branch"),
        "private": bool(repo.get("private", False)),
        "url": repo.get("html_url"),
        "updated_at": repo.get("updated_at"),
        "pushed_at": repo.get("pushed_at"),
        "language": repo.get("language"),
        "stars": int(repo.get("stargazers_count", 0) or 0),
    }


class GitHubClient:
    """Read-only GitHub calls used to pick repositories and branches to deploy."""

    def __init__(
        self,
        token: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._transport = transport

    async def _get(self, path: str, params: dict[str, object] | None = None) -> httpx.Response:
        async with build_async_client(self._token, transport=self._transport) as client:
            try:
                response = await client.get(path, params=params)
            except httpx.HTTPError as exc:
                raise GitHubApiError(f"GitHub request failed: {exc}", status=502) from exc
        if response.is_error:
            message = error_message(response) or f"GitHub API returned {response.status_code}"
            raise GitHubApiError(
                message,
                status=response.status_code,
                details=error_payload(response),
            )
        return response

    async def validate_token(self) -> dict[str, object]:
        try:
            response = await self._get("/user")
        except GitHubApiError as exc:
            return {"valid": False, "error": exc.message}
        payload = response.json()
        return {"valid": True, "login": payload.get("login")}

    async def fetch_user_repos(
        self,
        *,
        page: int = 1,
        per_page: int = 30,
        repo_type: str = "all",
        sort: str = "updated",
        direction: str = "desc",
    ) -> tuple[list[dict[str, Any]], Pagination]:
        response = await self._get(
            "/user/repos",
            params={
                "page": page,
                "per_page": max(1, min(per_page, 100)),
                "type": repo_type,
                "sort": sort,
                "direction": direction,
            },
        )
        payload = response.json()
        if not isinstance(payload, list):
            raise GitHubApiError("repository list payload is not a list", status=502)
        repos = [item for item in payload if isinstance(item, dict)]
        return repos, parse_link_header(response.headers.get("link"))

    async def fetch_all_user_repos(self, *, max_pages: int | None = None) -> list[dict[str, Any]]:
        limit = max_pages or get_settings().repo_list_max_pages
        repos: list[dict[str, Any]] = []
        page = 1
        while page <= limit:
            chunk, pagination = await self.fetch_user_repos(page=page, per_page=100)
            repos.extend(chunk)
            if not pagination.has_next:
                break
            page += 1
        logger.info("Fetched %d repositories across %d page(s)", len(repos), min(page, limit))
        return repos

    async def fetch_repo_branches(self, owner: str, repo: str) -> list[dict[str, Any]]:
        response = await self._get(f"/repos/{owner}/{repo}/branches")
        payload = response.json()
        if not isinstance(payload, list):
            raise GitHubApiError("branch list payload is not a list", status=502)
        return [item for item in payload if isinstance(item, dict)]

    async def get_rate_limit(self) -> dict[str, Any]:
        response = await self._get("/rate_limit")
        payload = response.json()
        return payload if isinstance(payload, dict) else {}
