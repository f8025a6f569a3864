import json
import os
import re
from typing import Any

import httpx
import pytest

from redeploy.config import get_settings
from redeploy.routes.limits import limiter
from redeploy.services import get_repo_cache
from redeploy.store import reset_stores

_GIT_PATH = re.compile(
    r"^/repos/(?P<owner>[^/]+)/(?P<repo>[^/]+)/git/"
    r"(?:refs/heads/(?P<ref>.+)|commits/(?P<sha>[^/]+)|commits)$"
)


@pytest.fixture(autouse=True)
def test_env():
    os.environ["APP_ENV"] = "dev"
    os.environ["GITHUB_API_BASE_URL"] = "https://api.github.com"
    os.environ["RATE_LIMIT_DEPLOYS_PER_MINUTE"] = "1000"
    os.environ["DEPLOY_USE_QUEUE"] = "0"
    get_settings.cache_clear()
    get_repo_cache.cache_clear()
    reset_stores()
    limiter.reset()
    yield
    get_settings.cache_clear()
    get_repo_cache.cache_clear()
    reset_stores()


class FakeGitHub:
    """In-memory stand-in for the Git Data endpoints, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.heads: dict[tuple[str, str], str] = {}
        self.trees: dict[str, str] = {}
        self.next_shas: dict[tuple[str, str], str] = {}
        self.failures: dict[tuple[str, str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.created: list[dict[str, Any]] = []
        self._branch_by_sha: dict[tuple[str, str], str] = {}
        self._counter = 0

    def add_branch(
        self,
        full_name: str,
        branch: str,
        *,
        head: str | None = None,
        tree: str | None = None,
        new_sha: str | None = None,
    ) -> None:
        head = head or re.sub(r"[^A-Za-z0-9]", "-", f"{full_name}-{branch}-head")
        self.heads[(full_name, branch)] = head
        self.trees[head] = tree or f"{head}-tree"
        self._branch_by_sha[(full_name, head)] = branch
        if new_sha:
            self.next_shas[(full_name, branch)] = new_sha

    def fail(
        self,
        full_name: str,
        branch: str,
        step: str,
        *,
        status: int = 500,
        message: str | None = "boom",
    ) -> None:
        """Make ``step`` (ref, commit, create or update) fail for one branch."""
        body: Any = {"message": message} if message is not None else {}
        self.failures[(full_name, branch, step)] = (status, body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self, method: str | None = None) -> list[str]:
        return [
            request.url.path
            for request in self.requests
            if method is None or request.method == method
        ]

    def _failure(self, full_name: str, branch: str | None, step: str) -> httpx.Response | None:
        if branch is None:
            return None
        failure = self.failures.get((full_name, branch, step))
        if failure is None:
            return None
        status, body = failure
        return httpx.Response(status, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        match = _GIT_PATH.match(request.url.path)
        if match is None:
            return httpx.Response(404, json={"message": "Not Found"})
        full_name = f"{match.group('owner')}/{match.group('repo')}"
        ref = match.group("ref")

        if ref is not None and request.method == "GET":
            if (failure := self._failure(full_name, ref, "ref")) is not None:
                return failure
            head = self.heads.get((full_name, ref))
            if head is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json={"ref": f"refs/heads/{ref}", "object": {"sha": head}})

        if ref is not None and request.method == "PATCH":
            if (failure := self._failure(full_name, ref, "update")) is not None:
                return failure
            body = json.loads(request.content)
            assert body["force"] is False
            self.heads[(full_name, ref)] = body["sha"]
            return httpx.Response(200, json={"object": {"sha": body["sha"]}})

        sha = match.group("sha")
        if sha is not None:
            branch = self._branch_by_sha.get((full_name, sha))
            if (failure := self._failure(full_name, branch, "commit")) is not None:
                return failure
            return httpx.Response(200, json={"sha": sha, "tree": {"sha": self.trees[sha]}})

        body = json.loads(request.content)
        branch = self._branch_by_sha.get((full_name, body["parents"][0]))
        if (failure := self._failure(full_name, branch, "create")) is not None:
            return failure
        self._counter += 1
        new_sha = self.next_shas.get((full_name, branch or ""), f"new{self._counter}")
        self.created.append({"repo": full_name, "branch": branch, **body, "sha": new_sha})
        return httpx.Response(201, json={"sha": new_sha})


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()
