import pytest
from fastapi.testclient import TestClient

from redeploy.deploy import orchestrator
from redeploy.github import client as github_client
from redeploy.main import app

USER = {"X-User-Id": "user-1"}
AUTH = {"Authorization": "Bearer gh-token", **USER}


@pytest.fixture
def github(fake_github, monkeypatch):
    real = github_client.build_async_client

    def build(token, *, transport=None):
        return real(token, transport=fake_github.transport)

    monkeypatch.setattr(orchestrator, "build_async_client", build)
    return fake_github


def _save_config(client: TestClient, repo_id: str, full_name: str, branches: list[str]) -> str:
    response = client.post(
        "/api/saved-repos",
        json={"repoId": repo_id, "fullName": full_name, "selectedBranches": branches},
        headers=USER,
    )
    assert response.status_code == 201
    return response.json()["id"]


def test_deploy_requires_bearer_token() -> None:
    client = TestClient(app)
    response = client.post("/api/deploy", json={"owner": "o", "repo": "r"}, headers=USER)

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_REQUIRED"


def test_deploy_requires_user_id() -> None:
    client = TestClient(app)
    response = client.post(
        "/api/deploy",
        json={"owner": "o", "repo": "r"},
        headers={"Authorization": "Bearer gh-token"},
    )

    assert response.status_code == 401
    assert response.json()["code"] == "USER_REQUIRED"


def test_deploy_without_target_returns_usage() -> None:
    client = TestClient(app)
    response = client.post("/api/deploy", json={}, headers=AUTH)

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "INVALID_REQUEST"
    assert "deploy-all" in body["usage"]


def test_deploy_all_without_configs_is_rejected() -> None:
    client = TestClient(app)
    response = client.post("/api/deploy", json={"action": "deploy-all"}, headers=AUTH)

    assert response.status_code == 400
    assert response.json()["code"] == "NO_REPOSITORIES"


def test_malformed_body_is_a_400() -> None:
    client = TestClient(app)
    response = client.post("/api/deploy", json={"repos": [{"owner": "o"}]}, headers=AUTH)

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_REQUEST"


def test_single_repo_deploy_defaults_to_main(github) -> None:
    github.add_branch("o/r", "main", new_sha="newcommit123")
    client = TestClient(app)

    response = client.post("/api/deploy", json={"owner": "o", "repo": "r"}, headers=AUTH)

    assert response.status_code == 200
    body = response.json()
    assert body["repo"] == "o/r"
    assert body["status"] == "success"
    assert body["branches"] == [
        {
            "branch": "main",
            "status": "success",
            "sha": "newcommit123",
            "timestamp": body["branches"][0]["timestamp"],
        }
    ]


def test_explicit_empty_branch_list_deploys_nothing(github) -> None:
    github.add_branch("o/r", "main")
    client = TestClient(app)

    response = client.post(
        "/api/deploy", json={"owner": "o", "repo": "r", "branches": []}, headers=AUTH
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "failed"
    assert body["summary"] == {"total": 0, "successful": 0, "failed": 0}
    assert github.requests == []
    assert github.created == []


def test_empty_branch_list_in_batch_is_kept(github) -> None:
    github.add_branch("o/a", "main")
    client = TestClient(app)

    response = client.post(
        "/api/deploy",
        json={"repos": [{"owner": "o", "repo": "a", "branches": []}]},
        headers=AUTH,
    )

    assert response.status_code == 200
    assert response.json()["results"][0]["summary"]["total"] == 0
    assert github.created == []


def test_partial_deploy_is_still_200(github) -> None:
    github.add_branch("o/r", "main")
    github.fail("o/r", "develop", "ref", status=404, message="Branch not found")
    client = TestClient(app)

    response = client.post(
        "/api/deploy",
        json={"owner": "o", "repo": "r", "branches": ["main", "develop"]},
        headers=AUTH,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "partial"
    assert body["branches"][1]["error"] == "Branch not found"


def test_direct_repos_batch(github) -> None:
    github.add_branch("o/a", "main")
    github.add_branch("o/b", "gh-pages")
    client = TestClient(app)

    response = client.post(
        "/api/deploy",
        json={
            "repos": [
                {"owner": "o", "repo": "a"},
                {"owner": "o", "repo": "b", "branches": ["gh-pages"]},
            ],
            "message": "deploy: content",
        },
        headers=AUTH,
    )

    assert response.status_code == 200
    body = response.json()
    assert [result["repo"] for result in body["results"]] == ["o/a", "o/b"]
    assert body["summary"] == {"total": 2, "successful": 2, "failed": 0, "partial": 0}
    assert [created["message"] for created in github.created] == ["deploy: content"] * 2


def test_deploy_all_uses_active_saved_configs_and_logs_history(github) -> None:
    github.add_branch("acme/site", "main")
    client = TestClient(app)
    _save_config(client, "1", "acme/site", ["main"])
    inactive = _save_config(client, "2", "acme/docs", ["main"])
    client.put(f"/api/saved-repos/{inactive}", json={"isActive": False}, headers=USER)

    response = client.post("/api/deploy", json={"action": "deploy-all"}, headers=AUTH)

    assert response.status_code == 200
    assert [result["repo"] for result in response.json()["results"]] == ["acme/site"]
    history = client.get("/api/history", headers=USER).json()
    assert history["total"] == 1
    assert history["deployments"][0]["repo"] == "acme/site"
    assert history["deployments"][0]["status"] == "success"


def test_deploy_selected_configs(github) -> None:
    github.add_branch("acme/docs", "main")
    client = TestClient(app)
    _save_config(client, "1", "acme/site", ["main"])
    docs = _save_config(client, "2", "acme/docs", ["main"])

    response = client.post(
        "/api/deploy",
        json={"action": "deploy-selected", "configIds": [docs]},
        headers=AUTH,
    )

    assert response.status_code == 200
    assert [result["repo"] for result in response.json()["results"]] == ["acme/docs"]


def test_deploy_selected_with_unknown_ids_is_rejected() -> None:
    client = TestClient(app)
    response = client.post(
        "/api/deploy",
        json={"action": "deploy-selected", "configIds": ["cfg_missing"]},
        headers=AUTH,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "NO_REPOSITORIES"


def test_deploy_through_queue_when_enabled(github, monkeypatch) -> None:
    monkeypatch.setenv("DEPLOY_USE_QUEUE", "1")
    github_client.get_settings.cache_clear()
    github.add_branch("o/a", "main")
    client = TestClient(app)

    response = client.post(
        "/api/deploy",
        json={"repos": [{"owner": "o", "repo": "a"}, {"owner": "o", "repo": "missing"}]},
        headers=AUTH,
    )

    assert response.status_code == 200
    assert response.json()["summary"] == {"total": 2, "successful": 1, "failed": 1, "partial": 0}


def test_deploy_is_rate_limited(github, monkeypatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_DEPLOYS_PER_MINUTE", "2")
    github_client.get_settings.cache_clear()
    github.add_branch("o/r", "main")
    client = TestClient(app)

    codes = [
        client.post("/api/deploy", json={"owner": "o", "repo": "r"}, headers=AUTH).status_code
        for _ in range(3)
    ]

    assert codes == [200, 200, 429]
