import pytest
from fastapi.testclient import TestClient

from redeploy.deploy import orchestrator
from redeploy.github import client as github_client
from redeploy.main import app

USER = {"X-User-Id": "user-1"}


@pytest.fixture
def github(fake_github, monkeypatch):
    real = github_client.build_async_client

    def build(token, *, transport=None):
        return real(token, transport=fake_github.transport)

    monkeypatch.setattr(orchestrator, "build_async_client", build)
    return fake_github


def _create_hook(client: TestClient, **body) -> dict:
    response = client.post("/api/webhooks", json={"name": "ci", **body}, headers=USER)
    assert response.status_code == 201
    return response.json()


def test_create_reveals_token_once() -> None:
    client = TestClient(app)
    hook = _create_hook(client)

    assert len(hook["token"]) == 64
    assert hook["webhook_url"] == f"/api/webhooks/trigger?token={hook['token']}"
    listed = client.get("/api/webhooks", headers=USER).json()["webhooks"]
    assert listed[0]["token"] == f"{hook['token'][:8]}...{hook['token'][-8:]}"


def test_delete_webhook() -> None:
    client = TestClient(app)
    hook = _create_hook(client)

    assert client.delete(f"/api/webhooks/{hook['id']}", headers=USER).status_code == 204
    assert client.delete(f"/api/webhooks/{hook['id']}", headers=USER).status_code == 404


def test_trigger_needs_a_valid_token() -> None:
    client = TestClient(app)

    missing = client.post("/api/webhooks/trigger", headers={"X-GitHub-Token": "gh"})
    wrong = client.post(
        "/api/webhooks/trigger", headers={"X-Webhook-Token": "nope", "X-GitHub-Token": "gh"}
    )

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert wrong.json()["code"] == "INVALID_TOKEN"


def test_trigger_needs_a_github_token() -> None:
    client = TestClient(app)
    hook = _create_hook(client)

    response = client.post(f"/api/webhooks/trigger?token={hook['token']}")

    assert response.status_code == 400
    assert response.json()["code"] == "GITHUB_TOKEN_REQUIRED"


def test_trigger_without_targets() -> None:
    client = TestClient(app)
    hook = _create_hook(client)

    response = client.post(
        "/api/webhooks/trigger",
        headers={"X-Webhook-Token": hook["token"], "X-GitHub-Token": "gh"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "NO_REPOSITORIES"


def test_trigger_deploys_targets_and_records_usage(github) -> None:
    github.add_branch("acme/site", "main")
    client = TestClient(app)
    client.post(
        "/api/saved-repos",
        json={"repoId": "1", "fullName": "acme/site", "selectedBranches": ["main"]},
        headers=USER,
    )
    hook = _create_hook(client)

    response = client.post(
        "/api/webhooks/trigger",
        headers={"X-Webhook-Token": hook["token"], "X-GitHub-Token": "gh"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Deployment triggered"
    assert body["webhook"] == "ci"
    assert body["summary"]["successful"] == 1
    assert github.requests[0].headers["Authorization"] == "Bearer gh"

    listed = client.get("/api/webhooks", headers=USER).json()["webhooks"]
    assert listed[0]["usage_count"] == 1
    assert client.get("/api/history", headers=USER).json()["total"] == 1
