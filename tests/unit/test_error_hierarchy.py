"""Tests for error hierarchy."""

from redeploy.errors import (
    ConfigError,
    DeploymentError,
    GitHubApiError,
    GroupError,
    RedeployError,
    RepoConfigError,
    RequestError,
    WebhookError,
)


def test_hierarchy() -> None:
    for cls in (
        ConfigError,
        DeploymentError,
        GitHubApiError,
        GroupError,
        RepoConfigError,
        RequestError,
        WebhookError,
    ):
        assert issubclass(cls, RedeployError)


def test_github_error_details_reach_the_payload() -> None:
    err = GitHubApiError("Bad credentials", status=401, details={"message": "Bad credentials"})
    assert err.to_payload() == {
        "error": "Bad credentials",
        "code": "GITHUB_API_ERROR",
        "details": {"message": "Bad credentials"},
    }
    assert GitHubApiError("timeout", status=502).to_payload() == {
        "error": "timeout",
        "code": "GITHUB_API_ERROR",
    }


def test_status_follows_code() -> None:
    assert RepoConfigError("x", "DUPLICATE_REPO").status == 409
    assert RepoConfigError("x", "NOT_FOUND").status == 404
    assert RepoConfigError("x", "INVALID_BRANCHES").status == 400
    assert GroupError("x", "DUPLICATE_NAME").status == 409
    assert WebhookError("x", "NOT_FOUND").status == 404
    assert RequestError("x").status == 400


def test_payload_includes_extra_fields() -> None:
    err = RequestError("Invalid request", extra={"usage": {"a": 1}})
    assert err.to_payload() == {
        "error": "Invalid request",
        "code": "INVALID_REQUEST",
        "usage": {"a": 1},
    }


def test_catch_as_redeploy_error() -> None:
    try:
        raise DeploymentError("Branch not found", code="REF_NOT_FOUND", status=404)
    except RedeployError as exc:
        assert str(exc) == "Branch not found"
        assert exc.code == "REF_NOT_FOUND"
